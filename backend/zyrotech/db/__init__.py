from zyrotech.db.base import Base
from zyrotech.db.session import AsyncSessionLocal, engine, get_db

__all__ = ["Base", "AsyncSessionLocal", "engine", "get_db"]
