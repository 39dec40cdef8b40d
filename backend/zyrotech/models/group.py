from uuid import UUID, uuid4

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from zyrotech.db.base import Base
from zyrotech.models.types import GUID


class Group(Base):
    """Category bots are listed under (Commodities, Currency, ...)."""

    __tablename__ = "groups"

    id: Mapped[UUID] = mapped_column(GUID(), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
