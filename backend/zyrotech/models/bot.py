from enum import Enum as PythonEnum
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Enum as SQLEnum, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from zyrotech.db.base import Base
from zyrotech.models.group import Group
from zyrotech.models.types import GUID


class PerformanceDuration(str, PythonEnum):
    """Window the bot's advertised performance refers to."""

    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    ALL = "ALL"


class Bot(Base):
    """Trading bot users can subscribe to."""

    __tablename__ = "bots"
    __table_args__ = (
        CheckConstraint("recommended_capital >= 0", name="recommended_capital_non_negative"),
    )

    id: Mapped[UUID] = mapped_column(GUID(), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    recommended_capital: Mapped[float] = mapped_column(Float, nullable=False)
    performance_duration: Mapped[str] = mapped_column(
        SQLEnum(*[d.value for d in PerformanceDuration], name="performance_duration", native_enum=False),
        default=PerformanceDuration.ONE_MONTH.value,
        nullable=False
    )
    script: Mapped[str] = mapped_column(String(10), default="USD", nullable=False)
    group_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("groups.id", ondelete="RESTRICT"),
        index=True,
        nullable=False
    )

    group: Mapped[Group] = relationship(lazy="selectin")
