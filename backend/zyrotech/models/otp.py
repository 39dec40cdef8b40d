from datetime import datetime
from enum import Enum as PythonEnum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum as SQLEnum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from zyrotech.db.base import Base
from zyrotech.models.types import GUID


class OTPType(str, PythonEnum):
    """Channel an OTP was issued for."""

    EMAIL = "email"
    PHONE = "phone"


class OTP(Base):
    """
    One-time verification code.

    Exactly one of ``email`` / ``phone`` is set, matching ``type``. Rows are
    deleted when consumed and purged once past ``expires_at``.
    """

    __tablename__ = "otps"
    __table_args__ = (
        Index("ix_otps_type_email", "type", "email"),
        Index("ix_otps_type_phone", "type", "phone"),
    )

    id: Mapped[UUID] = mapped_column(GUID(), primary_key=True, default=uuid4)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    otp: Mapped[str] = mapped_column(String(6), nullable=False)
    type: Mapped[str] = mapped_column(
        SQLEnum(*[t.value for t in OTPType], name="otp_type", native_enum=False),
        nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, index=True, nullable=False)
