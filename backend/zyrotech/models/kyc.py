"""
KYC Model

Basic identity details live in columns so PAN and Aadhar stay unique. The
three questionnaire sections are stored as JSON documents of the shape::

    {
        "questions_and_answers": [{"question": str, "answer": str}, ...],
        "completed_at": iso8601,
        "is_verified": bool,
        "verification_status": "pending" | "verified" | "rejected",
        "verification_date": iso8601 | None,
        "rejection_reason": str | None,
    }

Sections are always replaced wholesale, never mutated in place.
"""

from datetime import date, datetime
from enum import Enum as PythonEnum
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from zyrotech.db.base import Base
from zyrotech.models.types import GUID, JSONB


class KYCStatus(str, PythonEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class VerificationStatus(str, PythonEnum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class Gender(str, PythonEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


VERIFICATION_STATUS_ENUM = SQLEnum(
    *[s.value for s in VerificationStatus], name="verification_status", native_enum=False
)


class KYC(Base):
    """Know-your-customer record, one per user."""

    __tablename__ = "kyc"

    id: Mapped[UUID] = mapped_column(GUID(), primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        GUID(),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )

    # Basic details
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    dob: Mapped[date] = mapped_column(Date, nullable=False)
    gender: Mapped[str] = mapped_column(
        SQLEnum(*[g.value for g in Gender], name="gender", native_enum=False),
        nullable=False
    )
    pan: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    aadhar_number: Mapped[str] = mapped_column(String(12), unique=True, nullable=False)
    basic_is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    basic_verification_status: Mapped[str] = mapped_column(
        VERIFICATION_STATUS_ENUM,
        default=VerificationStatus.PENDING.value,
        nullable=False
    )
    basic_verification_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    basic_rejection_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Questionnaire sections
    risk_profiling: Mapped[Optional[dict]] = mapped_column(JSONB(), nullable=True)
    capital_management: Mapped[Optional[dict]] = mapped_column(JSONB(), nullable=True)
    experience: Mapped[Optional[dict]] = mapped_column(JSONB(), nullable=True)

    status: Mapped[str] = mapped_column(
        SQLEnum(*[s.value for s in KYCStatus], name="kyc_status", native_enum=False),
        default=KYCStatus.PENDING.value,
        nullable=False
    )
