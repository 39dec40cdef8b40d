"""Pydantic schemas for profile, phone and PIN operations."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from zyrotech.schemas.common import CamelModel

PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"


class ProfileResponse(CamelModel):
    """Full profile of the authenticated user."""
    id: UUID
    full_name: str
    email: str
    phone_number: Optional[str] = None
    is_email_verified: bool
    is_phone_verified: bool
    profile_picture: Optional[str] = None
    has_pin: bool = Field(..., description="Whether a PIN has been set")
    created_at: datetime


class PhoneUpdateRequest(CamelModel):
    phone_number: str = Field(..., pattern=PHONE_PATTERN, description="Phone number in E.164 form")


class PhoneVerifyRequest(CamelModel):
    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    otp: str = Field(..., min_length=1, max_length=6)


class PhoneUpdateData(CamelModel):
    phone_number: str
    is_phone_verified: bool
    # Present only when phone codes are echoed (no SMS gateway)
    otp: Optional[str] = None


class PinRequest(CamelModel):
    pin: str = Field(..., description="4 to 6 digit PIN")
