"""Pydantic schemas for authentication flows."""
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from zyrotech.schemas.common import CamelModel


class SignupRequest(CamelModel):
    """Schema for password registration."""
    full_name: str = Field(..., min_length=2, max_length=50, description="User's full name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=128, description="Password (at least 8 characters)")


class LoginRequest(CamelModel):
    """Schema for password login."""
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")


class GoogleAuthRequest(CamelModel):
    """Schema for Google sign-in."""
    id_token: str = Field(..., min_length=1, description="Google ID token issued to the client")


class EmailRequest(CamelModel):
    email: EmailStr = Field(..., description="Account email address")


class VerifyEmailOTPRequest(CamelModel):
    email: EmailStr = Field(..., description="Account email address")
    otp: str = Field(..., min_length=1, max_length=6, description="6-digit code from the email")


class ResetTokenRequest(CamelModel):
    token: str = Field(..., min_length=1, description="Reset token from the emailed link")


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1, description="Reset token from the emailed link")
    password: str = Field(..., min_length=8, max_length=128, description="New password")


class UserPublic(CamelModel):
    """Public view of a user, as returned by login and profile routes."""
    id: UUID
    full_name: str
    email: str
    phone_number: Optional[str] = None
    is_email_verified: bool
    is_phone_verified: Optional[bool] = None
    profile_picture: Optional[str] = None


class SignupData(CamelModel):
    user_id: UUID


class ResetTokenValidity(CamelModel):
    valid: bool
