"""Pydantic schemas for KYC submission and review."""
from datetime import date, datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import Field

from zyrotech.schemas.common import CamelModel


class BasicDetailsRequest(CamelModel):
    """
    Basic identity details.

    Fields are loosely typed; format checks live in the KYC service so each
    failure carries its own error code.
    """
    full_name: Optional[str] = None
    dob: Optional[str] = Field(None, description="Date of birth, YYYY-MM-DD")
    gender: Optional[str] = None
    pan: Optional[str] = None
    aadhar_number: Optional[str] = None


class QuestionnaireRequest(CamelModel):
    """Risk profiling, capital management and experience payload."""
    questions_and_answers: Optional[List[Any]] = Field(
        None, description="List of {question, answer} objects"
    )


class SectionReview(CamelModel):
    """Admin decision on one KYC section."""
    status: Literal["verified", "rejected"]
    rejection_reason: Optional[str] = Field(None, max_length=500)


class QuestionAnswer(CamelModel):
    question: str
    answer: str


class SectionState(CamelModel):
    is_verified: bool
    verification_status: str
    verification_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None


class BasicDetailsView(SectionState):
    full_name: str
    dob: date
    gender: str
    pan: str
    aadhar_number: str


class QuestionnaireView(SectionState):
    questions_and_answers: List[QuestionAnswer]
    completed_at: datetime


class KYCResponse(CamelModel):
    id: UUID
    user_id: UUID
    status: str
    basic_details: BasicDetailsView
    risk_profiling: Optional[QuestionnaireView] = None
    capital_management: Optional[QuestionnaireView] = None
    experience: Optional[QuestionnaireView] = None
    created_at: datetime
    updated_at: datetime


class SectionSubmitted(CamelModel):
    """Short acknowledgement returned after a section is submitted."""
    kyc_id: UUID
    status: str
    section: str
    verification_status: str
    completed_at: Optional[datetime] = None
