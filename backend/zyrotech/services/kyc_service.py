"""
KYC Service

Collects the four KYC sections in order (basic details, risk profiling,
capital management, experience) and records admin review decisions.

Overall status:
- ``pending`` until basic details are submitted
- ``rejected`` while any section is rejected
- ``completed`` once all four sections are verified
- ``in_progress`` otherwise
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.core.exceptions import BadRequestException, ConflictException, NotFoundException
from zyrotech.core.logging import get_logger
from zyrotech.models.kyc import KYC, Gender, KYCStatus, VerificationStatus
from zyrotech.schemas.kyc import BasicDetailsRequest, SectionReview
from zyrotech.utils import utcnow

# Initialize logger
logger = get_logger(__name__)

FULL_NAME_PATTERN = re.compile(r"^[a-zA-Z\s.'-]{2,50}$")
PAN_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$")
AADHAR_PATTERN = re.compile(r"^\d{12}$")
MINIMUM_AGE = 18

BASIC_DETAILS = "basic-details"
RISK_PROFILING = "risk-profiling"
CAPITAL_MANAGEMENT = "capital-management"
EXPERIENCE = "experience"

# URL section name -> model attribute of the questionnaire sections
QUESTIONNAIRE_SECTIONS = {
    RISK_PROFILING: "risk_profiling",
    CAPITAL_MANAGEMENT: "capital_management",
    EXPERIENCE: "experience",
}
SECTIONS = (BASIC_DETAILS, *QUESTIONNAIRE_SECTIONS)

# Each questionnaire section requires the previous one
PREREQUISITES = {
    CAPITAL_MANAGEMENT: ("risk_profiling", "Please complete risk profiling first", "risk-profiling-required"),
    EXPERIENCE: ("capital_management", "Please complete capital management first", "capital-management-required"),
}


def _age_on(dob: date, today: date) -> int:
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


def parse_dob(value: str) -> Optional[date]:
    """Parse an ISO date (time part ignored). Returns None when invalid."""
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None


def validate_questionnaire(questions_and_answers: Optional[List[Any]]) -> List[Dict[str, str]]:
    """
    Validate and normalise a list of ``{question, answer}`` objects.

    Raises:
        BadRequestException: ``missing-required-fields``, ``invalid-question``
            or ``invalid-answer``
    """
    if not questions_and_answers or not isinstance(questions_and_answers, list):
        raise BadRequestException(
            "Please provide questions and answers as an array",
            code="missing-required-fields"
        )

    cleaned = []
    for item in questions_and_answers:
        item = item if isinstance(item, dict) else {}
        question = item.get("question")
        answer = item.get("answer")
        if not isinstance(question, str) or not question.strip():
            raise BadRequestException("Each question must be a non-empty string", code="invalid-question")
        if not isinstance(answer, str) or not answer.strip():
            raise BadRequestException("Each answer must be a non-empty string", code="invalid-answer")
        cleaned.append({"question": question.strip(), "answer": answer.strip()})
    return cleaned


def _pending_section(questions_and_answers: List[Dict[str, str]]) -> Dict[str, Any]:
    return {
        "questions_and_answers": questions_and_answers,
        "completed_at": utcnow().isoformat(),
        "is_verified": False,
        "verification_status": VerificationStatus.PENDING.value,
        "verification_date": None,
        "rejection_reason": None,
    }


def compute_overall_status(kyc: KYC) -> str:
    """
    Derive the record status from the individual section states after an
    admin review. Any user submission puts the record back in progress.
    """
    states = [kyc.basic_verification_status]
    for attr in QUESTIONNAIRE_SECTIONS.values():
        section = getattr(kyc, attr)
        states.append(section["verification_status"] if section else None)

    if VerificationStatus.REJECTED.value in states:
        return KYCStatus.REJECTED.value
    if all(state == VerificationStatus.VERIFIED.value for state in states):
        return KYCStatus.COMPLETED.value
    return KYCStatus.IN_PROGRESS.value


class KYCService:
    """Service for KYC intake and review."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for_user(self, user_id: UUID) -> Optional[KYC]:
        result = await self.db.execute(select(KYC).where(KYC.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_status(self, user_id: UUID) -> KYC:
        kyc = await self.get_for_user(user_id)
        if kyc is None:
            raise NotFoundException("No KYC record found for this user", code="kyc-not-found")
        return kyc

    async def submit_basic_details(self, user_id: UUID, data: BasicDetailsRequest) -> tuple:
        """
        Create or replace the basic details section.

        Returns:
            Tuple of (KYC record, whether an existing record was updated)
        """
        values = [data.full_name, data.dob, data.gender, data.pan, data.aadhar_number]
        if any(v is None or not str(v).strip() for v in values):
            raise BadRequestException("Please provide all required fields", code="missing-required-fields")

        full_name = data.full_name.strip()
        if not FULL_NAME_PATTERN.match(full_name):
            raise BadRequestException(
                "Invalid full name format. Name should be 2-50 characters and contain only letters, "
                "spaces, and common name characters",
                code="invalid-full-name"
            )

        dob = parse_dob(data.dob)
        today = utcnow().date()
        if dob is None or dob >= today or _age_on(dob, today) < MINIMUM_AGE:
            raise BadRequestException(
                "Invalid date of birth. You must be at least 18 years old",
                code="invalid-dob"
            )

        gender = data.gender.strip().lower()
        if gender not in {g.value for g in Gender}:
            raise BadRequestException("Invalid gender. Must be one of: male, female, other", code="invalid-gender")

        pan = data.pan.strip().upper()
        if not PAN_PATTERN.match(pan):
            raise BadRequestException("Invalid PAN format. Should be in format: ABCDE1234F", code="invalid-pan")

        aadhar = data.aadhar_number.strip()
        if not AADHAR_PATTERN.match(aadhar):
            raise BadRequestException("Invalid Aadhar number. Must be 12 digits", code="invalid-aadhar")

        duplicate = await self.db.execute(
            select(KYC.id).where(
                KYC.user_id != user_id,
                or_(KYC.pan == pan, KYC.aadhar_number == aadhar)
            ).limit(1)
        )
        if duplicate.scalar_one_or_none() is not None:
            raise ConflictException(
                "PAN or Aadhar number already registered by another user",
                code="duplicate-kyc-details"
            )

        kyc = await self.get_for_user(user_id)
        updated = kyc is not None
        if kyc is None:
            kyc = KYC(user_id=user_id)
            self.db.add(kyc)

        kyc.full_name = full_name
        kyc.dob = dob
        kyc.gender = gender
        kyc.pan = pan
        kyc.aadhar_number = aadhar
        kyc.basic_is_verified = False
        kyc.basic_verification_status = VerificationStatus.PENDING.value
        kyc.basic_verification_date = None
        kyc.basic_rejection_reason = None
        kyc.status = KYCStatus.IN_PROGRESS.value

        await self.db.commit()
        logger.info(
            "[KYC] Basic details submitted",
            extra={"kyc_id": str(kyc.id), "resubmitted": updated}
        )
        return kyc, updated

    async def submit_questionnaire(
        self,
        user_id: UUID,
        section: str,
        questions_and_answers: Optional[List[Any]]
    ) -> KYC:
        """
        Store one questionnaire section, replacing any earlier submission.

        Raises:
            BadRequestException: Invalid payload or an earlier section missing
        """
        cleaned = validate_questionnaire(questions_and_answers)

        kyc = await self.get_for_user(user_id)
        if kyc is None:
            raise BadRequestException("Please complete basic KYC details first", code="basic-kyc-required")

        prerequisite = PREREQUISITES.get(section)
        if prerequisite and getattr(kyc, prerequisite[0]) is None:
            raise BadRequestException(prerequisite[1], code=prerequisite[2])

        setattr(kyc, QUESTIONNAIRE_SECTIONS[section], _pending_section(cleaned))
        kyc.status = KYCStatus.IN_PROGRESS.value

        await self.db.commit()
        logger.info(f"[KYC] Section {section} submitted", extra={"kyc_id": str(kyc.id)})
        return kyc

    async def review_section(
        self,
        user_id: UUID,
        section: str,
        review: SectionReview
    ) -> KYC:
        """
        Mark one section verified or rejected (admin only).

        Raises:
            BadRequestException: Unknown section, section not submitted, or a
                rejection without a reason
            NotFoundException: User has no KYC record
        """
        if section not in SECTIONS:
            raise BadRequestException(
                f"Unknown KYC section. Must be one of: {', '.join(SECTIONS)}",
                code="invalid-kyc-section"
            )

        rejected = review.status == VerificationStatus.REJECTED.value
        reason = (review.rejection_reason or "").strip() or None
        if rejected and not reason:
            raise BadRequestException("A rejection reason is required", code="missing-required-fields")

        kyc = await self.get_status(user_id)
        now = utcnow()

        if section == BASIC_DETAILS:
            kyc.basic_verification_status = review.status
            kyc.basic_is_verified = not rejected
            kyc.basic_verification_date = now
            kyc.basic_rejection_reason = reason if rejected else None
        else:
            attr = QUESTIONNAIRE_SECTIONS[section]
            current = getattr(kyc, attr)
            if current is None:
                raise BadRequestException("This KYC section has not been submitted", code="kyc-section-missing")
            setattr(kyc, attr, {
                **current,
                "verification_status": review.status,
                "is_verified": not rejected,
                "verification_date": now.isoformat(),
                "rejection_reason": reason if rejected else None,
            })

        kyc.status = compute_overall_status(kyc)
        await self.db.commit()

        logger.info(
            f"[KYC] Section {section} {review.status}",
            extra={"kyc_id": str(kyc.id), "kyc_status": kyc.status}
        )
        return kyc
