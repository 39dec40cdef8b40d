"""
KYC Router

Ordered KYC submission for the current user and admin review of sections.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from zyrotech.api.deps import get_kyc_service
from zyrotech.auth.dependencies import AdminUser, VerifiedUser
from zyrotech.core.responses import success_response
from zyrotech.models.kyc import KYC
from zyrotech.schemas.kyc import (
    BasicDetailsRequest,
    BasicDetailsView,
    KYCResponse,
    QuestionnaireRequest,
    QuestionnaireView,
    SectionReview,
    SectionSubmitted,
)
from zyrotech.services.kyc_service import (
    BASIC_DETAILS,
    CAPITAL_MANAGEMENT,
    EXPERIENCE,
    QUESTIONNAIRE_SECTIONS,
    RISK_PROFILING,
    KYCService,
)

router = APIRouter()

SECTION_TITLES = {
    RISK_PROFILING: "Risk profiling",
    CAPITAL_MANAGEMENT: "Capital management",
    EXPERIENCE: "Experience",
}


def build_kyc_response(kyc: KYC) -> KYCResponse:
    """Assemble the nested KYC view from the flat basic columns and JSON sections."""
    sections = {
        attr: QuestionnaireView.model_validate(getattr(kyc, attr)) if getattr(kyc, attr) else None
        for attr in QUESTIONNAIRE_SECTIONS.values()
    }
    return KYCResponse(
        id=kyc.id,
        user_id=kyc.user_id,
        status=kyc.status,
        basic_details=BasicDetailsView(
            full_name=kyc.full_name,
            dob=kyc.dob,
            gender=kyc.gender,
            pan=kyc.pan,
            aadhar_number=kyc.aadhar_number,
            is_verified=kyc.basic_is_verified,
            verification_status=kyc.basic_verification_status,
            verification_date=kyc.basic_verification_date,
            rejection_reason=kyc.basic_rejection_reason,
        ),
        created_at=kyc.created_at,
        updated_at=kyc.updated_at,
        **sections,
    )


def _questionnaire_ack(kyc: KYC, section: str) -> SectionSubmitted:
    stored = getattr(kyc, QUESTIONNAIRE_SECTIONS[section])
    return SectionSubmitted(
        kyc_id=kyc.id,
        status=kyc.status,
        section=section,
        verification_status=stored["verification_status"],
        completed_at=stored["completed_at"],
    )


@router.post(
    "/basic-details",
    status_code=status.HTTP_201_CREATED,
    summary="Submit basic KYC details",
    description="Creates or replaces name, date of birth, gender, PAN and Aadhar details."
)
async def submit_basic_details(
    data: BasicDetailsRequest,
    current_user: VerifiedUser,
    service: KYCService = Depends(get_kyc_service)
):
    kyc, updated = await service.submit_basic_details(current_user.id, data)
    message = (
        "KYC basic details updated successfully" if updated
        else "KYC basic details submitted successfully"
    )
    ack = SectionSubmitted(
        kyc_id=kyc.id,
        status=kyc.status,
        section=BASIC_DETAILS,
        verification_status=kyc.basic_verification_status,
    )
    return success_response(ack, message, status.HTTP_201_CREATED)


async def _submit_section(section: str, data: QuestionnaireRequest, user_id: UUID, service: KYCService):
    kyc = await service.submit_questionnaire(user_id, section, data.questions_and_answers)
    return success_response(
        _questionnaire_ack(kyc, section),
        f"{SECTION_TITLES[section]} details submitted successfully"
    )


@router.post("/risk-profiling", summary="Submit risk profiling answers")
async def submit_risk_profiling(
    data: QuestionnaireRequest,
    current_user: VerifiedUser,
    service: KYCService = Depends(get_kyc_service)
):
    return await _submit_section(RISK_PROFILING, data, current_user.id, service)


@router.post("/capital-management", summary="Submit capital management answers")
async def submit_capital_management(
    data: QuestionnaireRequest,
    current_user: VerifiedUser,
    service: KYCService = Depends(get_kyc_service)
):
    return await _submit_section(CAPITAL_MANAGEMENT, data, current_user.id, service)


@router.post("/experience", summary="Submit trading experience answers")
async def submit_experience(
    data: QuestionnaireRequest,
    current_user: VerifiedUser,
    service: KYCService = Depends(get_kyc_service)
):
    return await _submit_section(EXPERIENCE, data, current_user.id, service)


@router.get("/status", summary="Get the full KYC record")
async def get_kyc_status(
    current_user: VerifiedUser,
    service: KYCService = Depends(get_kyc_service)
):
    kyc = await service.get_status(current_user.id)
    return success_response(build_kyc_response(kyc))


@router.patch(
    "/{user_id}/sections/{section}",
    summary="Verify or reject a KYC section",
    description="Admin only. Rejections require a reason."
)
async def review_section(
    user_id: UUID,
    section: str,
    review: SectionReview,
    admin: AdminUser,
    service: KYCService = Depends(get_kyc_service)
):
    kyc = await service.review_section(user_id, section, review)
    return success_response(build_kyc_response(kyc), f"KYC section {section} {review.status}")
