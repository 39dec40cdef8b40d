"""
Profile Router

Current-user profile, phone verification and PIN endpoints.
"""

from fastapi import APIRouter, Depends

from zyrotech.api.deps import get_profile_service
from zyrotech.auth.dependencies import CurrentUser, PhoneVerifiedUser
from zyrotech.core.responses import success_response
from zyrotech.core.settings import settings
from zyrotech.schemas.profile import (
    PhoneUpdateData,
    PhoneUpdateRequest,
    PhoneVerifyRequest,
    PinRequest,
    ProfileResponse,
)
from zyrotech.services.profile_service import ProfileService

router = APIRouter()


@router.get("/me", summary="Get the current user's profile")
async def get_me(current_user: CurrentUser):
    return success_response(ProfileResponse.model_validate(current_user))


@router.put(
    "/phone",
    summary="Set the phone number and send a verification code",
    description=(
        "Stores the number as unverified and issues a phone OTP. No SMS gateway is "
        "connected; the code is included in the response only when OTP_ECHO_PHONE_CODE is enabled."
    )
)
async def update_phone(
    data: PhoneUpdateRequest,
    current_user: CurrentUser,
    service: ProfileService = Depends(get_profile_service)
):
    code = await service.update_phone(current_user, data.phone_number)
    payload = PhoneUpdateData(
        phone_number=current_user.phone_number,
        is_phone_verified=current_user.is_phone_verified,
        otp=code if settings.otp.ECHO_PHONE_CODE else None
    )
    return success_response(payload.model_dump(by_alias=True, exclude_none=True), "OTP sent successfully")


@router.post("/phone/verify", summary="Verify the phone number with its code")
async def verify_phone(
    data: PhoneVerifyRequest,
    current_user: CurrentUser,
    service: ProfileService = Depends(get_profile_service)
):
    user = await service.verify_phone(current_user, data.phone_number, data.otp)
    return success_response(
        {"phoneNumber": user.phone_number, "isPhoneVerified": user.is_phone_verified},
        "Phone number verified successfully"
    )


@router.post(
    "/pin",
    summary="Set or replace the PIN",
    description="Requires a verified phone number. The PIN must be 4 to 6 digits."
)
async def set_pin(
    data: PinRequest,
    current_user: PhoneVerifiedUser,
    service: ProfileService = Depends(get_profile_service)
):
    await service.set_pin(current_user, data.pin)
    return success_response(message="PIN set successfully")


@router.post("/verify-pin", summary="Check the PIN")
async def verify_pin(
    data: PinRequest,
    current_user: CurrentUser,
    service: ProfileService = Depends(get_profile_service)
):
    await service.verify_pin(current_user, data.pin)
    return success_response(message="PIN verified successfully")
