"""
Authentication Router

Signup, login (password and Google), email verification and password reset.
These are the only routes that do not require a bearer token.
"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from zyrotech.api.deps import get_auth_service
from zyrotech.core.responses import success_response
from zyrotech.core.settings import settings
from zyrotech.models.user import User
from zyrotech.schemas.auth import (
    EmailRequest,
    GoogleAuthRequest,
    LoginRequest,
    ResetPasswordRequest,
    ResetTokenRequest,
    ResetTokenValidity,
    SignupData,
    SignupRequest,
    UserPublic,
    VerifyEmailOTPRequest,
)
from zyrotech.services.auth_service import AuthService

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))

FORGOT_PASSWORD_MESSAGE = "If an account exists for this email, a password reset link has been sent."


def public_user(user: User) -> dict:
    """Public user view; the phone verification flag only appears with a phone."""
    data = UserPublic.model_validate(user)
    if not user.phone_number:
        data.is_phone_verified = None
    return data.model_dump(by_alias=True, exclude_none=True, mode="json")


@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Creates a password account. The email must be verified before logging in."
)
async def signup(
    data: SignupRequest,
    service: AuthService = Depends(get_auth_service)
):
    user = await service.signup(data)
    return success_response(
        SignupData(user_id=user.id),
        "Account created. Please verify your email.",
        status.HTTP_201_CREATED
    )


@router.post("/login", summary="Log in with email and password")
async def login(
    data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """
    Authenticate a user.

    Args:
        data: Email and password

    Returns:
        Bearer token and the public user view
    """
    token, user = await service.login(data.email, data.password)
    return success_response({"token": token, "user": public_user(user)}, "Login successful")


@router.post(
    "/google",
    summary="Sign in with Google",
    description="Verifies a Google ID token and links or creates the matching account."
)
async def google_auth(
    data: GoogleAuthRequest,
    service: AuthService = Depends(get_auth_service)
):
    token, user = await service.google_login(data.id_token)
    return success_response(
        {"token": token, "user": public_user(user)},
        "Google authentication successful"
    )


@router.post("/send-email-otp", summary="Email a verification code")
async def send_email_otp(
    data: EmailRequest,
    service: AuthService = Depends(get_auth_service)
):
    await service.send_email_otp(data.email)
    return success_response(message="OTP sent successfully")


@router.post("/verify-email-otp", summary="Verify the emailed code")
async def verify_email_otp(
    data: VerifyEmailOTPRequest,
    service: AuthService = Depends(get_auth_service)
):
    await service.verify_email_otp(data.email, data.otp)
    return success_response(message="Email verified successfully")


@router.post(
    "/forgot-password",
    summary="Request a password reset link",
    description="Always answers the same way so account existence is not revealed."
)
async def forgot_password(
    data: EmailRequest,
    service: AuthService = Depends(get_auth_service)
):
    await service.forgot_password(data.email)
    return success_response(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/validate-reset-token", summary="Check a reset token")
async def validate_reset_token(
    data: ResetTokenRequest,
    service: AuthService = Depends(get_auth_service)
):
    valid = await service.validate_reset_token(data.token)
    return success_response(ResetTokenValidity(valid=valid), "Reset token is valid")


@router.post("/reset-password", summary="Set a new password with a reset token")
async def reset_password(
    data: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    await service.reset_password(data.token, data.password)
    return success_response(message="Password has been reset successfully. You can now log in.")


@router.get(
    "/reset-password",
    response_class=HTMLResponse,
    summary="Password reset page",
    include_in_schema=False
)
async def reset_password_page(request: Request, token: Optional[str] = Query(None)):
    return templates.TemplateResponse(
        request,
        "reset_password.html",
        {
            "token": token or "",
            "app_name": settings.app.TITLE,
            "api_base": "/api/auth",
        }
    )
