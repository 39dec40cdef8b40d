"""
Authentication Service

Registration, password and Google login, email verification and the
password-reset token flow.
"""

from datetime import timedelta
from typing import Optional, Tuple
from urllib.parse import urlencode

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.auth.exceptions import (
    EmailNotVerifiedError,
    InvalidCredentialsError,
    InvalidOTPError,
    InvalidResetTokenError,
    OTPCooldownError,
    UserExistsError,
)
from zyrotech.auth.google import verify_google_id_token
from zyrotech.auth.hashing import hash_password, verify_password
from zyrotech.auth.jwt import create_access_token
from zyrotech.auth.utils import generate_reset_token, hash_token
from zyrotech.core.exceptions import BadRequestException, NotFoundException
from zyrotech.core.logging import get_logger
from zyrotech.core.settings import settings
from zyrotech.crud.user import get_user_by_email
from zyrotech.mailer.service import EmailDeliveryError, EmailService
from zyrotech.models.otp import OTPType
from zyrotech.models.user import User
from zyrotech.schemas.auth import SignupRequest
from zyrotech.services.otp_service import OTPService
from zyrotech.utils import normalize_email, utcnow

# Initialize logger
logger = get_logger(__name__)

FULL_NAME_MAX_LENGTH = 50


class AuthService:
    """Service for account authentication flows."""

    def __init__(self, db: AsyncSession, email_service: EmailService):
        self.db = db
        self.email_service = email_service
        self.otp_service = OTPService(db)

    async def signup(self, data: SignupRequest) -> User:
        """
        Register a password account. The email starts unverified.

        Raises:
            UserExistsError: If the email is already registered
        """
        email = normalize_email(data.email)
        if await get_user_by_email(self.db, email):
            raise UserExistsError()

        user = User(
            full_name=data.full_name.strip(),
            email=email,
            password_hash=hash_password(data.password),
        )
        self.db.add(user)
        await self.db.commit()

        logger.info("[AUTH] User registered", extra={"registered_user": str(user.id)})
        return user

    async def login(self, email: str, password: str) -> Tuple[str, User]:
        """
        Authenticate with email and password.

        Successful logins upgrade hashes that are bcrypt or use outdated
        Argon2 parameters.

        Returns:
            Tuple of access token and user

        Raises:
            InvalidCredentialsError: Unknown email, wrong password, or a
                Google-only account
            EmailNotVerifiedError: Credentials are right but the email is
                not verified yet
        """
        user = await get_user_by_email(self.db, email)
        if user is None or not user.password_hash:
            raise InvalidCredentialsError()

        is_valid, needs_rehash = verify_password(password, user.password_hash)
        if not is_valid:
            logger.info("[AUTH] Failed login attempt", extra={"login_user": str(user.id)})
            raise InvalidCredentialsError()

        if not user.is_email_verified:
            raise EmailNotVerifiedError()

        if needs_rehash:
            user.password_hash = hash_password(password)
            await self.db.commit()
            logger.info("[AUTH] Password hash upgraded", extra={"login_user": str(user.id)})

        logger.info("[AUTH] User logged in", extra={"login_user": str(user.id)})
        return create_access_token(user.id), user

    async def google_login(self, raw_token: str) -> Tuple[str, User]:
        """
        Sign in with a Google ID token, linking or creating the account.

        Raises:
            InvalidGoogleTokenError: Token fails verification
            BadRequestException: Google profile has no email
        """
        payload = await verify_google_id_token(raw_token)

        email = payload.get("email")
        if not email:
            raise BadRequestException("Email is required from Google profile", code="google-email-missing")
        email = normalize_email(email)
        google_id = str(payload["sub"])
        name = (payload.get("name") or "").strip()[:FULL_NAME_MAX_LENGTH]
        picture = payload.get("picture")

        result = await self.db.execute(
            select(User).where(or_(User.email == email, User.google_id == google_id))
        )
        # Prefer the account already linked to this Google identity
        candidates = list(result.scalars().all())
        user: Optional[User] = next(
            (u for u in candidates if u.google_id == google_id),
            candidates[0] if candidates else None
        )

        if user is not None:
            if user.google_id != google_id:
                user.google_id = google_id
                user.full_name = name or user.full_name
                user.profile_picture = picture or user.profile_picture
                logger.info("[AUTH] Google account linked", extra={"login_user": str(user.id)})
            # Google has verified the address
            user.is_email_verified = True
        else:
            user = User(
                full_name=name or email.split("@")[0][:FULL_NAME_MAX_LENGTH],
                email=email,
                google_id=google_id,
                profile_picture=picture,
                is_email_verified=True,
            )
            self.db.add(user)
            logger.info("[AUTH] User registered via Google")

        await self.db.commit()
        return create_access_token(user.id), user

    async def send_email_otp(self, email: str) -> None:
        """
        Issue and email a verification code.

        Raises:
            NotFoundException: No account for the email
            BadRequestException: Email already verified
            OTPCooldownError: A code was sent within the cooldown window
            EmailDeliveryError: SMTP failed; the unsent code is discarded
        """
        user = await get_user_by_email(self.db, email)
        if user is None:
            raise NotFoundException("User not found. Please sign up first.", code="user-not-found")
        if user.is_email_verified:
            raise BadRequestException("Email is already verified", code="email-already-verified")
        if await self.otp_service.check_otp_cooldown(user.email, OTPType.EMAIL):
            raise OTPCooldownError(settings.otp.COOLDOWN_SECONDS)

        record = await self.otp_service.create_otp(user.email, OTPType.EMAIL)
        try:
            await self.email_service.send_verification_otp(user.email, user.full_name, record.otp)
        except EmailDeliveryError:
            # An undelivered code must not start the cooldown
            await self.db.delete(record)
            await self.db.commit()
            raise

    async def verify_email_otp(self, email: str, code: str) -> User:
        """
        Consume an email code and mark the address verified.

        Raises:
            InvalidOTPError: Code is wrong, expired or already used
        """
        if not await self.otp_service.verify_otp(email, code, OTPType.EMAIL):
            raise InvalidOTPError()

        user = await get_user_by_email(self.db, email)
        if user is None:
            raise NotFoundException("User not found", code="user-not-found")
        user.is_email_verified = True
        await self.db.commit()

        logger.info("[AUTH] Email verified", extra={"verified_user": str(user.id)})
        return user

    async def forgot_password(self, email: str) -> None:
        """
        Email a single-use reset link when the address belongs to a user.

        Unknown addresses are ignored silently. Delivery failures are logged
        and not reported, so the response never reveals whether an account
        exists.
        """
        user = await get_user_by_email(self.db, email)
        if user is None:
            logger.info("[AUTH] Password reset requested for unknown email")
            return

        token = generate_reset_token()
        user.reset_password_token_hash = hash_token(token)
        user.reset_password_expires = utcnow() + timedelta(
            minutes=settings.auth.RESET_TOKEN_EXPIRE_MINUTES
        )
        await self.db.commit()

        reset_url = (
            f"{settings.app.PUBLIC_BASE_URL.rstrip('/')}/api/auth/reset-password?"
            + urlencode({"token": token})
        )
        try:
            await self.email_service.send_password_reset(user.email, user.full_name, reset_url)
        except EmailDeliveryError:
            # Same response as for unknown addresses
            user.reset_password_token_hash = None
            user.reset_password_expires = None
            await self.db.commit()
            logger.error("[AUTH] Password reset email could not be delivered", extra={"reset_user": str(user.id)})
            return
        logger.info("[AUTH] Password reset link sent", extra={"reset_user": str(user.id)})

    async def _user_for_reset_token(self, token: str) -> User:
        result = await self.db.execute(
            select(User).where(
                User.reset_password_token_hash == hash_token(token),
                User.reset_password_expires > utcnow(),
            )
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidResetTokenError()
        return user

    async def validate_reset_token(self, token: str) -> bool:
        """
        Raises:
            InvalidResetTokenError: Unknown, used or expired token
        """
        await self._user_for_reset_token(token)
        return True

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Set a new password and invalidate the token.

        Raises:
            InvalidResetTokenError: Unknown, used or expired token
        """
        user = await self._user_for_reset_token(token)
        user.password_hash = hash_password(new_password)
        user.reset_password_token_hash = None
        user.reset_password_expires = None
        await self.db.commit()
        logger.info("[AUTH] Password reset completed", extra={"reset_user": str(user.id)})
