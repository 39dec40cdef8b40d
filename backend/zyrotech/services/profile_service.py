"""
Profile Service

Phone number verification and PIN management for the signed-in user.
"""

import re
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.auth.exceptions import InvalidOTPError, OTPCooldownError
from zyrotech.auth.hashing import hash_secret, verify_secret
from zyrotech.core.exceptions import BadRequestException, ConflictException, UnauthorizedException
from zyrotech.core.logging import get_logger
from zyrotech.core.settings import settings
from zyrotech.crud.user import get_user_by_phone
from zyrotech.models.otp import OTPType
from zyrotech.models.user import User
from zyrotech.services.otp_service import OTPService

# Initialize logger
logger = get_logger(__name__)

PIN_PATTERN = re.compile(r"^\d{4,6}$")


class ProfileService:
    """Service for phone and PIN operations on the current user."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.otp_service = OTPService(db)

    async def update_phone(self, user: User, phone_number: str) -> Optional[str]:
        """
        Store a new (unverified) phone number and issue a phone OTP.

        Re-submitting the current unverified number simply issues a new code.

        Returns:
            The issued code. There is no SMS gateway, so callers decide
            whether it may be echoed back.

        Raises:
            BadRequestException: Number is already verified on this account
            ConflictException: Number belongs to another account
            OTPCooldownError: A code was sent within the cooldown window
        """
        phone_number = phone_number.strip()

        if user.phone_number == phone_number and user.is_phone_verified:
            raise BadRequestException("Phone number is already verified", code="phone-already-verified")

        owner = await get_user_by_phone(self.db, phone_number)
        if owner is not None and owner.id != user.id:
            raise ConflictException("Phone number is already in use", code="phone-in-use")

        if await self.otp_service.check_otp_cooldown(phone_number, OTPType.PHONE):
            raise OTPCooldownError(settings.otp.COOLDOWN_SECONDS)

        if user.phone_number != phone_number:
            user.phone_number = phone_number
            user.is_phone_verified = False
            await self.db.commit()

        record = await self.otp_service.create_otp(phone_number, OTPType.PHONE)
        logger.info("[OTP] Phone verification code issued")
        return record.otp

    async def verify_phone(self, user: User, phone_number: str, code: str) -> User:
        """
        Raises:
            InvalidOTPError: Code is wrong, expired or already used
            BadRequestException: Number differs from the one on the account
        """
        phone_number = phone_number.strip()
        if user.phone_number != phone_number:
            raise BadRequestException(
                "Phone number does not match the number on your profile",
                code="phone-mismatch"
            )
        if not await self.otp_service.verify_otp(phone_number, code, OTPType.PHONE):
            raise InvalidOTPError()

        user.is_phone_verified = True
        await self.db.commit()
        logger.info("[AUTH] Phone number verified")
        return user

    async def set_pin(self, user: User, pin: str) -> None:
        """Store a hashed 4-6 digit PIN, replacing any existing one."""
        if not PIN_PATTERN.match(pin or ""):
            raise BadRequestException("PIN must be 4 to 6 digits", code="invalid-pin-format")

        user.pin_hash = hash_secret(pin)
        await self.db.commit()
        logger.info("[AUTH] PIN set")

    async def verify_pin(self, user: User, pin: str) -> None:
        """
        Raises:
            BadRequestException: No PIN set yet
            UnauthorizedException: PIN does not match
        """
        if not user.pin_hash:
            raise BadRequestException("PIN has not been set", code="pin-not-set")

        is_valid, needs_rehash = verify_secret(pin or "", user.pin_hash)
        if not is_valid:
            logger.info("[AUTH] PIN verification failed")
            raise UnauthorizedException("Invalid PIN", code="invalid-pin")

        if needs_rehash:
            user.pin_hash = hash_secret(pin)
            await self.db.commit()
