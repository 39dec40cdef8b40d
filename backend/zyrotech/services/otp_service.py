"""
OTP Service

Issues, rate-limits and consumes one-time verification codes.

- Codes are 6 random digits (100000-999999)
- A code is valid until ``expires_at`` and is deleted once consumed
- A new code for the same subject and type is refused during the cooldown
- Expired rows are purged on issue and at startup via ``purge_expired``
"""

import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.core.logging import get_logger
from zyrotech.core.settings import settings
from zyrotech.models.otp import OTP, OTPType
from zyrotech.monitoring.prometheus import get_otp_issued_total
from zyrotech.utils import normalize_email, utcnow

# Initialize logger
logger = get_logger(__name__)


def generate_otp() -> str:
    """Return a random 6-digit code."""
    return str(100000 + secrets.randbelow(900000))


class OTPService:
    """Service for one-time password lifecycle."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _subject_filter(subject: str, otp_type: OTPType):
        if otp_type == OTPType.EMAIL:
            return and_(OTP.type == OTPType.EMAIL.value, OTP.email == normalize_email(subject))
        return and_(OTP.type == OTPType.PHONE.value, OTP.phone == subject.strip())

    async def create_otp(
        self,
        subject: str,
        otp_type: OTPType,
        expiry_minutes: Optional[int] = None
    ) -> OTP:
        """
        Issue a new code for an email address or phone number.

        Args:
            subject: Email address or phone number
            otp_type: Channel the code is delivered on
            expiry_minutes: Lifetime, defaults to ``OTP_EXPIRY_MINUTES``

        Returns:
            The stored OTP record
        """
        now = utcnow()
        minutes = settings.otp.EXPIRY_MINUTES if expiry_minutes is None else expiry_minutes

        await self.db.execute(
            delete(OTP).where(self._subject_filter(subject, otp_type), OTP.expires_at <= now)
        )

        record = OTP(
            otp=generate_otp(),
            type=otp_type.value,
            expires_at=now + timedelta(minutes=minutes),
            created_at=now,
            updated_at=now,
        )
        if otp_type == OTPType.EMAIL:
            record.email = normalize_email(subject)
        else:
            record.phone = subject.strip()

        self.db.add(record)
        await self.db.commit()

        get_otp_issued_total().labels(type=otp_type.value).inc()
        logger.info(f"[OTP] Issued {otp_type.value} code", extra={"expires_at": record.expires_at.isoformat()})
        return record

    async def check_otp_cooldown(
        self,
        subject: str,
        otp_type: OTPType,
        cooldown_seconds: Optional[int] = None
    ) -> bool:
        """
        Whether a code for this subject was issued inside the cooldown window.

        Returns:
            True when a new code must not be issued yet
        """
        seconds = settings.otp.COOLDOWN_SECONDS if cooldown_seconds is None else cooldown_seconds
        since = utcnow() - timedelta(seconds=seconds)
        result = await self.db.execute(
            select(OTP.id)
            .where(self._subject_filter(subject, otp_type), OTP.created_at > since)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def verify_otp(self, subject: str, code: str, otp_type: OTPType) -> bool:
        """
        Consume a code.

        Returns:
            True when a matching unexpired code existed; it is deleted.
            False on mismatch or expiry.
        """
        result = await self.db.execute(
            select(OTP)
            .where(
                self._subject_filter(subject, otp_type),
                OTP.otp == code.strip(),
                OTP.expires_at > utcnow(),
            )
            .limit(1)
        )
        record = result.scalar_one_or_none()
        if record is None:
            logger.info(f"[OTP] Rejected {otp_type.value} code")
            return False

        await self.db.delete(record)
        await self.db.commit()
        logger.info(f"[OTP] Consumed {otp_type.value} code")
        return True

    async def purge_expired(self) -> int:
        """Delete every expired code. Returns the number of rows removed."""
        result = await self.db.execute(delete(OTP).where(OTP.expires_at <= utcnow()))
        await self.db.commit()
        if result.rowcount:
            logger.info(f"[OTP] Purged {result.rowcount} expired codes")
        return result.rowcount or 0
