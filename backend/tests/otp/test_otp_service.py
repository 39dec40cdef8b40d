"""
OTP Service Tests
"""

from datetime import timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.models.otp import OTP, OTPType
from zyrotech.services.otp_service import OTPService, generate_otp
from zyrotech.utils import utcnow


def test_generate_otp_is_six_digits():
    for _ in range(50):
        code = generate_otp()
        assert len(code) == 6
        assert 100000 <= int(code) <= 999999


@pytest.mark.asyncio
async def test_create_and_verify_email_code(test_db: AsyncSession):
    service = OTPService(test_db)

    record = await service.create_otp("User@Zyrotech.io", OTPType.EMAIL)

    assert record.email == "user@zyrotech.io"
    assert record.phone is None
    assert record.expires_at > utcnow()
    assert await service.verify_otp("user@zyrotech.io", record.otp, OTPType.EMAIL) is True
    # Consumed
    assert await service.verify_otp("user@zyrotech.io", record.otp, OTPType.EMAIL) is False


@pytest.mark.asyncio
async def test_codes_are_scoped_by_type(test_db: AsyncSession):
    service = OTPService(test_db)

    record = await service.create_otp("+919876543210", OTPType.PHONE)

    assert record.phone == "+919876543210"
    assert await service.verify_otp("+919876543210", record.otp, OTPType.EMAIL) is False
    assert await service.verify_otp("+919876543210", record.otp, OTPType.PHONE) is True


@pytest.mark.asyncio
async def test_expired_code_is_rejected(test_db: AsyncSession):
    service = OTPService(test_db)

    record = await service.create_otp("user@zyrotech.io", OTPType.EMAIL, expiry_minutes=0)

    assert await service.verify_otp("user@zyrotech.io", record.otp, OTPType.EMAIL) is False


@pytest.mark.asyncio
async def test_cooldown(test_db: AsyncSession):
    service = OTPService(test_db)

    assert await service.check_otp_cooldown("user@zyrotech.io", OTPType.EMAIL) is False

    await service.create_otp("user@zyrotech.io", OTPType.EMAIL)

    assert await service.check_otp_cooldown("user@zyrotech.io", OTPType.EMAIL) is True
    assert await service.check_otp_cooldown("user@zyrotech.io", OTPType.EMAIL, cooldown_seconds=0) is False
    assert await service.check_otp_cooldown("other@zyrotech.io", OTPType.EMAIL) is False


@pytest.mark.asyncio
async def test_purge_expired(test_db: AsyncSession):
    service = OTPService(test_db)
    live = await service.create_otp("live@zyrotech.io", OTPType.EMAIL)
    stale = await service.create_otp("stale@zyrotech.io", OTPType.EMAIL)
    stale.expires_at = utcnow() - timedelta(minutes=1)
    await test_db.commit()

    removed = await service.purge_expired()

    assert removed == 1
    remaining = (await test_db.execute(select(OTP.id))).scalars().all()
    assert remaining == [live.id]
