"""Service factories used as FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from zyrotech.db.session import get_db
from zyrotech.mailer.service import EmailService, get_email_service
from zyrotech.services.auth_service import AuthService
from zyrotech.services.bot_service import BotService
from zyrotech.services.group_service import GroupService
from zyrotech.services.kyc_service import KYCService
from zyrotech.services.profile_service import ProfileService
from zyrotech.services.signal_service import SignalService
from zyrotech.services.subscription_service import SubscriptionService


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service)
) -> AuthService:
    return AuthService(db, email_service)


def get_profile_service(db: AsyncSession = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


def get_kyc_service(db: AsyncSession = Depends(get_db)) -> KYCService:
    return KYCService(db)


def get_group_service(db: AsyncSession = Depends(get_db)) -> GroupService:
    return GroupService(db)


def get_bot_service(db: AsyncSession = Depends(get_db)) -> BotService:
    return BotService(db)


def get_signal_service(db: AsyncSession = Depends(get_db)) -> SignalService:
    return SignalService(db)


def get_subscription_service(db: AsyncSession = Depends(get_db)) -> SubscriptionService:
    return SubscriptionService(db)
