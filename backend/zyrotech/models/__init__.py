from zyrotech.models.bot import Bot, PerformanceDuration
from zyrotech.models.group import Group
from zyrotech.models.kyc import KYC, Gender, KYCStatus, VerificationStatus
from zyrotech.models.otp import OTP, OTPType
from zyrotech.models.signal import Direction, Signal
from zyrotech.models.subscription import BotSubscription, SubscriptionStatus
from zyrotech.models.user import User

__all__ = [
    "User",
    "OTP",
    "OTPType",
    "Group",
    "Bot",
    "PerformanceDuration",
    "Signal",
    "Direction",
    "BotSubscription",
    "SubscriptionStatus",
    "KYC",
    "KYCStatus",
    "VerificationStatus",
    "Gender",
]
