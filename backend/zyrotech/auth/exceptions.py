"""Custom exceptions for authentication-related errors."""
from zyrotech.core.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    RateLimitException,
    UnauthorizedException,
)


class TokenValidationError(UnauthorizedException):
    """Raised when a bearer token is missing, malformed or unknown."""

    def __init__(self, reason: str = "Invalid token"):
        # Clients always see the same message; the reason is only logged
        super().__init__(extra={"reason": reason})


class TokenExpiredError(TokenValidationError):
    """Raised when JWT token has expired."""

    def __init__(self):
        super().__init__("Token has expired")


class InvalidCredentialsError(UnauthorizedException):
    """Raised when login credentials are invalid."""

    def __init__(self):
        super().__init__("Invalid email or password", code="invalid-credentials")


class EmailNotVerifiedError(ForbiddenException):
    """Raised when an action requires a verified email."""

    def __init__(self):
        super().__init__("Please verify your email first", code="email-not-verified")


class PhoneNotVerifiedError(ForbiddenException):
    """Raised when an action requires a verified phone number."""

    def __init__(self):
        super().__init__("Please verify your phone number first", code="phone-not-verified")


class UserExistsError(ConflictException):
    """Raised when email is already registered."""

    def __init__(self):
        super().__init__("An account with this email already exists", code="user-exists")


class InvalidGoogleTokenError(UnauthorizedException):
    def __init__(self):
        super().__init__("Invalid Google token", code="invalid-google-token")


class InvalidOTPError(BadRequestException):
    def __init__(self):
        super().__init__("Invalid or expired OTP", code="invalid-otp")


class OTPCooldownError(RateLimitException):
    """Raised when a new code is requested inside the cooldown window."""

    def __init__(self, seconds: int):
        super().__init__(
            f"Please wait {seconds} seconds before requesting a new OTP",
            code="otp-cooldown"
        )


class InvalidResetTokenError(BadRequestException):
    def __init__(self):
        super().__init__("Invalid or expired reset token", code="invalid-reset-token")
