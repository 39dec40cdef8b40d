from typing import Any, Dict, Optional

from fastapi import status


class AppException(Exception):
    """Base exception class for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        code: str = "internal-error",
        extra: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.extra = extra or {}
        super().__init__(message)


class BadRequestException(AppException):
    """Raised when the request is well-formed but semantically invalid."""

    def __init__(
        self,
        message: str = "Bad request",
        code: str = "bad-request",
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            code=code,
            extra=extra
        )


class UnauthorizedException(AppException):
    """Raised when authentication is missing or invalid."""

    def __init__(
        self,
        message: str = "Please authenticate.",
        code: str = "unauthorized",
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=code,
            extra=extra
        )


class ForbiddenException(AppException):
    """Raised when the caller lacks the required verification or role."""

    def __init__(
        self,
        message: str = "Forbidden",
        code: str = "forbidden",
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            code=code,
            extra=extra
        )


class NotFoundException(AppException):
    """Raised when requested resource is not found."""

    def __init__(
        self,
        message: str = "Resource not found",
        code: str = "not-found",
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            code=code,
            extra=extra
        )


class ConflictException(AppException):
    """Raised when there's a conflict with an existing resource."""

    def __init__(
        self,
        message: str = "Resource conflict",
        code: str = "duplicate-resource",
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            code=code,
            extra=extra
        )


class RateLimitException(AppException):
    """Raised when an action is repeated inside its cooldown window."""

    def __init__(
        self,
        message: str = "Too many requests",
        code: str = "rate-limited",
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            code=code,
            extra=extra
        )


class ServiceUnavailableException(AppException):
    """Raised when a required external service is unavailable."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        code: str = "service-unavailable",
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            code=code,
            extra=extra
        )


__all__ = [
    "AppException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "RateLimitException",
    "ServiceUnavailableException",
]
