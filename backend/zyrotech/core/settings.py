"""
Settings Module

This module manages all application configuration using Pydantic v2 Settings.
Includes configurations for:
- Application core settings
- Database connections
- Authentication, JWT and admin access
- OTP and password reset lifetimes
- Email delivery (SMTP) and Google sign-in
- Logging, monitoring and security headers
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Section classes read os.environ directly, so .env must be loaded first
load_dotenv()

DEFAULT_JWT_SECRET = "dev_jwt_secret_change_me"


class AppConfig(BaseSettings):
    """Application core configuration."""

    TITLE: str = "Zyrotech Trading Bot API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Trading-bot subscription platform: accounts, KYC, bots, signals and subscriptions"

    # Environment
    ENVIRONMENT: str = Field(
        default="development",
        pattern="^(development|staging|production|test)$"
    )
    DEBUG: bool = Field(default=False)

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)

    # Absolute base URL used in emailed links
    PUBLIC_BASE_URL: str = Field(default="http://localhost:3000")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    model_config = SettingsConfigDict(
        env_prefix="APP_"
    )


class DatabaseConfig(BaseSettings):
    """Database connection configuration."""

    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./zyrotech.db")
    ECHO: bool = Field(default=False)

    # Connection Pool (ignored for SQLite)
    POOL_SIZE: int = Field(default=10)
    MAX_OVERFLOW: int = Field(default=5)
    POOL_RECYCLE: int = Field(default=1800)  # 30 minutes

    # Create missing tables on startup
    CREATE_TABLES: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="DB_"
    )


class AuthConfig(BaseSettings):
    """Authentication and authorization configuration."""

    # JWT Settings
    JWT_SECRET_KEY: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = Field(default=7)

    # Password Hashing
    ARGON2_TIME_COST: int = Field(default=2)
    ARGON2_MEMORY_COST: int = Field(default=102400)
    ARGON2_PARALLELISM: int = Field(default=8)

    # Password reset
    RESET_TOKEN_EXPIRE_MINUTES: int = Field(default=30)

    # Users allowed to verify KYC sections
    ADMIN_EMAILS: List[str] = Field(default=[])

    model_config = SettingsConfigDict(
        env_prefix="AUTH_"
    )


class OTPConfig(BaseSettings):
    """One-time password configuration."""

    EXPIRY_MINUTES: int = Field(default=5)
    COOLDOWN_SECONDS: int = Field(default=60)

    # No SMS gateway is wired in; return phone codes in the response instead
    ECHO_PHONE_CODE: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="OTP_"
    )


class EmailConfig(BaseSettings):
    """SMTP configuration."""

    SMTP_HOST: str = Field(default="localhost")
    SMTP_PORT: int = Field(default=587)
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[SecretStr] = None
    SMTP_USE_TLS: bool = Field(default=False)
    SMTP_START_TLS: bool = Field(default=True)
    SMTP_TIMEOUT: int = Field(default=10)
    FROM_EMAIL: str = Field(default="no-reply@zyrotech.local")

    # Verify the SMTP connection during startup and abort if it fails
    VERIFY_ON_STARTUP: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_"
    )


class GoogleConfig(BaseSettings):
    """Google sign-in configuration."""

    CLIENT_IDS: List[str] = Field(default=[])

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_"
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=True)

    # Log file settings
    LOG_DIR: Path = Field(default=Path("logs"))
    LOG_MAX_BYTES: int = Field(default=10485760)  # 10MB
    LOG_BACKUP_COUNT: int = Field(default=5)

    # Sentry
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = Field(default=0.2)

    model_config = SettingsConfigDict(
        env_prefix="LOG_"
    )


class SecurityConfig(BaseSettings):
    """Security configuration."""

    # CORS
    CORS_ORIGINS: List[str] = Field(default=["*"])
    CORS_ALLOW_CREDENTIALS: bool = Field(default=False)
    CORS_ALLOW_METHODS: List[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    )
    CORS_ALLOW_HEADERS: List[str] = Field(default=["*"])

    # Security Headers
    SECURITY_HEADERS: bool = Field(default=True)
    HSTS_MAX_AGE: int = Field(default=31536000)  # 1 year

    model_config = SettingsConfigDict(
        env_prefix="SECURITY_"
    )


class AppSettings(BaseSettings):
    """Main settings class combining all configuration sections."""

    app: AppConfig = AppConfig()
    db: DatabaseConfig = DatabaseConfig()
    auth: AuthConfig = AuthConfig()
    otp: OTPConfig = OTPConfig()
    email: EmailConfig = EmailConfig()
    google: GoogleConfig = GoogleConfig()
    logging: LoggingConfig = LoggingConfig()
    security: SecurityConfig = SecurityConfig()

    @model_validator(mode="after")
    def validate_production_settings(self) -> "AppSettings":
        """Validate production environment settings."""
        if self.app.is_production:
            assert self.auth.JWT_SECRET_KEY.get_secret_value() != DEFAULT_JWT_SECRET, \
                "JWT secret must be set in production"
            assert not self.app.DEBUG, "Debug mode must be disabled in production"
            assert not self.otp.ECHO_PHONE_CODE, "Phone OTP echo must be disabled in production"
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=True,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> AppSettings:
    """
    Create cached settings instance.

    Returns:
        Cached AppSettings instance
    """
    return AppSettings()


# Create global settings instance
settings = get_settings()
