"""
Email Service Module

This module handles email dispatch through the configured SMTP server.
Messages are rendered from Jinja2 templates (HTML plus a plain-text part)
and sent with aiosmtplib; transient failures are retried with tenacity.
"""

from email.message import EmailMessage
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiosmtplib
from jinja2 import Environment, FileSystemLoader, select_autoescape
from tenacity import retry, stop_after_attempt, wait_exponential

from zyrotech.core.exceptions import ServiceUnavailableException
from zyrotech.core.logging import get_logger
from zyrotech.core.settings import settings
from zyrotech.monitoring.prometheus import get_emails_sent_total

# Initialize logger
logger = get_logger(__name__)

# Initialize Jinja2 environment
template_dir = Path(__file__).parent / "templates"
env = Environment(
    loader=FileSystemLoader(template_dir),
    autoescape=select_autoescape(["html"])
)


class EmailDeliveryError(ServiceUnavailableException):
    """Raised when a message could not be handed to the SMTP server."""

    def __init__(self):
        super().__init__("Failed to send email, please try again later", code="email-delivery-failed")


class EmailService:
    """Service for sending transactional emails."""

    def __init__(self):
        self.smtp_host = settings.email.SMTP_HOST
        self.smtp_port = settings.email.SMTP_PORT
        self.smtp_user = settings.email.SMTP_USER
        self.smtp_password = (
            settings.email.SMTP_PASSWORD.get_secret_value()
            if settings.email.SMTP_PASSWORD else None
        )
        self.from_email = settings.email.FROM_EMAIL

    def _connection(self) -> aiosmtplib.SMTP:
        return aiosmtplib.SMTP(
            hostname=self.smtp_host,
            port=self.smtp_port,
            use_tls=settings.email.SMTP_USE_TLS,
            start_tls=settings.email.SMTP_START_TLS if not settings.email.SMTP_USE_TLS else False,
            timeout=settings.email.SMTP_TIMEOUT
        )

    async def _send_smtp(self, message: EmailMessage) -> None:
        async with self._connection() as smtp:
            if self.smtp_user and self.smtp_password:
                await smtp.login(self.smtp_user, self.smtp_password)
            await smtp.send_message(message)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True
    )
    async def _deliver(self, message: EmailMessage) -> None:
        await self._send_smtp(message)

    async def send_email(
        self,
        to_emails: Union[str, List[str]],
        subject: str,
        template_name: str,
        template_data: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Render ``<template_name>.html`` and ``<template_name>.txt`` and send them.

        Args:
            to_emails: Recipient email(s)
            subject: Email subject
            template_name: Template base name under ``mailer/templates``
            template_data: Template variables

        Raises:
            EmailDeliveryError: If every delivery attempt fails
        """
        if isinstance(to_emails, str):
            to_emails = [to_emails]

        data = {"app_name": settings.app.TITLE, **(template_data or {})}
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.from_email
        message["To"] = ", ".join(to_emails)
        message.set_content(env.get_template(f"{template_name}.txt").render(**data))
        message.add_alternative(env.get_template(f"{template_name}.html").render(**data), subtype="html")

        try:
            await self._deliver(message)
        except (aiosmtplib.SMTPException, OSError) as e:
            get_emails_sent_total().labels(template=template_name, outcome="failed").inc()
            logger.error(
                "[EMAIL] Failed to send email",
                exc_info=True,
                extra={"to": to_emails, "subject": subject, "template": template_name, "error": str(e)}
            )
            raise EmailDeliveryError() from e

        get_emails_sent_total().labels(template=template_name, outcome="sent").inc()
        logger.info(
            "[EMAIL] Email sent successfully",
            extra={"to": to_emails, "subject": subject, "template": template_name}
        )

    async def send_verification_otp(self, to_email: str, full_name: str, code: str) -> None:
        await self.send_email(
            to_email,
            "Verify your email",
            "verify_email",
            {
                "full_name": full_name,
                "code": code,
                "expiry_minutes": settings.otp.EXPIRY_MINUTES,
            }
        )

    async def send_password_reset(self, to_email: str, full_name: str, reset_url: str) -> None:
        await self.send_email(
            to_email,
            "Reset your password",
            "password_reset",
            {
                "full_name": full_name,
                "reset_url": reset_url,
                "expiry_minutes": settings.auth.RESET_TOKEN_EXPIRE_MINUTES,
            }
        )

    async def verify_connection(self) -> bool:
        """Connect (and log in, when configured) without sending anything."""
        try:
            async with self._connection() as smtp:
                if self.smtp_user and self.smtp_password:
                    await smtp.login(self.smtp_user, self.smtp_password)
                await smtp.noop()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("[EMAIL] SMTP connection check failed", extra={"error": str(e)})
            return False
        logger.info("[EMAIL] SMTP connection verified")
        return True


# Create singleton instance
email_service = EmailService()


def get_email_service() -> EmailService:
    """FastAPI dependency returning the shared email service."""
    return email_service
