"""
Core email sending utilities using Brevo SMTP.
"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from libs.common.config import get_settings
from libs.common.encryption import mask_email
from libs.common.logging import get_logger

logger = get_logger(__name__)


def _get_smtp_password() -> str:
    """Get SMTP password from settings (BREVO_KEY takes priority over SMTP_PASSWORD)."""
    settings = get_settings()
    return settings.BREVO_KEY or settings.SMTP_PASSWORD


def _deliver(sender_email: str, to_email: str, message: str, password: str) -> None:
    settings = get_settings()
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
        server.starttls()
        server.login(settings.SMTP_USERNAME, password)
        server.sendmail(sender_email, to_email, message)


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    from_email: Optional[str] = None,
    from_name: Optional[str] = None,
) -> bool:
    """
    Send an email using Brevo SMTP.

    Returns:
        True if email was sent successfully, False otherwise
    """
    settings = get_settings()
    smtp_password = _get_smtp_password()

    if not smtp_password or not settings.SMTP_USERNAME:
        logger.warning(
            "SMTP not configured - email not sent",
            extra={"extra_fields": {"to": mask_email(to_email), "subject": subject}},
        )
        return False

    sender_email = from_email or settings.DEFAULT_FROM_EMAIL
    sender_name = from_name or settings.DEFAULT_FROM_NAME

    if html_body:
        msg = MIMEMultipart("alternative")
        msg.attach(MIMEText(body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
    else:
        msg = MIMEText(body, "plain")

    msg["Subject"] = subject
    msg["From"] = f"{sender_name} <{sender_email}>"
    msg["To"] = to_email

    try:
        await asyncio.to_thread(
            _deliver, sender_email, to_email, msg.as_string(), smtp_password
        )
    except smtplib.SMTPAuthenticationError as e:
        logger.error("SMTP authentication failed: %s", e)
        return False
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send email to %s: %s", mask_email(to_email), e)
        return False

    logger.info("Email sent to %s: %s", mask_email(to_email), subject)
    return True
