"""SMTP delivery for account emails.

With no ``smtp_host`` configured nothing is sent and a warning is logged, so
development and tests run without a mail server.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from civmanager.config import settings

logger = logging.getLogger(__name__)


def _build_message(to: str, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = settings.smtp_from
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)
    return msg


def _deliver(to: str, subject: str, body: str) -> None:
    """Blocking SMTP send; run in a thread executor."""
    if not settings.smtp_host:
        logger.warning("smtp_host is empty; not sending '%s' to %s", subject, to)
        return

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
        server.starttls()
        if settings.smtp_user:
            server.login(settings.smtp_user, settings.smtp_password)
        server.send_message(_build_message(to, subject, body))

    logger.info("Sent '%s' to %s", subject, to)


async def send_email(to: str, subject: str, body: str) -> None:
    """Send without blocking the event loop.

    Delivery errors are logged and never raised to the caller.
    """
    try:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _deliver, to, subject, body)
    except (OSError, smtplib.SMTPException) as exc:
        logger.error("Could not send '%s' to %s: %s", subject, to, exc)
