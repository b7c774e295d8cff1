"""Notification service: composes and dispatches account emails."""

import logging

from civmanager.config import settings
from civmanager.models.user import User
from civmanager.tasks.email_sender import send_email

logger = logging.getLogger(__name__)


def _reset_link(token: str) -> str:
    return f"{settings.base_url}/reset-password?token={token}"


async def notify_password_reset(user: User, token: str) -> None:
    """Send the password recovery link to the account's address."""
    if not user.email:
        logger.warning("User %s has no email address; cannot send reset link", user.id)
        return

    minutes = settings.recovery_token_expire_minutes
    subject = "Civilization Manager: reset your password"
    body = (
        f"Hello {user.username},\n\n"
        f"Someone asked to reset the password of your account.\n"
        f"Open this link within {minutes} minutes to choose a new one:\n\n"
        f"{_reset_link(token)}\n\n"
        f"If you did not ask for this, you can ignore this email.\n"
    )
    await send_email(user.email, subject, body)
