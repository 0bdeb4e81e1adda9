# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transactional email templates.

EmailService renders each account email (onboarding credentials,
subscription expiry, credential review and mentor status changes) and
hands it to the EmailChannel. Delivery problems are logged and reported
in the returned ChannelResult; they never propagate to the caller, so a
flaky SMTP relay cannot roll back an onboarding or a payment.
"""

import html
import logging
from typing import Optional

from src.core.config.settings import Settings, get_settings
from src.infrastructure.notifications.channels import (
    ChannelResult,
    EmailChannel,
    NotificationPayload,
)

logger = logging.getLogger(__name__)

SIGNATURE_TEXT = "Best regards,\nThe Skillseed Team"
SIGNATURE_HTML = "<p>Best regards,</p><p><strong>The Skillseed Team</strong></p>"

CREDENTIAL_NAMES = {
    "government_id": "Government ID",
    "professional_credentials": "Professional Credentials",
}

DEFAULT_REJECTION_REASON = (
    "The submitted credentials did not meet our verification requirements."
)


def _credential_name(credential_type: str) -> str:
    return CREDENTIAL_NAMES.get(credential_type, "Professional Credentials")


def _e(value: str) -> str:
    return html.escape(value or "")


class EmailService:
    """Renders and sends the platform's transactional emails.

    Example:
        service = EmailService(EmailChannel(settings.smtp))
        await service.send_school_onboarding_email("admin@school.rw", "Xy7!...")
    """

    def __init__(self, channel: EmailChannel) -> None:
        self._channel = channel

    async def _deliver(self, payload: NotificationPayload) -> ChannelResult:
        result = await self._channel.send(payload)
        if result.is_sent:
            logger.info(
                "%s email sent to %s", payload.notification_type, payload.recipient_email
            )
        else:
            logger.warning(
                "%s email to %s not sent (%s): %s",
                payload.notification_type,
                payload.recipient_email,
                result.status.value,
                result.error_message,
            )
        return result

    async def send_school_onboarding_email(self, email: str, password: str) -> ChannelResult:
        """Send a newly paid-up school its login credentials."""
        text = (
            "Hi there,\n\n"
            "Your school has been onboarded on Skillseed.\n\n"
            "Here are your login credentials:\n"
            f"Email: {email}\n"
            f"Password: {password}\n\n"
            "You'll be asked to reset this password on first login.\n\n"
            "Welcome aboard!"
        )
        body = (
            "<p>Hi there,</p>"
            "<p>Your school has been onboarded on Skillseed 🎉</p>"
            "<p>Here are your login credentials:</p>"
            f"<ul><li><strong>Email:</strong> {_e(email)}</li>"
            f"<li><strong>Password:</strong> {_e(password)}</li></ul>"
            "<p>You'll be asked to reset this password on first login.</p>"
            "<p>Welcome aboard!</p>"
        )
        return await self._deliver(
            NotificationPayload(
                notification_type="school_onboarding",
                title="Your Skillseed School Account",
                message=text,
                html=body,
                recipient_email=email,
            )
        )

    async def send_mentor_onboarding_email(
        self, first_name: str, email: str, password: str
    ) -> ChannelResult:
        """Send an onboarded mentor their login credentials."""
        text = (
            f"Hi {first_name},\n\n"
            "Welcome to Skillseed! We're thrilled to have you join our "
            "mentorship network.\n\n"
            "Here are your login credentials:\n"
            f"Email: {email}\n"
            f"Password: {password}\n\n"
            "You'll be prompted to reset your password the first time you log in "
            "to keep your account secure.\n\n"
            "Let's make learning meaningful,\nThe Skillseed Team"
        )
        body = (
            f"<p>Hi {_e(first_name)},</p>"
            "<p>Welcome to <strong>Skillseed</strong>! 🎉 We're thrilled to have you "
            "join our mentorship network.</p>"
            "<p>Here are your login credentials:</p>"
            f"<ul><li><strong>Email:</strong> {_e(email)}</li>"
            f"<li><strong>Password:</strong> {_e(password)}</li></ul>"
            "<p>You'll be prompted to reset your password the first time you log in "
            "to keep your account secure.</p>"
            "<p>As a mentor, you play a key role in shaping the experience of learners "
            "and supporting their growth.</p>"
            "<p>Let's make learning meaningful,</p>"
            "<p><strong>The Skillseed Team</strong></p>"
        )
        return await self._deliver(
            NotificationPayload(
                notification_type="mentor_onboarding",
                title="Welcome to Skillseed - Your Mentor Account Details",
                message=text,
                html=body,
                recipient_email=email,
                recipient_name=first_name,
            )
        )

    async def send_credential_approved_email(
        self, email: str, first_name: str, credential_type: str
    ) -> ChannelResult:
        """Notify a mentor that a credential was approved."""
        name = _credential_name(credential_type)
        text = (
            f"Hi {first_name},\n\n"
            f"Great news! Your {name} has been approved by our team.\n\n"
            "Your profile is now fully verified, which means you can access all "
            "mentor features on Skillseed.\n\n"
            f"{SIGNATURE_TEXT}"
        )
        body = (
            f"<p>Hi {_e(first_name)},</p>"
            f"<p>Great news! Your {name} has been <strong>approved</strong> by our team.</p>"
            "<p>Your profile is now fully verified, which means you can access all "
            "mentor features on Skillseed.</p>"
            f"{SIGNATURE_HTML}"
        )
        return await self._deliver(
            NotificationPayload(
                notification_type="credential_approved",
                title="Your Credentials Have Been Approved",
                message=text,
                html=body,
                recipient_email=email,
                recipient_name=first_name,
                data={"credential_type": credential_type},
            )
        )

    async def send_credential_rejected_email(
        self,
        email: str,
        first_name: str,
        credential_type: str,
        rejection_reason: Optional[str],
    ) -> ChannelResult:
        """Notify a mentor that a credential was rejected, with the reason."""
        name = _credential_name(credential_type)
        reason = rejection_reason or DEFAULT_REJECTION_REASON
        text = (
            f"Hi {first_name},\n\n"
            f"We've reviewed your {name} and unfortunately, we were unable to "
            "approve it at this time.\n\n"
            f"Reason: {reason}\n\n"
            "Please log in to your account and upload a new document that addresses "
            "the issues mentioned above.\n\n"
            f"{SIGNATURE_TEXT}"
        )
        body = (
            f"<p>Hi {_e(first_name)},</p>"
            f"<p>We've reviewed your {name} and unfortunately, we were unable to "
            "approve it at this time.</p>"
            f"<p><strong>Reason:</strong> {_e(reason)}</p>"
            "<p>Please log in to your account and upload a new document that addresses "
            "the issues mentioned above.</p>"
            f"{SIGNATURE_HTML}"
        )
        return await self._deliver(
            NotificationPayload(
                notification_type="credential_rejected",
                title="Action Required: Your Credentials Were Not Approved",
                message=text,
                html=body,
                recipient_email=email,
                recipient_name=first_name,
                data={"credential_type": credential_type},
            )
        )

    async def send_mentor_suspension_email(self, first_name: str, email: str) -> ChannelResult:
        """Notify a mentor that their account was suspended."""
        text = (
            f"Hi {first_name},\n\n"
            "We're writing to inform you that your Skillseed mentor account has been "
            "temporarily suspended.\n\n"
            "If you believe this action was taken in error, please contact our "
            "support team at support@skillseed.com.\n\n"
            f"{SIGNATURE_TEXT}"
        )
        body = (
            f"<p>Hi {_e(first_name)},</p>"
            "<p>We're writing to inform you that your Skillseed mentor account has been "
            "temporarily suspended.</p>"
            "<p>If you believe this action was taken in error, please contact our "
            "support team at support@skillseed.com.</p>"
            f"{SIGNATURE_HTML}"
        )
        return await self._deliver(
            NotificationPayload(
                notification_type="mentor_suspension",
                title="Your Skillseed Mentor Account Has Been Suspended",
                message=text,
                html=body,
                recipient_email=email,
                recipient_name=first_name,
            )
        )

    async def send_mentor_reactivation_email(self, first_name: str, email: str) -> ChannelResult:
        """Notify a mentor that their account was reactivated."""
        text = (
            f"Hi {first_name},\n\n"
            "We're pleased to inform you that your Skillseed mentor account has been "
            "reactivated.\n\n"
            "You can now log in to your account and resume all mentor activities on "
            "the platform.\n\n"
            f"{SIGNATURE_TEXT}"
        )
        body = (
            f"<p>Hi {_e(first_name)},</p>"
            "<p>We're pleased to inform you that your Skillseed mentor account has been "
            "reactivated.</p>"
            "<p>You can now log in to your account and resume all mentor activities on "
            "the platform.</p>"
            f"{SIGNATURE_HTML}"
        )
        return await self._deliver(
            NotificationPayload(
                notification_type="mentor_reactivation",
                title="Good News! Your Skillseed Mentor Account Has Been Reactivated",
                message=text,
                html=body,
                recipient_email=email,
                recipient_name=first_name,
            )
        )


# Singleton instance
_email_service: EmailService | None = None


def get_email_service(settings: Settings | None = None) -> EmailService:
    """Get or create the email service singleton.

    Args:
        settings: Application settings. Defaults to get_settings().

    Returns:
        The shared EmailService instance.
    """
    global _email_service

    if _email_service is None:
        settings = settings or get_settings()
        _email_service = EmailService(EmailChannel(settings.smtp))

    return _email_service


def reset_email_service() -> None:
    """Drop the singleton so the next call rebuilds it from settings."""
    global _email_service
    _email_service = None
