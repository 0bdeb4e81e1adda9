# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email notification channel using async SMTP.

Configuration comes from SMTPSettings (SMTP_HOST, SMTP_PORT,
SMTP_USERNAME, SMTP_PASSWORD, SMTP_USE_TLS, SMTP_FROM_EMAIL,
SMTP_FROM_NAME). When any required value is missing every send is
skipped and a warning is logged once.
"""

import html
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid

import aiosmtplib

from src.core.config.settings import SMTPSettings
from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)


class EmailChannel(BaseChannel):
    """Email notification channel using aiosmtplib.

    Every message carries a plain text part and an HTML part.
    """

    def __init__(self, settings: SMTPSettings) -> None:
        super().__init__()
        self._settings = settings
        self._warned = False

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.EMAIL

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Send an email via SMTP.

        Args:
            payload: The notification payload.

        Returns:
            ChannelResult with delivery status.
        """
        if not self._settings.is_configured:
            if not self._warned:
                self.logger.warning(
                    "Email disabled: SMTP_HOST, SMTP_USERNAME, SMTP_PASSWORD "
                    "or SMTP_FROM_EMAIL not set"
                )
                self._warned = True
            return self.create_skipped_result("SMTP configuration incomplete")

        if not payload.recipient_email:
            return self.create_skipped_result("No recipient email address")

        message = self._build_email_message(payload)
        try:
            await aiosmtplib.send(
                message,
                hostname=self._settings.host,
                port=self._settings.port,
                username=self._settings.username,
                password=self._settings.password.get_secret_value(),
                start_tls=self._settings.use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            self.logger.error(
                "Failed to send %s email to %s: %s",
                payload.notification_type,
                payload.recipient_email,
                str(e),
                exc_info=True,
            )
            return self.create_failure_result(
                f"SMTP error: {str(e)}",
                metadata={"recipient": payload.recipient_email},
            )

        self.logger.info(
            "Email sent to %s: %s",
            payload.recipient_email,
            payload.title,
        )
        return self.create_success_result(
            message_id=message["Message-ID"],
            metadata={"recipient": payload.recipient_email},
        )

    def _build_email_message(self, payload: NotificationPayload) -> MIMEMultipart:
        message = MIMEMultipart("alternative")

        message["From"] = f"{self._settings.from_name} <{self._settings.from_email}>"
        message["To"] = payload.recipient_email
        message["Subject"] = payload.title
        message["Message-ID"] = make_msgid(domain="skillseed")

        message.attach(MIMEText(payload.message, "plain", "utf-8"))
        message.attach(MIMEText(payload.html or self._render_html(payload), "html", "utf-8"))

        return message

    @staticmethod
    def _render_html(payload: NotificationPayload) -> str:
        paragraphs = "".join(
            f"<p>{html.escape(block).replace(chr(10), '<br>')}</p>"
            for block in payload.message.split("\n\n")
            if block.strip()
        )
        return f"<!DOCTYPE html><html><body>{paragraphs}</body></html>"
