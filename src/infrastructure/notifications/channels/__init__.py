# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification channels for delivering notifications.

Usage:
    from src.infrastructure.notifications.channels import (
        EmailChannel,
        NotificationPayload,
    )

    email = EmailChannel(settings.smtp)
    payload = NotificationPayload(
        notification_type="mentor_suspension",
        title="Your Skillseed Mentor Account Has Been Suspended",
        message="Hi Ada, ...",
        recipient_email="ada@example.com",
    )
    result = await email.send(payload)
"""

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    NotificationPayload,
)
from src.infrastructure.notifications.channels.email import EmailChannel

__all__ = [
    # Base types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    # Channels
    "EmailChannel",
]
