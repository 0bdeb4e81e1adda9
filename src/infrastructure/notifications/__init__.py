# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transactional email for the Skillseed backend.

Key Components:
- EmailService: One method per account email template
- EmailChannel: SMTP delivery via aiosmtplib
- NotificationPayload / ChannelResult: Data passed to and returned by channels

Usage:
    from src.infrastructure.notifications import get_email_service

    service = get_email_service()
    await service.send_mentor_suspension_email("Ada", "ada@example.com")
"""

from src.infrastructure.notifications.channels import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    EmailChannel,
    NotificationPayload,
)
from src.infrastructure.notifications.service import (
    EmailService,
    get_email_service,
    reset_email_service,
)

__all__ = [
    # Service
    "EmailService",
    "get_email_service",
    "reset_email_service",
    # Channel types
    "BaseChannel",
    "ChannelResult",
    "ChannelType",
    "DeliveryStatus",
    "NotificationPayload",
    # Channels
    "EmailChannel",
]
