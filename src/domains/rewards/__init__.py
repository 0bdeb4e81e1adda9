# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rewards domain - stars and badges earned by students."""

from src.domains.rewards.service import (
    CATEGORY_BADGES,
    COMMUNITY_POST_STARS,
    CONTENT_STARS,
    PROJECT_STARS,
    STAR_TIERS,
    ChallengeAlreadyCompletedError,
    ChallengeNotFoundError,
    ContentNotFoundError,
    RewardsService,
    RewardsServiceError,
    badge_type_for,
)

__all__ = [
    "RewardsService",
    "RewardsServiceError",
    "ChallengeNotFoundError",
    "ChallengeAlreadyCompletedError",
    "ContentNotFoundError",
    "CATEGORY_BADGES",
    "STAR_TIERS",
    "PROJECT_STARS",
    "COMMUNITY_POST_STARS",
    "CONTENT_STARS",
    "badge_type_for",
]
