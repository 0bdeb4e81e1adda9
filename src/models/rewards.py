# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Challenge completion and reward models."""

from typing import Any

from src.models.common import CamelModel


class CompleteChallengeRequest(CamelModel):
    completion_notes: str | None = None


class RewardsSummary(CamelModel):
    """Totals and breakdowns of a student's stars and badges."""

    total_stars: int
    total_badges: int
    stars_by_type: dict[str, int]
    badges_by_tier: dict[str, int]
    badges: list[dict[str, Any]]
    stars: list[dict[str, Any]]
