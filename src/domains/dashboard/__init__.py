# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dashboard domain - summary counts for each role."""

from src.domains.dashboard.service import (
    DashboardSchoolNotFoundError,
    DashboardService,
    DashboardServiceError,
    UnsupportedRoleError,
)

__all__ = [
    "DashboardService",
    "DashboardServiceError",
    "DashboardSchoolNotFoundError",
    "UnsupportedRoleError",
]
