# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School domain package.

This package provides:
- SchoolOnboardingService: Super admin school onboarding and management
- SchoolStudentService: Quota-checked student management by a school admin
"""

from src.domains.school.service import (
    OnboardingError,
    SchoolEmailExistsError,
    SchoolNotFoundError,
    SchoolOnboardingService,
    SchoolServiceError,
)
from src.domains.school.students import (
    QuotaExceededError,
    SchoolStudentService,
    StudentExistsError,
    StudentNotFoundError,
    StudentPermissionError,
)

__all__ = [
    "SchoolOnboardingService",
    "SchoolStudentService",
    "SchoolServiceError",
    "SchoolNotFoundError",
    "SchoolEmailExistsError",
    "OnboardingError",
    "QuotaExceededError",
    "StudentExistsError",
    "StudentNotFoundError",
    "StudentPermissionError",
]
