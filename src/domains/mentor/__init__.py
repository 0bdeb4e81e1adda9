# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mentor domain package.

This package provides:
- MentorOnboardingService: Onboarding, suspension and profile updates
- MentorCredentialService: Credential uploads and admin verification
"""

from src.domains.mentor.credentials import (
    CredentialNotFoundError,
    InvalidVerificationError,
    MentorCredentialService,
)
from src.domains.mentor.service import (
    MentorExistsError,
    MentorNotFoundError,
    MentorOnboardingService,
    MentorServiceError,
)

__all__ = [
    "MentorOnboardingService",
    "MentorCredentialService",
    "MentorServiceError",
    "MentorNotFoundError",
    "MentorExistsError",
    "CredentialNotFoundError",
    "InvalidVerificationError",
]
