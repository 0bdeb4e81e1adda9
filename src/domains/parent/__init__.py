# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent domain - registering children through staged TempStudent records."""

from src.domains.parent.service import (
    ParentNotFoundError,
    ParentService,
    ParentServiceError,
    TempStudentNotFoundError,
)

__all__ = [
    "ParentService",
    "ParentServiceError",
    "ParentNotFoundError",
    "TempStudentNotFoundError",
]
