# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transaction domain package."""

from src.domains.transaction.service import (
    SchoolNotPendingError,
    TemporaryPasswordNotFoundError,
    TransactionService,
    TransactionServiceError,
    TransactionTargetNotFoundError,
)

__all__ = [
    "TransactionService",
    "TransactionServiceError",
    "SchoolNotPendingError",
    "TransactionTargetNotFoundError",
    "TemporaryPasswordNotFoundError",
]
