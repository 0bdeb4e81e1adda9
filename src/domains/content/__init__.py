# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content domain package.

This package provides:
- ContentService: Content library, challenges and participation stats
- CategoryService: Challenge category CRUD
"""

from src.domains.content.categories import (
    CategoryExistsError,
    CategoryNotFoundError,
    CategoryService,
)
from src.domains.content.service import (
    ChallengeNotFoundError,
    ContentNotFoundError,
    ContentService,
    ContentServiceError,
    InvalidCategoryError,
    InvalidContentError,
    audiences_for_role,
    search_clause,
)

__all__ = [
    "ContentService",
    "CategoryService",
    "ContentServiceError",
    "ContentNotFoundError",
    "ChallengeNotFoundError",
    "InvalidContentError",
    "InvalidCategoryError",
    "CategoryNotFoundError",
    "CategoryExistsError",
    "audiences_for_role",
    "search_clause",
]
