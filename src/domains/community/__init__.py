# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Community domain package.

This package provides:
- CommunityService: Communities and student membership
- PostService: Member posts and likes
"""

from src.domains.community.posts import (
    NotCommunityMemberError,
    PostNotFoundError,
    PostService,
)
from src.domains.community.service import (
    CommunityMembershipError,
    CommunityNotFoundError,
    CommunityPermissionError,
    CommunityService,
    CommunityServiceError,
    InvalidCommunityCategoryError,
)

__all__ = [
    "CommunityService",
    "PostService",
    "CommunityServiceError",
    "CommunityNotFoundError",
    "CommunityMembershipError",
    "CommunityPermissionError",
    "InvalidCommunityCategoryError",
    "NotCommunityMemberError",
    "PostNotFoundError",
]
