# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    auth: Sign-in and registration for every principal type.
    users: Own profile and user administration.
    schools: School onboarding and management (super admin).
    school_students: Students managed by a school admin.
    transactions: Payments that activate schools and register children.
    mentors: Mentor onboarding, suspension and profile.
    mentor_credentials: Credential upload and admin verification.
    content: Content library and challenges.
    categories: Challenge categories.
    communities: Communities and membership.
    posts: Community posts and likes.
    rewards: Challenge completion, stars and badges.
    parents: Parent-driven child registration.
    dashboard: Per-role summary counts.
"""

from fastapi import APIRouter

from src.api.v1 import (
    auth,
    categories,
    communities,
    content,
    dashboard,
    mentor_credentials,
    mentors,
    parents,
    posts,
    rewards,
    school_students,
    schools,
    transactions,
    users,
)

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(schools.router, prefix="/schools", tags=["Schools"])
router.include_router(school_students.router, prefix="/school/students", tags=["School Students"])
router.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])
router.include_router(mentors.router, prefix="/mentors", tags=["Mentors"])
router.include_router(
    mentor_credentials.router, prefix="/mentor-credentials", tags=["Mentor Credentials"]
)
router.include_router(
    mentor_credentials.admin_router,
    prefix="/admin/mentor-credentials",
    tags=["Mentor Credentials Admin"],
)
router.include_router(content.router, prefix="/content", tags=["Content"])
router.include_router(categories.router, prefix="/categories", tags=["Categories"])
router.include_router(communities.router, prefix="/communities", tags=["Communities"])
router.include_router(posts.router, prefix="/communities", tags=["Posts"])
router.include_router(rewards.router, prefix="/rewards", tags=["Rewards"])
router.include_router(parents.router, prefix="/parents", tags=["Parents"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])

__all__ = ["router"]
