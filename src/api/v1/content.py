# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content library and challenge API endpoints.

Super admin:
- POST / - Create a video or book
- POST /challenges - Create a challenge
- GET /admin/challenges - Challenges with completion statistics
- GET /admin/challenges/{challenge_id} - Challenge with the students who completed it

Authenticated users:
- GET / - Content visible to the caller's role
- GET /{content_id} - Content details

Students:
- GET /challenges - List challenges
- GET /challenges/{challenge_id} - Challenge details
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, status

from src.api.dependencies import AuthenticatedUser, Database, StudentUser, SuperAdmin
from src.domains.content import (
    ChallengeNotFoundError,
    ContentNotFoundError,
    ContentService,
    InvalidCategoryError,
    InvalidContentError,
)
from src.models.common import ApiResponse
from src.models.content import (
    ChallengeCreateRequest,
    ChallengeFilter,
    ContentCreateRequest,
    ContentFilter,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_content_service(db) -> ContentService:
    return ContentService(db)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create content",
)
async def create_content(
    data: ContentCreateRequest,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    try:
        content = await _get_content_service(db).create_content(data, current_user.id)
    except InvalidContentError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ApiResponse(message="Content created successfully", data=content)


@router.get(
    "",
    summary="List content",
    description="Returns content targeted at everyone or at the caller's role.",
)
async def list_content(
    filters: Annotated[ContentFilter, Query()],
    current_user: AuthenticatedUser,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_content_service(db).list_content_for_role(current_user.role, filters)


# =========================================================================
# Challenges
# =========================================================================


@router.post(
    "/challenges",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create challenge",
)
async def create_challenge(
    data: ChallengeCreateRequest,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    try:
        challenge = await _get_content_service(db).create_challenge(data, current_user.id)
    except InvalidCategoryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ApiResponse(message="Challenge created successfully", data=challenge)


@router.get(
    "/admin/challenges",
    summary="List challenges with statistics",
)
async def list_challenges_for_admin(
    current_user: SuperAdmin,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_content_service(db).list_challenges_for_admin()


@router.get(
    "/admin/challenges/{challenge_id}",
    summary="Get challenge with statistics",
)
async def get_challenge_for_admin(
    challenge_id: str,
    current_user: SuperAdmin,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_content_service(db).get_challenge_for_admin(challenge_id)
    except ChallengeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/challenges",
    summary="List challenges",
)
async def list_challenges(
    filters: Annotated[ChallengeFilter, Query()],
    current_user: StudentUser,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_content_service(db).list_challenges(filters)


@router.get(
    "/challenges/{challenge_id}",
    summary="Get challenge",
)
async def get_challenge(
    challenge_id: str,
    current_user: StudentUser,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_content_service(db).get_challenge(challenge_id)
    except ChallengeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/{content_id}",
    summary="Get content",
)
async def get_content(
    content_id: str,
    current_user: AuthenticatedUser,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_content_service(db).get_content(content_id)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
