# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Community API endpoints.

- POST / - Create a community (super admin)
- GET / - List active communities with membership flags
- GET /my - Communities the caller belongs to
- GET /{community_id} - Community details with members
- POST /{community_id}/join - Join a community (students)
- POST /{community_id}/leave - Leave a community (students)
- DELETE /{community_id} - Deactivate a community (super admin)
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, HTTPException, Query, status

from src.api.dependencies import AuthenticatedUser, Database, StudentUser, SuperAdmin
from src.domains.community import (
    CommunityMembershipError,
    CommunityNotFoundError,
    CommunityPermissionError,
    CommunityService,
    InvalidCommunityCategoryError,
)
from src.models.common import ApiResponse
from src.models.community import CommunityCreateRequest, CommunityFilter

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_community_service(db) -> CommunityService:
    return CommunityService(db)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create community",
)
async def create_community(
    data: CommunityCreateRequest,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    try:
        community = await _get_community_service(db).create_community(data, current_user.id)
    except InvalidCommunityCategoryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ApiResponse(message="Community created successfully", data=community)


@router.get(
    "",
    summary="List communities",
)
async def list_communities(
    filters: Annotated[CommunityFilter, Query()],
    current_user: AuthenticatedUser,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_community_service(db).list_communities(filters, current_user.id)


@router.get(
    "/my",
    summary="List my communities",
)
async def list_my_communities(
    current_user: AuthenticatedUser,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_community_service(db).list_user_communities(current_user.id)


@router.get(
    "/{community_id}",
    summary="Get community",
)
async def get_community(
    community_id: str,
    current_user: AuthenticatedUser,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_community_service(db).get_community(community_id, current_user.id)
    except CommunityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/{community_id}/join",
    response_model=ApiResponse,
    summary="Join community",
)
async def join_community(
    community_id: str,
    current_user: StudentUser,
    db: Database,
) -> ApiResponse:
    service = _get_community_service(db)
    try:
        community = await service.join_community(community_id, current_user.id)
    except CommunityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CommunityPermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except CommunityMembershipError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ApiResponse(message="Successfully joined the community", data=community)


@router.post(
    "/{community_id}/leave",
    response_model=ApiResponse,
    summary="Leave community",
)
async def leave_community(
    community_id: str,
    current_user: StudentUser,
    db: Database,
) -> ApiResponse:
    service = _get_community_service(db)
    try:
        community = await service.leave_community(community_id, current_user.id)
    except CommunityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CommunityMembershipError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ApiResponse(message="Successfully left the community", data=community)


@router.delete(
    "/{community_id}",
    response_model=ApiResponse,
    summary="Deactivate community",
)
async def deactivate_community(
    community_id: str,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    try:
        await _get_community_service(db).deactivate_community(community_id, current_user.id)
    except CommunityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="Community deactivated successfully")
