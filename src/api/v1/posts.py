# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Community post API endpoints.

Mounted under /communities. Students only:
- POST /{community_id}/posts - Create a post (members only, awards stars)
- GET /{community_id}/posts - Paginated posts, newest first
- POST /posts/{post_id}/like - Like a post
- DELETE /posts/{post_id}/like - Remove a like
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from src.api.dependencies import Database, StudentUser
from src.domains.community import (
    CommunityMembershipError,
    CommunityNotFoundError,
    NotCommunityMemberError,
    PostNotFoundError,
    PostService,
)
from src.domains.rewards import RewardsService
from src.models.common import ApiResponse
from src.models.community import PostCreateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_post_service(db) -> PostService:
    return PostService(db, RewardsService(db))


@router.post(
    "/{community_id}/posts",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create post",
)
async def create_post(
    community_id: str,
    data: PostCreateRequest,
    current_user: StudentUser,
    db: Database,
) -> ApiResponse:
    service = _get_post_service(db)
    try:
        post = await service.create_post(current_user.id, community_id, data)
    except CommunityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except NotCommunityMemberError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    return ApiResponse(message="Post created successfully", data=post)


@router.get(
    "/{community_id}/posts",
    summary="List posts",
)
async def list_posts(
    community_id: str,
    current_user: StudentUser,
    db: Database,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict[str, Any]:
    try:
        return await _get_post_service(db).list_posts(community_id, page, limit)
    except CommunityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/posts/{post_id}/like",
    summary="Like post",
)
async def like_post(
    post_id: str,
    current_user: StudentUser,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_post_service(db).like_post(current_user.id, post_id)
    except PostNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CommunityMembershipError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete(
    "/posts/{post_id}/like",
    summary="Unlike post",
)
async def unlike_post(
    post_id: str,
    current_user: StudentUser,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_post_service(db).unlike_post(current_user.id, post_id)
    except PostNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CommunityMembershipError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
