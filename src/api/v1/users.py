# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management API endpoints.

This module provides endpoints for user management:
- GET /me - Get own profile
- PUT /me - Update own profile (multipart, optional image)
- GET / - List users, optionally filtered by role (super admin)
- DELETE /{user_id} - Soft delete a user (super admin)
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status

from src.api.dependencies import AuthenticatedUser, Database, Storage, SuperAdmin, read_upload
from src.domains.user.service import UserAlreadyExistsError, UserNotFoundError, UserService
from src.models.common import ApiResponse, UserRole
from src.models.user import ProfileUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_user_service(db, storage=None) -> UserService:
    """Get user service instance.

    Args:
        db: Application database.
        storage: Optional blob storage for profile images.

    Returns:
        UserService instance.
    """
    return UserService(db, storage)


@router.get(
    "/me",
    summary="Get own profile",
)
async def get_my_profile(
    current_user: AuthenticatedUser,
    db: Database,
) -> dict[str, Any]:
    service = _get_user_service(db)
    try:
        return await service.get_profile(current_user.id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/me",
    summary="Update own profile",
    description="Multipart form. Only the fields present are changed.",
)
async def update_my_profile(
    data: Annotated[ProfileUpdateRequest, Form()],
    current_user: AuthenticatedUser,
    db: Database,
    storage: Storage,
    image: Annotated[UploadFile | None, File()] = None,
) -> dict[str, Any]:
    service = _get_user_service(db, storage)
    try:
        return await service.update_profile(
            current_user.id, data, image=await read_upload(image)
        )
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "",
    summary="List users",
)
async def list_users(
    current_user: SuperAdmin,
    db: Database,
    role: UserRole | None = Query(default=None, description="Filter by role"),
) -> list[dict[str, Any]]:
    service = _get_user_service(db)
    return await service.list_users(role)


@router.delete(
    "/{user_id}",
    response_model=ApiResponse,
    summary="Delete user",
    description="Soft delete. The account can no longer sign in.",
)
async def delete_user(
    user_id: str,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    service = _get_user_service(db)
    try:
        user = await service.soft_delete_user(user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    logger.info("User %s deleted by %s", user_id, current_user.id)
    return ApiResponse(message="User deleted successfully", data=user)
