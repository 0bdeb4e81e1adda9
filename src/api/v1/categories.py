# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Challenge category API endpoints.

- POST / - Create category (super admin)
- GET / - List categories
- GET /{category_id} - Get category
- PUT /{category_id} - Update category (super admin)
- DELETE /{category_id} - Delete category (super admin)
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from src.api.dependencies import AuthenticatedUser, Database, SuperAdmin
from src.domains.content import CategoryExistsError, CategoryNotFoundError, CategoryService
from src.models.common import ApiResponse
from src.models.content import CategoryCreateRequest, CategoryUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_category_service(db) -> CategoryService:
    return CategoryService(db)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    data: CategoryCreateRequest,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    try:
        category = await _get_category_service(db).create_category(data, current_user.id)
    except CategoryExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ApiResponse(message="Category created successfully", data=category)


@router.get(
    "",
    summary="List categories",
)
async def list_categories(
    current_user: AuthenticatedUser,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_category_service(db).list_categories()


@router.get(
    "/{category_id}",
    summary="Get category",
)
async def get_category(
    category_id: str,
    current_user: AuthenticatedUser,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_category_service(db).get_category(category_id)
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{category_id}",
    response_model=ApiResponse,
    summary="Update category",
)
async def update_category(
    category_id: str,
    data: CategoryUpdateRequest,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    service = _get_category_service(db)
    try:
        category = await service.update_category(category_id, data, current_user.id)
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CategoryExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ApiResponse(message="Category updated successfully", data=category)


@router.delete(
    "/{category_id}",
    response_model=ApiResponse,
    summary="Delete category",
)
async def delete_category(
    category_id: str,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    try:
        await _get_category_service(db).delete_category(category_id, current_user.id)
    except CategoryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="Category deleted successfully")
