# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School management API endpoints.

All endpoints require the super admin role:
- POST / - Onboard a school (multipart, optional logo)
- GET / - List active schools
- GET /{school_id} - Get school details
- PUT /{school_id} - Update school (multipart, optional logo)
- DELETE /{school_id} - Soft delete school
- POST /{school_id}/restore - Restore a soft-deleted school

An onboarded school stays in pending status until its first payment is
recorded through the transactions endpoints.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from src.api.dependencies import Database, Redis, Storage, SuperAdmin, read_upload
from src.core.config import get_settings
from src.domains.school import (
    OnboardingError,
    SchoolEmailExistsError,
    SchoolNotFoundError,
    SchoolOnboardingService,
)
from src.models.common import ApiResponse
from src.models.school import SchoolCreateRequest, SchoolUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_school_service(db, redis=None, storage=None) -> SchoolOnboardingService:
    return SchoolOnboardingService(db, redis, get_settings().onboarding, storage)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Onboard school",
    description=(
        "Creates a school in pending status with a temporary password that is "
        "emailed once the first payment is recorded."
    ),
)
async def onboard_school(
    data: Annotated[SchoolCreateRequest, Form()],
    current_user: SuperAdmin,
    db: Database,
    redis: Redis,
    storage: Storage,
    logo: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    service = _get_school_service(db, redis, storage)
    try:
        school = await service.onboard_school(
            data, current_user.id, logo=await read_upload(logo)
        )
    except SchoolEmailExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except OnboardingError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        )

    return ApiResponse(
        message="School onboarded successfully. Awaiting payment.",
        data=school,
    )


@router.get(
    "",
    summary="List schools",
)
async def list_schools(
    current_user: SuperAdmin,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_school_service(db).list_schools()


@router.get(
    "/{school_id}",
    summary="Get school",
)
async def get_school(
    school_id: str,
    current_user: SuperAdmin,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_school_service(db).get_school(school_id)
    except SchoolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{school_id}",
    response_model=ApiResponse,
    summary="Update school",
)
async def update_school(
    school_id: str,
    data: Annotated[SchoolUpdateRequest, Form()],
    current_user: SuperAdmin,
    db: Database,
    storage: Storage,
    logo: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    service = _get_school_service(db, storage=storage)
    try:
        school = await service.update_school(
            school_id, data, logo=await read_upload(logo)
        )
    except SchoolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="School updated successfully", data=school)


@router.delete(
    "/{school_id}",
    response_model=ApiResponse,
    summary="Delete school",
)
async def delete_school(
    school_id: str,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    try:
        await _get_school_service(db).delete_school(school_id)
    except SchoolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="School deleted successfully")


@router.post(
    "/{school_id}/restore",
    response_model=ApiResponse,
    summary="Restore school",
)
async def restore_school(
    school_id: str,
    current_user: SuperAdmin,
    db: Database,
) -> ApiResponse:
    try:
        await _get_school_service(db).restore_school(school_id)
    except SchoolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="School restored successfully")
