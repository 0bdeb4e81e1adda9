# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent API endpoints.

Parents register their children in two steps. The child's details are
staged first and expire after an hour; paying completes the registration.

- POST /students - Stage a child registration (multipart, optional image)
- GET /students/temp/{child_temp_id} - Get staged registration data
- POST /students/complete - Complete a staged registration after payment
- GET /children - List the parent's children
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from src.api.dependencies import Database, ParentUser, Storage, read_upload
from src.core.config import get_settings
from src.domains.parent import ParentNotFoundError, ParentService, TempStudentNotFoundError
from src.models.common import ApiResponse
from src.models.parent import CompleteRegistrationRequest, TempStudentCreateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_parent_service(db, storage=None) -> ParentService:
    ttl = get_settings().onboarding.temp_student_ttl_seconds
    return ParentService(db, storage, ttl_seconds=ttl)


@router.post(
    "/students",
    status_code=status.HTTP_201_CREATED,
    summary="Stage child registration",
)
async def initiate_student_registration(
    data: Annotated[TempStudentCreateRequest, Form()],
    current_user: ParentUser,
    db: Database,
    storage: Storage,
    image: Annotated[UploadFile | None, File()] = None,
) -> dict[str, Any]:
    service = _get_parent_service(db, storage)
    return await service.initiate_student_registration(
        current_user.id, data, image=await read_upload(image)
    )


@router.get(
    "/students/temp/{child_temp_id}",
    summary="Get staged registration",
)
async def get_temp_student(
    child_temp_id: str,
    current_user: ParentUser,
    db: Database,
) -> dict[str, Any]:
    try:
        return await _get_parent_service(db).get_temp_student(child_temp_id)
    except TempStudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post(
    "/students/complete",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Complete child registration",
)
async def complete_student_registration(
    data: CompleteRegistrationRequest,
    current_user: ParentUser,
    db: Database,
) -> ApiResponse:
    service = _get_parent_service(db)
    try:
        result = await service.complete_student_registration(current_user.id, data)
    except (ParentNotFoundError, TempStudentNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    return ApiResponse(message="Student registered successfully", data=result)


@router.get(
    "/children",
    summary="List children",
)
async def list_children(
    current_user: ParentUser,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_parent_service(db).list_children(current_user.id)
