# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School-managed student endpoints.

The caller is a school admin; the token subject is the school id.

- POST / - Register a student within the school's quota
- GET / - List the school's students
- PUT /{student_id} - Update a student
- DELETE /{student_id} - Remove a student
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from src.api.dependencies import Database, SchoolAdmin, Storage, read_upload
from src.domains.school import (
    QuotaExceededError,
    SchoolNotFoundError,
    SchoolStudentService,
    StudentExistsError,
    StudentNotFoundError,
    StudentPermissionError,
)
from src.models.common import ApiResponse
from src.models.school import SchoolStudentCreateRequest, SchoolStudentUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_student_service(db, storage=None) -> SchoolStudentService:
    return SchoolStudentService(db, storage)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register student",
)
async def register_student(
    data: Annotated[SchoolStudentCreateRequest, Form()],
    current_user: SchoolAdmin,
    db: Database,
    storage: Storage,
    image: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    service = _get_student_service(db, storage)
    try:
        student = await service.register_student(
            current_user.id, data, image=await read_upload(image)
        )
    except SchoolNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except QuotaExceededError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StudentExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ApiResponse(message="Student registered successfully", data=student)


@router.get(
    "",
    summary="List students",
)
async def list_students(
    current_user: SchoolAdmin,
    db: Database,
) -> list[dict[str, Any]]:
    return await _get_student_service(db).list_students(current_user.id)


@router.put(
    "/{student_id}",
    response_model=ApiResponse,
    summary="Update student",
)
async def update_student(
    student_id: str,
    data: Annotated[SchoolStudentUpdateRequest, Form()],
    current_user: SchoolAdmin,
    db: Database,
    storage: Storage,
    image: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    service = _get_student_service(db, storage)
    try:
        student = await service.update_student(
            current_user.id, student_id, data, image=await read_upload(image)
        )
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StudentPermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    return ApiResponse(message="Student updated successfully", data=student)


@router.delete(
    "/{student_id}",
    response_model=ApiResponse,
    summary="Delete student",
)
async def delete_student(
    student_id: str,
    current_user: SchoolAdmin,
    db: Database,
) -> ApiResponse:
    try:
        await _get_student_service(db).delete_student(current_user.id, student_id)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StudentPermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    return ApiResponse(message="Student deleted successfully")
