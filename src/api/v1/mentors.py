# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mentor management API endpoints.

Super admin:
- POST / - Onboard a mentor (multipart, optional image)
- GET / - List mentors
- GET /{mentor_id} - Get mentor details
- PATCH /{mentor_id}/suspend - Suspend a mentor
- PATCH /{mentor_id}/reactivate - Reactivate a suspended mentor

Mentor:
- PUT /profile - Update own profile (multipart, optional image)
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from src.api.dependencies import Database, Email, MentorUser, Storage, SuperAdmin, read_upload
from src.domains.mentor import MentorExistsError, MentorNotFoundError, MentorOnboardingService
from src.models.common import ApiResponse
from src.models.mentor import MentorCreateRequest, MentorProfileUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_mentor_service(db, email, storage=None) -> MentorOnboardingService:
    return MentorOnboardingService(db, email, storage)


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Onboard mentor",
    description="Creates the mentor account and emails a temporary password.",
)
async def onboard_mentor(
    data: Annotated[MentorCreateRequest, Form()],
    current_user: SuperAdmin,
    db: Database,
    email: Email,
    storage: Storage,
    image: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    service = _get_mentor_service(db, email, storage)
    try:
        mentor = await service.onboard_mentor(
            data, current_user.id, image=await read_upload(image)
        )
    except MentorExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ApiResponse(message="Mentor onboarded successfully", data=mentor)


@router.put(
    "/profile",
    response_model=ApiResponse,
    summary="Update own mentor profile",
)
async def update_profile(
    data: Annotated[MentorProfileUpdateRequest, Form()],
    current_user: MentorUser,
    db: Database,
    email: Email,
    storage: Storage,
    image: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    service = _get_mentor_service(db, email, storage)
    try:
        mentor = await service.update_profile(
            current_user.id, data, image=await read_upload(image)
        )
    except MentorNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except MentorExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ApiResponse(message="Profile updated successfully", data=mentor)


@router.get(
    "",
    summary="List mentors",
)
async def list_mentors(
    current_user: SuperAdmin,
    db: Database,
    email: Email,
) -> list[dict[str, Any]]:
    return await _get_mentor_service(db, email).list_mentors()


@router.get(
    "/{mentor_id}",
    summary="Get mentor",
)
async def get_mentor(
    mentor_id: str,
    current_user: SuperAdmin,
    db: Database,
    email: Email,
) -> dict[str, Any]:
    try:
        return await _get_mentor_service(db, email).get_mentor(mentor_id)
    except MentorNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch(
    "/{mentor_id}/suspend",
    response_model=ApiResponse,
    summary="Suspend mentor",
)
async def suspend_mentor(
    mentor_id: str,
    current_user: SuperAdmin,
    db: Database,
    email: Email,
) -> ApiResponse:
    try:
        mentor = await _get_mentor_service(db, email).suspend_mentor(
            mentor_id, current_user.id
        )
    except MentorNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="Mentor suspended successfully", data=mentor)


@router.patch(
    "/{mentor_id}/reactivate",
    response_model=ApiResponse,
    summary="Reactivate mentor",
)
async def reactivate_mentor(
    mentor_id: str,
    current_user: SuperAdmin,
    db: Database,
    email: Email,
) -> ApiResponse:
    try:
        mentor = await _get_mentor_service(db, email).reactivate_mentor(
            mentor_id, current_user.id
        )
    except MentorNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="Mentor reactivated successfully", data=mentor)
