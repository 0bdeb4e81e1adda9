# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mentor credential endpoints.

Two routers are exported:

``router`` (mentor, mounted at /mentor-credentials):
- POST / - Upload a credential document (multipart)
- GET / - List own credentials

``admin_router`` (super admin, mounted at /admin/mentor-credentials):
- GET / - List credentials, optionally by status
- GET /pending - List credentials awaiting review
- GET /{credential_id} - Get credential details
- PATCH /{credential_id}/verify - Approve or reject a credential
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status

from src.api.dependencies import Database, Email, MentorUser, Storage, SuperAdmin, read_upload
from src.domains.mentor import (
    CredentialNotFoundError,
    InvalidVerificationError,
    MentorCredentialService,
    MentorNotFoundError,
)
from src.models.common import ApiResponse, CredentialStatus, CredentialType
from src.models.mentor import VerifyCredentialRequest

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


def _get_credential_service(db, email, storage=None) -> MentorCredentialService:
    return MentorCredentialService(db, email, storage)


# =========================================================================
# Mentor endpoints
# =========================================================================


@router.post(
    "",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload credential",
)
async def upload_credential(
    current_user: MentorUser,
    db: Database,
    email: Email,
    storage: Storage,
    file: Annotated[UploadFile, File()],
    credential_type: Annotated[CredentialType, Form(alias="credentialType")],
    description: Annotated[str | None, Form()] = None,
) -> ApiResponse:
    uploaded = await read_upload(file)
    if uploaded is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Credential file is required",
        )

    service = _get_credential_service(db, email, storage)
    try:
        credential = await service.upload_credential(
            current_user.id, credential_type, uploaded, description
        )
    except MentorNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message="Credential uploaded successfully", data=credential)


@router.get(
    "",
    summary="List own credentials",
)
async def list_my_credentials(
    current_user: MentorUser,
    db: Database,
    email: Email,
) -> list[dict[str, Any]]:
    return await _get_credential_service(db, email).list_for_mentor(current_user.id)


# =========================================================================
# Admin endpoints
# =========================================================================


@admin_router.get(
    "",
    summary="List credentials",
)
async def list_credentials(
    current_user: SuperAdmin,
    db: Database,
    email: Email,
    credential_status: CredentialStatus | None = Query(default=None, alias="status"),
) -> list[dict[str, Any]]:
    return await _get_credential_service(db, email).list_credentials(credential_status)


@admin_router.get(
    "/pending",
    summary="List pending credentials",
)
async def list_pending_credentials(
    current_user: SuperAdmin,
    db: Database,
    email: Email,
) -> list[dict[str, Any]]:
    return await _get_credential_service(db, email).list_pending()


@admin_router.get(
    "/{credential_id}",
    summary="Get credential",
)
async def get_credential(
    credential_id: str,
    current_user: SuperAdmin,
    db: Database,
    email: Email,
) -> dict[str, Any]:
    try:
        return await _get_credential_service(db, email).get_credential(credential_id)
    except CredentialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@admin_router.patch(
    "/{credential_id}/verify",
    response_model=ApiResponse,
    summary="Verify credential",
    description="Approve or reject. A rejection requires a reason.",
)
async def verify_credential(
    credential_id: str,
    data: VerifyCredentialRequest,
    current_user: SuperAdmin,
    db: Database,
    email: Email,
) -> ApiResponse:
    service = _get_credential_service(db, email)
    try:
        credential = await service.verify_credential(credential_id, data, current_user.id)
    except InvalidVerificationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CredentialNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ApiResponse(message=f"Credential {data.status} successfully", data=credential)
