# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get the MongoDB database and the Redis client
- Get authenticated principals and enforce roles
- Get email, storage and JWT helpers
- Convert uploaded files into plain bytes for the services

Example:
    @router.get("/students")
    async def list_students(
        db: Database,
        current_user: SchoolAdmin,
    ):
        ...
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, UploadFile, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from src.api.middleware.auth import CurrentUser, get_current_user
from src.core.config import get_settings
from src.domains.auth.jwt import JWTManager
from src.infrastructure.cache import RedisClient, RedisError
from src.infrastructure.cache import get_redis as get_redis_client
from src.infrastructure.database import DatabaseError, get_database
from src.infrastructure.notifications import EmailService, get_email_service
from src.infrastructure.storage import BlobStorageClient, UploadedFile, get_storage_client
from src.models.common import UserRole

logger = logging.getLogger(__name__)


def get_db() -> AsyncIOMotorDatabase:
    """Get the application database.

    Raises:
        HTTPException: 503 if the database is not initialized.
    """
    try:
        return get_database()
    except DatabaseError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        )


def get_redis() -> RedisClient:
    """Get the Redis client.

    Raises:
        HTTPException: 503 if Redis is not initialized.
    """
    try:
        return get_redis_client()
    except RedisError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        )


def get_email() -> EmailService:
    return get_email_service()


def get_storage() -> BlobStorageClient | None:
    """Get the blob storage client, or None when Azure is not configured.

    Services raise StorageError only when an upload is actually attempted.
    """
    azure = get_settings().azure_storage
    if not (azure.account_name and azure.account_key and azure.container_name):
        return None
    return get_storage_client(azure)


def get_jwt_manager() -> JWTManager:
    """Get JWT manager instance.

    Returns:
        JWTManager.
    """
    settings = get_settings()
    return JWTManager(settings.jwt)


async def read_upload(file: UploadFile | None) -> UploadedFile | None:
    """Read a multipart file part into an UploadedFile, skipping empty parts."""
    if file is None or not file.filename:
        return None
    content = await file.read()
    if not content:
        return None
    return UploadedFile(
        filename=file.filename,
        content=content,
        content_type=file.content_type,
    )


# =========================================================================
# Authentication Dependencies
# =========================================================================


def get_optional_user(request: Request) -> CurrentUser | None:
    """Get current user if authenticated, None otherwise."""
    return get_current_user(request)


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


class RequireRole:
    """Dependency for requiring specific roles.

    Example:
        @router.get("/admin")
        async def admin_only(
            user: CurrentUser = Depends(RequireRole("super_admin")),
        ):
            ...
    """

    def __init__(self, *roles: str) -> None:
        """Initialize role requirement.

        Args:
            roles: Accepted role values (any of these).
        """
        self.roles = roles

    def __call__(self, request: Request) -> CurrentUser:
        """Check roles and return user.

        Raises:
            HTTPException: 401 if not authenticated, 403 if the role is not accepted.
        """
        user = require_auth(request)

        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(self.roles)}",
            )

        return user


# =========================================================================
# Type Aliases for Cleaner Endpoint Signatures
# =========================================================================

Database = Annotated[AsyncIOMotorDatabase, Depends(get_db)]
Redis = Annotated[RedisClient, Depends(get_redis)]
Email = Annotated[EmailService, Depends(get_email)]
Storage = Annotated[BlobStorageClient | None, Depends(get_storage)]
JWT = Annotated[JWTManager, Depends(get_jwt_manager)]

OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth)]
SuperAdmin = Annotated[CurrentUser, Depends(RequireRole(UserRole.SUPER_ADMIN.value))]
SchoolAdmin = Annotated[CurrentUser, Depends(RequireRole(UserRole.SCHOOL_ADMIN.value))]
MentorUser = Annotated[CurrentUser, Depends(RequireRole(UserRole.MENTOR.value))]
ParentUser = Annotated[CurrentUser, Depends(RequireRole(UserRole.PARENT.value))]
StudentUser = Annotated[CurrentUser, Depends(RequireRole(UserRole.STUDENT.value))]
