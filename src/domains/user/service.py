# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service for profile management.

This module provides the UserService that handles:
- Reading and updating a user's own profile
- Listing users by role (super admin)
- Soft-deleting users (super admin)

Example:
    >>> service = UserService(db, storage)
    >>> profile = await service.get_profile("665f1c2e9b1e8a3d4c5b6a70")
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from src.infrastructure.database.collections import USERS
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.infrastructure.storage import BlobStorageClient, UploadedFile, require_storage
from src.models.common import UserRole
from src.models.user import ProfileUpdateRequest
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Base exception for user service errors."""

    pass


class UserNotFoundError(UserServiceError):
    """Raised when a user is not found."""

    pass


class UserAlreadyExistsError(UserServiceError):
    """Raised when an update would duplicate another user's email."""

    pass


class UserService:
    """Service for user profiles.

    Attributes:
        _db: Application database.
        _storage: Blob storage for profile images.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        storage: BlobStorageClient | None = None,
    ) -> None:
        self._db = db
        self._storage = storage

    async def get_profile(self, user_id: str) -> dict[str, Any]:
        """Get an active user's profile.

        Raises:
            UserNotFoundError: If the user does not exist or was deleted.
        """
        user = await self._db[USERS].find_one(
            {"_id": to_object_id(user_id), "deletedAt": None}
        )
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return serialize_document(user)

    async def update_profile(
        self,
        user_id: str,
        data: ProfileUpdateRequest,
        image: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """Update the caller's own profile fields and optional image.

        Raises:
            UserNotFoundError: If the user does not exist.
            UserAlreadyExistsError: If the new email belongs to someone else.
        """
        updates = data.to_document()
        if "email" in updates:
            updates["email"] = updates["email"].lower()
        if image is not None:
            updates["image"] = await require_storage(self._storage).upload_image(
                image.content, image.filename
            )
        updates["updatedAt"] = utc_now()

        try:
            user = await self._db[USERS].find_one_and_update(
                {"_id": to_object_id(user_id), "deletedAt": None},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise UserAlreadyExistsError("Email already in use") from e

        if not user:
            raise UserNotFoundError(f"User {user_id} not found")

        logger.info("Profile updated: %s (%s)", user_id, ", ".join(sorted(updates)))
        return serialize_document(user)

    async def list_users(self, role: UserRole | None = None) -> list[dict[str, Any]]:
        """List active users, newest first, optionally filtered by role."""
        query: dict[str, Any] = {"deletedAt": None}
        if role is not None:
            query["role"] = role.value

        users = await self._db[USERS].find(query).sort("createdAt", DESCENDING).to_list(None)
        return serialize_documents(users)

    async def soft_delete_user(self, user_id: str) -> dict[str, Any]:
        """Mark a user as deleted.

        Raises:
            UserNotFoundError: If the user does not exist or is already deleted.
        """
        user = await self._db[USERS].find_one_and_update(
            {"_id": to_object_id(user_id), "deletedAt": None},
            {"$set": {"deletedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")

        logger.info("User soft-deleted: %s", user_id)
        return serialize_document(user)
