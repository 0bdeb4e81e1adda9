# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School onboarding service.

This module provides the SchoolOnboardingService that handles:
- Onboarding a school with a temporary password
- Listing, reading and updating schools
- Soft delete and restore

A new school starts with status ``pending`` and no student quota. Its
plain temporary password waits in the cache under
``temp_password_{schoolId}`` until the first payment is recorded, when
TransactionService emails it to the school and deletes the key.

Example:
    >>> service = SchoolOnboardingService(db, redis, settings.onboarding, storage)
    >>> school = await service.onboard_school(request, super_admin_id)
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from src.core.config.settings import OnboardingSettings
from src.domains.auth.password import generate_temporary_password, hash_password
from src.infrastructure.cache import RedisClient, RedisError, temp_password_key
from src.infrastructure.database.collections import SCHOOLS
from src.infrastructure.database.connection import start_transaction
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.infrastructure.storage import BlobStorageClient, UploadedFile, require_storage
from src.models.common import SchoolStatus, UserRole
from src.models.school import SchoolCreateRequest, SchoolUpdateRequest
from src.utils.datetime import seconds_to_human, utc_now

logger = logging.getLogger(__name__)


class SchoolServiceError(Exception):
    """Base exception for school service errors."""

    pass


class SchoolNotFoundError(SchoolServiceError):
    """Raised when a school is not found."""

    pass


class SchoolEmailExistsError(SchoolServiceError):
    """Raised when onboarding a school whose email is already active."""

    pass


class OnboardingError(SchoolServiceError):
    """Raised when the temporary password cannot be parked in the cache."""

    pass


class SchoolOnboardingService:
    """Service for onboarding and managing schools.

    Attributes:
        _db: Application database.
        _redis: Cache holding temporary passwords.
        _settings: Onboarding settings (password length, TTL).
        _storage: Blob storage for logos.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        redis: RedisClient,
        settings: OnboardingSettings,
        storage: BlobStorageClient | None = None,
    ) -> None:
        self._db = db
        self._redis = redis
        self._settings = settings
        self._storage = storage

    async def onboard_school(
        self,
        data: SchoolCreateRequest,
        super_admin_id: str,
        logo: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """Create a school in pending status and park its temporary password.

        Args:
            data: School details.
            super_admin_id: ID of the onboarding super admin.
            logo: Optional logo image.

        Returns:
            The created school, password excluded.

        Raises:
            SchoolEmailExistsError: If an active school uses the email.
            OnboardingError: If the temporary password cannot be cached.
        """
        email = data.email.lower()
        existing = await self._db[SCHOOLS].find_one(
            {"email": email, "deletedAt": None}, {"_id": 1}
        )
        if existing:
            raise SchoolEmailExistsError(f"School with email '{email}' already exists")

        temp_password = generate_temporary_password(self._settings.temp_password_length)

        logo_url = ""
        if logo is not None:
            logo_url = await require_storage(self._storage).upload_image(
                logo.content, logo.filename
            )

        admin_oid = to_object_id(super_admin_id)
        now = utc_now()
        document = {
            **data.to_document(),
            "email": email,
            "logoUrl": logo_url,
            "password": hash_password(temp_password),
            "role": UserRole.SCHOOL_ADMIN.value,
            "status": SchoolStatus.PENDING.value,
            "studentsLimit": None,
            "students": [],
            "transactions": [],
            "createdBy": admin_oid,
            "superAdmin": admin_oid,
            "deletedAt": None,
            "createdAt": now,
            "updatedAt": now,
        }

        async with start_transaction(self._db) as session:
            result = await self._db[SCHOOLS].insert_one(document, session=session)
        document["_id"] = result.inserted_id

        await self._store_temporary_password(str(result.inserted_id), temp_password)

        logger.info(
            "School onboarded, payment status pending: %s by %s",
            data.school_name,
            super_admin_id,
        )
        return serialize_document(document)

    async def _store_temporary_password(self, school_id: str, password: str) -> None:
        ttl = self._settings.temp_password_ttl_seconds
        try:
            await self._redis.set(temp_password_key(school_id), password, expire_seconds=ttl)
        except RedisError as e:
            logger.error("Failed to store temporary password for school %s: %s", school_id, e)
            raise OnboardingError("Failed to store temporary password") from e

        logger.info(
            "Temporary password stored for school %s with TTL %s",
            school_id,
            seconds_to_human(ttl),
        )

    async def list_schools(self) -> list[dict[str, Any]]:
        """List active schools, newest first."""
        schools = (
            await self._db[SCHOOLS]
            .find({"role": UserRole.SCHOOL_ADMIN.value, "deletedAt": None})
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        return serialize_documents(schools)

    async def get_school(self, school_id: str) -> dict[str, Any]:
        """Get an active school.

        Raises:
            SchoolNotFoundError: If missing or soft-deleted.
        """
        school = await self._db[SCHOOLS].find_one(
            {"_id": to_object_id(school_id), "deletedAt": None}
        )
        if not school:
            raise SchoolNotFoundError(f"School with ID {school_id} not found")
        return serialize_document(school)

    async def update_school(
        self,
        school_id: str,
        data: SchoolUpdateRequest,
        logo: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """Update school details and optionally replace the logo.

        Raises:
            SchoolNotFoundError: If the school does not exist.
        """
        updates = data.to_document()
        if "email" in updates:
            updates["email"] = updates["email"].lower()
        if logo is not None:
            updates["logoUrl"] = await require_storage(self._storage).upload_image(
                logo.content, logo.filename
            )
        updates["updatedAt"] = utc_now()

        school = await self._db[SCHOOLS].find_one_and_update(
            {"_id": to_object_id(school_id)},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if not school:
            raise SchoolNotFoundError(f"School with ID {school_id} not found")

        logger.info("School with ID %s updated successfully", school_id)
        return serialize_document(school, exclude=("students", "transactions"))

    async def delete_school(self, school_id: str) -> None:
        """Soft-delete a school by setting deletedAt.

        Raises:
            SchoolNotFoundError: If the school does not exist.
        """
        result = await self._db[SCHOOLS].update_one(
            {"_id": to_object_id(school_id)},
            {"$set": {"deletedAt": utc_now()}},
        )
        if result.matched_count == 0:
            raise SchoolNotFoundError(f"School with ID {school_id} not found")
        logger.info("School with ID %s deleted successfully", school_id)

    async def restore_school(self, school_id: str) -> None:
        """Clear deletedAt on a soft-deleted school.

        Raises:
            SchoolNotFoundError: If the school does not exist.
        """
        result = await self._db[SCHOOLS].update_one(
            {"_id": to_object_id(school_id)},
            {"$unset": {"deletedAt": ""}},
        )
        if result.matched_count == 0:
            raise SchoolNotFoundError(f"School with ID {school_id} not found")
        logger.info("School with ID %s restored successfully", school_id)
