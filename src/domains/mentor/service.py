# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mentor onboarding and management service.

This module provides the MentorOnboardingService that handles:
- Super admin onboarding of mentors with an emailed temporary password
- Listing and reading mentors
- Suspension and reactivation (soft delete with email notice)
- Mentor self-service profile updates

A suspended mentor is a mentor document with ``deletedAt`` set; sign-in
and listings skip it.

Example:
    >>> service = MentorOnboardingService(db, email_service, storage)
    >>> mentor = await service.onboard_mentor(request, super_admin_id)
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from src.domains.auth.password import generate_temporary_password, hash_password
from src.infrastructure.database.collections import USERS
from src.infrastructure.database.connection import start_transaction
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.infrastructure.notifications import EmailService
from src.infrastructure.storage import BlobStorageClient, UploadedFile, require_storage
from src.models.common import UserRole
from src.models.mentor import MentorCreateRequest, MentorProfileUpdateRequest
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class MentorServiceError(Exception):
    """Base exception for mentor service errors."""

    pass


class MentorNotFoundError(MentorServiceError):
    """Raised when a mentor is not found."""

    pass


class MentorExistsError(MentorServiceError):
    """Raised when an active mentor already uses the email."""

    pass


class MentorOnboardingService:
    """Service for onboarding and managing mentors.

    Attributes:
        _db: Application database.
        _email: Email service for onboarding and suspension notices.
        _storage: Blob storage for profile images.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        email_service: EmailService,
        storage: BlobStorageClient | None = None,
    ) -> None:
        self._db = db
        self._email = email_service
        self._storage = storage

    async def onboard_mentor(
        self,
        data: MentorCreateRequest,
        super_admin_id: str,
        image: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """Create a mentor account and email the temporary password.

        Args:
            data: Mentor details.
            super_admin_id: ID of the onboarding super admin.
            image: Optional profile image.

        Returns:
            The created mentor, password excluded.

        Raises:
            MentorExistsError: If an active mentor uses the email.
        """
        email = data.email.lower()
        existing = await self._db[USERS].find_one(
            {"email": email, "role": UserRole.MENTOR.value, "deletedAt": None},
            {"_id": 1},
        )
        if existing:
            raise MentorExistsError("A mentor with this email already exists")

        temp_password = generate_temporary_password()

        image_url = ""
        if image is not None:
            image_url = await require_storage(self._storage).upload_image(
                image.content, image.filename
            )

        admin_oid = to_object_id(super_admin_id)
        now = utc_now()
        document = {
            **data.to_document(),
            "email": email,
            "image": image_url,
            "role": UserRole.MENTOR.value,
            "password": hash_password(temp_password),
            "createdBy": admin_oid,
            "deletedAt": None,
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            async with start_transaction(self._db) as session:
                result = await self._db[USERS].insert_one(document, session=session)
        except DuplicateKeyError as e:
            raise MentorExistsError("A mentor with this email already exists") from e
        document["_id"] = result.inserted_id

        await self._email.send_mentor_onboarding_email(
            data.first_name, email, temp_password
        )

        logger.info(
            "Mentor onboarded: %s %s by %s",
            data.first_name,
            data.last_name,
            super_admin_id,
        )
        return serialize_document(document)

    async def list_mentors(self) -> list[dict[str, Any]]:
        """List active mentors, newest first."""
        mentors = (
            await self._db[USERS]
            .find({"role": UserRole.MENTOR.value, "deletedAt": None})
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        return serialize_documents(mentors)

    async def get_mentor(self, mentor_id: str) -> dict[str, Any]:
        """Get an active mentor.

        Raises:
            MentorNotFoundError: If missing or suspended.
        """
        mentor = await self._db[USERS].find_one(
            {
                "_id": to_object_id(mentor_id),
                "role": UserRole.MENTOR.value,
                "deletedAt": None,
            }
        )
        if not mentor:
            raise MentorNotFoundError("Mentor not found")
        return serialize_document(mentor)

    async def suspend_mentor(self, mentor_id: str, super_admin_id: str) -> dict[str, Any]:
        """Suspend an active mentor and notify them.

        Raises:
            MentorNotFoundError: If no active mentor has that ID.
        """
        mentor = await self._db[USERS].find_one_and_update(
            {
                "_id": to_object_id(mentor_id),
                "role": UserRole.MENTOR.value,
                "deletedAt": None,
            },
            {"$set": {"deletedAt": utc_now(), "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        if not mentor:
            raise MentorNotFoundError("Mentor not found")

        await self._email.send_mentor_suspension_email(
            mentor.get("firstName", ""), mentor["email"]
        )
        logger.info("Mentor %s suspended by %s", mentor_id, super_admin_id)
        return serialize_document(mentor)

    async def reactivate_mentor(self, mentor_id: str, super_admin_id: str) -> dict[str, Any]:
        """Reactivate a suspended mentor and notify them.

        Raises:
            MentorNotFoundError: If no suspended mentor has that ID.
        """
        mentor = await self._db[USERS].find_one_and_update(
            {
                "_id": to_object_id(mentor_id),
                "role": UserRole.MENTOR.value,
                "deletedAt": {"$ne": None},
            },
            {"$unset": {"deletedAt": ""}, "$set": {"updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )
        if not mentor:
            raise MentorNotFoundError("Mentor not found")

        await self._email.send_mentor_reactivation_email(
            mentor.get("firstName", ""), mentor["email"]
        )
        logger.info("Mentor %s reactivated by %s", mentor_id, super_admin_id)
        return serialize_document(mentor)

    async def update_profile(
        self,
        mentor_id: str,
        data: MentorProfileUpdateRequest,
        image: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """Update the calling mentor's profile.

        Raises:
            MentorNotFoundError: If the mentor does not exist.
            MentorExistsError: If the new email belongs to another account.
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
            mentor = await self._db[USERS].find_one_and_update(
                {
                    "_id": to_object_id(mentor_id),
                    "role": UserRole.MENTOR.value,
                    "deletedAt": None,
                },
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise MentorExistsError("Email already in use") from e
        if not mentor:
            raise MentorNotFoundError("Mentor not found")

        logger.info("Mentor %s updated their profile", mentor_id)
        return serialize_document(mentor)
