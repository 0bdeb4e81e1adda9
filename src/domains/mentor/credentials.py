# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mentor credential uploads and admin verification.

Mentors upload identity or professional documents, which start as
``pending``. A super admin approves or rejects each one; a rejection
needs a reason. The mentor is emailed the outcome.
"""

import logging
import os
import uuid
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from src.domains.mentor.service import MentorNotFoundError, MentorServiceError
from src.infrastructure.database.collections import MENTOR_CREDENTIALS, USERS
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.infrastructure.notifications import EmailService
from src.infrastructure.storage import BlobStorageClient, UploadedFile, require_storage
from src.models.common import CredentialStatus, CredentialType, UserRole
from src.models.mentor import VerifyCredentialRequest
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def credential_blob_path(mentor_id: str, filename: str) -> str:
    _, ext = os.path.splitext(filename or "")
    return f"credentials/{mentor_id}/{uuid.uuid4()}{ext.lower()}"


class CredentialNotFoundError(MentorServiceError):
    """Raised when a credential is not found."""

    pass


class InvalidVerificationError(MentorServiceError):
    """Raised when a rejection has no reason."""

    pass


class MentorCredentialService:
    """Credential upload for mentors and verification for super admins."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        email_service: EmailService,
        storage: BlobStorageClient | None = None,
    ) -> None:
        self._db = db
        self._email = email_service
        self._storage = storage

    async def upload_credential(
        self,
        mentor_id: str,
        credential_type: CredentialType,
        file: UploadedFile,
        description: str | None = None,
    ) -> dict[str, Any]:
        """Store a credential document for review.

        Raises:
            MentorNotFoundError: If the mentor does not exist.
            StorageError: If the upload fails.
        """
        mentor_oid = to_object_id(mentor_id)
        mentor = await self._db[USERS].find_one(
            {"_id": mentor_oid, "role": UserRole.MENTOR.value}, {"_id": 1}
        )
        if not mentor:
            raise MentorNotFoundError(f"Mentor with ID {mentor_id} not found")

        file_url = await require_storage(self._storage).upload_document(
            file.content,
            file.filename,
            blob_path=credential_blob_path(mentor_id, file.filename),
        )

        now = utc_now()
        document = {
            "mentor": mentor_oid,
            "credentialType": credential_type.value,
            "fileUrl": file_url,
            "fileName": file.filename,
            "status": CredentialStatus.PENDING.value,
            "createdAt": now,
            "updatedAt": now,
        }
        if description:
            document["description"] = description

        result = await self._db[MENTOR_CREDENTIALS].insert_one(document)
        document["_id"] = result.inserted_id

        logger.info("Credential %s uploaded for mentor %s", credential_type.value, mentor_id)
        return serialize_document(document)

    async def list_for_mentor(self, mentor_id: str) -> list[dict[str, Any]]:
        credentials = (
            await self._db[MENTOR_CREDENTIALS]
            .find({"mentor": to_object_id(mentor_id)})
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        return serialize_documents(credentials)

    async def list_credentials(
        self, status: CredentialStatus | None = None
    ) -> list[dict[str, Any]]:
        """List credentials, optionally by status, with mentor names attached."""
        query: dict[str, Any] = {}
        if status is not None:
            query["status"] = status.value

        credentials = (
            await self._db[MENTOR_CREDENTIALS]
            .find(query)
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        return await self._with_mentors(credentials)

    async def list_pending(self) -> list[dict[str, Any]]:
        return await self.list_credentials(CredentialStatus.PENDING)

    async def _with_mentors(self, credentials: list[dict[str, Any]]) -> list[dict[str, Any]]:
        mentor_ids = list({c["mentor"] for c in credentials if c.get("mentor")})
        mentors = {}
        if mentor_ids:
            docs = await self._db[USERS].find(
                {"_id": {"$in": mentor_ids}},
                {"firstName": 1, "lastName": 1, "email": 1},
            ).to_list(None)
            mentors = {doc["_id"]: serialize_document(doc) for doc in docs}

        results = []
        for credential in credentials:
            item = serialize_document(credential)
            mentor = mentors.get(credential.get("mentor"))
            if mentor:
                item["mentor"] = mentor
            results.append(item)
        return results

    async def get_credential(self, credential_id: str) -> dict[str, Any]:
        """Get one credential with its mentor.

        Raises:
            CredentialNotFoundError: If the credential does not exist.
        """
        credential = await self._db[MENTOR_CREDENTIALS].find_one(
            {"_id": to_object_id(credential_id)}
        )
        if not credential:
            raise CredentialNotFoundError(f"Credential with ID {credential_id} not found")
        return (await self._with_mentors([credential]))[0]

    async def verify_credential(
        self,
        credential_id: str,
        data: VerifyCredentialRequest,
        admin_id: str,
    ) -> dict[str, Any]:
        """Approve or reject a credential and email the mentor.

        Args:
            credential_id: Credential to verify.
            data: Decision and, for rejections, the reason.
            admin_id: Verifying super admin.

        Returns:
            The updated credential.

        Raises:
            InvalidVerificationError: If rejecting without a reason.
            CredentialNotFoundError: If the credential does not exist.
        """
        reason = (data.rejection_reason or "").strip()
        if data.status == CredentialStatus.REJECTED.value and not reason:
            raise InvalidVerificationError("Rejection reason is required when rejecting")

        updates: dict[str, Any] = {
            "status": data.status,
            "verifiedAt": utc_now(),
            "verifiedBy": to_object_id(admin_id),
            "updatedAt": utc_now(),
        }
        update: dict[str, Any] = {"$set": updates}
        if data.status == CredentialStatus.REJECTED.value:
            updates["rejectionReason"] = reason
        else:
            update["$unset"] = {"rejectionReason": ""}

        credential = await self._db[MENTOR_CREDENTIALS].find_one_and_update(
            {"_id": to_object_id(credential_id)},
            update,
            return_document=ReturnDocument.AFTER,
        )
        if not credential:
            raise CredentialNotFoundError(f"Credential with ID {credential_id} not found")

        mentor = await self._db[USERS].find_one({"_id": credential["mentor"]})
        if mentor:
            first_name = mentor.get("firstName", "")
            if data.status == CredentialStatus.APPROVED.value:
                await self._email.send_credential_approved_email(
                    mentor["email"], first_name, credential["credentialType"]
                )
            else:
                await self._email.send_credential_rejected_email(
                    mentor["email"], first_name, credential["credentialType"], reason
                )
        else:
            logger.warning("Mentor for credential %s no longer exists", credential_id)

        logger.info("Credential %s %s by %s", credential_id, data.status, admin_id)
        return serialize_document(credential)
