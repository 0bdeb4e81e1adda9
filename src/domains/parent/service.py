# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Parent Service - registers children and lists them.

This service provides:
- Staging a child's details as a TempStudent until payment
- Reading a staged record by its childTempId
- Completing registration: the student account, the registration
  transaction and removal of the staged record in one DB transaction
- Listing a parent's children

Staged records expire through a TTL index on ``createdAt``. MongoDB
removes expired documents about once a minute, so reads also treat a
record older than the TTL as gone.
"""

import logging
import uuid
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from src.domains.auth.password import hash_password
from src.infrastructure.database.collections import (
    TEMP_STUDENT_TTL_SECONDS,
    TEMP_STUDENTS,
    TRANSACTIONS,
    USERS,
)
from src.infrastructure.database.connection import start_transaction
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.infrastructure.storage import BlobStorageClient, UploadedFile, require_storage
from src.models.common import TransactionType, UserRole
from src.models.parent import CompleteRegistrationRequest, TempStudentCreateRequest
from src.utils.datetime import has_elapsed, utc_now

logger = logging.getLogger(__name__)

PAYMENT_PATH = "/parent/dashboard/complete-student-registration/{child_temp_id}"


class ParentServiceError(Exception):
    """Exception raised for parent service operations."""

    def __init__(
        self,
        message: str,
        code: str = "parent_error",
        original_error: Exception | None = None,
    ):
        self.message = message
        self.code = code
        self.original_error = original_error
        super().__init__(self.message)


class ParentNotFoundError(ParentServiceError):
    """Raised when the calling parent account does not exist."""

    def __init__(self, parent_id: str):
        super().__init__(
            message="Parent not found",
            code="parent_not_found",
        )
        self.parent_id = parent_id


class TempStudentNotFoundError(ParentServiceError):
    """Raised when a staged registration is unknown, expired or not the caller's."""

    def __init__(self, child_temp_id: str):
        super().__init__(
            message="Temporary student data not found.",
            code="temp_student_not_found",
        )
        self.child_temp_id = child_temp_id


def new_child_temp_id() -> str:
    return f"student-{uuid.uuid4()}"


class ParentService:
    """Service for parent-driven student registration.

    Attributes:
        _db: Application database.
        _storage: Blob storage for child pictures.
        _ttl_seconds: Lifetime of a staged registration.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        storage: BlobStorageClient | None = None,
        ttl_seconds: int = TEMP_STUDENT_TTL_SECONDS,
    ) -> None:
        self._db = db
        self._storage = storage
        self._ttl_seconds = ttl_seconds

    async def initiate_student_registration(
        self,
        parent_id: str,
        data: TempStudentCreateRequest,
        image: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """Stage a child's details until the registration is paid for.

        Args:
            parent_id: Calling parent.
            data: Child details including the chosen password.
            image: Optional picture.

        Returns:
            ``{"tempData": ..., "message": ...}`` where tempData carries the
            childTempId and paymentUrl.
        """
        child_temp_id = new_child_temp_id()

        image_url = ""
        if image is not None:
            image_url = await require_storage(self._storage).upload_image(
                image.content, image.filename
            )

        document = {
            **data.to_document(),
            "childTempId": child_temp_id,
            "parent": to_object_id(parent_id),
            "imageUrl": image_url,
            "password": hash_password(data.password),
            "paymentUrl": PAYMENT_PATH.format(child_temp_id=child_temp_id),
            "createdAt": utc_now(),
        }
        result = await self._db[TEMP_STUDENTS].insert_one(document)
        document["_id"] = result.inserted_id

        logger.info("Student registration %s staged by parent %s", child_temp_id, parent_id)
        return {
            "tempData": serialize_document(document),
            "message": (
                "Student draft data collected. Complete payment to finish "
                "student registration."
            ),
        }

    def _is_expired(self, temp_student: dict[str, Any]) -> bool:
        created_at = temp_student.get("createdAt")
        if created_at is None:
            return False
        return has_elapsed(created_at, self._ttl_seconds)

    async def _find_temp_student(self, child_temp_id: str) -> dict[str, Any]:
        temp_student = await self._db[TEMP_STUDENTS].find_one({"childTempId": child_temp_id})
        if not temp_student or self._is_expired(temp_student):
            raise TempStudentNotFoundError(child_temp_id)
        return temp_student

    async def get_temp_student(self, child_temp_id: str) -> dict[str, Any]:
        """Get a staged registration.

        Raises:
            TempStudentNotFoundError: If unknown or expired.
        """
        return serialize_document(await self._find_temp_student(child_temp_id))

    async def complete_student_registration(
        self, parent_id: str, data: CompleteRegistrationRequest
    ) -> dict[str, Any]:
        """Turn a staged registration into a student account.

        The student, the ``student-registration`` transaction and the
        removal of the staged record commit together.

        Raises:
            ParentNotFoundError: If the parent does not exist.
            TempStudentNotFoundError: If the staged record is unknown, expired
                or belongs to another parent.
        """
        parent_oid = to_object_id(parent_id)
        parent = await self._db[USERS].find_one(
            {"_id": parent_oid, "role": UserRole.PARENT.value, "deletedAt": None}
        )
        if not parent:
            raise ParentNotFoundError(parent_id)

        temp_student = await self._find_temp_student(data.child_temp_id)
        if temp_student.get("parent") != parent_oid:
            raise TempStudentNotFoundError(data.child_temp_id)

        now = utc_now()
        student = {
            "firstName": temp_student["firstName"],
            "lastName": temp_student["lastName"],
            "age": temp_student.get("age"),
            "grade": temp_student.get("grade"),
            "password": temp_student["password"],
            "role": UserRole.STUDENT.value,
            "parent": parent_oid,
            "parentEmail": parent.get("email"),
            "createdBy": parent_oid,
            "createdAt": now,
            "updatedAt": now,
        }
        if temp_student.get("imageUrl"):
            student["image"] = temp_student["imageUrl"]

        transaction = {
            "amount": data.amount,
            "paymentMethod": data.payment_method.value,
            "transactionType": TransactionType.STUDENT_REGISTRATION.value,
            "transactionDate": now,
            "notes": data.notes,
            "parent": parent_oid,
            "createdAt": now,
        }

        async with start_transaction(self._db) as session:
            student_result = await self._db[USERS].insert_one(student, session=session)
            transaction["student"] = student_result.inserted_id
            transaction_result = await self._db[TRANSACTIONS].insert_one(
                transaction, session=session
            )
            await self._db[TEMP_STUDENTS].delete_one(
                {"_id": temp_student["_id"]}, session=session
            )

        student["_id"] = student_result.inserted_id
        transaction["_id"] = transaction_result.inserted_id

        logger.info(
            "Student %s registered by parent %s from %s",
            student_result.inserted_id,
            parent_id,
            data.child_temp_id,
        )
        return {
            "student": serialize_document(student),
            "transaction": serialize_document(transaction),
        }

    async def list_children(self, parent_id: str) -> list[dict[str, Any]]:
        """List a parent's active children, newest first."""
        children = (
            await self._db[USERS]
            .find(
                {
                    "parent": to_object_id(parent_id),
                    "role": UserRole.STUDENT.value,
                    "deletedAt": None,
                }
            )
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        return serialize_documents(children)
