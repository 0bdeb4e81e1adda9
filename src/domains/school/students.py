# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Students registered and managed by a school admin.

The school admin's token subject is the school id, so every operation
here is scoped to that school. Registration enforces the school's
student quota: the count of active students is read in the same
transaction as the insert, and a null ``studentsLimit`` means no limit.
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from src.domains.auth.password import hash_password
from src.domains.school.service import SchoolNotFoundError, SchoolServiceError
from src.infrastructure.database.collections import SCHOOLS, USERS
from src.infrastructure.database.connection import start_transaction
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.infrastructure.storage import BlobStorageClient, UploadedFile, require_storage
from src.models.common import UserRole
from src.models.school import SchoolStudentCreateRequest, SchoolStudentUpdateRequest
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class StudentNotFoundError(SchoolServiceError):
    """Raised when a student is not found."""

    pass


class StudentPermissionError(SchoolServiceError):
    """Raised when a student does not belong to the calling school."""

    pass


class StudentExistsError(SchoolServiceError):
    """Raised when the student's email is already registered."""

    pass


class QuotaExceededError(SchoolServiceError):
    """Raised when the school has no student seats left."""

    pass


class SchoolStudentService:
    """Student management for a single school.

    Attributes:
        _db: Application database.
        _storage: Blob storage for student pictures.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        storage: BlobStorageClient | None = None,
    ) -> None:
        self._db = db
        self._storage = storage

    async def register_student(
        self,
        school_id: str,
        data: SchoolStudentCreateRequest,
        image: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """Register a student within the school's quota.

        Args:
            school_id: Calling school.
            data: Student details.
            image: Optional picture.

        Returns:
            The created student, password excluded.

        Raises:
            SchoolNotFoundError: If the school does not exist.
            QuotaExceededError: If the school already has studentsLimit students.
        """
        school_oid = to_object_id(school_id)

        image_url = None
        if image is not None:
            image_url = await require_storage(self._storage).upload_image(
                image.content, image.filename
            )

        now = utc_now()
        document = {
            **data.to_document(),
            "password": hash_password(data.password),
            "role": UserRole.STUDENT.value,
            "school": school_oid,
            "createdBy": school_oid,
            "createdAt": now,
            "updatedAt": now,
        }
        if image_url:
            document["image"] = image_url

        async with start_transaction(self._db) as session:
            school = await self._db[SCHOOLS].find_one(
                {"_id": school_oid, "deletedAt": None}, session=session
            )
            if not school:
                raise SchoolNotFoundError(f"School with ID {school_id} not found")

            limit = school.get("studentsLimit")
            if limit is not None:
                count = await self._db[USERS].count_documents(
                    {
                        "school": school_oid,
                        "role": UserRole.STUDENT.value,
                        "deletedAt": None,
                    },
                    session=session,
                )
                if count >= limit:
                    raise QuotaExceededError(
                        "Cannot add more students. School has reached its limit "
                        f"of {limit} students."
                    )

            try:
                result = await self._db[USERS].insert_one(document, session=session)
            except DuplicateKeyError as e:
                raise StudentExistsError("Email already in use") from e

            await self._db[SCHOOLS].update_one(
                {"_id": school_oid},
                {"$push": {"students": result.inserted_id}},
                session=session,
            )

        document["_id"] = result.inserted_id
        logger.info("Student %s registered by school %s", result.inserted_id, school_id)
        return serialize_document(document)

    async def list_students(self, school_id: str) -> list[dict[str, Any]]:
        """List the school's active students, newest first."""
        students = (
            await self._db[USERS]
            .find(
                {
                    "school": to_object_id(school_id),
                    "role": UserRole.STUDENT.value,
                    "deletedAt": None,
                }
            )
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        return serialize_documents(students)

    async def _get_owned_student(self, school_id: str, student_id: str) -> dict[str, Any]:
        student = await self._db[USERS].find_one(
            {"_id": to_object_id(student_id), "role": UserRole.STUDENT.value}
        )
        if not student:
            raise StudentNotFoundError(f"Student with ID {student_id} not found")
        if str(student.get("school")) != str(school_id):
            raise StudentPermissionError("Student does not belong to this school")
        return student

    async def update_student(
        self,
        school_id: str,
        student_id: str,
        data: SchoolStudentUpdateRequest,
        image: UploadedFile | None = None,
    ) -> dict[str, Any]:
        """Update one of the school's students.

        Raises:
            StudentNotFoundError: If the student does not exist.
            StudentPermissionError: If the student belongs to another school.
        """
        await self._get_owned_student(school_id, student_id)

        updates = data.to_document()
        if image is not None:
            updates["image"] = await require_storage(self._storage).upload_image(
                image.content, image.filename
            )
        updates["updatedAt"] = utc_now()

        student = await self._db[USERS].find_one_and_update(
            {"_id": to_object_id(student_id)},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if not student:
            raise StudentNotFoundError(f"Student with ID {student_id} not found")

        logger.info("Student %s updated by school %s", student_id, school_id)
        return serialize_document(student)

    async def delete_student(self, school_id: str, student_id: str) -> None:
        """Remove a student from the school and delete the account.

        Raises:
            StudentNotFoundError: If the student does not exist.
            StudentPermissionError: If the student belongs to another school.
        """
        await self._get_owned_student(school_id, student_id)
        student_oid = to_object_id(student_id)

        async with start_transaction(self._db) as session:
            await self._db[SCHOOLS].update_one(
                {"_id": to_object_id(school_id)},
                {"$pull": {"students": student_oid}},
                session=session,
            )
            await self._db[USERS].delete_one({"_id": student_oid}, session=session)

        logger.info("Student %s deleted by school %s", student_id, school_id)
