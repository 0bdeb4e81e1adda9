# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transaction service for school and parent payments.

This module provides the TransactionService that handles:
- A pending school's first payment, which activates it, sets its student
  quota and emails the temporary password parked at onboarding
- Parent payments for a linked student
- School renewals
- Transaction and pending-school listings

The payment record and the school update are written in one MongoDB
transaction. The password handoff happens after commit: the cache key is
read, the email is sent and the key is deleted.

Example:
    >>> service = TransactionService(db, redis, email_service)
    >>> result = await service.create_school_transaction(request)
"""

import logging
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from src.infrastructure.cache import RedisClient, RedisError, temp_password_key
from src.infrastructure.database.collections import SCHOOLS, TRANSACTIONS, USERS
from src.infrastructure.database.connection import start_transaction
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.infrastructure.notifications import EmailService
from src.models.common import SchoolStatus
from src.models.transaction import (
    ParentTransactionRequest,
    RenewSchoolTransactionRequest,
    SchoolTransactionRequest,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class TransactionServiceError(Exception):
    """Base exception for transaction service errors."""

    pass


class SchoolNotPendingError(TransactionServiceError):
    """Raised when no pending school matches the payment."""

    pass


class TransactionTargetNotFoundError(TransactionServiceError):
    """Raised when the school, parent or student of a payment is missing."""

    pass


class TemporaryPasswordNotFoundError(TransactionServiceError):
    """Raised when a school's temporary password has expired from the cache."""

    pass


class TransactionService:
    """Service for recording payments.

    Attributes:
        _db: Application database.
        _redis: Cache holding temporary passwords.
        _email: Email service for the onboarding email.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        redis: RedisClient,
        email_service: EmailService,
    ) -> None:
        self._db = db
        self._redis = redis
        self._email = email_service

    async def create_school_transaction(
        self, data: SchoolTransactionRequest
    ) -> dict[str, Any]:
        """Record a pending school's first payment and activate it.

        Args:
            data: Payment details; the school is matched by name.

        Returns:
            ``{"transaction": ..., "school": ...}``

        Raises:
            SchoolNotPendingError: If no pending school has that name.
            TemporaryPasswordNotFoundError: If the temporary password expired.
                The payment is already committed at that point.
        """
        school = await self._db[SCHOOLS].find_one(
            {
                "schoolName": data.school_name,
                "status": SchoolStatus.PENDING.value,
                "deletedAt": None,
            }
        )
        if not school:
            raise SchoolNotPendingError("School not found or already completed payment")

        transaction = {
            "schoolName": data.school_name,
            "amount": data.amount,
            "currency": data.currency.upper(),
            "numberOfKids": data.number_of_kids,
            "paymentMethod": data.payment_method.value,
            "transactionType": data.transaction_type.value,
            "transactionDate": utc_now(),
            "notes": data.notes,
            "school": school["_id"],
            "createdAt": utc_now(),
        }

        async with start_transaction(self._db) as session:
            result = await self._db[TRANSACTIONS].insert_one(transaction, session=session)
            activated = await self._db[SCHOOLS].update_one(
                {
                    "_id": school["_id"],
                    "status": SchoolStatus.PENDING.value,
                    "deletedAt": None,
                },
                {
                    "$set": {
                        "status": SchoolStatus.COMPLETED.value,
                        "studentsLimit": data.number_of_kids,
                        "updatedAt": utc_now(),
                    },
                    "$push": {"transactions": result.inserted_id},
                },
                session=session,
            )
            if activated.matched_count == 0:
                # Paid by a concurrent request; aborts the insert above
                raise SchoolNotPendingError("School not found or already completed payment")
        transaction["_id"] = result.inserted_id

        school_id = str(school["_id"])
        temp_password = await self._get_temporary_password(school_id)
        if not temp_password:
            logger.error("Temporary password not found for school: %s", school_id)
            raise TemporaryPasswordNotFoundError("Temporary password not found")

        await self._email.send_school_onboarding_email(school["email"], temp_password)
        await self._cleanup_temporary_password(school_id)

        logger.info(
            "Transaction created and school activated: %s - Amount: %s",
            data.school_name,
            data.amount,
        )

        school.update(
            status=SchoolStatus.COMPLETED.value,
            studentsLimit=data.number_of_kids,
            transactions=[*school.get("transactions", []), result.inserted_id],
        )
        return {
            "transaction": serialize_document(transaction),
            "school": serialize_document(school),
        }

    async def _get_temporary_password(self, school_id: str) -> str | None:
        try:
            password = await self._redis.get(temp_password_key(school_id))
        except RedisError as e:
            logger.error("Failed to retrieve temporary password for school %s: %s", school_id, e)
            raise TransactionServiceError("Failed to retrieve temporary password") from e

        if not password:
            logger.warning("Temporary password not found or expired for school %s", school_id)
            return None
        return str(password)

    async def _cleanup_temporary_password(self, school_id: str) -> None:
        try:
            deleted = await self._redis.delete(temp_password_key(school_id))
        except RedisError as e:
            # Key expires on its own
            logger.error("Failed to clean up temporary password for school %s: %s", school_id, e)
            return

        if deleted:
            logger.info("Temporary password cleaned up for school %s", school_id)
        else:
            logger.warning("No temporary password found to clean up for school %s", school_id)

    async def create_parent_transaction(
        self, data: ParentTransactionRequest
    ) -> dict[str, Any]:
        """Record a parent's payment for one of their children.

        Raises:
            TransactionTargetNotFoundError: If the parent or student is missing
                or the student is not linked to the parent.
        """
        parent = await self._db[USERS].find_one({"_id": to_object_id(data.parent_id)})
        if not parent:
            raise TransactionTargetNotFoundError("Parent not found")

        student = await self._db[USERS].find_one({"_id": to_object_id(data.student_id)})
        if not student:
            raise TransactionTargetNotFoundError("Student not found")

        linked = student.get("parent") == parent["_id"] or (
            student.get("parentEmail") is not None
            and student.get("parentEmail") == parent.get("email")
        )
        if not linked:
            raise TransactionTargetNotFoundError("Student not associated with this parent")

        transaction = {
            "amount": data.amount,
            "currency": data.currency.upper(),
            "paymentMethod": data.payment_method.value,
            "transactionType": data.transaction_type.value,
            "transactionDate": utc_now(),
            "notes": data.notes,
            "parent": parent["_id"],
            "student": student["_id"],
            "createdAt": utc_now(),
        }

        async with start_transaction(self._db) as session:
            result = await self._db[TRANSACTIONS].insert_one(transaction, session=session)
        transaction["_id"] = result.inserted_id

        logger.info(
            "Parent transaction created: parent %s - student %s - Amount: %s",
            parent["_id"],
            student["_id"],
            data.amount,
        )
        return {"transaction": serialize_document(transaction)}

    async def renew_school_transaction(
        self, data: RenewSchoolTransactionRequest
    ) -> dict[str, Any]:
        """Record a renewal and reset the school's student quota.

        Raises:
            TransactionTargetNotFoundError: If the school does not exist.
        """
        school = await self._db[SCHOOLS].find_one({"_id": to_object_id(data.school_id)})
        if not school:
            raise TransactionTargetNotFoundError("School not found")

        transaction = {
            "schoolName": school.get("schoolName"),
            "amount": data.amount,
            "currency": data.currency.upper(),
            "numberOfKids": data.number_of_kids,
            "paymentMethod": data.payment_method.value,
            "transactionType": data.transaction_type.value,
            "transactionDate": utc_now(),
            "notes": data.notes,
            "school": school["_id"],
            "createdAt": utc_now(),
        }

        async with start_transaction(self._db) as session:
            result = await self._db[TRANSACTIONS].insert_one(transaction, session=session)
            await self._db[SCHOOLS].update_one(
                {"_id": school["_id"]},
                {
                    "$set": {
                        "status": SchoolStatus.COMPLETED.value,
                        "studentsLimit": data.number_of_kids,
                        "updatedAt": utc_now(),
                    },
                    "$push": {"transactions": result.inserted_id},
                },
                session=session,
            )
        transaction["_id"] = result.inserted_id

        logger.info(
            "School %s renewed: %s seats, Amount: %s",
            school["_id"],
            data.number_of_kids,
            data.amount,
        )
        school.update(status=SchoolStatus.COMPLETED.value, studentsLimit=data.number_of_kids)
        return {
            "transaction": serialize_document(transaction),
            "school": serialize_document(school, exclude=("students", "transactions")),
        }

    async def _names_by_id(self, collection: str, ids: set[ObjectId]) -> dict[ObjectId, str]:
        if not ids:
            return {}
        fields = {"schoolName": 1, "firstName": 1, "lastName": 1}
        docs = await self._db[collection].find({"_id": {"$in": list(ids)}}, fields).to_list(None)
        names = {}
        for doc in docs:
            name = doc.get("schoolName") or " ".join(
                part for part in (doc.get("firstName"), doc.get("lastName")) if part
            )
            names[doc["_id"]] = name
        return names

    async def list_transactions(self) -> list[dict[str, Any]]:
        """List all transactions, newest first, with payer names resolved."""
        transactions = (
            await self._db[TRANSACTIONS]
            .find()
            .sort("transactionDate", DESCENDING)
            .to_list(None)
        )

        school_names = await self._names_by_id(
            SCHOOLS, {t["school"] for t in transactions if t.get("school")}
        )
        user_names = await self._names_by_id(
            USERS,
            {t[k] for t in transactions for k in ("parent", "student") if t.get(k)},
        )

        results = []
        for t in transactions:
            item = serialize_document(t)
            if t.get("school"):
                item["schoolName"] = school_names.get(t["school"], t.get("schoolName"))
            if t.get("parent"):
                item["parentName"] = user_names.get(t["parent"])
            if t.get("student"):
                item["studentName"] = user_names.get(t["student"])
            results.append(item)
        return results

    async def list_pending_schools(self) -> list[dict[str, Any]]:
        """List active schools still waiting for their first payment."""
        schools = (
            await self._db[SCHOOLS]
            .find({"status": SchoolStatus.PENDING.value, "deletedAt": None})
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        return serialize_documents(schools)
