# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for TransactionService."""

from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId

from src.domains.transaction.service import (
    SchoolNotPendingError,
    TemporaryPasswordNotFoundError,
    TransactionService,
    TransactionServiceError,
    TransactionTargetNotFoundError,
)
from src.infrastructure.cache import RedisError, temp_password_key
from src.infrastructure.database.collections import SCHOOLS, TRANSACTIONS, USERS
from src.models.common import TransactionType
from src.models.transaction import (
    ParentTransactionRequest,
    RenewSchoolTransactionRequest,
    SchoolTransactionRequest,
)


@pytest.fixture(autouse=True)
def patched_transactions(transaction_stub):
    with patch("src.domains.transaction.service.start_transaction", new=transaction_stub):
        yield


@pytest.fixture
def service(mock_db, mock_redis, mock_email) -> TransactionService:
    return TransactionService(mock_db, mock_redis, mock_email)


@pytest.fixture
def pending_school() -> dict:
    return {
        "_id": ObjectId(),
        "schoolName": "Green Hills Academy",
        "email": "admin@greenhills.example.com",
        "status": "pending",
        "studentsLimit": None,
        "transactions": [],
        "password": "hash",
    }


def school_payment(**overrides) -> SchoolTransactionRequest:
    data = {
        "school_name": "Green Hills Academy",
        "amount": 150000,
        "number_of_kids": 40,
        "transaction_type": TransactionType.TIER_ONE,
    }
    data.update(overrides)
    return SchoolTransactionRequest(**data)


class TestSchoolTransaction:
    """Tests for a pending school's first payment."""

    @pytest.mark.asyncio
    async def test_activates_school_and_emails_password(
        self, service, mock_db, mock_redis, mock_email, pending_school
    ) -> None:
        transaction_id = ObjectId()
        mock_db[SCHOOLS].find_one.return_value = pending_school
        mock_db[TRANSACTIONS].insert_one.return_value = MagicMock(inserted_id=transaction_id)
        mock_redis.get.return_value = "Tmp!Pass1234"

        result = await service.create_school_transaction(school_payment())

        update = mock_db[SCHOOLS].update_one.await_args.args[1]
        assert update["$set"]["status"] == "completed"
        assert update["$set"]["studentsLimit"] == 40
        assert update["$push"] == {"transactions": transaction_id}

        mock_email.send_school_onboarding_email.assert_awaited_once_with(
            "admin@greenhills.example.com", "Tmp!Pass1234"
        )
        key = temp_password_key(str(pending_school["_id"]))
        mock_redis.delete.assert_awaited_once_with(key)

        assert result["school"]["status"] == "completed"
        assert result["school"]["transactions"] == [str(transaction_id)]
        assert "password" not in result["school"]
        assert result["transaction"]["paymentMethod"] == "mobilemoneyrwanda"
        assert result["transaction"]["currency"] == "RWF"

    @pytest.mark.asyncio
    async def test_only_pending_schools_match(self, service, mock_db) -> None:
        mock_db[SCHOOLS].find_one.return_value = None

        with pytest.raises(SchoolNotPendingError):
            await service.create_school_transaction(school_payment())

        query = mock_db[SCHOOLS].find_one.await_args.args[0]
        assert query["status"] == "pending"
        mock_db[TRANSACTIONS].insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_school_paid_concurrently(
        self, service, mock_db, mock_redis, mock_email, pending_school
    ) -> None:
        mock_db[SCHOOLS].find_one.return_value = pending_school
        mock_db[TRANSACTIONS].insert_one.return_value = MagicMock(inserted_id=ObjectId())
        mock_db[SCHOOLS].update_one.return_value = MagicMock(matched_count=0)

        with pytest.raises(SchoolNotPendingError):
            await service.create_school_transaction(school_payment())

        query = mock_db[SCHOOLS].update_one.await_args.args[0]
        assert query["_id"] == pending_school["_id"]
        assert query["status"] == "pending"
        assert query["deletedAt"] is None
        mock_redis.get.assert_not_awaited()
        mock_email.send_school_onboarding_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_password_after_commit(
        self, service, mock_db, mock_redis, mock_email, pending_school
    ) -> None:
        mock_db[SCHOOLS].find_one.return_value = pending_school
        mock_db[TRANSACTIONS].insert_one.return_value = MagicMock(inserted_id=ObjectId())
        mock_redis.get.return_value = None

        with pytest.raises(TemporaryPasswordNotFoundError):
            await service.create_school_transaction(school_payment())

        mock_db[SCHOOLS].update_one.assert_awaited_once()
        mock_email.send_school_onboarding_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cache_read_failure(
        self, service, mock_db, mock_redis, pending_school
    ) -> None:
        mock_db[SCHOOLS].find_one.return_value = pending_school
        mock_db[TRANSACTIONS].insert_one.return_value = MagicMock(inserted_id=ObjectId())
        mock_redis.get.side_effect = RedisError("down")

        with pytest.raises(TransactionServiceError, match="retrieve temporary password"):
            await service.create_school_transaction(school_payment())

    @pytest.mark.asyncio
    async def test_cleanup_failure_is_not_fatal(
        self, service, mock_db, mock_redis, pending_school
    ) -> None:
        mock_db[SCHOOLS].find_one.return_value = pending_school
        mock_db[TRANSACTIONS].insert_one.return_value = MagicMock(inserted_id=ObjectId())
        mock_redis.get.return_value = "Tmp!Pass1234"
        mock_redis.delete.side_effect = RedisError("down")

        result = await service.create_school_transaction(school_payment())

        assert result["school"]["status"] == "completed"


class TestParentTransaction:
    """Tests for parent payments."""

    @pytest.fixture
    def parent(self) -> dict:
        return {"_id": ObjectId(), "email": "parent@example.com", "role": "parent"}

    def request_for(self, parent: dict, student: dict) -> ParentTransactionRequest:
        return ParentTransactionRequest(
            parent_id=str(parent["_id"]),
            student_id=str(student["_id"]),
            amount=5000,
            transaction_type=TransactionType.STUDENT_SUBSCRIPTION,
        )

    @pytest.mark.asyncio
    async def test_linked_by_parent_reference(self, service, mock_db, parent) -> None:
        student = {"_id": ObjectId(), "parent": parent["_id"]}
        mock_db[USERS].find_one.side_effect = [parent, student]
        mock_db[TRANSACTIONS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await service.create_parent_transaction(self.request_for(parent, student))

        stored = mock_db[TRANSACTIONS].insert_one.await_args.args[0]
        assert stored["parent"] == parent["_id"]
        assert stored["student"] == student["_id"]
        assert result["transaction"]["student"] == str(student["_id"])

    @pytest.mark.asyncio
    async def test_linked_by_parent_email(self, service, mock_db, parent) -> None:
        student = {"_id": ObjectId(), "parentEmail": "parent@example.com"}
        mock_db[USERS].find_one.side_effect = [parent, student]
        mock_db[TRANSACTIONS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        await service.create_parent_transaction(self.request_for(parent, student))

        mock_db[TRANSACTIONS].insert_one.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unlinked_student(self, service, mock_db, parent) -> None:
        student = {"_id": ObjectId(), "parentEmail": None}
        mock_db[USERS].find_one.side_effect = [parent, student]

        with pytest.raises(TransactionTargetNotFoundError, match="not associated"):
            await service.create_parent_transaction(self.request_for(parent, student))

    @pytest.mark.asyncio
    async def test_missing_parent(self, service, mock_db, parent) -> None:
        mock_db[USERS].find_one.side_effect = [None]

        with pytest.raises(TransactionTargetNotFoundError, match="Parent not found"):
            await service.create_parent_transaction(
                self.request_for(parent, {"_id": ObjectId()})
            )


class TestRenewal:
    @pytest.mark.asyncio
    async def test_renew_resets_quota(self, service, mock_db, pending_school) -> None:
        pending_school["status"] = "completed"
        mock_db[SCHOOLS].find_one.return_value = pending_school
        mock_db[TRANSACTIONS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await service.renew_school_transaction(
            RenewSchoolTransactionRequest(
                school_id=str(pending_school["_id"]),
                amount=90000,
                currency="usd",
                number_of_kids=60,
            )
        )

        update = mock_db[SCHOOLS].update_one.await_args.args[1]
        assert update["$set"]["studentsLimit"] == 60
        stored = mock_db[TRANSACTIONS].insert_one.await_args.args[0]
        assert stored["schoolName"] == "Green Hills Academy"
        assert stored["transactionType"] == "subscription"
        assert stored["currency"] == "USD"
        assert result["school"]["studentsLimit"] == 60

    @pytest.mark.asyncio
    async def test_renew_missing_school(self, service, mock_db) -> None:
        mock_db[SCHOOLS].find_one.return_value = None

        with pytest.raises(TransactionTargetNotFoundError, match="School not found"):
            await service.renew_school_transaction(
                RenewSchoolTransactionRequest(
                    school_id=str(ObjectId()), amount=1, number_of_kids=1
                )
            )


class TestListings:
    @pytest.mark.asyncio
    async def test_list_resolves_payer_names(self, service, mock_db) -> None:
        school_id, parent_id, student_id = ObjectId(), ObjectId(), ObjectId()
        mock_db[TRANSACTIONS].cursor.to_list.return_value = [
            {"_id": ObjectId(), "school": school_id, "schoolName": "Old Name"},
            {"_id": ObjectId(), "parent": parent_id, "student": student_id},
        ]
        mock_db[SCHOOLS].cursor.to_list.return_value = [
            {"_id": school_id, "schoolName": "Green Hills Academy"}
        ]
        mock_db[USERS].cursor.to_list.return_value = [
            {"_id": parent_id, "firstName": "Marie", "lastName": "Uwase"},
            {"_id": student_id, "firstName": "Kalisa"},
        ]

        results = await service.list_transactions()

        assert results[0]["schoolName"] == "Green Hills Academy"
        assert results[1]["parentName"] == "Marie Uwase"
        assert results[1]["studentName"] == "Kalisa"

    @pytest.mark.asyncio
    async def test_list_pending_schools(self, service, mock_db, pending_school) -> None:
        mock_db[SCHOOLS].cursor.to_list.return_value = [pending_school]

        results = await service.list_pending_schools()

        query = mock_db[SCHOOLS].find.call_args.args[0]
        assert query == {"status": "pending", "deletedAt": None}
        assert results[0]["schoolName"] == "Green Hills Academy"
