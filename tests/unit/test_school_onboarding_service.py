# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for SchoolOnboardingService and SchoolStudentService."""

from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from src.core.config.settings import OnboardingSettings
from src.domains.school import (
    OnboardingError,
    QuotaExceededError,
    SchoolEmailExistsError,
    SchoolNotFoundError,
    SchoolOnboardingService,
    SchoolStudentService,
    StudentExistsError,
    StudentPermissionError,
)
from src.infrastructure.cache import RedisError, temp_password_key
from src.infrastructure.database.collections import SCHOOLS, USERS
from src.infrastructure.storage import UploadedFile
from src.models.school import (
    SchoolCreateRequest,
    SchoolStudentCreateRequest,
    SchoolStudentUpdateRequest,
    SchoolUpdateRequest,
)


@pytest.fixture(autouse=True)
def patched_transactions(transaction_stub):
    with patch(
        "src.domains.school.service.start_transaction", new=transaction_stub
    ), patch(
        "src.domains.school.students.start_transaction", new=transaction_stub
    ), patch(
        "src.domains.school.service.hash_password", side_effect=lambda pw: f"hashed:{pw}"
    ), patch(
        "src.domains.school.students.hash_password", side_effect=lambda pw: f"hashed:{pw}"
    ):
        yield


@pytest.fixture
def school_request() -> SchoolCreateRequest:
    return SchoolCreateRequest(
        school_name="Green Hills Academy",
        school_type="Primary",
        school_contact_person="Jane Doe",
        email="Admin@GreenHills.example.com",
        address="KG 9 Ave",
        city="Kigali",
        country="Rwanda",
        phone_number="+250788000000",
    )


@pytest.fixture
def onboarding_service(mock_db, mock_redis, mock_storage) -> SchoolOnboardingService:
    return SchoolOnboardingService(mock_db, mock_redis, OnboardingSettings(), mock_storage)


class TestOnboardSchool:
    """Tests for onboarding a school."""

    @pytest.mark.asyncio
    async def test_creates_pending_school(
        self, onboarding_service, mock_db, school_request
    ) -> None:
        school_id = ObjectId()
        mock_db[SCHOOLS].find_one.return_value = None
        mock_db[SCHOOLS].insert_one.return_value = MagicMock(inserted_id=school_id)
        admin_id = str(ObjectId())

        result = await onboarding_service.onboard_school(school_request, admin_id)

        stored = mock_db[SCHOOLS].insert_one.await_args.args[0]
        assert stored["email"] == "admin@greenhills.example.com"
        assert stored["role"] == "school_admin"
        assert stored["status"] == "pending"
        assert stored["studentsLimit"] is None
        assert stored["password"].startswith("hashed:")
        assert stored["superAdmin"] == ObjectId(admin_id)
        assert result["id"] == str(school_id)
        assert "password" not in result

    @pytest.mark.asyncio
    async def test_parks_plain_password_in_cache(
        self, onboarding_service, mock_db, mock_redis, school_request
    ) -> None:
        school_id = ObjectId()
        mock_db[SCHOOLS].find_one.return_value = None
        mock_db[SCHOOLS].insert_one.return_value = MagicMock(inserted_id=school_id)

        await onboarding_service.onboard_school(school_request, str(ObjectId()))

        key, password = mock_redis.set.await_args.args
        assert key == temp_password_key(str(school_id))
        assert len(password) == 12
        assert mock_redis.set.await_args.kwargs["expire_seconds"] == 24 * 3600
        stored = mock_db[SCHOOLS].insert_one.await_args.args[0]
        assert stored["password"] == f"hashed:{password}"

    @pytest.mark.asyncio
    async def test_existing_email(self, onboarding_service, mock_db, school_request) -> None:
        mock_db[SCHOOLS].find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(SchoolEmailExistsError):
            await onboarding_service.onboard_school(school_request, str(ObjectId()))

        mock_db[SCHOOLS].insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cache_failure(
        self, onboarding_service, mock_db, mock_redis, school_request
    ) -> None:
        mock_db[SCHOOLS].find_one.return_value = None
        mock_db[SCHOOLS].insert_one.return_value = MagicMock(inserted_id=ObjectId())
        mock_redis.set.side_effect = RedisError("connection refused")

        with pytest.raises(OnboardingError, match="Failed to store temporary password"):
            await onboarding_service.onboard_school(school_request, str(ObjectId()))

    @pytest.mark.asyncio
    async def test_uploads_logo(
        self, onboarding_service, mock_db, mock_storage, school_request
    ) -> None:
        mock_db[SCHOOLS].find_one.return_value = None
        mock_db[SCHOOLS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await onboarding_service.onboard_school(
            school_request, str(ObjectId()), UploadedFile("logo.png", b"png")
        )

        mock_storage.upload_image.assert_awaited_once_with(b"png", "logo.png")
        assert result["logoUrl"] == "https://blob.example/img.jpeg"


class TestManageSchools:
    """Tests for school reads, updates and soft delete."""

    @pytest.mark.asyncio
    async def test_get_missing_school(self, onboarding_service, mock_db) -> None:
        mock_db[SCHOOLS].find_one.return_value = None

        with pytest.raises(SchoolNotFoundError):
            await onboarding_service.get_school(str(ObjectId()))

    @pytest.mark.asyncio
    async def test_update_lowercases_email(self, onboarding_service, mock_db) -> None:
        school_id = ObjectId()
        mock_db[SCHOOLS].find_one_and_update.return_value = {
            "_id": school_id,
            "email": "new@school.example.com",
            "students": [ObjectId()],
        }

        result = await onboarding_service.update_school(
            str(school_id), SchoolUpdateRequest(email="NEW@school.example.com")
        )

        update = mock_db[SCHOOLS].find_one_and_update.await_args.args[1]
        assert update["$set"]["email"] == "new@school.example.com"
        assert "updatedAt" in update["$set"]
        assert "students" not in result

    @pytest.mark.asyncio
    async def test_delete_sets_deleted_at(self, onboarding_service, mock_db) -> None:
        mock_db[SCHOOLS].update_one.return_value = MagicMock(matched_count=1)

        await onboarding_service.delete_school(str(ObjectId()))

        update = mock_db[SCHOOLS].update_one.await_args.args[1]
        assert "deletedAt" in update["$set"]

    @pytest.mark.asyncio
    async def test_delete_missing_school(self, onboarding_service, mock_db) -> None:
        mock_db[SCHOOLS].update_one.return_value = MagicMock(matched_count=0)

        with pytest.raises(SchoolNotFoundError):
            await onboarding_service.delete_school(str(ObjectId()))

    @pytest.mark.asyncio
    async def test_restore_unsets_deleted_at(self, onboarding_service, mock_db) -> None:
        mock_db[SCHOOLS].update_one.return_value = MagicMock(matched_count=1)

        await onboarding_service.restore_school(str(ObjectId()))

        update = mock_db[SCHOOLS].update_one.await_args.args[1]
        assert update == {"$unset": {"deletedAt": ""}}


@pytest.fixture
def student_service(mock_db, mock_storage) -> SchoolStudentService:
    return SchoolStudentService(mock_db, mock_storage)


@pytest.fixture
def student_request() -> SchoolStudentCreateRequest:
    return SchoolStudentCreateRequest(
        first_name="Kalisa",
        last_name="Eric",
        age=10,
        grade="P5",
        password="secret1",
    )


class TestSchoolStudents:
    """Tests for quota-checked student management."""

    @pytest.mark.asyncio
    async def test_register_within_quota(
        self, student_service, mock_db, student_request
    ) -> None:
        school_id = ObjectId()
        student_id = ObjectId()
        mock_db[SCHOOLS].find_one.return_value = {"_id": school_id, "studentsLimit": 5}
        mock_db[USERS].count_documents.return_value = 4
        mock_db[USERS].insert_one.return_value = MagicMock(inserted_id=student_id)

        result = await student_service.register_student(str(school_id), student_request)

        stored = mock_db[USERS].insert_one.await_args.args[0]
        assert stored["role"] == "student"
        assert stored["school"] == school_id
        assert stored["password"] == "hashed:secret1"
        push = mock_db[SCHOOLS].update_one.await_args.args[1]
        assert push == {"$push": {"students": student_id}}
        assert "password" not in result

    @pytest.mark.asyncio
    async def test_register_at_quota(self, student_service, mock_db, student_request) -> None:
        mock_db[SCHOOLS].find_one.return_value = {"_id": ObjectId(), "studentsLimit": 3}
        mock_db[USERS].count_documents.return_value = 3

        with pytest.raises(QuotaExceededError, match="limit of 3 students"):
            await student_service.register_student(str(ObjectId()), student_request)

        mock_db[USERS].insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_register_without_limit_skips_count(
        self, student_service, mock_db, student_request
    ) -> None:
        mock_db[SCHOOLS].find_one.return_value = {"_id": ObjectId(), "studentsLimit": None}
        mock_db[USERS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        await student_service.register_student(str(ObjectId()), student_request)

        mock_db[USERS].count_documents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_register_missing_school(
        self, student_service, mock_db, student_request
    ) -> None:
        mock_db[SCHOOLS].find_one.return_value = None

        with pytest.raises(SchoolNotFoundError):
            await student_service.register_student(str(ObjectId()), student_request)

    @pytest.mark.asyncio
    async def test_register_duplicate(self, student_service, mock_db, student_request) -> None:
        mock_db[SCHOOLS].find_one.return_value = {"_id": ObjectId(), "studentsLimit": None}
        mock_db[USERS].insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(StudentExistsError):
            await student_service.register_student(str(ObjectId()), student_request)

    @pytest.mark.asyncio
    async def test_update_other_schools_student(self, student_service, mock_db) -> None:
        mock_db[USERS].find_one.return_value = {"_id": ObjectId(), "school": ObjectId()}

        with pytest.raises(StudentPermissionError):
            await student_service.update_student(
                str(ObjectId()), str(ObjectId()), SchoolStudentUpdateRequest(grade="P6")
            )

    @pytest.mark.asyncio
    async def test_delete_pulls_and_removes(self, student_service, mock_db) -> None:
        school_id = ObjectId()
        student_id = ObjectId()
        mock_db[USERS].find_one.return_value = {"_id": student_id, "school": school_id}

        await student_service.delete_student(str(school_id), str(student_id))

        pull = mock_db[SCHOOLS].update_one.await_args.args[1]
        assert pull == {"$pull": {"students": student_id}}
        assert mock_db[USERS].delete_one.await_args.args[0] == {"_id": student_id}
