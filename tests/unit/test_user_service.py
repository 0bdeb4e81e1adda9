# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for UserService."""

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from src.domains.user.service import UserAlreadyExistsError, UserNotFoundError, UserService
from src.infrastructure.database.collections import USERS
from src.infrastructure.storage import UploadedFile
from src.models.common import UserRole
from src.models.user import ProfileUpdateRequest


@pytest.fixture
def service(mock_db, mock_storage) -> UserService:
    return UserService(mock_db, mock_storage)


class TestProfile:
    """Tests for own-profile reads and updates."""

    @pytest.mark.asyncio
    async def test_get_profile_hides_password(self, service, mock_db) -> None:
        user_id = ObjectId()
        mock_db[USERS].find_one.return_value = {
            "_id": user_id,
            "firstName": "Marie",
            "password": "hash",
        }

        profile = await service.get_profile(str(user_id))

        assert profile == {"id": str(user_id), "firstName": "Marie"}

    @pytest.mark.asyncio
    async def test_get_deleted_user(self, service, mock_db) -> None:
        mock_db[USERS].find_one.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.get_profile(str(ObjectId()))

        assert mock_db[USERS].find_one.await_args.args[0]["deletedAt"] is None

    @pytest.mark.asyncio
    async def test_update_only_sent_fields(self, service, mock_db, mock_storage) -> None:
        user_id = ObjectId()
        mock_db[USERS].find_one_and_update.return_value = {"_id": user_id}

        await service.update_profile(
            str(user_id),
            ProfileUpdateRequest(email="Marie@Example.com", phone_number="+250788"),
            UploadedFile("me.jpg", b"jpg"),
        )

        updates = mock_db[USERS].find_one_and_update.await_args.args[1]["$set"]
        assert updates["email"] == "marie@example.com"
        assert updates["phoneNumber"] == "+250788"
        assert updates["image"] == "https://blob.example/img.jpeg"
        assert "firstName" not in updates

    @pytest.mark.asyncio
    async def test_update_to_taken_email(self, service, mock_db) -> None:
        mock_db[USERS].find_one_and_update.side_effect = DuplicateKeyError("dup")

        with pytest.raises(UserAlreadyExistsError):
            await service.update_profile(
                str(ObjectId()), ProfileUpdateRequest(email="taken@example.com")
            )


class TestAdministration:
    @pytest.mark.asyncio
    async def test_list_by_role(self, service, mock_db) -> None:
        await service.list_users(UserRole.MENTOR)

        assert mock_db[USERS].find.call_args.args[0] == {"deletedAt": None, "role": "mentor"}

    @pytest.mark.asyncio
    async def test_soft_delete_missing(self, service, mock_db) -> None:
        mock_db[USERS].find_one_and_update.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.soft_delete_user(str(ObjectId()))
