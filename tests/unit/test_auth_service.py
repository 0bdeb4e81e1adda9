# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for AuthService."""

from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId
from pydantic import SecretStr
from pymongo.errors import DuplicateKeyError

from src.domains.auth.jwt import JWTManager
from src.domains.auth.service import (
    AuthService,
    EmailInUseError,
    InvalidCredentialsError,
    PrincipalNotFoundError,
    RegistrationNotAllowedError,
)
from src.infrastructure.database.collections import SCHOOLS, USERS
from src.infrastructure.storage import StorageError, UploadedFile
from src.models.auth import MentorRegisterRequest, RegisterRequest
from src.models.common import UserRole


def fake_hash(password: str) -> str:
    return f"hashed:{password}"


def fake_verify(password: str, password_hash: str) -> bool:
    return password_hash == fake_hash(password)


@pytest.fixture(autouse=True)
def fast_passwords():
    """Replace bcrypt with a cheap reversible scheme."""
    with patch("src.domains.auth.service.hash_password", side_effect=fake_hash), patch(
        "src.domains.auth.service.verify_password", side_effect=fake_verify
    ):
        yield


@pytest.fixture
def jwt_manager() -> JWTManager:
    settings = MagicMock()
    settings.secret_key = SecretStr("test-secret")
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 60
    settings.child_token_expire_minutes = 1440
    return JWTManager(settings)


@pytest.fixture
def auth_service(mock_db, jwt_manager, mock_storage) -> AuthService:
    return AuthService(mock_db, jwt_manager, mock_storage)


def user_doc(role: str = "parent", **extra) -> dict:
    return {
        "_id": ObjectId(),
        "email": "user@example.com",
        "firstName": "Ada",
        "role": role,
        "password": fake_hash("secret1"),
        **extra,
    }


class TestRegister:
    """Tests for self-registration."""

    @pytest.mark.asyncio
    async def test_register_parent(self, auth_service, mock_db, jwt_manager) -> None:
        mock_db[USERS].find_one.return_value = None
        mock_db[USERS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await auth_service.register(
            RegisterRequest(
                first_name="Ada",
                last_name="Lovelace",
                email="Ada@Example.com",
                password="secret1",
            )
        )

        stored = mock_db[USERS].insert_one.await_args.args[0]
        assert stored["email"] == "ada@example.com"
        assert stored["password"] == fake_hash("secret1")
        assert stored["role"] == "parent"
        assert "password" not in result.user
        assert jwt_manager.decode_token(result.access_token).role == "parent"

    @pytest.mark.asyncio
    async def test_register_rejects_other_roles(self, auth_service) -> None:
        with pytest.raises(RegistrationNotAllowedError):
            await auth_service.register(
                RegisterRequest(
                    first_name="Ada",
                    last_name="L",
                    email="ada@example.com",
                    password="secret1",
                    role=UserRole.MENTOR,
                )
            )

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service, mock_db) -> None:
        mock_db[USERS].find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(EmailInUseError, match="Email already in use"):
            await auth_service.register(
                RegisterRequest(
                    first_name="Ada", last_name="L", email="ada@example.com", password="secret1"
                )
            )

    @pytest.mark.asyncio
    async def test_register_race_on_unique_index(self, auth_service, mock_db) -> None:
        mock_db[USERS].find_one.return_value = None
        mock_db[USERS].insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(EmailInUseError):
            await auth_service.register(
                RegisterRequest(
                    first_name="Ada", last_name="L", email="ada@example.com", password="secret1"
                )
            )


class TestSignIn:
    """Tests for the sign-in flows."""

    @pytest.mark.asyncio
    async def test_login_success(self, auth_service, mock_db) -> None:
        user = user_doc()
        mock_db[USERS].find_one.return_value = user

        result = await auth_service.login("USER@example.com", "secret1")

        query = mock_db[USERS].find_one.await_args.args[0]
        assert query == {"email": "user@example.com", "deletedAt": None}
        assert result.user["id"] == str(user["_id"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("found", [True, False])
    async def test_login_failure_is_generic(self, auth_service, mock_db, found) -> None:
        mock_db[USERS].find_one.return_value = user_doc() if found else None

        with pytest.raises(InvalidCredentialsError, match="Invalid credentials"):
            await auth_service.login("user@example.com", "wrong-password")

    @pytest.mark.asyncio
    async def test_school_signin_subject_is_school_id(
        self, auth_service, mock_db, jwt_manager
    ) -> None:
        school = user_doc(role="school_admin", schoolName="Green Hills")
        mock_db[SCHOOLS].find_one.return_value = school

        result = await auth_service.school_signin("user@example.com", "secret1")

        payload = jwt_manager.decode_token(result.access_token)
        assert payload.sub == str(school["_id"])
        assert payload.role == "school_admin"

    @pytest.mark.asyncio
    async def test_mentor_signin_filters_role_and_suspension(
        self, auth_service, mock_db
    ) -> None:
        mock_db[USERS].find_one.return_value = user_doc(role="mentor")

        await auth_service.mentor_signin("user@example.com", "secret1")

        query = mock_db[USERS].find_one.await_args.args[0]
        assert query["role"] == "mentor"
        assert query["deletedAt"] is None

    @pytest.mark.asyncio
    async def test_parent_signin_wrong_password(self, auth_service, mock_db) -> None:
        mock_db[USERS].find_one.return_value = user_doc()

        with pytest.raises(InvalidCredentialsError):
            await auth_service.parent_signin("user@example.com", "nope")

    @pytest.mark.asyncio
    async def test_child_login_checks_every_candidate(
        self, auth_service, mock_db, jwt_manager
    ) -> None:
        first = user_doc(role="student", password=fake_hash("other"))
        second = user_doc(role="student")
        mock_db[USERS].cursor.__aiter__.return_value = [first, second]

        result = await auth_service.child_login("Ada", "secret1")

        assert result.user["id"] == str(second["_id"])
        assert result.expires_in == 1440 * 60
        assert jwt_manager.decode_token(result.access_token).role == "student"

    @pytest.mark.asyncio
    async def test_child_login_no_match(self, auth_service, mock_db) -> None:
        mock_db[USERS].cursor.__aiter__.return_value = [user_doc(role="student")]

        with pytest.raises(InvalidCredentialsError):
            await auth_service.child_login("Ada", "wrong")


class TestMentorSelfRegister:
    """Tests for mentor self-registration."""

    @pytest.fixture
    def request_data(self) -> MentorRegisterRequest:
        return MentorRegisterRequest(
            first_name="Grace",
            last_name="Hopper",
            specialty="Coding",
            email="grace@example.com",
            password="secret1",
            phone_number="+250700000000",
            city="Kigali",
            country="Rwanda",
        )

    @pytest.mark.asyncio
    async def test_uploads_photo_and_national_id(
        self, auth_service, mock_db, mock_storage, request_data
    ) -> None:
        mock_db[USERS].find_one.return_value = None
        mock_db[USERS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await auth_service.mentor_self_register(
            request_data,
            photo=UploadedFile("me.png", b"png"),
            national_id=UploadedFile("id.pdf", b"%PDF"),
        )

        stored = mock_db[USERS].insert_one.await_args.args[0]
        assert stored["role"] == "mentor"
        assert stored["image"] == "https://blob.example/img.jpeg"
        assert stored["nationalIdUrl"] == "https://blob.example/doc.pdf"
        mock_storage.upload_document.assert_awaited_once_with(b"%PDF", "id.pdf")
        assert result.user["role"] == "mentor"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, auth_service, mock_db, request_data) -> None:
        mock_db[USERS].find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(EmailInUseError):
            await auth_service.mentor_self_register(request_data)

    @pytest.mark.asyncio
    async def test_upload_without_storage(self, mock_db, jwt_manager, request_data) -> None:
        mock_db[USERS].find_one.return_value = None
        service = AuthService(mock_db, jwt_manager, storage=None)

        with pytest.raises(StorageError):
            await service.mentor_self_register(
                request_data, photo=UploadedFile("me.png", b"png")
            )


class TestGetPrincipal:
    @pytest.mark.asyncio
    async def test_school_admin_reads_schools(self, auth_service, mock_db) -> None:
        school_id = ObjectId()
        mock_db[SCHOOLS].find_one.return_value = {"_id": school_id, "password": "x"}

        result = await auth_service.get_principal(str(school_id), "school_admin")

        assert result == {"id": str(school_id)}
        mock_db[USERS].find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_principal(self, auth_service, mock_db) -> None:
        mock_db[USERS].find_one.return_value = None

        with pytest.raises(PrincipalNotFoundError):
            await auth_service.get_principal(str(ObjectId()), "parent")
