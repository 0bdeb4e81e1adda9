# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for mentor onboarding and credential verification."""

from unittest.mock import MagicMock, patch

import pytest
from bson import ObjectId

from src.domains.mentor.credentials import (
    CredentialNotFoundError,
    InvalidVerificationError,
    MentorCredentialService,
    credential_blob_path,
)
from src.domains.mentor.service import (
    MentorExistsError,
    MentorNotFoundError,
    MentorOnboardingService,
)
from src.infrastructure.database.collections import MENTOR_CREDENTIALS, USERS
from src.infrastructure.storage import UploadedFile
from src.models.common import CredentialType
from src.models.mentor import (
    MentorCreateRequest,
    MentorProfileUpdateRequest,
    VerifyCredentialRequest,
)


@pytest.fixture(autouse=True)
def patched_transactions(transaction_stub):
    with patch("src.domains.mentor.service.start_transaction", new=transaction_stub), patch(
        "src.domains.mentor.service.hash_password", side_effect=lambda pw: f"hashed:{pw}"
    ):
        yield


@pytest.fixture
def onboarding(mock_db, mock_email, mock_storage) -> MentorOnboardingService:
    return MentorOnboardingService(mock_db, mock_email, mock_storage)


@pytest.fixture
def credentials(mock_db, mock_email, mock_storage) -> MentorCredentialService:
    return MentorCredentialService(mock_db, mock_email, mock_storage)


def mentor_doc(**extra) -> dict:
    return {
        "_id": ObjectId(),
        "firstName": "Grace",
        "lastName": "Hopper",
        "email": "grace@example.com",
        "role": "mentor",
        **extra,
    }


class TestOnboardMentor:
    """Tests for super admin mentor onboarding."""

    @pytest.fixture
    def request_data(self) -> MentorCreateRequest:
        return MentorCreateRequest(
            first_name="Grace",
            last_name="Hopper",
            specialty="Coding",
            email="Grace@Example.com",
            phone_number="+250700000000",
            city="Kigali",
            country="Rwanda",
        )

    @pytest.mark.asyncio
    async def test_emails_temporary_password(
        self, onboarding, mock_db, mock_email, request_data
    ) -> None:
        mock_db[USERS].find_one.return_value = None
        mock_db[USERS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await onboarding.onboard_mentor(request_data, str(ObjectId()))

        stored = mock_db[USERS].insert_one.await_args.args[0]
        first_name, email, password = mock_email.send_mentor_onboarding_email.await_args.args
        assert (first_name, email) == ("Grace", "grace@example.com")
        assert stored["password"] == f"hashed:{password}"
        assert stored["role"] == "mentor"
        assert result["email"] == "grace@example.com"
        assert "password" not in result

    @pytest.mark.asyncio
    async def test_duplicate_email(
        self, onboarding, mock_db, mock_email, request_data
    ) -> None:
        mock_db[USERS].find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(MentorExistsError):
            await onboarding.onboard_mentor(request_data, str(ObjectId()))

        mock_email.send_mentor_onboarding_email.assert_not_awaited()


class TestMentorLifecycle:
    """Tests for suspension, reactivation and profile updates."""

    @pytest.mark.asyncio
    async def test_suspend_sets_deleted_at_and_notifies(
        self, onboarding, mock_db, mock_email
    ) -> None:
        mentor = mentor_doc()
        mock_db[USERS].find_one_and_update.return_value = mentor

        await onboarding.suspend_mentor(str(mentor["_id"]), str(ObjectId()))

        query, update = mock_db[USERS].find_one_and_update.await_args.args
        assert query["deletedAt"] is None
        assert "deletedAt" in update["$set"]
        mock_email.send_mentor_suspension_email.assert_awaited_once_with(
            "Grace", "grace@example.com"
        )

    @pytest.mark.asyncio
    async def test_reactivate_only_suspended(self, onboarding, mock_db, mock_email) -> None:
        mock_db[USERS].find_one_and_update.return_value = None

        with pytest.raises(MentorNotFoundError):
            await onboarding.reactivate_mentor(str(ObjectId()), str(ObjectId()))

        query = mock_db[USERS].find_one_and_update.await_args.args[0]
        assert query["deletedAt"] == {"$ne": None}
        mock_email.send_mentor_reactivation_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_profile_with_image(
        self, onboarding, mock_db, mock_storage
    ) -> None:
        mentor = mentor_doc(biography="Compilers")
        mock_db[USERS].find_one_and_update.return_value = mentor

        await onboarding.update_profile(
            str(mentor["_id"]),
            MentorProfileUpdateRequest(biography="Compilers", languages=["en", "rw"]),
            UploadedFile("me.png", b"png"),
        )

        updates = mock_db[USERS].find_one_and_update.await_args.args[1]["$set"]
        assert updates["biography"] == "Compilers"
        assert updates["languages"] == ["en", "rw"]
        assert updates["image"] == "https://blob.example/img.jpeg"
        assert "firstName" not in updates

    @pytest.mark.asyncio
    async def test_get_suspended_mentor(self, onboarding, mock_db) -> None:
        mock_db[USERS].find_one.return_value = None

        with pytest.raises(MentorNotFoundError, match="Mentor not found"):
            await onboarding.get_mentor(str(ObjectId()))


def test_credential_blob_path_is_unique_per_upload() -> None:
    first = credential_blob_path("abc", "Degree.PDF")
    second = credential_blob_path("abc", "Degree.PDF")

    assert first.startswith("credentials/abc/")
    assert first.endswith(".pdf")
    assert first != second


class TestCredentials:
    """Tests for credential upload and verification."""

    @pytest.mark.asyncio
    async def test_upload_starts_pending(self, credentials, mock_db, mock_storage) -> None:
        mentor = mentor_doc()
        mock_db[USERS].find_one.return_value = {"_id": mentor["_id"]}
        mock_db[MENTOR_CREDENTIALS].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await credentials.upload_credential(
            str(mentor["_id"]),
            CredentialType.GOVERNMENT_ID,
            UploadedFile("passport.pdf", b"%PDF"),
            description="Passport",
        )

        assert result["status"] == "pending"
        assert result["fileUrl"] == "https://blob.example/doc.pdf"
        assert result["description"] == "Passport"
        blob_path = mock_storage.upload_document.await_args.kwargs["blob_path"]
        assert blob_path.startswith(f"credentials/{mentor['_id']}/")

    @pytest.mark.asyncio
    async def test_upload_for_unknown_mentor(self, credentials, mock_db, mock_storage) -> None:
        mock_db[USERS].find_one.return_value = None

        with pytest.raises(MentorNotFoundError):
            await credentials.upload_credential(
                str(ObjectId()), CredentialType.GOVERNMENT_ID, UploadedFile("a.pdf", b"x")
            )

        mock_storage.upload_document.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, credentials, mock_db) -> None:
        with pytest.raises(InvalidVerificationError):
            await credentials.verify_credential(
                str(ObjectId()),
                VerifyCredentialRequest(status="rejected", rejection_reason="   "),
                str(ObjectId()),
            )

        mock_db[MENTOR_CREDENTIALS].find_one_and_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_approve_clears_reason_and_notifies(
        self, credentials, mock_db, mock_email
    ) -> None:
        mentor = mentor_doc()
        mock_db[MENTOR_CREDENTIALS].find_one_and_update.return_value = {
            "_id": ObjectId(),
            "mentor": mentor["_id"],
            "credentialType": "government_id",
            "status": "approved",
        }
        mock_db[USERS].find_one.return_value = mentor

        await credentials.verify_credential(
            str(ObjectId()), VerifyCredentialRequest(status="approved"), str(ObjectId())
        )

        update = mock_db[MENTOR_CREDENTIALS].find_one_and_update.await_args.args[1]
        assert update["$unset"] == {"rejectionReason": ""}
        assert update["$set"]["status"] == "approved"
        mock_email.send_credential_approved_email.assert_awaited_once_with(
            "grace@example.com", "Grace", "government_id"
        )

    @pytest.mark.asyncio
    async def test_reject_stores_reason_and_notifies(
        self, credentials, mock_db, mock_email
    ) -> None:
        mentor = mentor_doc()
        mock_db[MENTOR_CREDENTIALS].find_one_and_update.return_value = {
            "_id": ObjectId(),
            "mentor": mentor["_id"],
            "credentialType": "professional_credentials",
            "status": "rejected",
        }
        mock_db[USERS].find_one.return_value = mentor

        await credentials.verify_credential(
            str(ObjectId()),
            VerifyCredentialRequest(status="rejected", rejection_reason=" Blurry scan "),
            str(ObjectId()),
        )

        update = mock_db[MENTOR_CREDENTIALS].find_one_and_update.await_args.args[1]
        assert update["$set"]["rejectionReason"] == "Blurry scan"
        mock_email.send_credential_rejected_email.assert_awaited_once_with(
            "grace@example.com", "Grace", "professional_credentials", "Blurry scan"
        )

    @pytest.mark.asyncio
    async def test_verify_missing_credential(self, credentials, mock_db) -> None:
        mock_db[MENTOR_CREDENTIALS].find_one_and_update.return_value = None

        with pytest.raises(CredentialNotFoundError):
            await credentials.verify_credential(
                str(ObjectId()), VerifyCredentialRequest(status="approved"), str(ObjectId())
            )

    @pytest.mark.asyncio
    async def test_list_attaches_mentor(self, credentials, mock_db) -> None:
        mentor = mentor_doc()
        mock_db[MENTOR_CREDENTIALS].cursor.to_list.return_value = [
            {"_id": ObjectId(), "mentor": mentor["_id"], "status": "pending"}
        ]
        mock_db[USERS].cursor.to_list.return_value = [mentor]

        results = await credentials.list_pending()

        assert mock_db[MENTOR_CREDENTIALS].find.call_args.args[0] == {"status": "pending"}
        assert results[0]["mentor"]["firstName"] == "Grace"
