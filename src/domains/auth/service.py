# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for sign-in and self-registration.

This module provides the AuthService that handles:
- Parent and super admin self-registration
- Email/password sign-in for users, schools, mentors and parents
- First-name/password sign-in for students
- Mentor self-registration with photo and national ID uploads

School admins sign in against the schools collection; their token
subject is the school id. Every other principal lives in users.

Example:
    >>> auth_service = AuthService(db, jwt_manager, storage)
    >>> result = await auth_service.login("parent@example.com", "secret1")
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from src.domains.auth.jwt import JWTManager
from src.domains.auth.password import hash_password, verify_password
from src.infrastructure.database.collections import SCHOOLS, USERS
from src.infrastructure.database.documents import serialize_document, to_object_id
from src.infrastructure.storage import BlobStorageClient, UploadedFile, require_storage
from src.models.auth import AuthResponse, MentorRegisterRequest, RegisterRequest
from src.models.common import UserRole
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.PARENT})


class AuthServiceError(Exception):
    """Base exception for authentication errors."""

    pass


class InvalidCredentialsError(AuthServiceError):
    """Raised when an email/name and password pair does not match."""

    pass


class EmailInUseError(AuthServiceError):
    """Raised when registering with an email that already exists."""

    pass


class RegistrationNotAllowedError(AuthServiceError):
    """Raised when a role other than parent or super admin self-registers."""

    pass


class PrincipalNotFoundError(AuthServiceError):
    """Raised when the token subject no longer exists."""

    pass


class AuthService:
    """Authentication service for sign-in and registration.

    Attributes:
        _db: Application database.
        _jwt: JWT manager issuing access tokens.
        _storage: Blob storage for mentor uploads.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        jwt_manager: JWTManager,
        storage: BlobStorageClient | None = None,
    ) -> None:
        self._db = db
        self._jwt = jwt_manager
        self._storage = storage

    def _issue(self, principal: dict[str, Any], child: bool = False) -> AuthResponse:
        subject = str(principal["_id"])
        if child:
            token = self._jwt.create_child_token(subject, email=principal.get("email"))
        else:
            token = self._jwt.create_access_token(
                subject,
                role=principal["role"],
                email=principal.get("email"),
            )
        return AuthResponse(
            access_token=token.access_token,
            expires_in=token.expires_in,
            user=serialize_document(principal),
        )

    async def _email_taken(self, email: str) -> bool:
        existing = await self._db[USERS].find_one({"email": email}, {"_id": 1})
        return existing is not None

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """Register a parent or super admin.

        Raises:
            RegistrationNotAllowedError: If the requested role cannot self-register.
            EmailInUseError: If the email is already registered.
        """
        if data.role not in SELF_REGISTER_ROLES:
            raise RegistrationNotAllowedError("Only SUPER_ADMIN or PARENT can self-register")

        email = data.email.lower()
        if await self._email_taken(email):
            raise EmailInUseError("Email already in use")

        now = utc_now()
        document = {
            **data.to_document(),
            "email": email,
            "password": hash_password(data.password),
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = await self._db[USERS].insert_one(document)
        except DuplicateKeyError as e:
            raise EmailInUseError("Email already in use") from e

        document["_id"] = result.inserted_id
        logger.info("User registered: %s (role=%s)", result.inserted_id, document["role"])
        return self._issue(document)

    async def login(self, email: str, password: str) -> AuthResponse:
        """Sign in any active user by email.

        Raises:
            InvalidCredentialsError: If the email or password is wrong.
        """
        user = await self._db[USERS].find_one(
            {"email": email.lower(), "deletedAt": None}
        )
        if not user or not verify_password(password, user.get("password", "")):
            logger.warning("Login failed for %s", email)
            raise InvalidCredentialsError("Invalid credentials")

        logger.info("User logged in: %s (role=%s)", user["_id"], user["role"])
        return self._issue(user)

    async def _role_signin(self, email: str, password: str, role: UserRole) -> AuthResponse:
        user = await self._db[USERS].find_one(
            {"email": email.lower(), "role": role.value, "deletedAt": None}
        )
        if not user or not verify_password(password, user.get("password", "")):
            logger.warning("%s login failed for %s", role.value, email)
            raise InvalidCredentialsError("Invalid credentials")

        logger.info("%s logged in: %s", role.value, user["_id"])
        return self._issue(user)

    async def school_signin(self, email: str, password: str) -> AuthResponse:
        """Sign in a school admin. The token subject is the school id.

        Raises:
            InvalidCredentialsError: If no active school matches.
        """
        school = await self._db[SCHOOLS].find_one(
            {
                "email": email.lower(),
                "role": UserRole.SCHOOL_ADMIN.value,
                "deletedAt": None,
            }
        )
        if not school:
            logger.warning("School login failed: no school found with email %s", email)
            raise InvalidCredentialsError("Invalid credentials")
        if not verify_password(password, school.get("password", "")):
            logger.warning("School login failed: invalid password for %s", email)
            raise InvalidCredentialsError("Invalid credentials")

        logger.info("School %s logged in", school.get("schoolName"))
        return self._issue(school)

    async def mentor_signin(self, email: str, password: str) -> AuthResponse:
        """Sign in a mentor that is not suspended."""
        return await self._role_signin(email, password, UserRole.MENTOR)

    async def parent_signin(self, email: str, password: str) -> AuthResponse:
        """Sign in a parent."""
        return await self._role_signin(email, password, UserRole.PARENT)

    async def child_login(self, first_name: str, password: str) -> AuthResponse:
        """Sign in a student by first name.

        First names are not unique, so the password is checked against
        every student with that name and the first match wins.

        Raises:
            InvalidCredentialsError: If no candidate matches.
        """
        cursor = self._db[USERS].find(
            {"firstName": first_name, "role": UserRole.STUDENT.value, "deletedAt": None}
        )
        async for student in cursor:
            if verify_password(password, student.get("password", "")):
                logger.info("Student logged in: %s", student["_id"])
                return self._issue(student, child=True)

        logger.warning("Child login failed for first name %s", first_name)
        raise InvalidCredentialsError("Invalid credentials")

    async def mentor_self_register(
        self,
        data: MentorRegisterRequest,
        photo: UploadedFile | None = None,
        national_id: UploadedFile | None = None,
    ) -> AuthResponse:
        """Register a mentor account from the public sign-up form.

        Raises:
            EmailInUseError: If the email is already registered.
            StorageError: If an upload fails or storage is not configured.
        """
        email = data.email.lower()
        if await self._email_taken(email):
            raise EmailInUseError("Email already in use")

        image_url = None
        national_id_url = None
        if photo is not None:
            image_url = await require_storage(self._storage).upload_image(
                photo.content, photo.filename
            )
        if national_id is not None:
            national_id_url = await require_storage(self._storage).upload_document(
                national_id.content, national_id.filename
            )

        now = utc_now()
        document = {
            **data.to_document(),
            "email": email,
            "password": hash_password(data.password),
            "role": UserRole.MENTOR.value,
            "createdAt": now,
            "updatedAt": now,
        }
        if image_url:
            document["image"] = image_url
        if national_id_url:
            document["nationalIdUrl"] = national_id_url

        try:
            result = await self._db[USERS].insert_one(document)
        except DuplicateKeyError as e:
            raise EmailInUseError("Email already in use") from e

        document["_id"] = result.inserted_id
        logger.info("Mentor self-registered: %s", result.inserted_id)
        return self._issue(document)

    async def get_principal(self, principal_id: str, role: str) -> dict[str, Any]:
        """Load the profile behind a token.

        Raises:
            PrincipalNotFoundError: If the user or school no longer exists.
        """
        collection = SCHOOLS if role == UserRole.SCHOOL_ADMIN.value else USERS
        doc = await self._db[collection].find_one(
            {"_id": to_object_id(principal_id), "deletedAt": None}
        )
        if not doc:
            raise PrincipalNotFoundError("User not found")
        return serialize_document(doc)
