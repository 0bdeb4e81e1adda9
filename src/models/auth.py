# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response models."""

from typing import Any

from pydantic import EmailStr, Field

from src.models.common import CamelModel, UserRole


class RegisterRequest(CamelModel):
    """Self-registration for parents and super admins."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone_number: str | None = None
    role: UserRole = UserRole.PARENT


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ChildLoginRequest(CamelModel):
    """Students sign in with their first name and password."""

    first_name: str = Field(min_length=1)
    password: str = Field(min_length=1)


class MentorRegisterRequest(CamelModel):
    """Mentor self-registration form fields."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    specialty: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone_number: str = Field(min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    biography: str | None = None
    linkedin: str | None = None


class AuthResponse(CamelModel):
    """Token issued after a successful sign-in.

    Attributes:
        access_token: Bearer JWT.
        token_type: Always "Bearer".
        expires_in: Token lifetime in seconds.
        user: Serialized principal (user or school), password excluded.
    """

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: dict[str, Any]
