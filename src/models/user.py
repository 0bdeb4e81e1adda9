# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User profile models."""

from pydantic import EmailStr, Field

from src.models.common import CamelModel


class ProfileUpdateRequest(CamelModel):
    """Fields any user may change on their own profile."""

    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    phone_number: str | None = None
    grade: str | None = None
    age: int | None = Field(default=None, ge=1, le=120)
