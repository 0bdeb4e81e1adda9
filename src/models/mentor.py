# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mentor onboarding, profile and credential models."""

from typing import Literal

from pydantic import EmailStr, Field

from src.models.common import CamelModel


class MentorCreateRequest(CamelModel):
    """Mentor onboarded by a super admin. The photo arrives as a file part."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    specialty: str = Field(min_length=1)
    email: EmailStr
    phone_number: str = Field(min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)


class MentorProfileUpdateRequest(CamelModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    biography: str | None = None
    linkedin: str | None = None
    specialty: str | None = None
    areas_of_expertise: list[str] | None = None
    years_of_experience: str | None = None
    education: str | None = None
    languages: list[str] | None = None


class VerifyCredentialRequest(CamelModel):
    status: Literal["approved", "rejected"]
    rejection_reason: str | None = None
