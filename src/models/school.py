# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School onboarding and school-managed student models."""

from pydantic import EmailStr, Field

from src.models.common import CamelModel


class SchoolCreateRequest(CamelModel):
    """School onboarding form. The logo arrives as a separate file part."""

    school_name: str = Field(min_length=1)
    school_type: str = Field(min_length=1)
    school_contact_person: str = Field(min_length=1)
    email: EmailStr
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    country: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)


class SchoolUpdateRequest(CamelModel):
    school_name: str | None = Field(default=None, min_length=1)
    school_type: str | None = None
    school_contact_person: str | None = None
    email: EmailStr | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    phone_number: str | None = None


class SchoolStudentCreateRequest(CamelModel):
    """Student registered by a school admin."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    age: int = Field(ge=3, le=25)
    grade: str = Field(min_length=1)
    password: str = Field(min_length=6)
    parent_email: EmailStr | None = None


class SchoolStudentUpdateRequest(CamelModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    age: int | None = Field(default=None, ge=3, le=25)
    grade: str | None = None
    parent_email: EmailStr | None = None
