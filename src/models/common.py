# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared enums and base models for API requests and responses.

Field names are snake_case in Python and camelCase on the wire and in
stored documents. CamelModel.to_document() produces the stored form.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Dump set fields with camelCase keys and plain enum values."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class UserRole(str, Enum):
    STUDENT = "student"
    PARENT = "parent"
    MENTOR = "mentor"
    SCHOOL_ADMIN = "school_admin"
    SUPER_ADMIN = "super_admin"


class SchoolStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class PaymentMethod(str, Enum):
    CARD = "card"
    MOBILE_MONEY_RWANDA = "mobilemoneyrwanda"


class TransactionType(str, Enum):
    SUBSCRIPTION = "subscription"
    TIER_ONE = "tier-one"
    TIER_TWO = "tier-two"
    STUDENT_REGISTRATION = "student-registration"
    STUDENT_SUBSCRIPTION = "student-subscription"


class CredentialType(str, Enum):
    GOVERNMENT_ID = "government_id"
    PROFESSIONAL_CREDENTIALS = "professional_credentials"


class CredentialStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContentType(str, Enum):
    VIDEO = "video"
    BOOK = "book"


class ContentCategory(str, Enum):
    SCIENCE = "science"
    TECHNOLOGY = "technology"
    ENGINEERING = "engineering"
    ARTS = "arts"
    MATHEMATICS = "mathematics"
    HISTORY = "history"
    LITERATURE = "literature"
    CAREER = "career"
    GENERAL = "general"


class TargetAudience(str, Enum):
    PARENT = "parent"
    SCHOOL = "school"
    MENTOR = "mentor"
    ALL = "all"


class ChallengeType(str, Enum):
    PROJECT = "project"
    EXPERIMENT = "experiment"
    ACTIVITY = "activity"


class AgeRange(str, Enum):
    AGE_6_TO_8 = "6-8"
    AGE_9_TO_12 = "9-12"
    AGE_13_TO_15 = "13-15"
    AGE_16_TO_18 = "16-18"


class AgeGroup(str, Enum):
    AGE_5_TO_8 = "5-8"
    AGE_9_TO_12 = "9-12"
    AGE_13_TO_16 = "13-16"
    AGE_17_PLUS = "17+"


class BadgeTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    LEGENDARY = "legendary"
    SPECIAL = "special"


class StarContentType(str, Enum):
    PROJECT = "project"
    COMMUNITY = "community"
    VIDEO = "video"
    BOOK = "book"


class ApiResponse(CamelModel):
    """Envelope used by mutation endpoints.

    Attributes:
        success: Whether the operation succeeded.
        message: Human-readable outcome.
        data: Operation result.
    """

    success: bool = True
    message: str
    data: Any = None


class PageMeta(CamelModel):
    """Pagination metadata."""

    total: int
    page: int
    limit: int
    total_pages: int


class PaginationParams(CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
