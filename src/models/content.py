# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content library, challenge and category models."""

from pydantic import Field

from src.models.common import (
    AgeRange,
    CamelModel,
    ChallengeType,
    ContentCategory,
    ContentType,
    TargetAudience,
)


class ContentCreateRequest(CamelModel):
    """A video or a book in the content library.

    Videos need video_url; books need author and book_url. The service
    checks these because they depend on type.
    """

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: ContentType
    category: ContentCategory
    target_audience: TargetAudience
    video_url: str | None = None
    author: str | None = None
    book_url: str | None = None
    thumbnail_url: str | None = None


class ContentFilter(CamelModel):
    type: ContentType | None = None
    category: ContentCategory | None = None
    search: str | None = None


class ChallengeCreateRequest(CamelModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    type: ChallengeType
    category_id: str
    difficulty_level: str = Field(min_length=1)
    theme: str = Field(min_length=1)
    estimated_time: str = Field(min_length=1)
    age_range: AgeRange
    image_url: str | None = None
    video_tutorial_url: str | None = None


class ChallengeFilter(CamelModel):
    type: ChallengeType | None = None
    category_id: str | None = None
    age_range: AgeRange | None = None
    search: str | None = None


class CategoryCreateRequest(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None
    icon: str | None = None
    color_theme: str | None = None


class CategoryUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    icon: str | None = None
    color_theme: str | None = None
