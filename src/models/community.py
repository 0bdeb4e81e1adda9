# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Community and post models."""

from pydantic import Field

from src.models.common import AgeGroup, CamelModel


class CommunityCreateRequest(CamelModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: str | None = None
    category_id: str | None = None
    age_group: AgeGroup
    image_url: str | None = None
    banner_url: str | None = None


class CommunityFilter(CamelModel):
    category: str | None = None
    category_id: str | None = None
    age_group: AgeGroup | None = None
    search: str | None = None


class PostCreateRequest(CamelModel):
    content: str = Field(min_length=1, max_length=5000)
    images: list[str] = Field(default_factory=list)
