# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Content library and challenge service.

This module provides the ContentService that handles:
- Super admin creation of videos, books and challenges
- Audience-filtered content listings per role
- Challenge listings for students
- Challenge participation statistics for super admins

Content is tagged with a target audience. Every role sees ``all``
content plus its own audience; super admins see every audience.
"""

import logging
import re
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from src.infrastructure.database.collections import (
    CATEGORIES,
    CHALLENGES,
    COMPLETED_CHALLENGES,
    CONTENTS,
    USERS,
)
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.models.common import ContentType, TargetAudience, UserRole
from src.models.content import (
    ChallengeCreateRequest,
    ChallengeFilter,
    ContentCreateRequest,
    ContentFilter,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

ROLE_AUDIENCES: dict[str, list[str]] = {
    UserRole.PARENT.value: [TargetAudience.ALL.value, TargetAudience.PARENT.value],
    UserRole.SCHOOL_ADMIN.value: [TargetAudience.ALL.value, TargetAudience.SCHOOL.value],
    UserRole.MENTOR.value: [TargetAudience.ALL.value, TargetAudience.MENTOR.value],
    UserRole.SUPER_ADMIN.value: [audience.value for audience in TargetAudience],
}


class ContentServiceError(Exception):
    """Base exception for content service errors."""

    pass


class ContentNotFoundError(ContentServiceError):
    """Raised when content is not found."""

    pass


class ChallengeNotFoundError(ContentServiceError):
    """Raised when a challenge is not found."""

    pass


class InvalidContentError(ContentServiceError):
    """Raised when content is missing fields its type requires."""

    pass


class InvalidCategoryError(ContentServiceError):
    """Raised when a challenge references a category that does not exist."""

    pass


def audiences_for_role(role: str) -> list[str]:
    """Target audiences visible to a role."""
    return ROLE_AUDIENCES.get(role, [TargetAudience.ALL.value])


def search_clause(
    search: str | None, fields: tuple[str, ...] = ("title", "description")
) -> dict[str, Any] | None:
    """Case-insensitive match on any of the fields, with the term escaped."""
    if not search:
        return None
    pattern = {"$regex": re.escape(search), "$options": "i"}
    return {"$or": [{field: pattern} for field in fields]}


class ContentService:
    """Service for the content library and challenges.

    Attributes:
        _db: Application database.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    async def create_content(
        self, data: ContentCreateRequest, user_id: str
    ) -> dict[str, Any]:
        """Create a video or book.

        Raises:
            InvalidContentError: If a video has no URL or a book lacks an
                author or URL.
        """
        if data.type == ContentType.VIDEO and not data.video_url:
            raise InvalidContentError("Video content requires videoUrl")
        if data.type == ContentType.BOOK and not (data.author and data.book_url):
            raise InvalidContentError("Book content requires author and bookUrl")

        now = utc_now()
        document = {
            **data.to_document(),
            "createdBy": to_object_id(user_id),
            "createdAt": now,
            "updatedAt": now,
        }
        result = await self._db[CONTENTS].insert_one(document)
        document["_id"] = result.inserted_id

        logger.info("Content %s (%s) created by %s", result.inserted_id, data.type.value, user_id)
        return serialize_document(document)

    async def create_challenge(
        self, data: ChallengeCreateRequest, user_id: str
    ) -> dict[str, Any]:
        """Create a challenge under an existing category.

        Raises:
            InvalidCategoryError: If the category does not exist.
        """
        category_oid = to_object_id(data.category_id)
        category = await self._db[CATEGORIES].find_one({"_id": category_oid}, {"_id": 1})
        if not category:
            raise InvalidCategoryError(
                f"Invalid category ID: Challenge category with ID {data.category_id} not found"
            )

        now = utc_now()
        document = {
            **data.to_document(),
            "categoryId": category_oid,
            "createdBy": to_object_id(user_id),
            "createdAt": now,
            "updatedAt": now,
        }
        result = await self._db[CHALLENGES].insert_one(document)
        document["_id"] = result.inserted_id

        logger.info("Challenge %s created by %s", result.inserted_id, user_id)
        return serialize_document(document)

    async def _category_names(self, category_ids: set) -> dict[Any, str]:
        if not category_ids:
            return {}
        categories = await self._db[CATEGORIES].find(
            {"_id": {"$in": list(category_ids)}}, {"name": 1}
        ).to_list(None)
        return {c["_id"]: c.get("name") for c in categories}

    async def _completion_stats(self) -> dict[Any, dict[str, int]]:
        pipeline = [
            {
                "$group": {
                    "_id": "$challengeId",
                    "students": {"$addToSet": "$userId"},
                    "totalSubmissions": {"$sum": 1},
                }
            },
            {
                "$project": {
                    "uniqueStudents": {"$size": "$students"},
                    "totalSubmissions": 1,
                }
            },
        ]
        rows = await self._db[COMPLETED_CHALLENGES].aggregate(pipeline).to_list(None)
        return {
            row["_id"]: {
                "uniqueStudents": row["uniqueStudents"],
                "totalSubmissions": row["totalSubmissions"],
            }
            for row in rows
        }

    async def list_challenges_for_admin(self) -> list[dict[str, Any]]:
        """List challenges with category names and participation counts."""
        challenges = (
            await self._db[CHALLENGES].find().sort("createdAt", DESCENDING).to_list(None)
        )
        names = await self._category_names(
            {c["categoryId"] for c in challenges if c.get("categoryId")}
        )
        stats = await self._completion_stats()

        results = []
        for challenge in challenges:
            item = serialize_document(challenge)
            item["categoryName"] = names.get(challenge.get("categoryId"))
            counts = stats.get(challenge["_id"], {})
            item["uniqueStudents"] = counts.get("uniqueStudents", 0)
            item["totalSubmissions"] = counts.get("totalSubmissions", 0)
            results.append(item)
        return results

    async def get_challenge_for_admin(self, challenge_id: str) -> dict[str, Any]:
        """Get a challenge with the students who completed it.

        Raises:
            ChallengeNotFoundError: If the challenge does not exist.
        """
        challenge_oid = to_object_id(challenge_id)
        challenge = await self._db[CHALLENGES].find_one({"_id": challenge_oid})
        if not challenge:
            raise ChallengeNotFoundError("Challenge not found")

        completions = (
            await self._db[COMPLETED_CHALLENGES]
            .find({"challengeId": challenge_oid})
            .sort("completedAt", DESCENDING)
            .to_list(None)
        )
        user_ids = list({c["userId"] for c in completions})
        students = {}
        if user_ids:
            docs = await self._db[USERS].find(
                {"_id": {"$in": user_ids}},
                {"firstName": 1, "lastName": 1, "email": 1, "grade": 1},
            ).to_list(None)
            students = {doc["_id"]: doc for doc in docs}

        student_list = []
        for completion in completions:
            student = students.get(completion["userId"], {})
            student_list.append(
                {
                    "id": str(completion["userId"]),
                    "firstName": student.get("firstName"),
                    "lastName": student.get("lastName"),
                    "grade": student.get("grade"),
                    "completedAt": completion.get("completedAt"),
                    "completionNotes": completion.get("completionNotes"),
                }
            )

        item = serialize_document(challenge)
        names = await self._category_names({challenge.get("categoryId")} - {None})
        item["categoryName"] = names.get(challenge.get("categoryId"))
        item["uniqueStudents"] = len(user_ids)
        item["totalSubmissions"] = len(completions)
        item["studentList"] = student_list
        return item

    async def list_content_for_role(
        self, role: str, filters: ContentFilter | None = None
    ) -> list[dict[str, Any]]:
        """List content visible to a role, newest first."""
        filters = filters or ContentFilter()
        query: dict[str, Any] = {"targetAudience": {"$in": audiences_for_role(role)}}
        if filters.type:
            query["type"] = filters.type.value
        if filters.category:
            query["category"] = filters.category.value
        clause = search_clause(filters.search)
        if clause:
            query.update(clause)

        contents = (
            await self._db[CONTENTS].find(query).sort("createdAt", DESCENDING).to_list(None)
        )
        return serialize_documents(contents)

    async def get_content(self, content_id: str) -> dict[str, Any]:
        content = await self._db[CONTENTS].find_one({"_id": to_object_id(content_id)})
        if not content:
            raise ContentNotFoundError("Content not found")
        return serialize_document(content)

    async def list_challenges(
        self, filters: ChallengeFilter | None = None
    ) -> list[dict[str, Any]]:
        """List challenges for students, newest first."""
        filters = filters or ChallengeFilter()
        query: dict[str, Any] = {}
        if filters.type:
            query["type"] = filters.type.value
        if filters.category_id:
            query["categoryId"] = to_object_id(filters.category_id)
        if filters.age_range:
            query["ageRange"] = filters.age_range.value
        clause = search_clause(filters.search)
        if clause:
            query.update(clause)

        challenges = (
            await self._db[CHALLENGES].find(query).sort("createdAt", DESCENDING).to_list(None)
        )
        return serialize_documents(challenges)

    async def get_challenge(self, challenge_id: str) -> dict[str, Any]:
        challenge = await self._db[CHALLENGES].find_one({"_id": to_object_id(challenge_id)})
        if not challenge:
            raise ChallengeNotFoundError("Challenge not found")
        return serialize_document(challenge)
