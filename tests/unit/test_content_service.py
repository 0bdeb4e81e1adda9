# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the content library, challenges and categories."""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from src.domains.content.categories import (
    CategoryExistsError,
    CategoryNotFoundError,
    CategoryService,
)
from src.domains.content.service import (
    ChallengeNotFoundError,
    ContentNotFoundError,
    ContentService,
    InvalidCategoryError,
    InvalidContentError,
    audiences_for_role,
    search_clause,
)
from src.infrastructure.database.collections import (
    CATEGORIES,
    CHALLENGES,
    COMPLETED_CHALLENGES,
    CONTENTS,
    USERS,
)
from src.models.common import ChallengeType, ContentCategory, ContentType, TargetAudience
from src.models.content import (
    CategoryCreateRequest,
    CategoryUpdateRequest,
    ChallengeCreateRequest,
    ChallengeFilter,
    ContentCreateRequest,
    ContentFilter,
)


@pytest.mark.parametrize(
    "role,expected",
    [
        ("parent", {"all", "parent"}),
        ("school_admin", {"all", "school"}),
        ("mentor", {"all", "mentor"}),
        ("super_admin", {"all", "parent", "school", "mentor"}),
        ("student", {"all"}),
    ],
)
def test_audiences_for_role(role: str, expected: set[str]) -> None:
    assert set(audiences_for_role(role)) == expected


class TestSearchClause:
    def test_empty_search(self) -> None:
        assert search_clause(None) is None
        assert search_clause("") is None

    def test_escapes_regex_characters(self) -> None:
        clause = search_clause("c++ (intro)")

        assert clause == {
            "$or": [
                {"title": {"$regex": r"c\+\+\ \(intro\)", "$options": "i"}},
                {"description": {"$regex": r"c\+\+\ \(intro\)", "$options": "i"}},
            ]
        }


@pytest.fixture
def service(mock_db) -> ContentService:
    return ContentService(mock_db)


def content_request(**overrides) -> ContentCreateRequest:
    data = {
        "title": "Volcanoes",
        "description": "How volcanoes work",
        "type": ContentType.VIDEO,
        "category": ContentCategory.SCIENCE,
        "target_audience": TargetAudience.ALL,
        "video_url": "https://videos.example.com/volcano",
    }
    data.update(overrides)
    return ContentCreateRequest(**data)


class TestCreateContent:
    """Tests for content creation."""

    @pytest.mark.asyncio
    async def test_create_video(self, service, mock_db) -> None:
        mock_db[CONTENTS].insert_one.return_value = MagicMock(inserted_id=ObjectId())
        admin_id = ObjectId()

        result = await service.create_content(content_request(), str(admin_id))

        stored = mock_db[CONTENTS].insert_one.await_args.args[0]
        assert stored["targetAudience"] == "all"
        assert stored["videoUrl"] == "https://videos.example.com/volcano"
        assert stored["createdBy"] == admin_id
        assert result["type"] == "video"

    @pytest.mark.asyncio
    async def test_video_requires_url(self, service, mock_db) -> None:
        with pytest.raises(InvalidContentError, match="videoUrl"):
            await service.create_content(content_request(video_url=None), str(ObjectId()))

        mock_db[CONTENTS].insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_book_requires_author_and_url(self, service) -> None:
        with pytest.raises(InvalidContentError, match="author and bookUrl"):
            await service.create_content(
                content_request(type=ContentType.BOOK, video_url=None, author="Ada"),
                str(ObjectId()),
            )


class TestContentListing:
    @pytest.mark.asyncio
    async def test_parent_query(self, service, mock_db) -> None:
        await service.list_content_for_role(
            "parent",
            ContentFilter(type=ContentType.BOOK, category=ContentCategory.ARTS, search="paint"),
        )

        query = mock_db[CONTENTS].find.call_args.args[0]
        assert set(query["targetAudience"]["$in"]) == {"all", "parent"}
        assert query["type"] == "book"
        assert query["category"] == "arts"
        assert "$or" in query

    @pytest.mark.asyncio
    async def test_get_missing_content(self, service, mock_db) -> None:
        mock_db[CONTENTS].find_one.return_value = None

        with pytest.raises(ContentNotFoundError):
            await service.get_content(str(ObjectId()))


class TestChallenges:
    """Tests for challenge creation and listings."""

    def challenge_request(self, category_id: ObjectId) -> ChallengeCreateRequest:
        return ChallengeCreateRequest(
            title="Build a Bridge",
            description="Popsicle stick bridge",
            type=ChallengeType.PROJECT,
            category_id=str(category_id),
            difficulty_level="easy",
            theme="Engineering",
            estimated_time="2 hours",
            age_range="9-12",
        )

    @pytest.mark.asyncio
    async def test_create_under_existing_category(self, service, mock_db) -> None:
        category_id = ObjectId()
        mock_db[CATEGORIES].find_one.return_value = {"_id": category_id}
        mock_db[CHALLENGES].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await service.create_challenge(
            self.challenge_request(category_id), str(ObjectId())
        )

        stored = mock_db[CHALLENGES].insert_one.await_args.args[0]
        assert stored["categoryId"] == category_id
        assert stored["ageRange"] == "9-12"
        assert result["categoryId"] == str(category_id)

    @pytest.mark.asyncio
    async def test_create_with_unknown_category(self, service, mock_db) -> None:
        mock_db[CATEGORIES].find_one.return_value = None

        with pytest.raises(InvalidCategoryError):
            await service.create_challenge(self.challenge_request(ObjectId()), str(ObjectId()))

    @pytest.mark.asyncio
    async def test_student_filter(self, service, mock_db) -> None:
        category_id = ObjectId()

        await service.list_challenges(
            ChallengeFilter(
                type=ChallengeType.EXPERIMENT, category_id=str(category_id), age_range="6-8"
            )
        )

        query = mock_db[CHALLENGES].find.call_args.args[0]
        assert query == {"type": "experiment", "categoryId": category_id, "ageRange": "6-8"}

    @pytest.mark.asyncio
    async def test_admin_list_includes_participation(self, service, mock_db) -> None:
        category_id, challenge_id = ObjectId(), ObjectId()
        mock_db[CHALLENGES].cursor.to_list.return_value = [
            {"_id": challenge_id, "title": "Bridge", "categoryId": category_id},
            {"_id": ObjectId(), "title": "Kite"},
        ]
        mock_db[CATEGORIES].cursor.to_list.return_value = [
            {"_id": category_id, "name": "Engineering"}
        ]
        mock_db[COMPLETED_CHALLENGES].aggregate_cursor.to_list.return_value = [
            {"_id": challenge_id, "uniqueStudents": 2, "totalSubmissions": 3}
        ]

        results = await service.list_challenges_for_admin()

        assert results[0]["categoryName"] == "Engineering"
        assert results[0]["uniqueStudents"] == 2
        assert results[0]["totalSubmissions"] == 3
        assert results[1]["uniqueStudents"] == 0

    @pytest.mark.asyncio
    async def test_admin_detail_lists_students(self, service, mock_db, now) -> None:
        challenge_id, student_id = ObjectId(), ObjectId()
        mock_db[CHALLENGES].find_one.return_value = {"_id": challenge_id, "title": "Bridge"}
        mock_db[COMPLETED_CHALLENGES].cursor.to_list.return_value = [
            {"userId": student_id, "completedAt": now, "completionNotes": "Done"}
        ]
        mock_db[USERS].cursor.to_list.return_value = [
            {"_id": student_id, "firstName": "Kalisa", "grade": "P5"}
        ]

        result = await service.get_challenge_for_admin(str(challenge_id))

        assert result["uniqueStudents"] == 1
        assert result["studentList"][0]["firstName"] == "Kalisa"
        assert result["studentList"][0]["completionNotes"] == "Done"

    @pytest.mark.asyncio
    async def test_get_missing_challenge(self, service, mock_db) -> None:
        mock_db[CHALLENGES].find_one.return_value = None

        with pytest.raises(ChallengeNotFoundError):
            await service.get_challenge(str(ObjectId()))


@pytest.fixture
def categories(mock_db) -> CategoryService:
    return CategoryService(mock_db)


class TestCategories:
    """Tests for CategoryService."""

    @pytest.mark.asyncio
    async def test_create(self, categories, mock_db) -> None:
        mock_db[CATEGORIES].find_one.return_value = None
        mock_db[CATEGORIES].insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await categories.create_category(
            CategoryCreateRequest(name="Robotics", color_theme="#00AAFF"), str(ObjectId())
        )

        assert result["name"] == "Robotics"
        assert result["colorTheme"] == "#00AAFF"

    @pytest.mark.asyncio
    async def test_create_duplicate_name(self, categories, mock_db) -> None:
        mock_db[CATEGORIES].find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(CategoryExistsError, match='"Robotics" already exists'):
            await categories.create_category(
                CategoryCreateRequest(name="Robotics"), str(ObjectId())
            )

    @pytest.mark.asyncio
    async def test_create_race_on_unique_index(self, categories, mock_db) -> None:
        mock_db[CATEGORIES].find_one.return_value = None
        mock_db[CATEGORIES].insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(CategoryExistsError):
            await categories.create_category(
                CategoryCreateRequest(name="Robotics"), str(ObjectId())
            )

    @pytest.mark.asyncio
    async def test_rename_to_taken_name(self, categories, mock_db) -> None:
        category_id = ObjectId()
        mock_db[CATEGORIES].find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(CategoryExistsError):
            await categories.update_category(
                str(category_id), CategoryUpdateRequest(name="Art"), str(ObjectId())
            )

        clash_query = mock_db[CATEGORIES].find_one.await_args.args[0]
        assert clash_query["_id"] == {"$ne": category_id}

    @pytest.mark.asyncio
    async def test_update_missing(self, categories, mock_db) -> None:
        mock_db[CATEGORIES].find_one_and_update.return_value = None

        with pytest.raises(CategoryNotFoundError):
            await categories.update_category(
                str(ObjectId()), CategoryUpdateRequest(icon="star"), str(ObjectId())
            )

    @pytest.mark.asyncio
    async def test_delete_missing(self, categories, mock_db) -> None:
        mock_db[CATEGORIES].delete_one.return_value = MagicMock(deleted_count=0)

        with pytest.raises(CategoryNotFoundError):
            await categories.delete_category(str(ObjectId()), str(ObjectId()))
