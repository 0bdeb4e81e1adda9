# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Community service.

This module provides the CommunityService that handles:
- Super admin creation and deactivation of communities
- Active community listings with member counts
- Students joining and leaving communities

Membership is the ``members`` array of ObjectIds on the community
document. Joins and leaves use ``$addToSet`` and ``$pull`` so concurrent
requests cannot duplicate or lose members.
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument

from src.domains.content.service import search_clause
from src.infrastructure.database.collections import CATEGORIES, COMMUNITIES, USERS
from src.infrastructure.database.documents import serialize_document, to_object_id
from src.models.common import UserRole
from src.models.community import CommunityCreateRequest, CommunityFilter
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CommunityServiceError(Exception):
    """Base exception for community service errors."""

    pass


class CommunityNotFoundError(CommunityServiceError):
    """Raised when a community is not found or inactive."""

    pass


class CommunityMembershipError(CommunityServiceError):
    """Raised on joining twice or leaving without membership."""

    pass


class CommunityPermissionError(CommunityServiceError):
    """Raised when a non-student tries to join."""

    pass


class InvalidCommunityCategoryError(CommunityServiceError):
    """Raised when the challenge category does not exist."""

    pass


def _with_membership(
    community: dict[str, Any], user_id: str | None = None
) -> dict[str, Any]:
    members = community.get("members", [])
    item = serialize_document(community, exclude=("members",))
    item["memberCount"] = len(members)
    if user_id is not None:
        item["hasJoined"] = any(str(member) == str(user_id) for member in members)
    return item


class CommunityService:
    """Service for communities and their membership.

    Attributes:
        _db: Application database.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    async def create_community(
        self, data: CommunityCreateRequest, user_id: str
    ) -> dict[str, Any]:
        """Create an active community with no members.

        Raises:
            InvalidCommunityCategoryError: If category_id names no category.
        """
        document = data.to_document()
        document.pop("categoryId", None)

        if data.category_id:
            category_oid = to_object_id(data.category_id)
            category = await self._db[CATEGORIES].find_one({"_id": category_oid}, {"name": 1})
            if not category:
                raise InvalidCommunityCategoryError(
                    f"Challenge category with ID {data.category_id} not found"
                )
            document["challengeCategory"] = category_oid
            document.setdefault("category", category.get("name"))

        now = utc_now()
        document.update(
            members=[],
            isActive=True,
            createdBy=to_object_id(user_id),
            createdAt=now,
            updatedAt=now,
        )
        result = await self._db[COMMUNITIES].insert_one(document)
        document["_id"] = result.inserted_id

        logger.info("Community %s created by %s", result.inserted_id, user_id)
        return _with_membership(document)

    async def list_communities(
        self,
        filters: CommunityFilter | None = None,
        user_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """List active communities, newest first."""
        filters = filters or CommunityFilter()
        query: dict[str, Any] = {"isActive": True}
        if filters.category:
            query["category"] = filters.category
        if filters.category_id:
            query["challengeCategory"] = to_object_id(filters.category_id)
        if filters.age_group:
            query["ageGroup"] = filters.age_group.value
        clause = search_clause(filters.search, fields=("name", "description"))
        if clause:
            query.update(clause)

        communities = (
            await self._db[COMMUNITIES].find(query).sort("createdAt", DESCENDING).to_list(None)
        )
        return [_with_membership(c, user_id) for c in communities]

    async def _get_active(self, community_id: str) -> dict[str, Any]:
        community = await self._db[COMMUNITIES].find_one(
            {"_id": to_object_id(community_id), "isActive": True}
        )
        if not community:
            raise CommunityNotFoundError("Community not found")
        return community

    async def get_community(
        self, community_id: str, user_id: str | None = None
    ) -> dict[str, Any]:
        """Get an active community with its members' names.

        Raises:
            CommunityNotFoundError: If missing or inactive.
        """
        community = await self._get_active(community_id)
        item = _with_membership(community, user_id)

        member_ids = community.get("members", [])
        members = []
        if member_ids:
            docs = await self._db[USERS].find(
                {"_id": {"$in": member_ids}},
                {"firstName": 1, "lastName": 1, "image": 1},
            ).to_list(None)
            members = [serialize_document(doc) for doc in docs]
        item["members"] = members
        return item

    async def join_community(self, community_id: str, user_id: str) -> dict[str, Any]:
        """Add a student to a community.

        Raises:
            CommunityNotFoundError: If missing or inactive.
            CommunityPermissionError: If the user is not a student.
            CommunityMembershipError: If already a member.
        """
        community = await self._get_active(community_id)
        user_oid = to_object_id(user_id)

        user = await self._db[USERS].find_one({"_id": user_oid}, {"role": 1})
        if not user:
            raise CommunityNotFoundError("User not found")
        if user.get("role") != UserRole.STUDENT.value:
            raise CommunityPermissionError("Only students can join communities")
        if user_oid in community.get("members", []):
            raise CommunityMembershipError("User is already a member of this community")

        updated = await self._db[COMMUNITIES].find_one_and_update(
            {"_id": community["_id"]},
            {"$addToSet": {"members": user_oid}},
            return_document=ReturnDocument.AFTER,
        )
        logger.info("User %s joined community %s", user_id, community_id)
        return _with_membership(updated, user_id)

    async def leave_community(self, community_id: str, user_id: str) -> dict[str, Any]:
        """Remove a member from a community.

        Raises:
            CommunityNotFoundError: If missing or inactive.
            CommunityMembershipError: If the user is not a member.
        """
        community = await self._get_active(community_id)
        user_oid = to_object_id(user_id)
        if user_oid not in community.get("members", []):
            raise CommunityMembershipError("User is not a member of this community")

        updated = await self._db[COMMUNITIES].find_one_and_update(
            {"_id": community["_id"]},
            {"$pull": {"members": user_oid}},
            return_document=ReturnDocument.AFTER,
        )
        logger.info("User %s left community %s", user_id, community_id)
        return _with_membership(updated, user_id)

    async def list_user_communities(self, user_id: str) -> list[dict[str, Any]]:
        user_oid = to_object_id(user_id)
        communities = (
            await self._db[COMMUNITIES]
            .find({"members": user_oid, "isActive": True})
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        return [_with_membership(c, user_id) for c in communities]

    async def deactivate_community(self, community_id: str, user_id: str) -> None:
        """Hide a community from listings.

        Raises:
            CommunityNotFoundError: If the community does not exist.
        """
        result = await self._db[COMMUNITIES].update_one(
            {"_id": to_object_id(community_id)},
            {"$set": {"isActive": False, "updatedAt": utc_now()}},
        )
        if result.matched_count == 0:
            raise CommunityNotFoundError("Community not found")
        logger.info("Community %s deactivated by %s", community_id, user_id)
