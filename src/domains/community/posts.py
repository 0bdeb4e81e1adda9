# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Posts inside communities.

Only members can post. Each new post earns its author community stars
through RewardsService. Likes are a set of user ids on the post.
"""

import logging
import math
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from src.domains.community.service import (
    CommunityMembershipError,
    CommunityNotFoundError,
    CommunityServiceError,
)
from src.domains.rewards import RewardsService
from src.infrastructure.database.collections import COMMUNITIES, POSTS, USERS
from src.infrastructure.database.documents import serialize_document, to_object_id
from src.models.community import PostCreateRequest
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class PostNotFoundError(CommunityServiceError):
    """Raised when a post is not found or inactive."""

    pass


class NotCommunityMemberError(CommunityServiceError):
    """Raised when a non-member posts to a community."""

    pass


def _present(post: dict[str, Any], author: dict[str, Any] | None = None) -> dict[str, Any]:
    likes = post.get("likes", [])
    item = serialize_document(post)
    item["likesCount"] = len(likes)
    if author is not None:
        item["author"] = serialize_document(author)
    return item


class PostService:
    """Service for community posts and likes."""

    def __init__(self, db: AsyncIOMotorDatabase, rewards: RewardsService) -> None:
        self._db = db
        self._rewards = rewards

    async def create_post(
        self, user_id: str, community_id: str, data: PostCreateRequest
    ) -> dict[str, Any]:
        """Create a post and award community stars to its author.

        Raises:
            CommunityNotFoundError: If the community is missing or inactive.
            NotCommunityMemberError: If the user has not joined the community.
        """
        community_oid = to_object_id(community_id)
        user_oid = to_object_id(user_id)

        community = await self._db[COMMUNITIES].find_one(
            {"_id": community_oid, "isActive": True}, {"members": 1}
        )
        if not community:
            raise CommunityNotFoundError("Community not found")
        if user_oid not in community.get("members", []):
            raise NotCommunityMemberError("You must be a member of the community to post")

        now = utc_now()
        post = {
            **data.to_document(),
            "author": user_oid,
            "community": community_oid,
            "likes": [],
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
        }
        result = await self._db[POSTS].insert_one(post)
        post["_id"] = result.inserted_id

        await self._rewards.award_community_post_stars(user_id, str(result.inserted_id))

        logger.info("Post %s created in community %s by %s", result.inserted_id, community_id, user_id)
        return _present(post)

    async def list_posts(
        self, community_id: str, page: int = 1, limit: int = 10
    ) -> dict[str, Any]:
        """List a community's active posts, newest first, one page at a time.

        Returns:
            ``{"data": [...], "meta": {total, page, limit, totalPages}}``

        Raises:
            CommunityNotFoundError: If the community does not exist.
        """
        community_oid = to_object_id(community_id)
        if not await self._db[COMMUNITIES].find_one({"_id": community_oid}, {"_id": 1}):
            raise CommunityNotFoundError("Community not found")

        query = {"community": community_oid, "isActive": True}
        total = await self._db[POSTS].count_documents(query)
        posts = (
            await self._db[POSTS]
            .find(query)
            .sort("createdAt", DESCENDING)
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list(None)
        )

        author_ids = list({p["author"] for p in posts})
        authors = {}
        if author_ids:
            docs = await self._db[USERS].find(
                {"_id": {"$in": author_ids}},
                {"firstName": 1, "lastName": 1, "image": 1},
            ).to_list(None)
            authors = {doc["_id"]: doc for doc in docs}

        return {
            "data": [_present(p, authors.get(p["author"])) for p in posts],
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(total / limit) if limit else 0,
            },
        }

    async def _get_post(self, post_id: str) -> dict[str, Any]:
        post = await self._db[POSTS].find_one(
            {"_id": to_object_id(post_id), "isActive": True}, {"likes": 1}
        )
        if not post:
            raise PostNotFoundError("Post not found")
        return post

    async def like_post(self, user_id: str, post_id: str) -> dict[str, Any]:
        """Like a post once.

        Raises:
            PostNotFoundError: If the post does not exist.
            CommunityMembershipError: If the user already liked it.
        """
        post = await self._get_post(post_id)
        user_oid = to_object_id(user_id)
        if user_oid in post.get("likes", []):
            raise CommunityMembershipError("You have already liked this post")

        await self._db[POSTS].update_one(
            {"_id": post["_id"]}, {"$addToSet": {"likes": user_oid}}
        )
        return {
            "message": "Post liked successfully",
            "likesCount": len(post.get("likes", [])) + 1,
        }

    async def unlike_post(self, user_id: str, post_id: str) -> dict[str, Any]:
        """Remove a like.

        Raises:
            PostNotFoundError: If the post does not exist.
            CommunityMembershipError: If the user has not liked it.
        """
        post = await self._get_post(post_id)
        user_oid = to_object_id(user_id)
        if user_oid not in post.get("likes", []):
            raise CommunityMembershipError("You have not liked this post")

        await self._db[POSTS].update_one({"_id": post["_id"]}, {"$pull": {"likes": user_oid}})
        return {
            "message": "Post unliked successfully",
            "likesCount": len(post.get("likes", [])) - 1,
        }
