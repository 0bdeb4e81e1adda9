# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rewards service - challenge completions, stars and badges.

This service provides:
- Challenge completion, at most once per student and challenge
- A bronze badge per completed challenge, typed by the challenge category
- Stars: 15 per completed project, 5 per community post, 1 per watched
  video and 20 per read book
- Tier badges once star totals cross 100, 200 and 300
- The special Visionary badge for holding all four subject badges
- A per-student rewards summary

Tier and special badges are upserted, so re-evaluating never duplicates
them.
"""

import logging
from dataclasses import dataclass
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from src.infrastructure.database.collections import (
    BADGES,
    CATEGORIES,
    CHALLENGES,
    COMPLETED_CHALLENGES,
    CONTENTS,
    STARS,
)
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.models.common import BadgeTier, StarContentType
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

PROJECT_STARS = 15
COMMUNITY_POST_STARS = 5
CONTENT_STARS: dict[str, int] = {
    StarContentType.VIDEO.value: 1,
    StarContentType.BOOK.value: 20,
}

MAIN_BADGE_TYPES = frozenset({"science", "math", "reading", "coding"})


@dataclass(frozen=True)
class BadgeDefinition:
    """Static description of a badge."""

    name: str
    description: str
    icon: str
    image_url: str


CATEGORY_BADGES: dict[str, BadgeDefinition] = {
    "science": BadgeDefinition(
        "Science Explorer",
        "Completed a science challenge and demonstrated scientific curiosity",
        "🔬",
        "/assets/badges/science-explorer.png",
    ),
    "math": BadgeDefinition(
        "Math Wizard",
        "Mastered mathematical concepts and solved challenging problems",
        "🧮",
        "/assets/badges/math-wizard.png",
    ),
    "reading": BadgeDefinition(
        "Reading Champion",
        "Demonstrated excellent reading comprehension and literary analysis",
        "📚",
        "/assets/badges/reading-champion.png",
    ),
    "coding": BadgeDefinition(
        "Code Master",
        "Wrote functioning code and demonstrated programming skills",
        "💻",
        "/assets/badges/code-master.png",
    ),
    "general": BadgeDefinition(
        "Achievement Unlocked",
        "Successfully completed a learning challenge",
        "🏆",
        "/assets/badges/achievement.png",
    ),
}

# (minimum stars, tier, name, description, icon)
STAR_TIERS: tuple[tuple[int, BadgeTier, str, str, str], ...] = (
    (100, BadgeTier.SILVER, "Rising Star", "Earn 100 stars", "🌟"),
    (200, BadgeTier.GOLD, "Power Player", "Earn 200 stars", "⚡"),
    (300, BadgeTier.LEGENDARY, "Ultimate Legend", "Earn 300+ stars", "👑"),
)

VISIONARY = (
    BadgeTier.SPECIAL,
    "Visionary",
    "Earn badges in all main challenge categories",
    "🔮",
)


def badge_type_for(category_name: str | None) -> str:
    """Map a challenge category name to a badge type."""
    name = (category_name or "").lower()
    if "science" in name:
        return "science"
    if "math" in name:
        return "math"
    if "read" in name:
        return "reading"
    if "cod" in name or "program" in name:
        return "coding"
    return "general"


class RewardsServiceError(Exception):
    """Base exception for rewards errors."""

    pass


class ChallengeNotFoundError(RewardsServiceError):
    """Raised when completing a challenge that does not exist."""

    pass


class ChallengeAlreadyCompletedError(RewardsServiceError):
    """Raised when a student completes the same challenge twice."""

    pass


class ContentNotFoundError(RewardsServiceError):
    """Raised when completing educational content that does not exist."""

    pass


class RewardsService:
    """Service for challenge completions, stars and badges.

    Attributes:
        _db: Application database.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    async def complete_challenge(
        self,
        user_id: str,
        challenge_id: str,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Record a challenge completion and award its rewards.

        Args:
            user_id: Completing student.
            challenge_id: Challenge being completed.
            notes: Optional completion notes.

        Returns:
            The completion, its badge, stars awarded and any tier or special
            badges newly earned.

        Raises:
            ChallengeNotFoundError: If the challenge does not exist.
            ChallengeAlreadyCompletedError: If the student already completed it.
        """
        user_oid = to_object_id(user_id)
        challenge_oid = to_object_id(challenge_id)

        challenge = await self._db[CHALLENGES].find_one({"_id": challenge_oid})
        if not challenge:
            raise ChallengeNotFoundError("Challenge not found")

        pair = {"userId": user_oid, "challengeId": challenge_oid}
        if await self._db[COMPLETED_CHALLENGES].find_one(pair, {"_id": 1}):
            raise ChallengeAlreadyCompletedError("Challenge already completed by this user")

        completion = {**pair, "completedAt": utc_now()}
        if notes:
            completion["completionNotes"] = notes
        try:
            result = await self._db[COMPLETED_CHALLENGES].insert_one(completion)
        except DuplicateKeyError as e:
            raise ChallengeAlreadyCompletedError(
                "Challenge already completed by this user"
            ) from e
        completion["_id"] = result.inserted_id

        category_name = None
        if challenge.get("categoryId"):
            category = await self._db[CATEGORIES].find_one(
                {"_id": challenge["categoryId"]}, {"name": 1}
            )
            category_name = category.get("name") if category else None
        badge_type = badge_type_for(category_name or challenge.get("type"))
        definition = CATEGORY_BADGES[badge_type]

        badge = {
            "user": user_oid,
            "challenge": challenge_oid,
            "name": definition.name,
            "description": definition.description,
            "badgeType": badge_type,
            "tier": BadgeTier.BRONZE.value,
            "icon": definition.icon,
            "imageUrl": definition.image_url,
            "isCompleted": True,
            "createdAt": utc_now(),
        }
        badge_result = await self._db[BADGES].insert_one(badge)
        badge["_id"] = badge_result.inserted_id

        await self._award_stars(
            user_oid,
            StarContentType.PROJECT,
            challenge_oid,
            f"Project Completion: {challenge.get('title') or 'Challenge'}",
            PROJECT_STARS,
        )

        earned = await self._check_special_badges(user_oid)
        earned += await self._check_tier_badges(user_oid)

        logger.info(
            "User %s completed challenge %s, awarded %s badge",
            user_id,
            challenge_id,
            badge_type,
        )
        return {
            "completedChallenge": serialize_document(completion),
            "badge": serialize_document(badge),
            "starsAwarded": PROJECT_STARS,
            "newBadges": earned,
        }

    async def _award_stars(
        self,
        user_oid,
        content_type: StarContentType,
        content_id,
        title: str,
        value: int,
    ) -> dict[str, Any]:
        """Insert a star record unless one exists for the same content."""
        key = {"user": user_oid, "contentType": content_type.value, "contentId": content_id}
        existing = await self._db[STARS].find_one(key)
        if existing:
            return existing

        star = {
            **key,
            "title": title,
            "starValue": value,
            "completed": True,
            "completedAt": utc_now(),
        }
        result = await self._db[STARS].insert_one(star)
        star["_id"] = result.inserted_id
        return star

    async def _total_stars(self, user_oid) -> int:
        stars = await self._db[STARS].find(
            {"user": user_oid, "completed": True}, {"starValue": 1}
        ).to_list(None)
        return sum(star.get("starValue") or 1 for star in stars)

    async def _award_badge(
        self, user_oid, tier: BadgeTier, name: str, description: str, icon: str
    ) -> bool:
        """Upsert a tier or special badge. Returns True if it was new."""
        slug = name.lower().replace(" ", "-")
        result = await self._db[BADGES].update_one(
            {"user": user_oid, "tier": tier.value, "name": name},
            {
                "$setOnInsert": {
                    "description": description,
                    "icon": icon,
                    "badgeType": tier.value,
                    "imageUrl": f"/assets/badges/{tier.value}-{slug}.png",
                    "isCompleted": True,
                    "createdAt": utc_now(),
                }
            },
            upsert=True,
        )
        if result.upserted_id is not None:
            logger.info("User %s earned the %s badge", user_oid, name)
            return True
        return False

    async def _check_tier_badges(self, user_oid) -> list[str]:
        total = await self._total_stars(user_oid)
        earned = []
        for threshold, tier, name, description, icon in STAR_TIERS:
            if total >= threshold and await self._award_badge(
                user_oid, tier, name, description, icon
            ):
                earned.append(name)
        return earned

    async def _check_special_badges(self, user_oid) -> list[str]:
        badge_types = await self._db[BADGES].distinct(
            "badgeType", {"user": user_oid, "isCompleted": True}
        )
        if MAIN_BADGE_TYPES.issubset(badge_types):
            tier, name, description, icon = VISIONARY
            if await self._award_badge(user_oid, tier, name, description, icon):
                return [name]
        return []

    async def list_completed_challenges(self, user_id: str) -> list[dict[str, Any]]:
        """List a student's completions with challenge titles, newest first."""
        completions = (
            await self._db[COMPLETED_CHALLENGES]
            .find({"userId": to_object_id(user_id)})
            .sort("completedAt", DESCENDING)
            .to_list(None)
        )
        challenge_ids = [c["challengeId"] for c in completions]
        titles = {}
        if challenge_ids:
            challenges = await self._db[CHALLENGES].find(
                {"_id": {"$in": challenge_ids}}, {"title": 1, "type": 1, "imageUrl": 1}
            ).to_list(None)
            titles = {c["_id"]: serialize_document(c) for c in challenges}

        results = []
        for completion in completions:
            item = serialize_document(completion)
            item["challenge"] = titles.get(completion["challengeId"])
            results.append(item)
        return results

    async def is_challenge_completed(self, user_id: str, challenge_id: str) -> bool:
        found = await self._db[COMPLETED_CHALLENGES].find_one(
            {"userId": to_object_id(user_id), "challengeId": to_object_id(challenge_id)},
            {"_id": 1},
        )
        return found is not None

    async def award_community_post_stars(self, user_id: str, post_id: str) -> dict[str, Any]:
        """Award community post stars once per post and re-check tiers."""
        user_oid = to_object_id(user_id)
        star = await self._award_stars(
            user_oid,
            StarContentType.COMMUNITY,
            to_object_id(post_id),
            "Community Post",
            COMMUNITY_POST_STARS,
        )
        await self._check_tier_badges(user_oid)
        return serialize_document(star)

    async def complete_content(self, user_id: str, content_id: str) -> dict[str, Any]:
        """Mark a video or book as finished and award its stars.

        Finishing the same content again refreshes the existing star rather
        than adding a new one.

        Args:
            user_id: Student who finished the content.
            content_id: Video or book.

        Returns:
            ``{"star": ..., "starsAwarded": ..., "newBadges": [...]}``

        Raises:
            ContentNotFoundError: If the content does not exist.
        """
        user_oid = to_object_id(user_id)
        content = await self._db[CONTENTS].find_one(
            {"_id": to_object_id(content_id)}, {"type": 1, "title": 1}
        )
        if not content:
            raise ContentNotFoundError("Educational content not found")

        content_type = StarContentType(content.get("type", StarContentType.VIDEO.value))
        value = CONTENT_STARS[content_type.value]
        star = await self._db[STARS].find_one_and_update(
            {"user": user_oid, "contentType": content_type.value, "contentId": content["_id"]},
            {
                "$set": {"completed": True, "completedAt": utc_now(), "starValue": value},
                "$setOnInsert": {"title": content.get("title") or "Educational Content"},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

        earned = await self._check_tier_badges(user_oid)
        logger.info(
            "User %s completed %s %s, awarded %s stars",
            user_id,
            content_type.value,
            content_id,
            value,
        )
        return {
            "star": serialize_document(star, exclude=("user",)),
            "starsAwarded": value,
            "newBadges": earned,
        }

    async def get_rewards_summary(self, user_id: str) -> dict[str, Any]:
        """Summarise a student's stars and badges."""
        user_oid = to_object_id(user_id)
        stars = await self._db[STARS].find({"user": user_oid}).to_list(None)
        badges = await self._db[BADGES].find({"user": user_oid}).to_list(None)

        stars_by_type: dict[str, int] = {t.value: 0 for t in StarContentType}
        for star in stars:
            content_type = star.get("contentType", "other")
            stars_by_type[content_type] = stars_by_type.get(content_type, 0) + (
                star.get("starValue") or 1
            )

        badges_by_tier: dict[str, int] = {t.value: 0 for t in BadgeTier}
        for badge in badges:
            tier = badge.get("tier", BadgeTier.BRONZE.value)
            badges_by_tier[tier] = badges_by_tier.get(tier, 0) + 1

        return {
            "totalStars": sum(stars_by_type.values()),
            "totalBadges": len(badges),
            "starsByType": stars_by_type,
            "badgesByTier": badges_by_tier,
            "badges": serialize_documents(badges, exclude=("user",)),
            "stars": serialize_documents(stars, exclude=("user",)),
        }
