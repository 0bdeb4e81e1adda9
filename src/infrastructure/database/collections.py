# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Collection names and index definitions.

Indexes back the invariants that services check in code: unique emails,
unique category names, one completion per (user, challenge) pair and
staged student registrations that expire on their own.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel

logger = logging.getLogger(__name__)

USERS = "users"
SCHOOLS = "schools"
TRANSACTIONS = "transactions"
CONTENTS = "contents"
CHALLENGES = "challenges"
CATEGORIES = "categories"
COMMUNITIES = "communities"
POSTS = "posts"
MENTOR_CREDENTIALS = "mentor_credentials"
TEMP_STUDENTS = "temp_students"
COMPLETED_CHALLENGES = "completed_challenges"
STARS = "stars"
BADGES = "badges"

TEMP_STUDENT_TTL_SECONDS = 3600

INDEXES: dict[str, list[IndexModel]] = {
    USERS: [
        IndexModel([("email", ASCENDING)], unique=True, sparse=True),
        IndexModel([("role", ASCENDING), ("firstName", ASCENDING)]),
        IndexModel([("school", ASCENDING)]),
        IndexModel([("parent", ASCENDING)]),
    ],
    SCHOOLS: [
        IndexModel([("email", ASCENDING)]),
        IndexModel([("schoolName", ASCENDING), ("status", ASCENDING)]),
    ],
    TRANSACTIONS: [
        IndexModel([("school", ASCENDING), ("transactionType", ASCENDING)]),
        IndexModel([("parent", ASCENDING), ("transactionType", ASCENDING)]),
        IndexModel([("student", ASCENDING), ("transactionType", ASCENDING)]),
        IndexModel([("transactionDate", DESCENDING)]),
    ],
    CATEGORIES: [
        IndexModel([("name", ASCENDING)], unique=True),
    ],
    CONTENTS: [
        IndexModel([("targetAudience", ASCENDING), ("createdAt", DESCENDING)]),
    ],
    CHALLENGES: [
        IndexModel([("categoryId", ASCENDING)]),
    ],
    COMMUNITIES: [
        IndexModel([("isActive", ASCENDING), ("createdAt", DESCENDING)]),
    ],
    POSTS: [
        IndexModel([("community", ASCENDING), ("createdAt", DESCENDING)]),
    ],
    MENTOR_CREDENTIALS: [
        IndexModel([("mentor", ASCENDING)]),
        IndexModel([("status", ASCENDING), ("createdAt", DESCENDING)]),
    ],
    COMPLETED_CHALLENGES: [
        IndexModel([("userId", ASCENDING), ("challengeId", ASCENDING)], unique=True),
    ],
    STARS: [
        IndexModel([("user", ASCENDING), ("contentType", ASCENDING)]),
    ],
    BADGES: [
        IndexModel([("user", ASCENDING), ("badgeType", ASCENDING)]),
    ],
}


def temp_student_indexes(ttl_seconds: int) -> list[IndexModel]:
    """Indexes for staged registrations, expiring ttl_seconds after createdAt."""
    return [
        IndexModel([("childTempId", ASCENDING)], unique=True),
        IndexModel([("createdAt", ASCENDING)], expireAfterSeconds=ttl_seconds),
    ]


async def ensure_indexes(
    db: AsyncIOMotorDatabase,
    temp_student_ttl_seconds: int = TEMP_STUDENT_TTL_SECONDS,
) -> None:
    """Create every index the application relies on.

    create_indexes is idempotent, so this runs on each startup.

    Args:
        db: Application database.
        temp_student_ttl_seconds: Lifetime of staged student registrations.
    """
    indexes = {**INDEXES, TEMP_STUDENTS: temp_student_indexes(temp_student_ttl_seconds)}
    for collection_name, models in indexes.items():
        names = await db[collection_name].create_indexes(models)
        logger.debug("Indexes ensured on %s: %s", collection_name, ", ".join(names))

    logger.info("MongoDB indexes ensured for %d collections", len(indexes))
