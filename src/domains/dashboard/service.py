# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Dashboard service - per-role summary counts.

Each role gets its own summary:
- super_admin: schools by status, users by role, catalogue sizes,
  pending credentials and payment totals per currency
- school_admin: seats used and remaining, plus the latest students
- parent: children with their star totals and the parent's payments
- student: stars, badges, completed challenges and community activity
- mentor: credentials by status and authored content

Summaries are read-only and computed on request from the collections.
"""

import logging
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from src.infrastructure.database.collections import (
    BADGES,
    CHALLENGES,
    COMMUNITIES,
    COMPLETED_CHALLENGES,
    CONTENTS,
    MENTOR_CREDENTIALS,
    POSTS,
    SCHOOLS,
    STARS,
    TRANSACTIONS,
    USERS,
)
from src.infrastructure.database.documents import serialize_documents, to_object_id
from src.models.common import CredentialStatus, SchoolStatus, UserRole

logger = logging.getLogger(__name__)

RECENT_STUDENTS = 5
DEFAULT_CURRENCY = "RWF"

_STUDENT_FIELDS = {"firstName": 1, "lastName": 1, "email": 1, "image": 1, "createdAt": 1}


class DashboardServiceError(Exception):
    """Base exception for dashboard errors."""

    pass


class UnsupportedRoleError(DashboardServiceError):
    """Raised for a principal whose role has no dashboard."""

    pass


class DashboardSchoolNotFoundError(DashboardServiceError):
    """Raised when a school admin's school no longer exists."""

    pass


class DashboardService:
    """Service computing dashboard summaries.

    Attributes:
        _db: Application database.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    async def get_dashboard(self, principal_id: str, role: str) -> dict[str, Any]:
        """Build the summary for the principal's role.

        Args:
            principal_id: User id, or school id for school admins.
            role: Role value from the access token.

        Returns:
            ``{"role": ..., "summary": {...}}``

        Raises:
            UnsupportedRoleError: If the role has no dashboard.
            DashboardSchoolNotFoundError: If a school admin's school is gone.
        """
        builders = {
            UserRole.SUPER_ADMIN.value: self._super_admin_summary,
            UserRole.SCHOOL_ADMIN.value: self._school_admin_summary,
            UserRole.PARENT.value: self._parent_summary,
            UserRole.STUDENT.value: self._student_summary,
            UserRole.MENTOR.value: self._mentor_summary,
        }
        builder = builders.get(role)
        if builder is None:
            raise UnsupportedRoleError("Invalid user role")

        logger.info("Fetching dashboard data for %s with role %s", principal_id, role)
        summary = await builder(to_object_id(principal_id))
        return {"role": role, "summary": summary}

    async def _grouped_counts(
        self, collection: str, match: dict[str, Any], field: str
    ) -> dict[str, int]:
        pipeline = [
            {"$match": match},
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
        ]
        rows = await self._db[collection].aggregate(pipeline).to_list(None)
        return {row["_id"]: row["count"] for row in rows if row["_id"] is not None}

    async def _payment_totals(self, match: dict[str, Any]) -> dict[str, Any]:
        # Payments recorded before currency was stored count as RWF
        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": {"$ifNull": ["$currency", DEFAULT_CURRENCY]},
                    "amount": {"$sum": "$amount"},
                    "count": {"$sum": 1},
                }
            },
        ]
        rows = await self._db[TRANSACTIONS].aggregate(pipeline).to_list(None)
        return {
            "totalTransactions": sum(row["count"] for row in rows),
            "amountByCurrency": {row["_id"]: row["amount"] for row in rows},
        }

    async def _super_admin_summary(self, _admin_oid: ObjectId) -> dict[str, Any]:
        schools = self._db[SCHOOLS]
        active = {"deletedAt": None}
        schools_by_status = {
            status.value: await schools.count_documents({**active, "status": status.value})
            for status in SchoolStatus
        }

        by_role = await self._grouped_counts(USERS, active, "role")
        users_by_role = {role.value: by_role.get(role.value, 0) for role in UserRole}

        return {
            "totalSchools": sum(schools_by_status.values()),
            "schoolsByStatus": schools_by_status,
            "totalUsers": sum(users_by_role.values()),
            "usersByRole": users_by_role,
            "totalContents": await self._db[CONTENTS].count_documents({}),
            "totalChallenges": await self._db[CHALLENGES].count_documents({}),
            "totalCommunities": await self._db[COMMUNITIES].count_documents(
                {"isActive": True}
            ),
            "pendingCredentials": await self._db[MENTOR_CREDENTIALS].count_documents(
                {"status": CredentialStatus.PENDING.value}
            ),
            "payments": await self._payment_totals({}),
        }

    async def _school_admin_summary(self, school_oid: ObjectId) -> dict[str, Any]:
        school = await self._db[SCHOOLS].find_one(
            {"_id": school_oid, "deletedAt": None},
            {"schoolName": 1, "status": 1, "studentsLimit": 1},
        )
        if not school:
            raise DashboardSchoolNotFoundError("School not found")

        query = {"school": school_oid, "role": UserRole.STUDENT.value, "deletedAt": None}
        total = await self._db[USERS].count_documents(query)
        recent = (
            await self._db[USERS]
            .find(query, _STUDENT_FIELDS)
            .sort("createdAt", DESCENDING)
            .limit(RECENT_STUDENTS)
            .to_list(None)
        )

        limit = school.get("studentsLimit")
        return {
            "schoolName": school.get("schoolName"),
            "status": school.get("status"),
            "totalStudents": total,
            "studentsLimit": limit,
            "remainingSeats": None if limit is None else max(limit - total, 0),
            "recentStudents": serialize_documents(recent),
        }

    async def _stars_by_user(self, user_oids: list[ObjectId]) -> dict[ObjectId, int]:
        if not user_oids:
            return {}
        pipeline = [
            {"$match": {"user": {"$in": user_oids}, "completed": True}},
            {
                "$group": {
                    "_id": "$user",
                    "stars": {"$sum": {"$ifNull": ["$starValue", 1]}},
                }
            },
        ]
        rows = await self._db[STARS].aggregate(pipeline).to_list(None)
        return {row["_id"]: row["stars"] for row in rows}

    async def _parent_summary(self, parent_oid: ObjectId) -> dict[str, Any]:
        children = (
            await self._db[USERS]
            .find(
                {"parent": parent_oid, "role": UserRole.STUDENT.value, "deletedAt": None},
                _STUDENT_FIELDS,
            )
            .sort("createdAt", DESCENDING)
            .to_list(None)
        )
        stars = await self._stars_by_user([child["_id"] for child in children])

        items = serialize_documents(children)
        for item, child in zip(items, children):
            item["totalStars"] = stars.get(child["_id"], 0)

        return {
            "totalChildren": len(children),
            "children": items,
            "payments": await self._payment_totals({"parent": parent_oid}),
        }

    async def _student_summary(self, student_oid: ObjectId) -> dict[str, Any]:
        stars = await self._stars_by_user([student_oid])
        return {
            "totalStars": stars.get(student_oid, 0),
            "totalBadges": await self._db[BADGES].count_documents({"user": student_oid}),
            "completedChallenges": await self._db[COMPLETED_CHALLENGES].count_documents(
                {"userId": student_oid}
            ),
            "communitiesJoined": await self._db[COMMUNITIES].count_documents(
                {"members": student_oid, "isActive": True}
            ),
            "totalPosts": await self._db[POSTS].count_documents({"author": student_oid}),
        }

    async def _mentor_summary(self, mentor_oid: ObjectId) -> dict[str, Any]:
        by_status = await self._grouped_counts(
            MENTOR_CREDENTIALS, {"mentor": mentor_oid}, "status"
        )
        return {
            "credentialsByStatus": {
                status.value: by_status.get(status.value, 0) for status in CredentialStatus
            },
            "contentsCreated": await self._db[CONTENTS].count_documents(
                {"createdBy": mentor_oid}
            ),
            "challengesCreated": await self._db[CHALLENGES].count_documents(
                {"createdBy": mentor_oid}
            ),
        }
