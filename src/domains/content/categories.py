# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Challenge categories managed by super admins."""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from src.domains.content.service import ContentServiceError
from src.infrastructure.database.collections import CATEGORIES
from src.infrastructure.database.documents import (
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.models.content import CategoryCreateRequest, CategoryUpdateRequest
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CategoryNotFoundError(ContentServiceError):
    """Raised when a category is not found."""

    pass


class CategoryExistsError(ContentServiceError):
    """Raised when a category name is already taken."""

    pass


class CategoryService:
    """CRUD for challenge categories. Names are unique."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db

    async def create_category(
        self, data: CategoryCreateRequest, user_id: str
    ) -> dict[str, Any]:
        """Create a category.

        Raises:
            CategoryExistsError: If the name is taken.
        """
        if await self._db[CATEGORIES].find_one({"name": data.name}, {"_id": 1}):
            raise CategoryExistsError(f'Category with name "{data.name}" already exists')

        now = utc_now()
        document = {
            **data.to_document(),
            "createdBy": to_object_id(user_id),
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = await self._db[CATEGORIES].insert_one(document)
        except DuplicateKeyError as e:
            raise CategoryExistsError(f'Category with name "{data.name}" already exists') from e
        document["_id"] = result.inserted_id

        logger.info("Category created: %s by user %s", result.inserted_id, user_id)
        return serialize_document(document)

    async def list_categories(self) -> list[dict[str, Any]]:
        categories = await self._db[CATEGORIES].find().sort("name", ASCENDING).to_list(None)
        return serialize_documents(categories)

    async def get_category(self, category_id: str) -> dict[str, Any]:
        category = await self._db[CATEGORIES].find_one({"_id": to_object_id(category_id)})
        if not category:
            raise CategoryNotFoundError(f"Category with ID {category_id} not found")
        return serialize_document(category)

    async def update_category(
        self, category_id: str, data: CategoryUpdateRequest, user_id: str
    ) -> dict[str, Any]:
        """Update a category.

        Raises:
            CategoryNotFoundError: If the category does not exist.
            CategoryExistsError: If the new name belongs to another category.
        """
        category_oid = to_object_id(category_id)
        updates = data.to_document()

        if "name" in updates:
            clash = await self._db[CATEGORIES].find_one(
                {"name": updates["name"], "_id": {"$ne": category_oid}}, {"_id": 1}
            )
            if clash:
                raise CategoryExistsError(
                    f'Category with name "{updates["name"]}" already exists'
                )
        updates["updatedAt"] = utc_now()

        try:
            category = await self._db[CATEGORIES].find_one_and_update(
                {"_id": category_oid},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise CategoryExistsError(
                f'Category with name "{updates["name"]}" already exists'
            ) from e
        if not category:
            raise CategoryNotFoundError(f"Category with ID {category_id} not found")

        logger.info("Category updated: %s by user %s", category_id, user_id)
        return serialize_document(category)

    async def delete_category(self, category_id: str, user_id: str) -> None:
        result = await self._db[CATEGORIES].delete_one({"_id": to_object_id(category_id)})
        if result.deleted_count == 0:
            raise CategoryNotFoundError(f"Category with ID {category_id} not found")
        logger.info("Category deleted: %s by user %s", category_id, user_id)
