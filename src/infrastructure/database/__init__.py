# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for MongoDB.

This package provides the shared motor client, the transaction helper,
index setup and document serialization helpers.

Example:
    from src.infrastructure.database import get_database, start_transaction

    db = get_database()
    async with start_transaction(db) as session:
        await db.schools.update_one(query, update, session=session)
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_database,
    init_database,
    start_transaction,
)
from src.infrastructure.database.documents import (
    InvalidObjectIdError,
    serialize_document,
    serialize_documents,
    to_object_id,
)
from src.infrastructure.database.collections import ensure_indexes

__all__ = [
    # Connection
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "get_database",
    "init_database",
    "start_transaction",
    # Collections
    "ensure_indexes",
    # Documents
    "InvalidObjectIdError",
    "serialize_document",
    "serialize_documents",
    "to_object_id",
]
