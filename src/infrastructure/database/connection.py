# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""MongoDB connection management using motor.

A single AsyncIOMotorClient is created at application startup and shared by
every request. Multi-document writes run inside a client session with a
transaction, which requires the server to be a replica set member.

Example:
    from src.infrastructure.database.connection import (
        init_database,
        get_database,
        start_transaction,
    )

    # Initialize at application startup
    await init_database(settings)

    # Use in services
    db = get_database()
    async with start_transaction(db) as session:
        await db.schools.insert_one(document, session=session)
"""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)
from pymongo.errors import PyMongoError

if TYPE_CHECKING:
    from src.core.config.settings import Settings

logger = logging.getLogger(__name__)

# Module-level state for the shared client
_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


class DatabaseError(Exception):
    """Base exception for database operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying driver error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


async def init_database(settings: "Settings") -> AsyncIOMotorDatabase:
    """Create the motor client and select the application database.

    Args:
        settings: Application settings containing MongoDB configuration.

    Returns:
        The application database handle.

    Raises:
        DatabaseError: If the client cannot be created.
    """
    global _client, _database

    try:
        _client = AsyncIOMotorClient(
            settings.mongo.uri.get_secret_value(),
            maxPoolSize=settings.mongo.max_pool_size,
            serverSelectionTimeoutMS=settings.mongo.server_selection_timeout_ms,
            tz_aware=True,
        )
        _database = _client[settings.mongo.database]
    except PyMongoError as e:
        raise DatabaseError("Failed to initialize MongoDB client", e) from e

    logger.info("MongoDB client initialized: database=%s", settings.mongo.database)
    return _database


async def close_database() -> None:
    """Close the motor client at application shutdown."""
    global _client, _database

    if _client is not None:
        _client.close()
        _client = None
        _database = None


def get_database() -> AsyncIOMotorDatabase:
    """Get the application database handle.

    Raises:
        DatabaseError: If the database has not been initialized.
    """
    if _database is None:
        raise DatabaseError("Database not initialized. Call init_database() first.")
    return _database


@asynccontextmanager
async def start_transaction(
    db: AsyncIOMotorDatabase,
) -> AsyncIterator[AsyncIOMotorClientSession]:
    """Run a block of writes inside a MongoDB transaction.

    The transaction commits when the block exits normally and aborts when
    it raises. Pass the yielded session to every read and write that must
    be part of the transaction.

    Args:
        db: Database whose client owns the session.

    Yields:
        The client session bound to the open transaction.

    Example:
        async with start_transaction(db) as session:
            await db.transactions.insert_one(doc, session=session)
            await db.schools.update_one(query, update, session=session)
    """
    async with await db.client.start_session() as session:
        async with session.start_transaction():
            yield session


async def check_database_connection() -> bool:
    """Check if MongoDB is reachable with a ping command.

    Returns:
        True if the server answered, False otherwise.
    """
    if _database is None:
        return False

    try:
        await _database.command("ping")
        return True
    except PyMongoError:
        return False
