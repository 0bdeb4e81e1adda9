# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests with mocked MongoDB collections
- Integration tests
- End-to-end tests
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

# Settings are read at import time by the rate limiter
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_environment() -> dict[str, str]:
    """Provide test environment variables.

    Returns:
        Dictionary of environment variables for testing.
    """
    return {
        "ENVIRONMENT": "test",
        "DEBUG": "true",
        "LOG_LEVEL": "DEBUG",
        "MONGO_URI": "mongodb://localhost:27017/?replicaSet=rs0",
        "MONGO_DATABASE": "skillseed_test",
        "REDIS_HOST": "localhost",
        "REDIS_PORT": "6379",
        "JWT_SECRET_KEY": "test-secret-key-for-testing-only",
        "JWT_ALGORITHM": "HS256",
        "ACCESS_TOKEN_EXPIRE_MINUTES": "30",
        "CHILD_TOKEN_EXPIRE_MINUTES": "1440",
        "RATE_LIMIT_ENABLED": "false",
    }


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as an end-to-end test (requires full stack)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# MongoDB Mocks
# =============================================================================


def make_collection() -> MagicMock:
    """Create a mock motor collection with async CRUD methods.

    ``find`` returns a cursor whose sort/skip/limit chain back to itself, so
    tests only need to set ``collection.cursor.to_list``.
    """
    collection = MagicMock()
    for method in (
        "find_one",
        "insert_one",
        "update_one",
        "delete_one",
        "find_one_and_update",
        "count_documents",
        "distinct",
    ):
        setattr(collection, method, AsyncMock())

    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    collection.cursor = cursor

    aggregate_cursor = MagicMock()
    aggregate_cursor.to_list = AsyncMock(return_value=[])
    collection.aggregate.return_value = aggregate_cursor
    collection.aggregate_cursor = aggregate_cursor
    return collection


@pytest.fixture
def mock_db() -> MagicMock:
    """Create mock MongoDB database.

    Indexing by collection name returns the same mock collection every
    time, so tests can set return values before the service runs.
    """
    collections: dict[str, MagicMock] = {}

    def get_collection(name: str) -> MagicMock:
        if name not in collections:
            collections[name] = make_collection()
        return collections[name]

    db = MagicMock()
    db.__getitem__.side_effect = get_collection
    db.collections = collections
    return db


@asynccontextmanager
async def _fake_transaction(db: Any):
    yield MagicMock(name="session")


@pytest.fixture
def transaction_stub():
    """Stand-in for start_transaction that yields a dummy session.

    Patch it over the name a service module imported, e.g.
    ``patch("src.domains.parent.service.start_transaction", new=transaction_stub)``.
    """
    return _fake_transaction


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create mock Redis client."""
    redis = MagicMock()
    redis.set = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=True)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def mock_email() -> MagicMock:
    """Create mock email service. Every send_* method is awaitable."""
    email = MagicMock()
    email.send_school_onboarding_email = AsyncMock()
    email.send_mentor_onboarding_email = AsyncMock()
    email.send_credential_approved_email = AsyncMock()
    email.send_credential_rejected_email = AsyncMock()
    email.send_mentor_suspension_email = AsyncMock()
    email.send_mentor_reactivation_email = AsyncMock()
    return email


@pytest.fixture
def mock_storage() -> MagicMock:
    """Create mock blob storage client."""
    storage = MagicMock()
    storage.upload_image = AsyncMock(return_value="https://blob.example/img.jpeg")
    storage.upload_document = AsyncMock(return_value="https://blob.example/doc.pdf")
    return storage


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def object_id() -> ObjectId:
    return ObjectId()
