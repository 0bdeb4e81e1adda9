# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Helpers for converting between API values and stored documents."""

from datetime import datetime
from typing import Any, Iterable

from bson import ObjectId
from bson.errors import InvalidId

from src.utils.datetime import ensure_utc

# Never leaves the service layer
ALWAYS_EXCLUDED = frozenset({"password"})


class InvalidObjectIdError(ValueError):
    """Raised when a path or body value is not a valid ObjectId."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Invalid id: {value}")
        self.value = value


def to_object_id(value: Any) -> ObjectId:
    """Convert a string (or ObjectId) to an ObjectId.

    Raises:
        InvalidObjectIdError: If the value is not a 24-char hex id.
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError) as e:
        raise InvalidObjectIdError(value) from e


def _convert(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, dict):
        return {k: _convert(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_convert(v) for v in value]
    return value


def serialize_document(
    doc: dict[str, Any] | None,
    exclude: Iterable[str] = (),
) -> dict[str, Any] | None:
    """Turn a stored document into a JSON-friendly dict.

    ``_id`` becomes ``id``, ObjectIds become strings (also inside nested
    dicts and lists) and ``password`` is always dropped.

    Args:
        doc: Raw document from motor, or None.
        exclude: Extra top-level fields to drop.

    Returns:
        The serialized document, or None if doc was None.
    """
    if doc is None:
        return None

    skip = ALWAYS_EXCLUDED | set(exclude)
    result: dict[str, Any] = {}
    if "_id" in doc:
        result["id"] = str(doc["_id"])
    for key, value in doc.items():
        if key == "_id" or key in skip:
            continue
        result[key] = _convert(value)
    return result


def serialize_documents(
    docs: Iterable[dict[str, Any]],
    exclude: Iterable[str] = (),
) -> list[dict[str, Any]]:
    """Serialize a sequence of documents with serialize_document."""
    exclude = tuple(exclude)
    return [serialize_document(doc, exclude) for doc in docs]
