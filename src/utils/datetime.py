# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Timezone-aware datetime helpers.

BSON dates carry no zone and are always UTC. The Mongo client is opened
with tz_aware=True, so every datetime read back from a document is aware.
Code that writes documents or compares against them should take "now"
from utc_now() so naive and aware values never meet.

Usage:
    from src.utils.datetime import utc_now

    document = {"createdAt": utc_now(), "updatedAt": utc_now()}
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a datetime to aware UTC.

    Naive values are taken to already be UTC, which is how BSON dates
    come back from a client opened without tz_aware.

    Args:
        dt: Naive or aware datetime, or None.

    Returns:
        Aware UTC datetime, or None when dt is None.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def minutes_from_now(minutes: int) -> datetime:
    return utc_now() + timedelta(minutes=minutes)


def has_elapsed(start: datetime, seconds: int) -> bool:
    """Whether `seconds` have passed since `start`.

    Used for documents that carry a TTL index. MongoDB sweeps expired
    documents about once a minute, so a read can still see a record
    whose lifetime is already over.
    """
    return ensure_utc(start) + timedelta(seconds=seconds) <= utc_now()


def format_iso(dt: datetime | None) -> str | None:
    """ISO 8601 string in UTC, or None."""
    return None if dt is None else ensure_utc(dt).isoformat()


def seconds_to_human(seconds: int) -> str:
    """Render a duration for log lines, e.g. "24h", "1h 30m" or "45s"."""
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    parts = [f"{value}{unit}" for value, unit in ((hours, "h"), (minutes, "m"), (secs, "s")) if value]
    return " ".join(parts) or "0s"
