# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Cross-cutting helpers: structlog setup and UTC datetimes."""

from src.utils.datetime import ensure_utc, format_iso, has_elapsed, utc_now
from src.utils.logging import bind_context, clear_context, get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "utc_now",
    "ensure_utc",
    "has_elapsed",
    "format_iso",
]
