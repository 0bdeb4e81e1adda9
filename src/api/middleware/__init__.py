# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- AuthMiddleware: JWT authentication.
- RequestLoggingMiddleware: Request/response logging with a request id.
- limiter: slowapi rate limiter keyed on user id or IP.
"""

from src.api.middleware.auth import AuthMiddleware, CurrentUser
from src.api.middleware.rate_limit import limiter
from src.api.middleware.request_logging import RequestLoggingMiddleware

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "RequestLoggingMiddleware",
    "limiter",
]
