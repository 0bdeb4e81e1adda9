# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the Skillseed backend.

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.mongo.database)
    'skillseed'
"""

from src.core.config.settings import (
    AzureStorageSettings,
    CORSSettings,
    JWTSettings,
    MongoSettings,
    OnboardingSettings,
    RateLimitSettings,
    RedisSettings,
    Settings,
    SMTPSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "MongoSettings",
    "RedisSettings",
    "JWTSettings",
    "SMTPSettings",
    "AzureStorageSettings",
    "OnboardingSettings",
    "RateLimitSettings",
    "CORSSettings",
]
