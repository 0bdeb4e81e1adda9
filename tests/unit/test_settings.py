# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from unittest.mock import patch

import pytest

from src.core.config.settings import (
    AzureStorageSettings,
    CORSSettings,
    JWTSettings,
    MongoSettings,
    OnboardingSettings,
    RateLimitSettings,
    RedisSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestMongoSettings:
    """Tests for MongoSettings."""

    def test_default_values(self) -> None:
        settings = MongoSettings()

        assert settings.database == "skillseed"
        assert settings.max_pool_size == 50
        assert "replicaSet" in settings.uri.get_secret_value()

    def test_env_prefix(self) -> None:
        with patch.dict(os.environ, {"MONGO_DATABASE": "other", "MONGO_MAX_POOL_SIZE": "5"}):
            settings = MongoSettings()

        assert settings.database == "other"
        assert settings.max_pool_size == 5


class TestRedisSettings:
    """Tests for RedisSettings."""

    def test_url_without_password(self) -> None:
        settings = RedisSettings(host="cache", port=6380, database=2)

        assert settings.url == "redis://cache:6380/2"

    def test_url_with_password(self) -> None:
        settings = RedisSettings(password="secret")  # type: ignore[arg-type]

        assert settings.url == "redis://:secret@localhost:6379/0"


class TestJWTSettings:
    """Tests for JWTSettings."""

    def test_token_lifetimes_from_env(self) -> None:
        env = {
            "ACCESS_TOKEN_EXPIRE_MINUTES": "15",
            "CHILD_TOKEN_EXPIRE_MINUTES": "1440",
        }
        with patch.dict(os.environ, env):
            settings = JWTSettings()

        assert settings.access_token_expire_minutes == 15
        assert settings.child_token_expire_minutes == 1440


class TestAzureStorageSettings:
    """Tests for AzureStorageSettings."""

    def test_image_width_defaults_to_800(self) -> None:
        settings = AzureStorageSettings()

        assert settings.image_width == 800

    def test_account_from_env(self) -> None:
        env = {
            "AZURE_ACCT_NAME": "skillseed",
            "AZURE_ACCT_KEY": "a2V5",
            "AZURE_CONTAINER_NAME": "uploads",
        }
        with patch.dict(os.environ, env):
            settings = AzureStorageSettings()

        assert settings.account_name == "skillseed"
        assert settings.container_name == "uploads"


class TestOnboardingSettings:
    """Tests for OnboardingSettings."""

    def test_defaults(self) -> None:
        settings = OnboardingSettings()

        assert settings.temp_password_ttl_hours == 24
        assert settings.temp_password_length == 12
        assert settings.temp_student_ttl_seconds == 3600

    def test_ttl_seconds_property(self) -> None:
        with patch.dict(os.environ, {"TEMP_PASSWORD_TTL_HOURS": "2"}):
            settings = OnboardingSettings()

        assert settings.temp_password_ttl_seconds == 7200


class TestRateLimitSettings:
    def test_auth_limit_from_env(self) -> None:
        with patch.dict(os.environ, {"RATE_LIMIT_AUTH": "3/minute"}):
            settings = RateLimitSettings()

        assert settings.auth == "3/minute"
        assert settings.storage_uri == "memory://"


class TestCORSSettings:
    """Tests for CORSSettings."""

    def test_origins_list_parses_comma_separated(self) -> None:
        settings = CORSSettings(origins="https://a.example, https://b.example,")

        assert settings.origins_list == ["https://a.example", "https://b.example"]


class TestSettings:
    """Tests for main Settings class."""

    def test_environment_flags(self) -> None:
        settings = Settings(environment="development")

        assert settings.is_development is True
        assert settings.is_production is False

    def test_production_rejects_default_jwt_secret(self) -> None:
        with patch.dict(os.environ, {"JWT_SECRET_KEY": "change-this-in-production"}):
            with pytest.raises(ValueError, match="JWT secret key"):
                Settings(environment="production")

    def test_production_accepts_custom_secret(self) -> None:
        with patch.dict(os.environ, {"JWT_SECRET_KEY": "a-real-production-secret"}):
            settings = Settings(environment="production")

        assert settings.is_production is True


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_returns_cached_instance(self) -> None:
        clear_settings_cache()

        first = get_settings()
        second = get_settings()

        assert first is second

    def test_clear_cache_reloads(self) -> None:
        clear_settings_cache()
        first = get_settings()

        clear_settings_cache()
        second = get_settings()

        assert first is not second
