# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the Skillseed
backend. Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoSettings(BaseSettings):
    """MongoDB configuration.

    Transactions require a replica set, so local development should run
    mongod with --replSet (a single-node set is enough).

    Attributes:
        uri: MongoDB connection string.
        database: Database name.
        max_pool_size: Maximum connections in the driver pool.
        server_selection_timeout_ms: How long to wait for a reachable server.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONGO_",
        extra="ignore",
    )

    uri: SecretStr = SecretStr("mongodb://localhost:27017/?replicaSet=rs0")
    database: str = "skillseed"
    max_pool_size: int = 50
    server_selection_timeout_ms: int = 5000


class RedisSettings(BaseSettings):
    """Redis configuration for the temporary password handoff.

    Attributes:
        host: Redis server host.
        port: Redis server port.
        password: Redis password.
        database: Redis database number.
        url: Full Redis connection URL.
        max_connections: Maximum connection pool size.
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        extra="ignore",
    )

    host: str = "localhost"
    port: int = 6379
    password: SecretStr | None = None
    database: int = 0
    max_connections: int = 20

    @property
    def url(self) -> str:
        """Build the Redis connection URL."""
        if self.password is not None and self.password.get_secret_value():
            pwd = self.password.get_secret_value()
            return f"redis://:{pwd}@{self.host}:{self.port}/{self.database}"
        return f"redis://{self.host}:{self.port}/{self.database}"


class JWTSettings(BaseSettings):
    """JWT authentication configuration.

    Attributes:
        secret_key: Secret key for signing tokens.
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Access token lifetime for adults.
        child_token_expire_minutes: Access token lifetime for student logins.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr("change-this-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    child_token_expire_minutes: int = Field(
        default=60 * 24,
        validation_alias="CHILD_TOKEN_EXPIRE_MINUTES",
    )


class SMTPSettings(BaseSettings):
    """SMTP relay configuration for transactional email.

    Email is skipped (and logged) when host, username, password or
    sender address is missing.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port.
        username: SMTP authentication username.
        password: SMTP authentication password.
        use_tls: Use STARTTLS.
        from_email: Sender email address.
        from_name: Sender display name.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore",
    )

    host: str | None = None
    port: int = 587
    username: str | None = None
    password: SecretStr | None = None
    use_tls: bool = True
    from_email: str | None = None
    from_name: str = "Skillseed"

    @property
    def is_configured(self) -> bool:
        """Check whether all required SMTP values are present."""
        return all([self.host, self.username, self.password, self.from_email])


class AzureStorageSettings(BaseSettings):
    """Azure Blob Storage configuration for uploads.

    Attributes:
        account_name: Storage account name.
        account_key: Storage account key.
        container_name: Container receiving uploads.
        image_width: Width uploaded images are resized to.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    account_name: str | None = Field(
        default=None,
        validation_alias="AZURE_ACCT_NAME",
    )
    account_key: SecretStr | None = Field(
        default=None,
        validation_alias="AZURE_ACCT_KEY",
    )
    container_name: str | None = Field(
        default=None,
        validation_alias="AZURE_CONTAINER_NAME",
    )
    image_width: int = Field(
        default=800,
        validation_alias="AZURE_IMAGE_WIDTH",
    )

    @property
    def account_url(self) -> str:
        """Build the blob service endpoint URL."""
        return f"https://{self.account_name}.blob.core.windows.net"


class OnboardingSettings(BaseSettings):
    """Account onboarding configuration.

    Attributes:
        temp_password_ttl_hours: How long a school's temporary password is kept
            in the cache while waiting for the first payment.
        temp_password_length: Length of generated temporary passwords.
        temp_student_ttl_seconds: Lifetime of a staged student registration.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    temp_password_ttl_hours: int = Field(
        default=24,
        validation_alias="TEMP_PASSWORD_TTL_HOURS",
    )
    temp_password_length: int = Field(
        default=12,
        validation_alias="TEMP_PASSWORD_LENGTH",
    )
    temp_student_ttl_seconds: int = Field(
        default=3600,
        validation_alias="TEMP_STUDENT_TTL_SECONDS",
    )

    @property
    def temp_password_ttl_seconds(self) -> int:
        """Temporary password TTL in seconds."""
        return self.temp_password_ttl_hours * 3600


class RateLimitSettings(BaseSettings):
    """Rate limiting configuration.

    Attributes:
        enabled: Whether rate limiting is applied.
        requests_per_minute: Maximum requests per minute per client.
        auth: Limit for sign-in and registration endpoints (RATE_LIMIT_AUTH).
        storage_uri: slowapi storage backend (memory:// or a redis URL).
    """

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        extra="ignore",
    )

    enabled: bool = True
    requests_per_minute: int = 120
    auth: str = "10/minute"
    storage_uri: str = "memory://"


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        mongo: MongoDB settings.
        redis: Redis settings.
        jwt: JWT authentication settings.
        smtp: SMTP relay settings.
        azure_storage: Blob storage settings.
        onboarding: Onboarding settings.
        rate_limit: Rate limiting settings.
        cors: CORS settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "test", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    smtp: SMTPSettings = Field(default_factory=SMTPSettings)
    azure_storage: AzureStorageSettings = Field(default_factory=AzureStorageSettings)
    onboarding: OnboardingSettings = Field(default_factory=OnboardingSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            default_jwt_secret = "change-this-in-production"
            if self.jwt.secret_key.get_secret_value() == default_jwt_secret:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
