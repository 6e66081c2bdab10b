"""Application settings and configuration.

This module defines all configuration options for the Campus Threads core.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Campus Threads", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./campus_threads.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Identity provider session tokens
    identity_jwt_key: str = Field(alias="IDENTITY_JWT_KEY")
    identity_jwt_algorithm: str = Field(default="HS256", alias="IDENTITY_JWT_ALGORITHM")
    identity_jwt_issuer: str | None = Field(default=None, alias="IDENTITY_JWT_ISSUER")
    identity_jwt_audience: str | None = Field(default=None, alias="IDENTITY_JWT_AUDIENCE")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Identity provider webhook (Svix-signed)
    identity_webhook_secret: str | None = Field(default=None, alias="IDENTITY_WEBHOOK_SECRET")

    # Blob storage
    storage_base_url: str = Field(default="http://localhost:3210", alias="STORAGE_BASE_URL")
    storage_api_key: str | None = Field(default=None, alias="STORAGE_API_KEY")
    storage_http_timeout_seconds: float = Field(
        default=10.0,
        alias="STORAGE_HTTP_TIMEOUT_SECONDS",
    )
    media_resolve_workers: int = Field(default=8, alias="MEDIA_RESOLVE_WORKERS")

    # Listings
    default_page_size: int = Field(default=20, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")
    search_result_limit: int = Field(default=20, alias="SEARCH_RESULT_LIMIT")

    # Scheduled post publication
    publish_worker_enabled: bool = Field(default=False, alias="PUBLISH_WORKER_ENABLED")
    publish_sweep_interval_seconds: float = Field(
        default=60.0,
        alias="PUBLISH_SWEEP_INTERVAL_SECONDS",
    )
    cron_secret: str | None = Field(default=None, alias="CRON_SECRET")

    # CORS configuration for the mobile/web client
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
