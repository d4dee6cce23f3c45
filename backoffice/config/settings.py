"""
Portfolio CMS Back-Office
Centralized Configuration Management

Pydantic settings with environment variable support. Apart from the backend
connection credentials, nothing here changes domain behavior.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Hosted relational database configuration"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="portfolio_cms", alias="database", description="Database name")
    user: str = Field(default="portfolio", description="Database user")
    password: SecretStr = Field(default="secure_password", description="Database password")
    url: Optional[str] = Field(default=None, alias="DATABASE_URL", description="Full URL (overrides host/port)")
    echo: bool = Field(default=False, description="Echo SQL queries")
    create_schema: bool = Field(default=False, description="Create missing tables on startup")

    @property
    def async_url(self) -> str:
        """Async database URL; DATABASE_URL wins when set."""
        if self.url:
            if self.url.startswith("postgres://"):
                return self.url.replace("postgres://", "postgresql+asyncpg://", 1)
            if self.url.startswith("postgresql://"):
                return self.url.replace("postgresql://", "postgresql+asyncpg://", 1)
            return self.url
        return f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"


class StorageSettings(BaseSettings):
    """Object storage for uploaded assets"""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    root_dir: str = Field(default="./public", description="Filesystem root served publicly")
    upload_prefix: str = Field(default="uploads", description="Sub-directory holding uploads")
    public_base_url: str = Field(default="", description="Prefix for public asset URLs")
    max_file_size: int = Field(default=5 * 1024 * 1024, description="Max upload size in bytes")
    allowed_image_types: List[str] = Field(
        default=["image/png", "image/jpeg", "image/webp"],
        description="MIME types accepted by save_image",
    )


class RedisSettings(BaseSettings):
    """Redis cache configuration"""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: Optional[SecretStr] = Field(default=None, description="Redis password")
    db: int = Field(default=0, description="Redis database number")
    max_connections: int = Field(default=50, description="Max connections")
    socket_timeout: int = Field(default=5, description="Socket timeout in seconds")
    enabled: bool = Field(default=True, description="Use Redis for analytics caching")
    url: Optional[str] = Field(default=None, alias="REDIS_URL", description="Redis URL (overrides host/port)")

    def get_url(self) -> str:
        """Redis connection URL - uses REDIS_URL if set, otherwise builds from host/port"""
        if self.url:
            return self.url
        if self.password:
            return f"redis://:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


class SecuritySettings(BaseSettings):
    """CORS and rate limiting"""

    model_config = SettingsConfigDict(env_prefix="")

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )
    tracking_rate_limit: int = Field(
        default=120, alias="TRACKING_RATE_LIMIT", description="Tracking requests per window"
    )
    tracking_rate_window_seconds: int = Field(
        default=60, alias="TRACKING_RATE_WINDOW_SECONDS", description="Rate limit window"
    )


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class AnalyticsSettings(BaseSettings):
    """Visitor analytics tuning"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    default_period_days: int = Field(default=30, description="Default reporting window")
    top_limit: int = Field(default=10, description="Default size of top-N listings")
    new_visitor_ratio: float = Field(
        default=0.65, ge=0.0, le=1.0, description="Assumed share of new visitors"
    )
    session_expiry_minutes: int = Field(default=30, description="Visitor session idle expiry")
    away_after_seconds: float = Field(default=30.0, description="Idle time before read time pauses")
    cache_ttl_seconds: int = Field(default=600, description="Analytics cache TTL")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="portfolio-backoffice", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")

    version: str = Field(default="1.0.0", description="Application version")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
