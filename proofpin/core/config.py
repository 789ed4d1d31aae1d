"""Application configuration loaded from environment variables.

All configuration is via environment variables (or a local .env file).
No hardcoded URLs, ports, or credentials.
"""

from functools import lru_cache

from pydantic import Field, PostgresDsn, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Proofpin")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    port: int = Field(default=8000, description="Port to bind to")
    host: str = Field(default="0.0.0.0", description="Host to bind to")

    # Database
    database_url: PostgresDsn = Field(
        ...,
        description="PostgreSQL connection string",
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size")
    db_max_overflow: int = Field(default=10, description="Max overflow connections")
    db_pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    db_slow_query_threshold_ms: int = Field(
        default=100, description="Threshold for slow query warnings (ms)"
    )
    db_connect_timeout: int = Field(
        default=60, description="Connection timeout in seconds"
    )
    db_command_timeout: int = Field(
        default=60, description="Command timeout in seconds"
    )

    # Redis
    redis_url: RedisDsn | None = Field(
        default=None,
        description="Redis connection string for the project stats cache",
    )
    redis_pool_size: int = Field(default=10, description="Redis connection pool size")
    redis_connect_timeout: float = Field(
        default=10.0, description="Redis connection timeout in seconds"
    )
    redis_socket_timeout: float = Field(
        default=5.0, description="Redis socket timeout in seconds"
    )
    redis_retry_on_timeout: bool = Field(
        default=True, description="Retry Redis operations on timeout"
    )
    redis_health_check_interval: int = Field(
        default=30, description="Redis health check interval in seconds"
    )
    # Circuit breaker settings
    redis_circuit_failure_threshold: int = Field(
        default=5, description="Failures before circuit opens"
    )
    redis_circuit_recovery_timeout: float = Field(
        default=30.0, description="Seconds before attempting recovery"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")

    # CORS
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Frontend origin allowed by CORS",
    )

    # Blob storage
    storage_backend: str = Field(
        default="local", description="Blob storage backend: local or s3"
    )
    storage_local_path: str = Field(
        default="./uploads", description="Base directory for the local backend"
    )
    storage_s3_bucket: str | None = Field(
        default=None, description="S3 bucket for the s3 backend"
    )
    storage_s3_region: str = Field(default="us-east-1", description="S3 region")
    storage_s3_prefix: str = Field(
        default="", description="Key prefix applied to every stored object"
    )
    storage_s3_endpoint_url: str | None = Field(
        default=None, description="Custom S3 endpoint (MinIO, R2, ...)"
    )
    max_upload_size_bytes: int = Field(
        default=100 * 1024 * 1024, description="Maximum accepted upload size"
    )

    # Identity
    default_user_id: str = Field(
        default="user-1",
        description="User id assumed when a request carries no X-User-ID header",
    )

    # Project stats cache
    project_stats_cache_ttl: int = Field(
        default=60,
        description="Seconds to cache per-user project stats (0 disables)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
