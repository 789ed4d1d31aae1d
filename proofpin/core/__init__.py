"""Core utilities and configuration."""

from proofpin.core.auth import UserInfo, get_current_user
from proofpin.core.config import Settings, get_settings
from proofpin.core.database import Base, db_manager, get_session
from proofpin.core.logging import (
    db_logger,
    get_logger,
    redis_logger,
    setup_logging,
    storage_logger,
)
from proofpin.core.redis import get_redis, redis_manager

__all__ = [
    # Auth
    "UserInfo",
    "get_current_user",
    # Config
    "Settings",
    "get_settings",
    # Database
    "Base",
    "db_manager",
    "get_session",
    # Logging
    "db_logger",
    "get_logger",
    "redis_logger",
    "setup_logging",
    "storage_logger",
    # Redis
    "get_redis",
    "redis_manager",
]
