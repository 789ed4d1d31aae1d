"""Per-user project stats caching using Redis.

The project list with activity stats is recomputed from three tables on
every request; this cache holds the finished listing per user for a short
TTL. Entries are dropped whenever something that feeds the stats changes
(comments, files, projects, view marks). Redis is optional: when it is
unavailable every lookup is a miss and writes are skipped.

Cache key format: project_stats:{user_id}
"""

import time
from dataclasses import dataclass

from pydantic import TypeAdapter, ValidationError

from proofpin.core.config import get_settings
from proofpin.core.logging import get_logger
from proofpin.core.redis import RedisManager, redis_manager
from proofpin.schemas.project import ProjectWithStatsResponse

logger = get_logger(__name__)

CACHE_KEY_PREFIX = "project_stats:"
SLOW_OPERATION_THRESHOLD_MS = 1000

_LISTING_ADAPTER = TypeAdapter(list[ProjectWithStatsResponse])


@dataclass
class CacheStats:
    """Statistics for cache operations."""

    hits: int = 0
    misses: int = 0
    errors: int = 0


class ProjectStatsCacheService:
    """Caches ProjectWithStatsResponse listings keyed by user."""

    def __init__(
        self, redis: RedisManager | None = None, ttl_seconds: int | None = None
    ) -> None:
        self._redis = redis or redis_manager
        self._ttl_seconds = (
            ttl_seconds
            if ttl_seconds is not None
            else get_settings().project_stats_cache_ttl
        )
        self._stats = CacheStats()

    @property
    def enabled(self) -> bool:
        return self._ttl_seconds > 0 and self._redis.available

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @staticmethod
    def build_key(user_id: str) -> str:
        return f"{CACHE_KEY_PREFIX}{user_id}"

    async def get(self, user_id: str) -> list[ProjectWithStatsResponse] | None:
        """Return the cached listing for user_id, or None on a miss."""
        if not self.enabled:
            return None

        start_time = time.monotonic()
        cache_key = self.build_key(user_id)
        cached = await self._redis.get(cache_key)
        duration_ms = (time.monotonic() - start_time) * 1000

        if cached is None:
            self._stats.misses += 1
            logger.debug(
                "Project stats cache miss",
                extra={"user_id": user_id, "duration_ms": round(duration_ms, 2)},
            )
            return None

        try:
            listing = _LISTING_ADAPTER.validate_json(cached)
        except ValidationError as e:
            self._stats.errors += 1
            logger.error(
                "Project stats cache entry is corrupt, discarding",
                extra={
                    "user_id": user_id,
                    "cache_key": cache_key,
                    "error_count": e.error_count(),
                },
            )
            await self._redis.delete(cache_key)
            return None

        self._stats.hits += 1
        logger.debug(
            "Project stats cache hit",
            extra={
                "user_id": user_id,
                "project_count": len(listing),
                "duration_ms": round(duration_ms, 2),
            },
        )
        if duration_ms > SLOW_OPERATION_THRESHOLD_MS:
            logger.warning(
                "Slow project stats cache get",
                extra={"user_id": user_id, "duration_ms": round(duration_ms, 2)},
            )
        return listing

    async def set(
        self, user_id: str, listing: list[ProjectWithStatsResponse]
    ) -> bool:
        """Store a freshly computed listing. Returns False when not cached."""
        if not self.enabled:
            return False

        payload = _LISTING_ADAPTER.dump_json(listing)
        stored = await self._redis.set(
            self.build_key(user_id), payload, ex=self._ttl_seconds
        )
        logger.debug(
            "Project stats cache set",
            extra={
                "user_id": user_id,
                "project_count": len(listing),
                "stored": stored,
                "ttl_seconds": self._ttl_seconds,
            },
        )
        return stored

    async def invalidate(self, user_id: str) -> None:
        """Drop the cached listing for user_id."""
        if not self._redis.available:
            return
        await self._redis.delete(self.build_key(user_id))
        logger.debug("Project stats cache invalidated", extra={"user_id": user_id})


# Global singleton instance
_project_stats_cache: ProjectStatsCacheService | None = None


def get_project_stats_cache() -> ProjectStatsCacheService:
    """Get the global project stats cache instance."""
    global _project_stats_cache
    if _project_stats_cache is None:
        _project_stats_cache = ProjectStatsCacheService()
        logger.info("ProjectStatsCacheService singleton created")
    return _project_stats_cache
