"""Redis client with connection pooling and circuit breaker pattern.

Redis only backs the project stats cache, so it is strictly optional:
- Connection pooling via redis-py
- Circuit breaker for fault tolerance
- Graceful degradation (operations return None) when Redis is unavailable
- Connection retry logic for cold starts
"""

import asyncio
import time
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from proofpin.core.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from proofpin.core.config import get_settings
from proofpin.core.logging import get_logger, redis_logger

logger = get_logger(__name__)


class RedisManager:
    """Manages Redis connections with pooling and circuit breaker."""

    def __init__(self) -> None:
        self._pool: ConnectionPool | None = None
        self._client: Redis | None = None
        self._circuit_breaker: CircuitBreaker | None = None
        self._available = False

    @property
    def available(self) -> bool:
        """Check if Redis is available."""
        return self._available and self._client is not None

    @property
    def circuit_breaker(self) -> CircuitBreaker | None:
        return self._circuit_breaker

    async def init_redis(self) -> bool:
        """Initialize Redis connection pool.

        Returns True if Redis is available, False otherwise.
        """
        settings = get_settings()

        if not settings.redis_url:
            logger.info("Redis URL not configured, project stats cache disabled")
            self._available = False
            return False

        redis_url = str(settings.redis_url)

        self._circuit_breaker = CircuitBreaker(
            config=CircuitBreakerConfig(
                failure_threshold=settings.redis_circuit_failure_threshold,
                recovery_timeout=settings.redis_circuit_recovery_timeout,
            ),
            name="redis",
        )

        try:
            self._pool = ConnectionPool.from_url(
                redis_url,
                max_connections=settings.redis_pool_size,
                socket_connect_timeout=settings.redis_connect_timeout,
                socket_timeout=settings.redis_socket_timeout,
                retry_on_timeout=settings.redis_retry_on_timeout,
                health_check_interval=settings.redis_health_check_interval,
            )
            self._client = Redis(connection_pool=self._pool)

            await self._connect_with_retry()

            self._available = True
            redis_logger.connection_success()
            return True

        except Exception as e:
            redis_logger.connection_error(e, redis_url)
            self._available = False
            # Redis is optional, the app keeps running without it
            return False

    async def _connect_with_retry(
        self, max_retries: int = 3, base_delay: float = 1.0
    ) -> None:
        """Ping Redis with exponential backoff."""
        last_error: Exception | None = None

        for attempt in range(max_retries):
            try:
                if self._client:
                    await self._client.ping()  # type: ignore[misc]
                    return
            except (RedisConnectionError, RedisTimeoutError) as e:
                last_error = e
                if attempt < max_retries - 1:
                    delay = base_delay * (2**attempt)
                    logger.warning(
                        f"Redis connection attempt {attempt + 1} failed, "
                        f"retrying in {delay}s",
                        extra={
                            "attempt": attempt + 1,
                            "max_retries": max_retries,
                            "delay_seconds": delay,
                            "error": str(e),
                        },
                    )
                    await asyncio.sleep(delay)

        if last_error:
            raise last_error

    async def close(self) -> None:
        """Close Redis connections."""
        if self._client:
            await self._client.aclose()
            self._client = None
        if self._pool:
            await self._pool.disconnect()
            self._pool = None
        self._available = False
        logger.info("Redis connections closed")

    async def execute(self, operation: str, *args: Any, **kwargs: Any) -> Any | None:
        """Execute a Redis operation with circuit breaker protection.

        Returns None if Redis is unavailable (graceful degradation).
        """
        if not self._client or not self._circuit_breaker:
            redis_logger.graceful_fallback(operation, "Redis not initialized")
            return None

        if not await self._circuit_breaker.can_execute():
            redis_logger.graceful_fallback(operation, "Circuit breaker open")
            return None

        start_time = time.monotonic()
        key = str(args[0]) if args else ""

        try:
            method = getattr(self._client, operation)
            result = await method(*args, **kwargs)
        except RedisTimeoutError:
            redis_logger.timeout(operation, key, get_settings().redis_socket_timeout)
            await self._record_failure(operation, key, start_time)
            return None
        except RedisConnectionError as e:
            redis_logger.connection_error(e, str(get_settings().redis_url))
            await self._record_failure(operation, key, start_time)
            return None
        except RedisError as e:
            logger.error(
                f"Redis error during {operation}",
                extra={
                    "operation": operation,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            await self._record_failure(operation, key, start_time)
            return None

        duration_ms = (time.monotonic() - start_time) * 1000
        redis_logger.operation(operation, key, duration_ms, success=True)
        await self._circuit_breaker.record_success()
        return result

    async def _record_failure(
        self, operation: str, key: str, start_time: float
    ) -> None:
        duration_ms = (time.monotonic() - start_time) * 1000
        redis_logger.operation(operation, key, duration_ms, success=False)
        if self._circuit_breaker is not None:
            await self._circuit_breaker.record_failure()

    async def get(self, key: str) -> bytes | None:
        """Get a value from Redis."""
        return await self.execute("get", key)

    async def set(self, key: str, value: str | bytes, ex: int | None = None) -> bool:
        """Set a value in Redis, optionally expiring after ``ex`` seconds."""
        kwargs: dict[str, Any] = {}
        if ex is not None:
            kwargs["ex"] = ex
        result = await self.execute("set", key, value, **kwargs)
        return result is not None

    async def delete(self, *keys: str) -> int | None:
        """Delete keys from Redis."""
        return await self.execute("delete", *keys)

    async def ping(self) -> bool:
        result = await self.execute("ping")
        return result is True or result == b"PONG"

    async def check_health(self) -> bool:
        """Check if Redis connection is healthy."""
        if not self._available:
            return False
        return await self.ping()


# Global Redis manager instance
redis_manager = RedisManager()


async def get_redis() -> RedisManager:
    """Dependency for getting the Redis manager."""
    return redis_manager
