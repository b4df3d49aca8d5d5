"""
Redis cache layer.

Provides:
- Generic get/set/delete cache operations with namespacing and TTLs
- The authenticated-user cache (profile, role and permission grants)
- Token whitelist/blacklist keyed by the JWT "jti" claim

Cache failures are logged and swallowed. For the user cache that means a
reload from the database; a token whose ID cannot be confirmed as
whitelisted is treated as invalid.
"""

import json
from typing import Any

import redis.asyncio as aioredis
import structlog

from authsvc.config import settings
from authsvc.core.metrics import cache_operations_total

logger = structlog.get_logger(__name__)

KEY_PREFIX = "authsvc"
USER_NAMESPACE = "auth"
TOKEN_NAMESPACE = "token"


class CacheManager:
    """
    Redis-based cache manager.

    Handles:
    - Connection lifecycle
    - JSON serialization
    - Key namespacing
    - TTL management
    """

    def __init__(self) -> None:
        self._client: aioredis.Redis | None = None

    async def init(self) -> None:
        """Initialize Redis connection pool."""
        self._client = aioredis.from_url(
            str(settings.redis_url),
            encoding="utf-8",
            decode_responses=True,
            max_connections=20,
        )

        await self._client.ping()
        logger.info("cache_initialized")

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            logger.info("cache_closed")

    @property
    def client(self) -> aioredis.Redis:
        """Get Redis client."""
        if not self._client:
            raise RuntimeError("Cache not initialized. Call init() first.")
        return self._client

    def _build_key(self, namespace: str, key: str) -> str:
        """
        Build namespaced cache key.

        Format: authsvc:{namespace}:{key}
        Example: authsvc:auth:user:42
        """
        return f"{KEY_PREFIX}:{namespace}:{key}"

    async def get(self, namespace: str, key: str) -> Any | None:
        """Get a deserialized value, or None on miss or error."""
        cache_key = self._build_key(namespace, key)

        try:
            value = await self.client.get(cache_key)
        except Exception as e:
            logger.warning("cache_get_failed", key=cache_key, error=str(e))
            return None

        cache_operations_total.labels(operation="get", hit=str(value is not None)).inc()
        if value is None:
            return None
        return json.loads(value)

    async def set(
        self,
        namespace: str,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """
        Set value in cache.

        Args:
            namespace: Cache namespace
            key: Cache key
            value: Value to cache (must be JSON-serializable)
            ttl: Time-to-live in seconds (None = use default)
        """
        cache_key = self._build_key(namespace, key)
        ttl = ttl or settings.redis_cache_ttl

        try:
            await self.client.set(cache_key, json.dumps(value, default=str), ex=ttl)
        except Exception as e:
            logger.warning("cache_set_failed", key=cache_key, error=str(e))
            return False

        cache_operations_total.labels(operation="set", hit="n/a").inc()
        return True

    async def delete(self, namespace: str, key: str) -> bool:
        """Delete specific cache entry."""
        cache_key = self._build_key(namespace, key)

        try:
            return await self.client.delete(cache_key) > 0
        except Exception as e:
            logger.warning("cache_delete_failed", key=cache_key, error=str(e))
            return False

    async def invalidate_namespace(self, namespace: str) -> int:
        """Invalidate all keys in a namespace; returns the number deleted."""
        pattern = self._build_key(namespace, "*")

        try:
            keys = await self.client.keys(pattern)
            if not keys:
                return 0
            deleted = await self.client.delete(*keys)
        except Exception as e:
            logger.warning("cache_invalidate_failed", namespace=namespace, error=str(e))
            return 0

        logger.info("cache_namespace_invalidated", namespace=namespace, deleted=deleted)
        return deleted


# Global instance
cache_manager = CacheManager()


def _user_key(user_id: int) -> str:
    return f"user:{user_id}"


async def get_cached_user(user_id: int) -> dict[str, Any] | None:
    """Return cached user data written by set_cached_user, if any."""
    return await cache_manager.get(USER_NAMESPACE, _user_key(user_id))


async def set_cached_user(user_id: int, data: dict[str, Any], ttl: int | None = None) -> bool:
    """Cache user data (profile, role, permission grants)."""
    stored = await cache_manager.set(
        USER_NAMESPACE,
        _user_key(user_id),
        data,
        ttl=ttl or settings.cache_user_ttl,
    )
    if stored:
        logger.debug(
            "user_data_cached",
            user_id=user_id,
            has_role=data.get("role") is not None,
            permissions_count=len(data.get("permissions", [])),
        )
    return stored


async def invalidate_cached_user(user_id: int) -> bool:
    """Drop cached data for one user."""
    return await cache_manager.delete(USER_NAMESPACE, _user_key(user_id))


async def invalidate_user_cache() -> int:
    """Drop cached data for every user, e.g. after a role's grants change."""
    return await cache_manager.invalidate_namespace(USER_NAMESPACE)


async def whitelist_token(token_id: str, ttl: int) -> bool:
    """Mark an issued token as valid for its lifetime."""
    return await cache_manager.set(TOKEN_NAMESPACE, f"whitelist:{token_id}", "valid", ttl=ttl)


async def revoke_token(token_id: str, ttl: int) -> None:
    """Blacklist a token for its remaining lifetime and drop it from the whitelist."""
    if ttl > 0:
        await cache_manager.set(TOKEN_NAMESPACE, f"blacklist:{token_id}", "revoked", ttl=ttl)
    await cache_manager.delete(TOKEN_NAMESPACE, f"whitelist:{token_id}")
    logger.info("token_revoked", token_id=token_id)


async def is_token_valid(token_id: str) -> bool:
    """A token is valid when it is whitelisted and not blacklisted."""
    if await cache_manager.get(TOKEN_NAMESPACE, f"blacklist:{token_id}") is not None:
        return False
    return await cache_manager.get(TOKEN_NAMESPACE, f"whitelist:{token_id}") is not None
