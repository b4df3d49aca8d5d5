"""
Unit tests for cache layer.
"""

import pytest

from authsvc.core import cache
from authsvc.core.cache import CacheManager


@pytest.mark.unit
class TestCacheManager:
    """Test cache manager functionality."""

    def test_build_key(self):
        manager = CacheManager()

        assert manager._build_key("auth", "user:42") == "authsvc:auth:user:42"

    def test_build_key_with_colon(self):
        """Test cache key with existing colons."""
        manager = CacheManager()

        key = manager._build_key("users", "email:test@example.com")
        assert key == "authsvc:users:email:test@example.com"

    async def test_uninitialized_cache_degrades_to_miss(self):
        """Without a Redis client every operation fails soft."""
        manager = CacheManager()

        assert await manager.get("auth", "user:1") is None
        assert await manager.set("auth", "user:1", {"a": 1}) is False
        assert await manager.delete("auth", "user:1") is False
        assert await manager.invalidate_namespace("auth") == 0


@pytest.mark.unit
class TestUserCache:
    """User data helpers on top of the cache manager."""

    async def test_set_and_get_cached_user(self, mock_cache):
        data = {"user": {"id": 5}, "role": None, "permissions": []}

        assert await cache.set_cached_user(5, data) is True
        assert mock_cache["auth:user:5"] == data
        assert await cache.get_cached_user(5) == data

    async def test_get_cached_user_miss(self, mock_cache):
        assert await cache.get_cached_user(99) is None

    async def test_invalidate_cached_user(self, mock_cache):
        await cache.set_cached_user(5, {"user": {"id": 5}})

        assert await cache.invalidate_cached_user(5) is True
        assert await cache.get_cached_user(5) is None

    async def test_invalidate_user_cache_drops_all_users(self, mock_cache):
        await cache.set_cached_user(1, {"user": {"id": 1}})
        await cache.set_cached_user(2, {"user": {"id": 2}})

        assert await cache.invalidate_user_cache() == 2
        assert mock_cache == {}


@pytest.mark.unit
class TestTokenStore:
    """Whitelist/blacklist bookkeeping for issued tokens."""

    async def test_whitelisted_token_is_valid(self, mock_cache):
        await cache.whitelist_token("abc", ttl=60)

        assert await cache.is_token_valid("abc") is True

    async def test_unknown_token_is_invalid(self, mock_cache):
        assert await cache.is_token_valid("missing") is False

    async def test_revoked_token_is_invalid(self, mock_cache):
        await cache.whitelist_token("abc", ttl=60)

        await cache.revoke_token("abc", ttl=60)

        assert await cache.is_token_valid("abc") is False
        assert mock_cache == {"token:blacklist:abc": "revoked"}

    async def test_blacklist_wins_over_whitelist(self, mock_cache):
        mock_cache["token:whitelist:abc"] = "valid"
        mock_cache["token:blacklist:abc"] = "revoked"

        assert await cache.is_token_valid("abc") is False

    async def test_unreachable_cache_rejects_tokens(self, monkeypatch):
        monkeypatch.setattr(cache, "cache_manager", CacheManager())

        assert await cache.is_token_valid("abc") is False
