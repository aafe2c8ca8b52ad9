"""Tests for the Redis storage backend against an in-process fake client."""

import asyncio
import math
import time

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from hastebin_core.backends.storage import redis as redis_backend
from hastebin_core.backends.storage.redis import RedisDocumentStore
from hastebin_core.exceptions import (
    BackendUnavailableError,
    DocumentNotFoundError,
    StorageTimeoutError,
)


class FakeRedis:
    """Subset of ``redis.asyncio.Redis`` with real TTL bookkeeping."""

    ping_error: Exception | None = None

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.data: dict[str, tuple[str, float | None]] = {}
        self.closed = False
        self.get_delay = 0.0

    def _live(self, key):
        item = self.data.get(key)
        if item is None:
            return None
        if item[1] is not None and item[1] <= time.monotonic():
            del self.data[key]
            return None
        return item

    def advance(self, seconds: float) -> None:
        """Move every TTL closer to expiry."""
        self.data = {
            k: (v, None if exp is None else exp - seconds)
            for k, (v, exp) in self.data.items()
        }

    async def ping(self):
        if self.ping_error is not None:
            raise self.ping_error
        return True

    async def set(self, key, value, ex=None):
        self.data[key] = (value, None if ex is None else time.monotonic() + ex)
        return True

    async def get(self, key):
        if self.get_delay:
            await asyncio.sleep(self.get_delay)
        item = self._live(key)
        return None if item is None else item[0]

    async def expire(self, key, seconds):
        item = self._live(key)
        if item is None:
            return False
        self.data[key] = (item[0], time.monotonic() + seconds)
        return True

    async def ttl(self, key):
        item = self._live(key)
        if item is None:
            return -2
        if item[1] is None:
            return -1
        return math.ceil(item[1] - time.monotonic())

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_redis(monkeypatch):
    """Route redis.asyncio.Redis to the fake."""
    monkeypatch.setattr(FakeRedis, "ping_error", None)
    monkeypatch.setattr(redis_backend.aioredis, "Redis", FakeRedis)


@pytest.fixture
async def redis_store(fake_redis):
    """Create a connected Redis store with a two-second window."""
    store = RedisDocumentStore(host="localhost", port=6379, expiration=2)
    await store.connect()
    yield store
    await store.close()


class TestRedisDocumentStore:
    """Tests for RedisDocumentStore."""

    @pytest.mark.asyncio
    async def test_client_options(self, fake_redis):
        """Connection settings are passed to the client."""
        store = RedisDocumentStore(
            host="cache", port=6380, username="u", password="p", timeout=1.5
        )
        await store.connect()
        kwargs = store.client.kwargs
        assert kwargs["host"] == "cache"
        assert kwargs["port"] == 6380
        assert kwargs["username"] == "u"
        assert kwargs["password"] == "p"
        assert kwargs["decode_responses"] is True
        assert kwargs["socket_timeout"] == 1.5

    @pytest.mark.asyncio
    async def test_defaults(self, fake_redis):
        """Host and port default to a local server."""
        store = RedisDocumentStore()
        await store.connect()
        assert store.client.kwargs["host"] == "localhost"
        assert store.client.kwargs["port"] == 6379
        assert store.client.kwargs["username"] is None

    @pytest.mark.asyncio
    async def test_set_applies_ttl(self, redis_store):
        """A normal write gets the window as TTL."""
        await redis_store.set("testKey", "testValue", False)
        ttl = await redis_store.client.ttl("testKey")
        assert 0 < ttl <= 2

    @pytest.mark.asyncio
    async def test_get_resets_ttl(self, redis_store):
        """A refreshing read resets the TTL to the full window."""
        await redis_store.set("testKey", "testValue", False)
        redis_store.client.advance(1.5)
        assert await redis_store.client.ttl("testKey") == 1

        assert await redis_store.get("testKey", False) == "testValue"
        assert await redis_store.client.ttl("testKey") == 2

    @pytest.mark.asyncio
    async def test_skip_read_leaves_ttl(self, redis_store):
        """A skipping read leaves the TTL alone."""
        await redis_store.set("testKey", "testValue", False)
        redis_store.client.advance(1.5)

        await redis_store.get("testKey", True)
        assert await redis_store.client.ttl("testKey") == 1

    @pytest.mark.asyncio
    async def test_skip_expiration_has_no_ttl(self, redis_store):
        """skip_expiration writes carry no TTL and survive any delay."""
        await redis_store.set("testKeyNoExpire", "testValue", True)
        assert await redis_store.client.ttl("testKeyNoExpire") == -1

        redis_store.client.advance(3600)
        assert await redis_store.get("testKeyNoExpire", True) == "testValue"
        assert await redis_store.client.ttl("testKeyNoExpire") == -1

    @pytest.mark.asyncio
    async def test_expired_is_not_found(self, redis_store):
        """After the window the key is gone."""
        await redis_store.set("k", "v", False)
        redis_store.client.advance(3)
        with pytest.raises(DocumentNotFoundError):
            await redis_store.get("k", False)

    @pytest.mark.asyncio
    async def test_missing_is_not_found(self, redis_store):
        """A key that was never written is not found."""
        with pytest.raises(DocumentNotFoundError):
            await redis_store.get("nonExistentKey", False)

    @pytest.mark.asyncio
    async def test_overwrite(self, redis_store):
        """Writing an existing key replaces value and TTL."""
        await redis_store.set("k", "v1", True)
        await redis_store.set("k", "v2", False)
        assert await redis_store.get("k", False) == "v2"
        assert await redis_store.client.ttl("k") == 2

    @pytest.mark.asyncio
    async def test_zero_window_never_expires(self, fake_redis):
        """A zero window means no TTL and no refresh."""
        store = RedisDocumentStore(expiration=0)
        await store.connect()
        await store.set("k", "v", False)
        await store.get("k", False)
        assert await store.client.ttl("k") == -1

    @pytest.mark.asyncio
    async def test_connect_failure(self, monkeypatch, fake_redis):
        """A failed PING is reported as BackendUnavailableError."""
        monkeypatch.setattr(FakeRedis, "ping_error", RedisConnectionError("refused"))
        store = RedisDocumentStore(host="nowhere")
        with pytest.raises(BackendUnavailableError, match="nowhere"):
            await store.connect()

    @pytest.mark.asyncio
    async def test_timeout(self, fake_redis):
        """A call slower than the timeout raises StorageTimeoutError."""
        store = RedisDocumentStore(timeout=0.05)
        await store.connect()
        store.client.get_delay = 0.5
        with pytest.raises(StorageTimeoutError):
            await store.get("k")

    @pytest.mark.asyncio
    async def test_close(self, redis_store):
        """Closing releases the client."""
        client = redis_store.client
        await redis_store.close()
        assert client.closed
        with pytest.raises(RuntimeError):
            redis_store.client

    @pytest.mark.asyncio
    async def test_not_connected(self):
        """Using the store before connect() is a programming error."""
        with pytest.raises(RuntimeError):
            await RedisDocumentStore().get("k")
