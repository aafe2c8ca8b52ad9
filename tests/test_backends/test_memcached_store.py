"""Tests for the Memcached storage backend against an in-process fake client."""

import time

import pytest
from aiomcache.exceptions import ValidationException

from hastebin_core.backends.storage import memcached as memcached_backend
from hastebin_core.backends.storage.memcached import (
    MAX_RELATIVE_EXPTIME,
    MemcachedDocumentStore,
    to_exptime,
)
from hastebin_core.exceptions import BackendUnavailableError, DocumentNotFoundError


def _validate_key(key: bytes) -> None:
    """Mirror aiomcache's client-side key check."""
    if not key or len(key) > 250 or any(b <= 32 or b == 127 for b in key):
        raise ValidationException("invalid key", key)


class FakeMemcache:
    """Subset of ``aiomcache.Client`` that records exptimes."""

    version_error: Exception | None = None

    def __init__(self, host, port=11211, **kwargs):
        self.host = host
        self.port = port
        self.items: dict[bytes, tuple[bytes, int]] = {}
        self.closed = False
        self.touch_calls = 0
        self.after_get = None

    async def version(self):
        if self.version_error is not None:
            raise self.version_error
        return b"1.6.21"

    async def set(self, key, value, exptime=0):
        assert isinstance(key, bytes) and isinstance(value, bytes)
        _validate_key(key)
        self.items[key] = (value, exptime)
        return True

    async def get(self, key, default=None):
        assert isinstance(key, bytes)
        _validate_key(key)
        item = self.items.get(key)
        if self.after_get is not None:
            await self.after_get()
        return default if item is None else item[0]

    async def touch(self, key, exptime):
        _validate_key(key)
        self.touch_calls += 1
        if key not in self.items:
            return False
        value, _ = self.items[key]
        self.items[key] = (value, exptime)
        return True

    def expire(self, key: bytes) -> None:
        """Simulate the server evicting an expired item."""
        self.items.pop(key, None)

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_memcache(monkeypatch):
    """Route aiomcache.Client to the fake."""
    monkeypatch.setattr(FakeMemcache, "version_error", None)
    monkeypatch.setattr(memcached_backend.aiomcache, "Client", FakeMemcache)


@pytest.fixture
async def memcached_store(fake_memcache):
    """Create a connected Memcached store with a 60 second window."""
    store = MemcachedDocumentStore(host="cache", port=11211, expiration=60)
    await store.connect()
    yield store
    await store.close()


class TestToExptime:
    """Tests for the exptime conversion."""

    def test_none_and_zero(self):
        """No TTL maps to 0 (never)."""
        assert to_exptime(None) == 0
        assert to_exptime(0) == 0

    def test_relative(self):
        """Short TTLs are sent as relative seconds."""
        assert to_exptime(60) == 60
        assert to_exptime(MAX_RELATIVE_EXPTIME) == MAX_RELATIVE_EXPTIME

    def test_absolute_for_long_ttl(self):
        """TTLs over 30 days become absolute timestamps."""
        ttl = MAX_RELATIVE_EXPTIME + 1
        assert to_exptime(ttl, now=1_000_000.0) == 1_000_000 + ttl
        assert to_exptime(ttl) > time.time()


class TestMemcachedDocumentStore:
    """Tests for MemcachedDocumentStore."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, memcached_store):
        """Reading a written key returns the value."""
        await memcached_store.set("k", "héllo", False)
        assert await memcached_store.get("k", False) == "héllo"

    @pytest.mark.asyncio
    async def test_set_exptime(self, memcached_store):
        """Writes carry the window, or 0 when skipped."""
        await memcached_store.set("a", "v", False)
        await memcached_store.set("b", "v", True)
        assert memcached_store.client.items[b"a"][1] == 60
        assert memcached_store.client.items[b"b"][1] == 0

    @pytest.mark.asyncio
    async def test_get_refreshes_with_touch(self, memcached_store):
        """A refreshing read touches the item with a fresh exptime."""
        await memcached_store.set("k", "v", True)
        await memcached_store.get("k", False)
        assert memcached_store.client.touch_calls == 1
        assert memcached_store.client.items[b"k"] == (b"v", 60)

    @pytest.mark.asyncio
    async def test_skip_read_does_not_touch(self, memcached_store):
        """A skipping read leaves the item untouched."""
        await memcached_store.set("k", "v", True)
        await memcached_store.get("k", True)
        assert memcached_store.client.touch_calls == 0
        assert memcached_store.client.items[b"k"] == (b"v", 0)

    @pytest.mark.asyncio
    async def test_refresh_keeps_concurrent_write(self, memcached_store):
        """A write landing between the read and the refresh is not overwritten."""
        await memcached_store.set("k", "old", False)

        async def overwrite():
            memcached_store.client.after_get = None
            await memcached_store.set("k", "new", False)

        memcached_store.client.after_get = overwrite
        assert await memcached_store.get("k", False) == "old"
        assert await memcached_store.get("k", False) == "new"

    @pytest.mark.asyncio
    async def test_expired_is_not_found(self, memcached_store):
        """An item the server evicted is not found."""
        await memcached_store.set("k", "v", False)
        memcached_store.client.expire(b"k")
        with pytest.raises(DocumentNotFoundError):
            await memcached_store.get("k", False)

    @pytest.mark.asyncio
    async def test_missing_is_not_found(self, memcached_store):
        """A cache miss is not found."""
        with pytest.raises(DocumentNotFoundError):
            await memcached_store.get("missing", False)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["", "has space", "x" * 300, "tab\there"])
    async def test_unstorable_key_is_not_found(self, memcached_store, key):
        """Keys the client refuses read as not found rather than erroring."""
        with pytest.raises(DocumentNotFoundError):
            await memcached_store.get(key, False)

    @pytest.mark.asyncio
    async def test_overwrite(self, memcached_store):
        """Writing an existing key replaces its value."""
        await memcached_store.set("k", "v1", False)
        await memcached_store.set("k", "v2", False)
        assert await memcached_store.get("k", False) == "v2"

    @pytest.mark.asyncio
    async def test_connect_failure(self, monkeypatch, fake_memcache):
        """A failed version check is reported as BackendUnavailableError."""
        monkeypatch.setattr(FakeMemcache, "version_error", ConnectionRefusedError())
        with pytest.raises(BackendUnavailableError):
            await MemcachedDocumentStore(host="nowhere").connect()

    @pytest.mark.asyncio
    async def test_close(self, memcached_store):
        """Closing releases the client."""
        client = memcached_store.client
        await memcached_store.close()
        assert client.closed
