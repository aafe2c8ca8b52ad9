"""Tests for the in-memory storage backend."""

import asyncio

import pytest

from hastebin_core.backends.storage.memory import MemoryDocumentStore
from hastebin_core.exceptions import DocumentNotFoundError


@pytest.fixture
def memory_store():
    """Create a memory store with a one-second window."""
    return MemoryDocumentStore(expiration=1)


class TestMemoryDocumentStore:
    """Tests for MemoryDocumentStore."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, memory_store):
        """Reading a written key returns the value."""
        await memory_store.set("key", "value")
        assert await memory_store.get("key") == "value"

    @pytest.mark.asyncio
    async def test_get_missing(self, memory_store):
        """A key that was never written is not found."""
        with pytest.raises(DocumentNotFoundError):
            await memory_store.get("nonexistent")

    @pytest.mark.asyncio
    async def test_overwrite(self, memory_store):
        """Writing an existing key replaces its value."""
        await memory_store.set("key", "value1")
        await memory_store.set("key", "value2")
        assert await memory_store.get("key") == "value2"

    @pytest.mark.asyncio
    async def test_expiration(self, memory_store):
        """Documents expire after the window."""
        await memory_store.set("key", "value")
        await asyncio.sleep(1.1)
        with pytest.raises(DocumentNotFoundError):
            await memory_store.get("key")
        assert "key" not in memory_store._data

    @pytest.mark.asyncio
    async def test_skip_expiration_survives(self, memory_store):
        """Documents written with skip_expiration never expire."""
        await memory_store.set("key", "value", skip_expiration=True)
        await asyncio.sleep(1.1)
        assert await memory_store.get("key", skip_expiration=True) == "value"

    @pytest.mark.asyncio
    async def test_read_refreshes_deadline(self, memory_store):
        """A refreshing read resets the deadline to the full window."""
        await memory_store.set("key", "value")
        memory_store._data["key"].expires_at -= 0.5
        before = memory_store._data["key"].expires_at

        await memory_store.get("key")
        assert memory_store._data["key"].expires_at > before

    @pytest.mark.asyncio
    async def test_skip_read_leaves_deadline(self, memory_store):
        """A skipping read leaves the deadline untouched."""
        await memory_store.set("key", "value")
        before = memory_store._data["key"].expires_at

        await memory_store.get("key", skip_expiration=True)
        assert memory_store._data["key"].expires_at == before

    @pytest.mark.asyncio
    async def test_close_clears(self, memory_store):
        """Closing drops all data."""
        await memory_store.set("key", "value")
        await memory_store.close()
        with pytest.raises(DocumentNotFoundError):
            await memory_store.get("key")
