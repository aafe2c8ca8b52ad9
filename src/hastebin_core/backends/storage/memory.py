"""In-memory document storage."""

import asyncio
from dataclasses import dataclass
from typing import Any

from hastebin_core.backends.storage.base import BaseDocumentStore
from hastebin_core.exceptions import DocumentNotFoundError
from hastebin_core.expiration import ExpirationPolicy


@dataclass
class MemoryEntry:
    """A stored value with an optional epoch deadline."""

    value: str
    expires_at: float | None = None

    def is_expired(self) -> bool:
        """Check if this entry has expired."""
        return ExpirationPolicy.is_expired(self.expires_at)


class MemoryDocumentStore(BaseDocumentStore):
    """In-memory document store with application-level expiry.

    Suitable for development and testing. Data is lost on restart.
    """

    name = "memory"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._data: dict[str, MemoryEntry] = {}
        self._lock = asyncio.Lock()

    async def set(self, key: str, value: str, skip_expiration: bool = False) -> None:
        """Store a value, replacing any previous entry."""
        entry = MemoryEntry(value=value, expires_at=self.policy.deadline(skip_expiration))
        async with self._lock:
            self._data[key] = entry

    async def get(self, key: str, skip_expiration: bool = False) -> str:
        """Get a value, dropping it if it has expired."""
        async with self._lock:
            entry = self._data.get(key)
            if entry is None:
                raise DocumentNotFoundError(key)
            if entry.is_expired():
                del self._data[key]
                raise DocumentNotFoundError(key)
            if self.policy.should_refresh(skip_expiration):
                entry.expires_at = self.policy.deadline(skip_expiration)
            return entry.value

    async def close(self) -> None:
        """Drop all stored documents."""
        async with self._lock:
            self._data.clear()
