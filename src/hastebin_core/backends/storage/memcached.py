"""Memcached document storage using ``aiomcache``."""

import time
from typing import Any

import aiomcache
from aiomcache.exceptions import ValidationException

from hastebin_core.backends.storage.base import BaseDocumentStore
from hastebin_core.exceptions import BackendUnavailableError, DocumentNotFoundError
from hastebin_core.observability import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 11211

# Memcached reads exptime values above 30 days as absolute Unix timestamps
MAX_RELATIVE_EXPTIME = 60 * 60 * 24 * 30


def to_exptime(ttl: int | None, now: float | None = None) -> int:
    """Convert a TTL in seconds to a memcached exptime (0 means never)."""
    if not ttl:
        return 0
    if ttl > MAX_RELATIVE_EXPTIME:
        return int((now if now is not None else time.time()) + ttl)
    return ttl


class MemcachedDocumentStore(BaseDocumentStore):
    """Memcached-backed store relying on native item expiry.

    A refreshing read extends the exptime with ``touch``, which leaves the
    stored value alone, so a ``set`` landing between the read and the
    refresh keeps its content.
    """

    name = "memcached"

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize Memcached store.

        Args:
            host: Memcached host. Defaults to localhost
            port: Memcached port. Defaults to 11211
            **kwargs: Passed to BaseDocumentStore; unknown keys ignored
        """
        super().__init__(**kwargs)
        self.host = host or "localhost"
        self.port = port or DEFAULT_PORT
        self._client: aiomcache.Client | None = None

    @property
    def client(self) -> aiomcache.Client:
        if self._client is None:
            raise RuntimeError("Memcached store not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        """Create the client and ask the server for its version."""
        self._client = aiomcache.Client(self.host, self.port)
        try:
            await self._call(self._client.version())
        except Exception as e:
            raise BackendUnavailableError(
                f"Failed to connect to Memcached at {self.host}:{self.port}: {e}"
            ) from e
        logger.info("Connected to Memcached", context={"host": self.host, "port": self.port})

    async def set(self, key: str, value: str, skip_expiration: bool = False) -> None:
        """Store the item with the window as exptime (0 when skipped)."""
        exptime = to_exptime(self.policy.ttl(skip_expiration))
        await self._call(
            self.client.set(key.encode("utf-8"), value.encode("utf-8"), exptime=exptime)
        )

    async def get(self, key: str, skip_expiration: bool = False) -> str:
        """Get the item and touch it with a fresh exptime unless skipped.

        Keys memcached refuses (empty, over 250 bytes, containing spaces or
        control characters) can never name a stored item, so they read as
        not found.
        """
        raw_key = key.encode("utf-8")
        try:
            value = await self._call(self.client.get(raw_key))
        except ValidationException:
            raise DocumentNotFoundError(key) from None
        if value is None:
            raise DocumentNotFoundError(key)

        if self.policy.should_refresh(skip_expiration):
            # False means the item vanished in between; the read still succeeds
            await self._call(
                self.client.touch(raw_key, to_exptime(self.policy.window_seconds))
            )

        return value.decode("utf-8")

    async def close(self) -> None:
        """Close the client's connection pool."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("Closed Memcached connection")
