"""Redis document storage using the ``redis`` async client."""

from typing import Any

import redis.asyncio as aioredis

from hastebin_core.backends.storage.base import BaseDocumentStore
from hastebin_core.exceptions import BackendUnavailableError, DocumentNotFoundError
from hastebin_core.observability import get_logger

logger = get_logger(__name__)

DEFAULT_PORT = 6379


class RedisDocumentStore(BaseDocumentStore):
    """Redis-backed store relying on native key TTLs.

    Writes set the TTL to the expiration window (or none when skipped);
    reads reset it to the full window with ``EXPIRE``.
    """

    name = "redis"

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize Redis store.

        Args:
            host: Redis host. Defaults to localhost
            port: Redis port. Defaults to 6379
            username: ACL username
            password: Password
            **kwargs: Passed to BaseDocumentStore; unknown keys ignored
        """
        super().__init__(**kwargs)
        self.host = host or "localhost"
        self.port = port or DEFAULT_PORT
        self.username = username or None
        self.password = password or None
        self._client: aioredis.Redis | None = None

    @property
    def client(self) -> aioredis.Redis:
        if self._client is None:
            raise RuntimeError("Redis store not connected. Call connect() first.")
        return self._client

    async def connect(self) -> None:
        """Create the client and PING the server."""
        self._client = aioredis.Redis(
            host=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            decode_responses=True,
            socket_timeout=self.timeout,
            socket_connect_timeout=self.timeout,
        )
        try:
            await self._call(self._client.ping())
        except Exception as e:
            raise BackendUnavailableError(
                f"Failed to connect to Redis at {self.host}:{self.port}: {e}"
            ) from e
        logger.info("Connected to Redis", context={"host": self.host, "port": self.port})

    async def set(self, key: str, value: str, skip_expiration: bool = False) -> None:
        """SET the value with the window as TTL (no TTL when skipped)."""
        await self._call(self.client.set(key, value, ex=self.policy.ttl(skip_expiration)))

    async def get(self, key: str, skip_expiration: bool = False) -> str:
        """GET the value and reset its TTL unless skipped."""
        value = await self._call(self.client.get(key))
        if value is None:
            raise DocumentNotFoundError(key)

        if self.policy.should_refresh(skip_expiration):
            await self._call(self.client.expire(key, self.policy.window_seconds))

        return value

    async def close(self) -> None:
        """Close the client's connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Closed Redis connection")
