"""Shared plumbing for storage backends."""

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

from hastebin_core.exceptions import StorageTimeoutError
from hastebin_core.expiration import ExpirationPolicy

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 5.0


class BaseDocumentStore:
    """Base class for storage backends.

    Holds the expiration policy and the per-call timeout. Subclasses own
    exactly one driver client, created in ``connect()`` and released in
    ``close()``.
    """

    name = "base"

    def __init__(
        self,
        expiration: int = 0,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
        **kwargs: Any,
    ) -> None:
        """Initialize backend.

        Args:
            expiration: Expiration window in seconds (0 disables expiry)
            timeout: Per-call timeout in seconds (None disables)
            **kwargs: Ignored (for compatibility with other backends)
        """
        self.policy = ExpirationPolicy(expiration)
        self.timeout = timeout

    async def connect(self) -> None:
        """Open the backend. No-op by default."""

    async def close(self) -> None:
        """Release the backend. No-op by default."""

    async def _call(self, awaitable: Awaitable[T]) -> T:
        """Await a driver call, bounded by the configured timeout."""
        if self.timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, self.timeout)
        except asyncio.TimeoutError as e:
            raise StorageTimeoutError(
                f"{self.name} call exceeded {self.timeout}s timeout"
            ) from e

    async def __aenter__(self) -> "BaseDocumentStore":
        """Connect on entry."""
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Close on exit."""
        await self.close()
