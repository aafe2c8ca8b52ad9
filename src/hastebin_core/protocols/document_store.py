"""DocumentStore protocol for storage backends."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for document storage backends (file, Redis, MongoDB, S3, ...).

    Implementations must be safe for concurrent use by many tasks sharing a
    single instance. Writes are upserts: writing an existing key replaces its
    value and resets its expiry.
    """

    async def connect(self) -> None:
        """Open the driver client and verify the backend is reachable.

        Raises:
            BackendUnavailableError: If the liveness check fails
        """
        ...

    async def set(self, key: str, value: str, skip_expiration: bool = False) -> None:
        """Store a value, applying the expiration window unless skipped."""
        ...

    async def get(self, key: str, skip_expiration: bool = False) -> str:
        """Get the value for a key, sliding its expiry unless skipped.

        Raises:
            DocumentNotFoundError: If the key is absent or has expired
        """
        ...

    async def close(self) -> None:
        """Release the backend's client and connections."""
        ...
