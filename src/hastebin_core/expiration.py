"""Expiration policy shared by all storage backends.

A backend is configured with a single expiration window. Every write that
does not opt out with ``skip_expiration`` gets that window, and every read
that does not opt out pushes the deadline forward by the full window again.
How the deadline is represented (native TTL, epoch column, BSON date) is up
to the backend; this module only answers the questions they all share.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class ExpirationPolicy:
    """Sliding expiration window applied by a storage backend.

    Attributes:
        window_seconds: Lifetime of a document in seconds. 0 disables expiry.
    """

    window_seconds: int = 0

    def __post_init__(self) -> None:
        if self.window_seconds < 0:
            raise ValueError("Expiration window cannot be negative")

    @property
    def enabled(self) -> bool:
        """Whether documents written through this policy expire at all."""
        return self.window_seconds > 0

    def ttl(self, skip_expiration: bool) -> int | None:
        """Get the TTL to hand to a backend with native expiry.

        Returns:
            TTL in seconds, or None if the document must not expire
        """
        if skip_expiration or not self.enabled:
            return None
        return self.window_seconds

    def should_refresh(self, skip_expiration: bool) -> bool:
        """Whether a read should slide the document's deadline forward."""
        return not skip_expiration and self.enabled

    def deadline(self, skip_expiration: bool, now: float | None = None) -> float | None:
        """Get the absolute expiry time as Unix epoch seconds.

        Args:
            skip_expiration: Whether the document opts out of expiry
            now: Reference time (defaults to the current time)

        Returns:
            Epoch seconds, or None if the document must not expire
        """
        ttl = self.ttl(skip_expiration)
        if ttl is None:
            return None
        if now is None:
            now = time.time()
        return now + ttl

    def deadline_datetime(
        self,
        skip_expiration: bool,
        now: float | None = None,
    ) -> datetime | None:
        """Get the absolute expiry time as an aware UTC datetime."""
        deadline = self.deadline(skip_expiration, now)
        if deadline is None:
            return None
        return datetime.fromtimestamp(deadline, tz=timezone.utc)

    @staticmethod
    def is_expired(deadline: float | datetime | None, now: float | None = None) -> bool:
        """Check whether a stored deadline has passed.

        A missing deadline (None or 0) never expires.
        """
        if not deadline:
            return False
        if isinstance(deadline, datetime):
            if deadline.tzinfo is None:
                deadline = deadline.replace(tzinfo=timezone.utc)
            deadline = deadline.timestamp()
        if now is None:
            now = time.time()
        return deadline <= now
