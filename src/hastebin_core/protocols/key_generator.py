"""KeyGenerator protocol for document key strategies."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyGenerator(Protocol):
    """Protocol for document key generators."""

    def generate(self, length: int) -> str:
        """Generate a key of exactly ``length`` characters."""
        ...
