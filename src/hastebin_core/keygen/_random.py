"""Secure random source shared by the key generators."""

import secrets

from hastebin_core.exceptions import KeyGenerationError


def secure_choice(alphabet: str) -> str:
    """Pick one character uniformly from ``alphabet`` using ``secrets``.

    Raises:
        KeyGenerationError: If the operating system's random source fails
    """
    try:
        return alphabet[secrets.randbelow(len(alphabet))]
    except OSError as e:
        raise KeyGenerationError(f"Secure random source failed: {e}") from e


def check_length(length: int) -> None:
    """Reject negative key lengths."""
    if length < 0:
        raise ValueError(f"Key length cannot be negative: {length}")
