"""Uniform random key generator."""

from hastebin_core.keygen._random import check_length, secure_choice

DEFAULT_KEY_SPACE = "abcdefghijklmnopqrstuvwxyz"


class RandomKeyGenerator:
    """Draws every character independently and uniformly from a key space.

    Example:
        generator = RandomKeyGenerator("abc123")
        key = generator.generate(10)
    """

    def __init__(self, key_space: str | None = None) -> None:
        """Initialize random key generator.

        Args:
            key_space: Characters to draw from. Defaults to lowercase a-z.
        """
        self.key_space = key_space or DEFAULT_KEY_SPACE

    def generate(self, length: int) -> str:
        """Generate a key of exactly ``length`` characters.

        Raises:
            ValueError: If length is negative
            KeyGenerationError: If the secure random source fails
        """
        check_length(length)
        return "".join(secure_choice(self.key_space) for _ in range(length))
