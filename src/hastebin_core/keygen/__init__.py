"""Document key generators."""

from hastebin_core.keygen.phonetic import PhoneticKeyGenerator
from hastebin_core.keygen.random import DEFAULT_KEY_SPACE, RandomKeyGenerator

__all__ = ["DEFAULT_KEY_SPACE", "PhoneticKeyGenerator", "RandomKeyGenerator"]
