"""Pronounceable key generator alternating consonants and vowels."""

from hastebin_core.keygen._random import check_length, secure_choice

VOWELS = "aeiou"
CONSONANTS = "bcdfghjklmnpqrstvwxyz"


class PhoneticKeyGenerator:
    """Generates keys such as ``hobaxu`` or ``ekivo``.

    Whether a key starts with a consonant or a vowel is decided at random on
    every call, so two keys of the same length may have different parity.
    """

    def generate(self, length: int) -> str:
        """Generate a key of exactly ``length`` characters.

        Raises:
            ValueError: If length is negative
            KeyGenerationError: If the secure random source fails
        """
        check_length(length)
        start = int(secure_choice("01"))

        chars = []
        for i in range(length):
            if i % 2 == start:
                chars.append(secure_choice(CONSONANTS))
            else:
                chars.append(secure_choice(VOWELS))
        return "".join(chars)
