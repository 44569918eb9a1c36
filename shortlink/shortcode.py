"""Identifier generation for new short links."""

import hashlib
import random
import string
import uuid
from typing import Optional


class IdentifierGenerator:
    """Produces base62 identifiers.

    ``from_url`` is deterministic so the same target maps to the same
    identifier when it is free; ``random`` and ``from_uuid`` resolve
    collisions.
    """

    ALPHABET = string.ascii_letters + string.digits

    def __init__(self, default_length: int = 6):
        """Initialize identifier generator.

        Args:
            default_length: Length used when a call does not pass one
        """
        self.default_length = default_length

    def from_url(self, url: str, length: Optional[int] = None) -> str:
        """Identifier derived from a SHA-256 digest of the URL.

        Args:
            url: Target URL
            length: Identifier length (defaults to ``default_length``)

        Returns:
            Base62 identifier
        """
        digest = int(hashlib.sha256(url.encode()).hexdigest(), 16)
        return self.to_base62(digest)[: length or self.default_length]

    def random(self, length: Optional[int] = None) -> str:
        """Random identifier.

        Args:
            length: Identifier length (defaults to ``default_length``)

        Returns:
            Base62 identifier
        """
        return "".join(random.choices(self.ALPHABET, k=length or self.default_length))

    def from_uuid(self, length: Optional[int] = None) -> str:
        """Identifier taken from a random UUID4.

        Args:
            length: Identifier length (defaults to ``default_length``)

        Returns:
            Base62 identifier
        """
        return self.to_base62(uuid.uuid4().int)[: length or self.default_length]

    @classmethod
    def to_base62(cls, num: int) -> str:
        """Convert a non-negative integer to base62.

        Args:
            num: Number to convert

        Returns:
            Base62 string
        """
        if num == 0:
            return cls.ALPHABET[0]

        chars = []
        base = len(cls.ALPHABET)
        while num > 0:
            num, remainder = divmod(num, base)
            chars.append(cls.ALPHABET[remainder])
        return "".join(reversed(chars))

    @classmethod
    def from_base62(cls, code: str) -> int:
        """Convert a base62 string back to an integer.

        Args:
            code: Base62 string

        Returns:
            Decoded number
        """
        result = 0
        for char in code:
            result = result * len(cls.ALPHABET) + cls.ALPHABET.index(char)
        return result

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """True if every character is base62, ``-`` or ``_``."""
        return bool(code) and all(c in IdentifierGenerator.ALPHABET or c in "-_" for c in code)
