"""
Seed Hash Selection
===================

EdDSA key derivation hashes the private seed to 64 bytes. Two algorithms are
interchangeable; the choice is a closed enum selected per call.
"""

import hashlib
from enum import Enum

from .blake512 import blake512


class HashingAlgorithm(Enum):
    BLAKE512 = "blake512"
    BLAKE2B = "blake2b"

    @classmethod
    def from_name(cls, name: str) -> "HashingAlgorithm":
        try:
            return cls(name.lower())
        except ValueError:
            choices = ", ".join(a.value for a in cls)
            raise ValueError(f"Unknown hashing algorithm '{name}', expected one of: {choices}") from None

    def digest(self, data: bytes) -> bytes:
        """64-byte digest of ``data`` under this algorithm."""
        if self is HashingAlgorithm.BLAKE2B:
            return hashlib.blake2b(data, digest_size=64).digest()
        return blake512(data)
