"""Post-quantum addresses and address derivation."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass


@dataclass(frozen=True)
class PQAddress:
    """An address identified by the hash of a public key."""

    hash: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash", bytes(self.hash))

    @classmethod
    def from_string(cls, s: str) -> PQAddress:
        """Build an address whose hash is the UTF-8 bytes of ``s``."""
        return cls(s.encode("utf-8"))

    def hex(self) -> str:
        """Return the address hash as lower-case hexadecimal."""
        return self.hash.hex()

    def __str__(self) -> str:
        return self.hex()


def derive_address_from_pk(pk: bytes) -> bytes:
    """Derive an address hash from a public key (SHA-256)."""
    return hashlib.sha256(bytes(pk)).digest()