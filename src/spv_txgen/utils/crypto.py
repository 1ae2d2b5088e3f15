"""Hash helpers used by the transaction codec, sighash and addresses."""

from __future__ import annotations

import hashlib


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def sha256d(data: bytes) -> bytes:
    """SHA-256 applied twice; txids, sighash digests and Base58 checksums."""
    return sha256(sha256(data))


def sha256d_hex(data: bytes) -> str:
    """:func:`sha256d` in display byte order (reversed), as txids are shown."""
    return sha256d(data)[::-1].hex()


def hash160(data: bytes) -> bytes:
    """RIPEMD-160(SHA-256(data)), the P2PKH public key hash."""
    return hashlib.new("ripemd160", sha256(data)).digest()
