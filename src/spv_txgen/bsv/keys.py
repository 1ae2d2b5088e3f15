"""secp256k1 keys — Base58Check, public key derivation, ECDSA sign/verify.

Signatures over transaction inputs are deterministic (RFC 6979) and low-S,
DER encoded, as BSV nodes require.
"""

from __future__ import annotations

import hashlib

from ecdsa import SECP256k1, BadSignatureError, MalformedPointError, SigningKey, VerifyingKey
from ecdsa.util import sigdecode_der, sigencode_der_canonize

from spv_txgen.utils.crypto import sha256d

_CURVE = SECP256k1

PRIVATE_KEY_SIZE = 32

# ---------------------------------------------------------------------------
# Base58Check encoding / decoding
# ---------------------------------------------------------------------------

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {char: value for value, char in enumerate(_B58_ALPHABET)}


def base58_encode(payload: bytes) -> str:
    """Base58 without checksum; each leading zero byte becomes ``1``."""
    n = int.from_bytes(payload, "big")
    digits: list[str] = []
    while n:
        n, remainder = divmod(n, 58)
        digits.append(_B58_ALPHABET[remainder])
    zeros = len(payload) - len(payload.lstrip(b"\x00"))
    return "1" * zeros + "".join(reversed(digits))


def base58_decode(s: str) -> bytes:
    """Inverse of :func:`base58_encode`.

    Raises:
        ValueError: On characters outside the Base58 alphabet.
    """
    n = 0
    for char in s:
        if char not in _B58_INDEX:
            msg = f"Invalid Base58 character: {char!r}"
            raise ValueError(msg)
        n = n * 58 + _B58_INDEX[char]
    body = n.to_bytes((n.bit_length() + 7) // 8, "big")
    return b"\x00" * (len(s) - len(s.lstrip("1"))) + body


def base58check_encode(payload: bytes) -> str:
    return base58_encode(payload + sha256d(payload)[:4])


def base58check_decode(s: str) -> bytes:
    """Decode Base58Check, verifying the 4-byte checksum.

    Raises:
        ValueError: If the string is malformed or the checksum is invalid.
    """
    raw = base58_decode(s)
    if len(raw) < 4:
        msg = "Base58Check string too short"
        raise ValueError(msg)
    payload, checksum = raw[:-4], raw[-4:]
    if checksum != sha256d(payload)[:4]:
        msg = "Base58Check checksum mismatch"
        raise ValueError(msg)
    return payload


# ---------------------------------------------------------------------------
# Keys and signatures
# ---------------------------------------------------------------------------


def _signing_key(privkey_bytes: bytes) -> SigningKey:
    """Load a raw private key, rejecting bad lengths and scalars outside [1, n)."""
    if len(privkey_bytes) != PRIVATE_KEY_SIZE:
        msg = f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(privkey_bytes)}"
        raise ValueError(msg)
    secexp = int.from_bytes(privkey_bytes, "big")
    if not 0 < secexp < _CURVE.order:
        msg = "Private key out of range"
        raise ValueError(msg)
    return SigningKey.from_secret_exponent(secexp, curve=_CURVE)


def private_key_to_public_key(privkey_bytes: bytes, *, compressed: bool = True) -> bytes:
    """SEC public key: 33 bytes compressed, 65 bytes uncompressed.

    Raises:
        ValueError: If the private key is malformed.
    """
    encoding = "compressed" if compressed else "uncompressed"
    return _signing_key(privkey_bytes).get_verifying_key().to_string(encoding)


def sign_digest(privkey_bytes: bytes, digest: bytes) -> bytes:
    """Sign a 32-byte digest; same key and digest always give the same bytes."""
    return _signing_key(privkey_bytes).sign_digest_deterministic(
        digest, hashfunc=hashlib.sha256, sigencode=sigencode_der_canonize
    )


def verify_signature(pubkey_bytes: bytes, digest: bytes, signature: bytes) -> bool:
    """Check a DER signature against a SEC public key (either encoding)."""
    try:
        vk = VerifyingKey.from_string(pubkey_bytes, curve=_CURVE)
        return vk.verify_digest(signature, digest, sigdecode=sigdecode_der)
    except (BadSignatureError, MalformedPointError, ValueError):
        return False
