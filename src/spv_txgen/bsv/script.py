"""Scripts the signer reads and writes.

A P2PKH locking script is a fixed template around a 20-byte public key hash;
its unlocking script is two data pushes, ``<signature> <pubkey>``.
"""

from __future__ import annotations

import enum
import struct

from spv_txgen.utils.crypto import hash160


class OpCode(int, enum.Enum):
    OP_0 = 0x00
    OP_PUSHDATA1 = 0x4C
    OP_PUSHDATA2 = 0x4D
    OP_PUSHDATA4 = 0x4E
    OP_DUP = 0x76
    OP_EQUALVERIFY = 0x88
    OP_HASH160 = 0xA9
    OP_CHECKSIG = 0xAC


class ScriptType(enum.StrEnum):
    """Locking script types the signer distinguishes."""

    P2PKH = "pubkeyhash"
    UNKNOWN = "unknown"


# OP_DUP OP_HASH160 <push 20> ... OP_EQUALVERIFY OP_CHECKSIG
_P2PKH_PREFIX = bytes([OpCode.OP_DUP, OpCode.OP_HASH160, 20])
_P2PKH_SUFFIX = bytes([OpCode.OP_EQUALVERIFY, OpCode.OP_CHECKSIG])
_P2PKH_SIZE = len(_P2PKH_PREFIX) + 20 + len(_P2PKH_SUFFIX)

# Push opcode -> width of its little-endian length field
_PUSHDATA_WIDTHS = {
    OpCode.OP_PUSHDATA1: struct.Struct("<B"),
    OpCode.OP_PUSHDATA2: struct.Struct("<H"),
    OpCode.OP_PUSHDATA4: struct.Struct("<I"),
}

# ---------------------------------------------------------------------------
# Data pushes
# ---------------------------------------------------------------------------


def push_data(data: bytes) -> bytes:
    """Minimal push of *data*."""
    length = len(data)
    if length == 0:
        return bytes([OpCode.OP_0])
    if length <= 0x4B:
        return bytes([length]) + data
    for op, width in _PUSHDATA_WIDTHS.items():
        if length < 1 << (8 * width.size):
            return bytes([op]) + width.pack(length) + data
    msg = f"Push of {length} bytes is too large"
    raise ValueError(msg)


def read_pushes(script: bytes) -> list[bytes]:
    """Split a push-only script into the data items it pushes.

    Raises:
        ValueError: If the script contains a non-push opcode or is truncated.
    """

    def take(size: int) -> bytes:
        nonlocal idx
        if idx + size > len(script):
            msg = "Push extends past end of script"
            raise ValueError(msg)
        chunk = script[idx : idx + size]
        idx += size
        return chunk

    items: list[bytes] = []
    idx = 0
    while idx < len(script):
        op = take(1)[0]
        if op <= 0x4B:
            items.append(take(op))
        elif op in _PUSHDATA_WIDTHS:
            width = _PUSHDATA_WIDTHS[OpCode(op)]
            (length,) = width.unpack(take(width.size))
            items.append(take(length))
        else:
            msg = f"Non-push opcode {op:#x} in push-only script"
            raise ValueError(msg)
    return items


# ---------------------------------------------------------------------------
# P2PKH
# ---------------------------------------------------------------------------


def p2pkh_lock_script(pubkey_hash: bytes) -> bytes:
    if len(pubkey_hash) != 20:
        msg = f"pubkey_hash must be 20 bytes, got {len(pubkey_hash)}"
        raise ValueError(msg)
    return _P2PKH_PREFIX + pubkey_hash + _P2PKH_SUFFIX


def p2pkh_lock_script_from_pubkey(pubkey: bytes) -> bytes:
    return p2pkh_lock_script(hash160(pubkey))


def p2pkh_unlock_script(signature: bytes, pubkey: bytes) -> bytes:
    """``<signature+sighash byte> <pubkey>``."""
    return push_data(signature) + push_data(pubkey)


def detect_script_type(script: bytes) -> ScriptType:
    if (
        len(script) == _P2PKH_SIZE
        and script.startswith(_P2PKH_PREFIX)
        and script.endswith(_P2PKH_SUFFIX)
    ):
        return ScriptType.P2PKH
    return ScriptType.UNKNOWN


def extract_pubkey_hash(script: bytes) -> bytes | None:
    """The hash a P2PKH locking script pays to, or None for other scripts."""
    if detect_script_type(script) != ScriptType.P2PKH:
        return None
    return script[len(_P2PKH_PREFIX) : -len(_P2PKH_SUFFIX)]
