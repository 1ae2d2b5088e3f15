"""Signature hashing — BSV ``SIGHASH_ALL | SIGHASH_FORKID``.

BSV signs the BIP143-style preimage::

    version || hashPrevouts || hashSequence || outpoint || scriptCode
    || value || nSequence || hashOutputs || locktime || sighash type

The preimage commits to the value of the output being spent, which is why a
signable transaction carries the full UTXO entries next to the body.
"""

from __future__ import annotations

import struct

from spv_txgen.bsv.transaction import Transaction, encode_varint
from spv_txgen.utils.crypto import sha256d

SIGHASH_ALL = 0x01
SIGHASH_FORKID = 0x40
SIGHASH_ALL_FORKID = SIGHASH_ALL | SIGHASH_FORKID


def hash_prevouts(tx: Transaction) -> bytes:
    """Double SHA-256 of all input outpoints."""
    return sha256d(b"".join(inp.outpoint for inp in tx.inputs))


def hash_sequence(tx: Transaction) -> bytes:
    """Double SHA-256 of all input sequence numbers."""
    return sha256d(b"".join(struct.pack("<I", inp.sequence) for inp in tx.inputs))


def hash_outputs(tx: Transaction) -> bytes:
    """Double SHA-256 of all serialized outputs."""
    return sha256d(b"".join(out.serialize() for out in tx.outputs))


def signature_preimage(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    sighash_type: int = SIGHASH_ALL_FORKID,
) -> bytes:
    """Build the FORKID preimage for one input.

    Args:
        tx: The transaction being signed.
        input_index: Index of the input to sign.
        script_code: Locking script of the output being spent.
        value: Satoshi value of the output being spent.
        sighash_type: Sighash flags; only ``SIGHASH_ALL | SIGHASH_FORKID`` is supported.

    Raises:
        ValueError: On an out-of-range index or unsupported sighash type.
    """
    if sighash_type != SIGHASH_ALL_FORKID:
        msg = f"Unsupported sighash type: {sighash_type:#x}"
        raise ValueError(msg)
    if not 0 <= input_index < len(tx.inputs):
        msg = f"Input index {input_index} out of range"
        raise ValueError(msg)
    inp = tx.inputs[input_index]
    return (
        struct.pack("<i", tx.version)
        + hash_prevouts(tx)
        + hash_sequence(tx)
        + inp.outpoint
        + encode_varint(len(script_code))
        + script_code
        + struct.pack("<q", value)
        + struct.pack("<I", inp.sequence)
        + hash_outputs(tx)
        + struct.pack("<I", tx.locktime)
        + struct.pack("<I", sighash_type)
    )


def signature_hash(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    sighash_type: int = SIGHASH_ALL_FORKID,
) -> bytes:
    """Return the 32-byte digest an input signature commits to."""
    return sha256d(signature_preimage(tx, input_index, script_code, value, sighash_type))
