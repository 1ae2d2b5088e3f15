"""Signable transaction — a body plus the UTXO entries its inputs spend."""

from __future__ import annotations

import copy
import struct
from dataclasses import dataclass, field

from spv_txgen.bsv.transaction import Transaction, TxOutput, encode_varint
from spv_txgen.tx.utxo import UtxoEntry

# BRC-30 Extended Format marker, written after the version field
EF_MARKER = b"\x00\x00\x00\x00\x00\xef"


@dataclass
class SignableTransaction:
    """The unit that gets signed and eventually broadcast.

    Attributes:
        tx: The transaction body.
        entries: One :class:`UtxoEntry` per input, in input order.
    """

    tx: Transaction
    entries: list[UtxoEntry] = field(default_factory=list)

    @classmethod
    def with_entries(cls, tx: Transaction, entries: list[UtxoEntry]) -> SignableTransaction:
        """Pair a body with its spent entries.

        Raises:
            ValueError: If the entry count differs from the input count.
        """
        if len(entries) != len(tx.inputs):
            msg = f"Expected {len(tx.inputs)} UTXO entries, got {len(entries)}"
            raise ValueError(msg)
        return cls(tx=tx, entries=list(entries))

    def id(self) -> str:
        """Transaction ID of the current body."""
        return self.tx.txid()

    def clone(self) -> SignableTransaction:
        """Return an independent deep copy."""
        return copy.deepcopy(self)

    @property
    def input_value(self) -> int:
        """Sum of the spent entries in satoshis."""
        return sum(entry.satoshis for entry in self.entries)

    def to_ef_bytes(self) -> bytes:
        """Serialize in Extended Format: every input carries its spent output.

        ARC validates fees and scripts from EF without looking up parents.
        """
        tx = self.tx
        parts = [struct.pack("<i", tx.version), EF_MARKER, encode_varint(len(tx.inputs))]
        for inp, entry in zip(tx.inputs, self.entries, strict=True):
            parts.append(inp.serialize())
            parts.append(TxOutput(entry.satoshis, entry.script_pubkey).serialize())
        parts.append(encode_varint(len(tx.outputs)))
        parts.extend(out.serialize() for out in tx.outputs)
        parts.append(struct.pack("<I", tx.locktime))
        return b"".join(parts)

    def to_ef_hex(self) -> str:
        return self.to_ef_bytes().hex()
