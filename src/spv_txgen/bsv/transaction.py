"""Transaction codec — the body that gets signed, hashed and broadcast.

Inputs and outputs serialize exactly as they appear on the wire; the txid is
the reversed double SHA-256 of that serialization, so it covers the
unlocking scripts and changes when inputs are signed.
"""

from __future__ import annotations

import copy
import struct
from dataclasses import dataclass, field
from io import BytesIO

from spv_txgen.utils.crypto import sha256d_hex

_I32 = struct.Struct("<i")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_I64 = struct.Struct("<q")

# Final sequence number: relative locktime disabled
DEFAULT_SEQUENCE = 0xFFFFFFFF


def _read_exact(stream: BytesIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        msg = f"Unexpected end of stream reading {what}"
        raise ValueError(msg)
    return data


# ---------------------------------------------------------------------------
# VarInt and length-prefixed bytes
# ---------------------------------------------------------------------------


def encode_varint(n: int) -> bytes:
    """Encode *n* as a CompactSize integer."""
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + _U16.pack(n)
    if n <= 0xFFFFFFFF:
        return b"\xfe" + _U32.pack(n)
    return b"\xff" + _U64.pack(n)


def read_varint(stream: BytesIO) -> int:
    """Read a CompactSize integer from *stream*."""
    prefix = _read_exact(stream, 1, "varint")[0]
    if prefix < 0xFD:
        return prefix
    codec = {0xFD: _U16, 0xFE: _U32, 0xFF: _U64}[prefix]
    return codec.unpack(_read_exact(stream, codec.size, "varint"))[0]


def var_bytes(data: bytes) -> bytes:
    """*data* prefixed with its CompactSize length."""
    return encode_varint(len(data)) + data


def read_var_bytes(stream: BytesIO, what: str) -> bytes:
    return _read_exact(stream, read_varint(stream), what)


# ---------------------------------------------------------------------------
# Inputs and outputs
# ---------------------------------------------------------------------------


@dataclass
class TxInput:
    """A spend of one previous output.

    Attributes:
        prev_tx_id: 32-byte hash of the spent transaction (internal byte order).
        prev_tx_out_index: Output index within that transaction.
        script_sig: Unlocking script; empty until signed.
        sequence: Sequence number.
    """

    prev_tx_id: bytes
    prev_tx_out_index: int
    script_sig: bytes = b""
    sequence: int = DEFAULT_SEQUENCE

    @property
    def prev_tx_id_hex(self) -> str:
        """Spent txid as displayed by explorers (reversed)."""
        return self.prev_tx_id[::-1].hex()

    @property
    def outpoint(self) -> bytes:
        """The 36-byte outpoint: txid followed by little-endian vout."""
        return self.prev_tx_id + _U32.pack(self.prev_tx_out_index)

    @property
    def is_signed(self) -> bool:
        return bool(self.script_sig)

    def serialize(self) -> bytes:
        return self.outpoint + var_bytes(self.script_sig) + _U32.pack(self.sequence)

    @classmethod
    def deserialize(cls, stream: BytesIO) -> TxInput:
        prev_tx_id = _read_exact(stream, 32, "prev_tx_id")
        (index,) = _U32.unpack(_read_exact(stream, 4, "prev_tx_out_index"))
        script_sig = read_var_bytes(stream, "script_sig")
        (sequence,) = _U32.unpack(_read_exact(stream, 4, "sequence"))
        return cls(prev_tx_id, index, script_sig, sequence)


@dataclass
class TxOutput:
    """Satoshis locked to a script.

    The same layout carries a spent output inside Extended Format inputs.
    """

    value: int
    script_pubkey: bytes

    def serialize(self) -> bytes:
        return _I64.pack(self.value) + var_bytes(self.script_pubkey)

    @classmethod
    def deserialize(cls, stream: BytesIO) -> TxOutput:
        (value,) = _I64.unpack(_read_exact(stream, 8, "value"))
        return cls(value, read_var_bytes(stream, "script_pubkey"))


# ---------------------------------------------------------------------------
# Transaction
# ---------------------------------------------------------------------------


@dataclass
class Transaction:
    """A BSV transaction body."""

    version: int = 1
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    locktime: int = 0

    def serialize(self) -> bytes:
        parts = [_I32.pack(self.version), encode_varint(len(self.inputs))]
        parts.extend(inp.serialize() for inp in self.inputs)
        parts.append(encode_varint(len(self.outputs)))
        parts.extend(out.serialize() for out in self.outputs)
        parts.append(_U32.pack(self.locktime))
        return b"".join(parts)

    def to_hex(self) -> str:
        return self.serialize().hex()

    @classmethod
    def deserialize(cls, stream: BytesIO) -> Transaction:
        (version,) = _I32.unpack(_read_exact(stream, 4, "version"))
        inputs = [TxInput.deserialize(stream) for _ in range(read_varint(stream))]
        outputs = [TxOutput.deserialize(stream) for _ in range(read_varint(stream))]
        (locktime,) = _U32.unpack(_read_exact(stream, 4, "locktime"))
        return cls(version, inputs, outputs, locktime)

    @classmethod
    def from_hex(cls, hex_str: str) -> Transaction:
        """Parse a raw transaction.

        Raises:
            ValueError: On malformed hex, truncation or trailing bytes.
        """
        stream = BytesIO(bytes.fromhex(hex_str))
        tx = cls.deserialize(stream)
        if stream.read(1):
            msg = "Trailing bytes after transaction"
            raise ValueError(msg)
        return tx

    def txid(self) -> str:
        return sha256d_hex(self.serialize())

    def copy(self) -> Transaction:
        """Independent deep copy; scripts and lists are not shared."""
        return copy.deepcopy(self)

    @property
    def size(self) -> int:
        return len(self.serialize())

    @property
    def output_value(self) -> int:
        """Satoshis paid out across all outputs."""
        return sum(out.value for out in self.outputs)

    def add_input(
        self,
        prev_tx_id: bytes,
        prev_tx_out_index: int,
        script_sig: bytes = b"",
        sequence: int = DEFAULT_SEQUENCE,
    ) -> TxInput:
        inp = TxInput(prev_tx_id, prev_tx_out_index, script_sig, sequence)
        self.inputs.append(inp)
        return inp

    def add_output(self, value: int, script_pubkey: bytes) -> TxOutput:
        out = TxOutput(value, script_pubkey)
        self.outputs.append(out)
        return out
