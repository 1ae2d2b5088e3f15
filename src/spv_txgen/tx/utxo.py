"""UTXO records — the full input data a signable transaction spends."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UtxoEntry:
    """The spent output itself: what signing and EF encoding need.

    Attributes:
        satoshis: Output value in satoshis.
        script_pubkey: Locking script of the output.
        height: Block height of the creating transaction (0 if unconfirmed).
        is_coinbase: Whether the output was created by a coinbase transaction.
    """

    satoshis: int
    script_pubkey: bytes
    height: int = 0
    is_coinbase: bool = False


@dataclass(frozen=True)
class UtxoEntryReference:
    """A wallet UTXO: outpoint, output data and the owning address.

    Attributes:
        txid: Creating transaction ID (display hex).
        vout: Output index in the creating transaction.
        entry: The output data.
        address: P2PKH address the output pays to, if known.
    """

    txid: str
    vout: int
    entry: UtxoEntry
    address: str | None = None

    @property
    def id(self) -> str:
        """``txid:vout`` composite key."""
        return f"{self.txid}:{self.vout}"

    @property
    def satoshis(self) -> int:
        return self.entry.satoshis

    @property
    def prev_tx_id(self) -> bytes:
        """Creating transaction ID in internal byte order, as stored in inputs."""
        return bytes.fromhex(self.txid)[::-1]
