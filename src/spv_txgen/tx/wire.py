"""Wire projection — the read-only form a transport submits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from spv_txgen.tx.signable import SignableTransaction


@dataclass(frozen=True)
class WireTransaction:
    """Serialized transaction as handed to a transport.

    Attributes:
        txid: Transaction ID (display hex).
        raw_hex: Standard raw transaction hex.
        ef_hex: Extended Format hex (inputs carry their spent outputs).
    """

    txid: str
    raw_hex: str
    ef_hex: str

    @classmethod
    def from_signable(cls, signable: SignableTransaction) -> WireTransaction:
        return cls(
            txid=signable.id(),
            raw_hex=signable.tx.to_hex(),
            ef_hex=signable.to_ef_hex(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict."""
        return {"txid": self.txid, "rawTx": self.raw_hex, "efTx": self.ef_hex}
