"""ARC response models for ``POST /v1/tx`` and ``GET /v1/tx/{txid}``."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class TXStatus(enum.StrEnum):
    """Where ARC says a transaction is.

    Progress runs QUEUED → RECEIVED → STORED → ANNOUNCED_TO_NETWORK →
    REQUESTED_BY_NETWORK → SENT_TO_NETWORK → ACCEPTED_BY_NETWORK →
    SEEN_ON_NETWORK → MINED. REJECTED and DOUBLE_SPEND_ATTEMPTED end it.
    """

    UNKNOWN = "UNKNOWN"
    QUEUED = "QUEUED"
    RECEIVED = "RECEIVED"
    STORED = "STORED"
    ANNOUNCED_TO_NETWORK = "ANNOUNCED_TO_NETWORK"
    REQUESTED_BY_NETWORK = "REQUESTED_BY_NETWORK"
    SENT_TO_NETWORK = "SENT_TO_NETWORK"
    ACCEPTED_BY_NETWORK = "ACCEPTED_BY_NETWORK"
    SEEN_ON_NETWORK = "SEEN_ON_NETWORK"
    MINED = "MINED"
    DOUBLE_SPEND_ATTEMPTED = "DOUBLE_SPEND_ATTEMPTED"
    REJECTED = "REJECTED"

    @classmethod
    def from_string(cls, value: str) -> TXStatus:
        """Parse *value*; statuses newer than this client map to UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


_REJECTED = frozenset({TXStatus.REJECTED, TXStatus.DOUBLE_SPEND_ATTEMPTED})


@dataclass
class TXInfo:
    """Status of one transaction as reported by ARC.

    ``tx_status`` keeps the raw string so unknown statuses survive a
    round trip; use :attr:`status` for comparisons.
    """

    txid: str = ""
    tx_status: str = ""
    block_hash: str = ""
    block_height: int = 0
    timestamp: str = ""
    competing_txs: list[str] = field(default_factory=list)
    extra_info: str = ""

    @property
    def status(self) -> TXStatus:
        return TXStatus.from_string(self.tx_status)

    @property
    def is_rejected(self) -> bool:
        return self.status in _REJECTED

    @property
    def rejection_reason(self) -> str:
        """Why ARC refused the transaction, for error messages."""
        if self.extra_info:
            return self.extra_info
        if self.competing_txs:
            return f"double spend, competing with {', '.join(self.competing_txs)}"
        return self.tx_status or "no reason given"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TXInfo:
        """Build from an ARC JSON body; ARC sends nulls for unset fields."""
        return cls(
            txid=data.get("txid") or "",
            tx_status=data.get("txStatus") or "",
            block_hash=data.get("blockHash") or "",
            block_height=data.get("blockHeight") or 0,
            timestamp=str(data.get("timestamp") or ""),
            competing_txs=list(data.get("competingTxs") or []),
            extra_info=data.get("extraInfo") or "",
        )
