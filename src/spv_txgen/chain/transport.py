"""ARC transport — submits pending transactions through :class:`ARCService`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from spv_txgen.errors.chain_errors import ARCError

if TYPE_CHECKING:
    from spv_txgen.chain.arc.service import ARCService
    from spv_txgen.tx.wire import WireTransaction

logger = logging.getLogger(__name__)


class ARCTransport:
    """A :class:`~spv_txgen.tx.interfaces.Transport` backed by ARC.

    Broadcasts the Extended Format hex so ARC can validate inputs without
    fetching parent transactions.
    """

    def __init__(self, service: ARCService) -> None:
        self._service = service

    async def submit_transaction(self, wire: WireTransaction, allow_orphan: bool) -> str:
        """Broadcast *wire* and return the txid ARC reports.

        ARC keeps no orphan pool; *allow_orphan* is accepted for interface
        compatibility and has no effect.

        Raises:
            ARCError: If the request fails or ARC rejects the transaction.
        """
        if allow_orphan:
            logger.debug("ARC has no orphan pool; allow_orphan ignored for %s", wire.txid)
        info = await self._service.broadcast(wire.ef_hex)
        if info.is_rejected:
            msg = f"transaction {wire.txid} rejected: {info.rejection_reason}"
            logger.warning("ARC rejected %s: %s", wire.txid, info.rejection_reason)
            raise ARCError(msg, status_code=422)
        return info.txid or wire.txid
