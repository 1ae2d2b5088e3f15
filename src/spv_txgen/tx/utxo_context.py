"""UTXO context — in-memory tracking of spendable and outgoing UTXOs.

Implements :class:`~spv_txgen.tx.interfaces.UtxoLifecycleNotifier`: when a
pending transaction commits, its UTXOs move from the spendable set to the
consumed set and the transaction is remembered as outgoing until it is
confirmed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

from spv_txgen.errors.tx_errors import UtxoContextError

if TYPE_CHECKING:
    from spv_txgen.tx.pending import PendingTransaction
    from spv_txgen.tx.utxo import UtxoEntryReference

logger = logging.getLogger(__name__)


class UtxoContext:
    """Spendable UTXOs of one wallet account.

    One instance may be shared by submits running in different threads and
    event loops.

    Usage::

        context = UtxoContext()
        context.insert(utxos)
        generator = GeneratorContext(signer=signer, notifier=context)
        await generator.pending(result).submit(transport)
        assert context.is_outgoing(utxos[0].id)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._spendable: dict[str, UtxoEntryReference] = {}
        # utxo id -> txid of the outgoing transaction spending it
        self._consumed: dict[str, str] = {}
        self._outgoing: dict[str, PendingTransaction] = {}

    def insert(self, utxos: Iterable[UtxoEntryReference]) -> None:
        """Add UTXOs to the spendable set; consumed ones are ignored."""
        with self._lock:
            for utxo in utxos:
                if utxo.id not in self._consumed:
                    self._spendable[utxo.id] = utxo

    @property
    def balance(self) -> int:
        """Total satoshis of spendable UTXOs."""
        with self._lock:
            return sum(utxo.satoshis for utxo in self._spendable.values())

    @property
    def spendable(self) -> list[UtxoEntryReference]:
        with self._lock:
            return list(self._spendable.values())

    def is_outgoing(self, utxo_id: str) -> bool:
        """True if *utxo_id* is spent by a committed transaction."""
        with self._lock:
            return utxo_id in self._consumed

    def outgoing_transactions(self) -> dict[str, PendingTransaction]:
        """Committed transactions by txid, as recorded at commit time."""
        with self._lock:
            return dict(self._outgoing)

    async def handle_outgoing_transaction(self, pending: PendingTransaction) -> None:
        """Mark the UTXOs spent by *pending* as consumed.

        Raises:
            UtxoContextError: If another outgoing transaction already spends
                one of the UTXOs.
        """
        txid = pending.id()
        with self._lock:
            for utxo in pending.utxo_entries:
                spender = self._consumed.get(utxo.id)
                if spender is not None and spender != txid:
                    msg = f"utxo {utxo.id} already spent by outgoing transaction {spender}"
                    raise UtxoContextError(msg)
            for utxo in pending.utxo_entries:
                self._spendable.pop(utxo.id, None)
                self._consumed[utxo.id] = txid
            self._outgoing[txid] = pending
        logger.info(
            "Outgoing transaction %s consumes %d utxos (%d sats)",
            txid,
            len(pending.utxo_entries),
            pending.input_aggregate_value,
        )

    async def handle_confirmed_transaction(self, txid: str) -> None:
        """Forget an outgoing transaction once it is mined."""
        with self._lock:
            pending = self._outgoing.pop(txid, None)
            if pending is None:
                return
            for utxo in pending.utxo_entries:
                self._consumed.pop(utxo.id, None)
        logger.info("Outgoing transaction %s confirmed", txid)
