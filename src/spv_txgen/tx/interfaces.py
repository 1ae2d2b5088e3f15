"""Capabilities a pending transaction consumes from its surroundings."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from spv_txgen.tx.pending import PendingTransaction
    from spv_txgen.tx.signable import SignableTransaction
    from spv_txgen.tx.wire import WireTransaction


class Signer(Protocol):
    """Produces a signed copy of a signable transaction.

    Raises :class:`~spv_txgen.errors.tx_errors.CryptoError` on key or
    signature failures.
    """

    def try_sign(
        self, signable: SignableTransaction, addresses: Sequence[str]
    ) -> SignableTransaction: ...


class UtxoLifecycleNotifier(Protocol):
    """Told once per transaction, at commit time, that its UTXOs are spent."""

    async def handle_outgoing_transaction(self, pending: PendingTransaction) -> None: ...


class Transport(Protocol):
    """Broadcasts a transaction and returns the network-assigned txid."""

    async def submit_transaction(self, wire: WireTransaction, allow_orphan: bool) -> str: ...


class TransactionGenerator(Protocol):
    """The generator a pending transaction was produced by."""

    @property
    def signer(self) -> Signer | None: ...

    @property
    def notifier(self) -> UtxoLifecycleNotifier | None: ...
