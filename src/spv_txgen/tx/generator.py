"""Generator context — binds the signer and UTXO context a result is created with."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from spv_txgen.tx.pending import PendingTransaction

if TYPE_CHECKING:
    from spv_txgen.bsv.transaction import Transaction
    from spv_txgen.tx.interfaces import Signer, UtxoLifecycleNotifier
    from spv_txgen.tx.utxo import UtxoEntryReference


@dataclass
class AssemblyResult:
    """A transaction as decided by UTXO selection and fee calculation.

    Attributes:
        transaction: Unsigned transaction body.
        utxo_entries: UTXOs spent by the body, in input order.
        addresses: Addresses owning those UTXOs.
        payment_value: Destination amount (None for consolidations).
        change_value: Change returned to the wallet.
        aggregate_input_value: Sum of spent UTXO values.
        aggregate_output_value: Sum of output values.
        fees: Miner fee paid.
        is_final: False when this is one step of a multi-transaction batch.
    """

    transaction: Transaction
    utxo_entries: list[UtxoEntryReference]
    addresses: list[str]
    change_value: int
    aggregate_input_value: int
    aggregate_output_value: int
    fees: int
    payment_value: int | None = None
    is_final: bool = True


@dataclass
class GeneratorContext:
    """Capabilities shared by every pending transaction a generator produces."""

    signer: Signer | None = None
    notifier: UtxoLifecycleNotifier | None = None

    def pending(self, result: AssemblyResult) -> PendingTransaction:
        """Wrap an assembly result in a :class:`PendingTransaction` bound to this context."""
        return PendingTransaction.create(
            self,
            result.transaction,
            result.utxo_entries,
            result.addresses,
            result.payment_value,
            result.change_value,
            result.aggregate_input_value,
            result.aggregate_output_value,
            result.fees,
            result.is_final,
        )
