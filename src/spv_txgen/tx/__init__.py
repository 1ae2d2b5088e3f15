"""Pending transactions — signing and exactly-once submission of generated transactions."""

from spv_txgen.tx.generator import AssemblyResult, GeneratorContext
from spv_txgen.tx.interfaces import (
    Signer,
    TransactionGenerator,
    Transport,
    UtxoLifecycleNotifier,
)
from spv_txgen.tx.pending import PendingTransaction
from spv_txgen.tx.sign import KeySigner, is_fully_signed, sign_with_keys, verify_input
from spv_txgen.tx.signable import SignableTransaction
from spv_txgen.tx.utxo import UtxoEntry, UtxoEntryReference
from spv_txgen.tx.utxo_context import UtxoContext
from spv_txgen.tx.wire import WireTransaction

__all__ = [
    "AssemblyResult",
    "GeneratorContext",
    "KeySigner",
    "PendingTransaction",
    "SignableTransaction",
    "Signer",
    "TransactionGenerator",
    "Transport",
    "UtxoContext",
    "UtxoEntry",
    "UtxoEntryReference",
    "UtxoLifecycleNotifier",
    "WireTransaction",
    "is_fully_signed",
    "sign_with_keys",
    "verify_input",
]
