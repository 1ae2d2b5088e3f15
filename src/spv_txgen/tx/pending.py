"""Pending transaction — a generated transaction on its way to the network.

A :class:`PendingTransaction` carries one generator result through signing
and submission:

1. Created by the generator with an unsigned body and its economics.
2. Signed zero or more times; each signing replaces the payload wholesale.
3. Submitted once: commit (UTXO context notified) → broadcast.

The payload sits behind a lock held only for a single read or replace, never
across the signer, notifier or transport. Commit is a separate one-shot gate,
so economics readers never contend with either.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from spv_txgen.errors.definitions import ErrAlreadyCommitted, ErrNoSigner, ErrSignAfterCommit
from spv_txgen.errors.tx_errors import PendingTransactionError
from spv_txgen.tx.sign import sign_with_keys
from spv_txgen.tx.signable import SignableTransaction
from spv_txgen.tx.wire import WireTransaction

if TYPE_CHECKING:
    from spv_txgen.bsv.transaction import Transaction
    from spv_txgen.tx.interfaces import TransactionGenerator, Transport
    from spv_txgen.tx.utxo import UtxoEntryReference

logger = logging.getLogger(__name__)


class PendingTransaction:
    """A generated transaction plus its economics, committed at most once.

    Instances are shared: a UI and a submission task may hold the same object.
    Economics and the spend set are fixed at construction; only the signable
    payload changes, and only through :meth:`sign` / :meth:`sign_with_keys`.
    """

    def __init__(
        self,
        generator: TransactionGenerator,
        signable: SignableTransaction,
        utxo_entries: Sequence[UtxoEntryReference],
        addresses: Sequence[str],
        *,
        payment_value: int | None,
        change_value: int,
        aggregate_input_value: int,
        aggregate_output_value: int,
        fees: int,
        is_final: bool,
    ) -> None:
        self._generator = generator
        self._signable = signable
        self._signable_lock = threading.Lock()
        # Acquired once, never released: the commit gate.
        self._commit_gate = threading.Lock()
        self._utxo_entries = tuple(utxo_entries)
        self._addresses = tuple(addresses)
        self._payment_value = payment_value
        self._change_value = change_value
        self._aggregate_input_value = aggregate_input_value
        self._aggregate_output_value = aggregate_output_value
        self._fees = fees
        self._is_final = is_final

    @classmethod
    def create(
        cls,
        generator: TransactionGenerator,
        transaction: Transaction,
        utxo_entries: Sequence[UtxoEntryReference],
        addresses: Sequence[str],
        payment_value: int | None,
        change_value: int,
        aggregate_input_value: int,
        aggregate_output_value: int,
        fees: int,
        is_final: bool,
    ) -> PendingTransaction:
        """Build a pending transaction from a generator result.

        The UTXO entries become the input records of the signable payload.

        Raises:
            PendingTransactionError: If the inputs of *transaction* do not
                spend exactly *utxo_entries*, in order.
        """
        if len(transaction.inputs) != len(utxo_entries):
            msg = (
                f"transaction has {len(transaction.inputs)} inputs "
                f"but {len(utxo_entries)} UTXO entries were supplied"
            )
            raise PendingTransactionError(msg)
        for index, (inp, ref) in enumerate(zip(transaction.inputs, utxo_entries, strict=True)):
            if inp.prev_tx_id != ref.prev_tx_id or inp.prev_tx_out_index != ref.vout:
                msg = (
                    f"input {index} spends {inp.prev_tx_id_hex}:{inp.prev_tx_out_index}, "
                    f"expected {ref.id}"
                )
                raise PendingTransactionError(msg)

        signable = SignableTransaction.with_entries(
            transaction, [ref.entry for ref in utxo_entries]
        )
        pending = cls(
            generator,
            signable,
            utxo_entries,
            addresses,
            payment_value=payment_value,
            change_value=change_value,
            aggregate_input_value=aggregate_input_value,
            aggregate_output_value=aggregate_output_value,
            fees=fees,
            is_final=is_final,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Pending transaction %s created: %d inputs, fees %d, final=%s",
                pending.id(),
                len(utxo_entries),
                fees,
                is_final,
            )
        return pending

    # ------------------------------------------------------------------
    # Identity and payload views
    # ------------------------------------------------------------------

    def id(self) -> str:
        """Transaction ID of the current payload.

        Not cached: signing replaces the payload and with it the ID.
        """
        with self._signable_lock:
            return self._signable.id()

    def transaction(self) -> Transaction:
        """Independent copy of the current transaction body."""
        with self._signable_lock:
            return self._signable.tx.copy()

    def signable_transaction(self) -> SignableTransaction:
        """Independent copy of the current payload (body and UTXO entries)."""
        with self._signable_lock:
            return self._signable.clone()

    def wire_transaction(self) -> WireTransaction:
        """Wire projection of the current payload."""
        with self._signable_lock:
            return WireTransaction.from_signable(self._signable)

    # ------------------------------------------------------------------
    # Fixed properties
    # ------------------------------------------------------------------

    @property
    def addresses(self) -> tuple[str, ...]:
        """Addresses of the UTXOs this transaction spends."""
        return self._addresses

    @property
    def utxo_entries(self) -> tuple[UtxoEntryReference, ...]:
        """UTXOs this transaction spends, in input order."""
        return self._utxo_entries

    @property
    def fees(self) -> int:
        return self._fees

    @property
    def input_aggregate_value(self) -> int:
        return self._aggregate_input_value

    @property
    def output_aggregate_value(self) -> int:
        return self._aggregate_output_value

    @property
    def payment_value(self) -> int | None:
        """Destination amount; None for consolidation (sweep) transactions."""
        return self._payment_value

    @property
    def change_value(self) -> int:
        return self._change_value

    @property
    def is_final(self) -> bool:
        """True for a standalone transaction, False for one batch element."""
        return self._is_final

    @property
    def is_batch(self) -> bool:
        return not self._is_final

    @property
    def is_committed(self) -> bool:
        return self._commit_gate.locked()

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign(self) -> None:
        """Sign with the signer bound to the generator.

        Raises:
            ConfigurationError: If the generator has no signer.
            CryptoError: If the signer fails.
            SignAfterCommitError: If the transaction is already committed.
        """
        signer = self._generator.signer
        if signer is None:
            raise ErrNoSigner
        signed = signer.try_sign(self._payload_for_signing(), self._addresses)
        self._replace_payload(signed)

    def sign_with_keys(self, private_keys: Iterable[bytes]) -> None:
        """Sign with explicitly supplied 32-byte private keys.

        The result may be partially signed; completeness is not checked.

        Raises:
            CryptoError: If a key is malformed.
            SignAfterCommitError: If the transaction is already committed.
        """
        signed = sign_with_keys(self._payload_for_signing(), private_keys)
        self._replace_payload(signed)

    def _payload_for_signing(self) -> SignableTransaction:
        if self.is_committed:
            raise ErrSignAfterCommit
        with self._signable_lock:
            return self._signable.clone()

    def _replace_payload(self, signed: SignableTransaction) -> None:
        with self._signable_lock:
            # Checked under the lock: submit reads the payload only after commit.
            if self.is_committed:
                raise ErrSignAfterCommit
            self._signable = signed
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Pending transaction signed, id now %s", signed.id())

    # ------------------------------------------------------------------
    # Commit and submit
    # ------------------------------------------------------------------

    async def _commit(self) -> None:
        """Flip the commit gate and notify the UTXO context, exactly once.

        Raises:
            DoubleCommitError: If the transaction was committed before.
        """
        if not self._commit_gate.acquire(blocking=False):
            raise ErrAlreadyCommitted
        txid = self.id()
        logger.info("Committing transaction %s", txid)
        notifier = self._generator.notifier
        if notifier is not None:
            await notifier.handle_outgoing_transaction(self)

    async def submit(self, transport: Transport, *, allow_orphan: bool = False) -> str:
        """Commit the transaction and broadcast it.

        An instance is submitted once whatever the outcome; a failed
        broadcast leaves it committed, so retries need a new instance.

        Returns:
            The transaction ID assigned by the network.

        Raises:
            DoubleCommitError: If the transaction was already submitted.
            TransportError: If the broadcast fails.
        """
        await self._commit()
        wire = self.wire_transaction()
        txid = await transport.submit_transaction(wire, allow_orphan)
        logger.info("Transaction %s submitted", txid)
        return txid

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def log(self) -> None:
        """Log the wire projection. Never raises and never changes state."""
        try:
            wire = self.wire_transaction()
            logger.info(
                "pending transaction %s (final=%s, fees=%d, committed=%s): %s",
                wire.txid,
                self._is_final,
                self._fees,
                self.is_committed,
                wire.raw_hex,
            )
        except Exception:
            logger.exception("Failed to log pending transaction")

    def __repr__(self) -> str:
        return (
            f"PendingTransaction(inputs={len(self._utxo_entries)}, fees={self._fees}, "
            f"final={self._is_final}, committed={self.is_committed})"
        )
