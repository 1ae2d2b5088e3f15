"""Shared test fixtures for the spv-txgen test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from spv_txgen.bsv.address import pubkey_to_address
from spv_txgen.bsv.keys import private_key_to_public_key
from spv_txgen.bsv.script import p2pkh_lock_script_from_pubkey
from spv_txgen.bsv.transaction import Transaction
from spv_txgen.tx.generator import AssemblyResult
from spv_txgen.tx.utxo import UtxoEntry, UtxoEntryReference

if TYPE_CHECKING:
    from collections.abc import Callable

    from spv_txgen.tx.pending import PendingTransaction
    from spv_txgen.tx.wire import WireTransaction

PRIVKEY_A = bytes.fromhex("e8f32e723decf4051aefac8e2c93c9c5b214313817cdb01a1494b917c8436b35")
PRIVKEY_B = bytes.fromhex("aa" * 32)


def make_utxo(
    privkey: bytes, satoshis: int, *, vout: int = 0, seed: str = "11"
) -> UtxoEntryReference:
    """A P2PKH UTXO paying to the address of *privkey*."""
    pubkey = private_key_to_public_key(privkey)
    return UtxoEntryReference(
        txid=seed * 32,
        vout=vout,
        entry=UtxoEntry(satoshis=satoshis, script_pubkey=p2pkh_lock_script_from_pubkey(pubkey)),
        address=pubkey_to_address(pubkey),
    )


def build_result(
    utxos: list[UtxoEntryReference],
    *,
    pay_to: bytes = PRIVKEY_B,
    payment: int | None = 900,
    change: int = 0,
    fees: int = 100,
    is_final: bool = True,
) -> AssemblyResult:
    """An assembly result spending *utxos* to *pay_to*, plus change back to the first UTXO."""
    tx = Transaction()
    for utxo in utxos:
        tx.add_input(utxo.prev_tx_id, utxo.vout)
    pay_script = p2pkh_lock_script_from_pubkey(private_key_to_public_key(pay_to))
    if payment is not None:
        tx.add_output(payment, pay_script)
    if change:
        tx.add_output(change, utxos[0].entry.script_pubkey)
    addresses = list(dict.fromkeys(u.address for u in utxos if u.address is not None))
    total_in = sum(u.satoshis for u in utxos)
    return AssemblyResult(
        transaction=tx,
        utxo_entries=utxos,
        addresses=addresses,
        payment_value=payment,
        change_value=change,
        aggregate_input_value=total_in,
        aggregate_output_value=tx.output_value,
        fees=fees,
        is_final=is_final,
    )


class RecordingNotifier:
    """UTXO lifecycle notifier that records every call."""

    def __init__(self, *, error: Exception | None = None) -> None:
        self.calls: list[PendingTransaction] = []
        self._error = error

    async def handle_outgoing_transaction(self, pending: PendingTransaction) -> None:
        self.calls.append(pending)
        if self._error is not None:
            raise self._error


class RecordingTransport:
    """Transport returning a fixed txid and recording submitted projections."""

    def __init__(self, txid: str = "abc", *, error: Exception | None = None) -> None:
        self.txid = txid
        self.submitted: list[tuple[WireTransaction, bool]] = []
        self._error = error

    async def submit_transaction(self, wire: WireTransaction, allow_orphan: bool) -> str:
        self.submitted.append((wire, allow_orphan))
        if self._error is not None:
            raise self._error
        return self.txid


@pytest.fixture
def utxos() -> list[UtxoEntryReference]:
    """Two UTXOs owned by key A worth 1000 satoshis together."""
    return [make_utxo(PRIVKEY_A, 600, vout=0), make_utxo(PRIVKEY_A, 400, vout=1)]


@pytest.fixture
def result(utxos) -> AssemblyResult:
    """1000 in, 900 paid, 100 fees, no change."""
    return build_result(utxos)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def privkey_a() -> bytes:
    return PRIVKEY_A


@pytest.fixture
def privkey_b() -> bytes:
    return PRIVKEY_B


@pytest.fixture
def utxo_factory() -> Callable[..., UtxoEntryReference]:
    return make_utxo


@pytest.fixture
def result_factory() -> Callable[..., AssemblyResult]:
    return build_result


@pytest.fixture
def notifier_factory() -> type[RecordingNotifier]:
    return RecordingNotifier


@pytest.fixture
def transport_factory() -> type[RecordingTransport]:
    return RecordingTransport
