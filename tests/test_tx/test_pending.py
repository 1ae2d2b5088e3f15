"""Tests for PendingTransaction — economics, signing, commit and submit."""

from __future__ import annotations

import pytest

from spv_txgen.bsv.address import address_to_pubkey_hash
from spv_txgen.bsv.script import read_pushes
from spv_txgen.errors.chain_errors import TransportError
from spv_txgen.errors.tx_errors import (
    ConfigurationError,
    CryptoError,
    DoubleCommitError,
    PendingTransactionError,
    SignAfterCommitError,
    UtxoContextError,
)
from spv_txgen.tx.generator import GeneratorContext
from spv_txgen.tx.pending import PendingTransaction
from spv_txgen.tx.sign import KeySigner, is_fully_signed, verify_input
from spv_txgen.tx.signable import SignableTransaction
from spv_txgen.utils.crypto import hash160

# ---------------------------------------------------------------------------
# Construction and accessors
# ---------------------------------------------------------------------------


class TestCreate:
    def test_economics(self, result) -> None:
        pending = GeneratorContext().pending(result)
        assert pending.fees == 100
        assert pending.input_aggregate_value == 1000
        assert pending.output_aggregate_value == 900
        assert pending.payment_value == 900
        assert pending.change_value == 0
        assert pending.is_final is True
        assert pending.is_batch is False
        assert pending.is_committed is False

    def test_batch_element(self, utxos, result_factory) -> None:
        pending = GeneratorContext().pending(result_factory(utxos, is_final=False))
        assert pending.is_final is False
        assert pending.is_batch is True

    def test_consolidation_has_no_payment_value(self, utxos, result_factory) -> None:
        result = result_factory(utxos, payment=None, change=950, fees=50)
        pending = GeneratorContext().pending(result)
        assert pending.payment_value is None
        assert pending.change_value == 950

    def test_spend_set_is_immutable(self, result, utxos) -> None:
        pending = GeneratorContext().pending(result)
        assert isinstance(pending.utxo_entries, tuple)
        assert isinstance(pending.addresses, tuple)
        assert [u.id for u in pending.utxo_entries] == [u.id for u in utxos]
        result.utxo_entries.clear()
        result.addresses.clear()
        assert len(pending.utxo_entries) == 2
        assert len(pending.addresses) == 1

    def test_payload_carries_utxo_entries(self, result, utxos) -> None:
        pending = GeneratorContext().pending(result)
        signable = pending.signable_transaction()
        assert signable.entries == [u.entry for u in utxos]
        assert signable.input_value == 1000

    def test_input_count_mismatch(self, result) -> None:
        with pytest.raises(PendingTransactionError, match="2 inputs but 1"):
            PendingTransaction.create(
                GeneratorContext(),
                result.transaction,
                result.utxo_entries[:1],
                result.addresses,
                900,
                0,
                1000,
                900,
                100,
                True,
            )

    def test_outpoint_mismatch(self, result) -> None:
        reordered = list(reversed(result.utxo_entries))
        with pytest.raises(PendingTransactionError, match="input 0"):
            PendingTransaction.create(
                GeneratorContext(),
                result.transaction,
                reordered,
                result.addresses,
                900,
                0,
                1000,
                900,
                100,
                True,
            )

    def test_repr(self, result) -> None:
        pending = GeneratorContext().pending(result)
        assert "fees=100" in repr(pending)


# ---------------------------------------------------------------------------
# Identifier and payload snapshots
# ---------------------------------------------------------------------------


class TestIdentifier:
    def test_stable_without_signing(self, result) -> None:
        pending = GeneratorContext().pending(result)
        assert pending.id() == pending.id()
        assert pending.id() == result.transaction.txid()

    def test_changes_after_sign(self, result, privkey_a) -> None:
        pending = GeneratorContext(signer=KeySigner([privkey_a])).pending(result)
        before = pending.id()
        pending.sign()
        assert pending.id() != before
        assert pending.id() == pending.transaction().txid()

    def test_transaction_is_a_snapshot(self, result) -> None:
        pending = GeneratorContext().pending(result)
        snapshot = pending.transaction()
        snapshot.inputs[0].script_sig = b"\x01\x02"
        snapshot.outputs.clear()
        assert pending.transaction().inputs[0].script_sig == b""
        assert len(pending.transaction().outputs) == 1

    def test_wire_projection(self, result) -> None:
        pending = GeneratorContext().pending(result)
        wire = pending.wire_transaction()
        assert wire.txid == pending.id()
        assert wire.raw_hex == pending.transaction().to_hex()
        assert wire.ef_hex == pending.signable_transaction().to_ef_hex()


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------


class TestSign:
    def test_no_signer_is_configuration_error(self, result) -> None:
        pending = GeneratorContext().pending(result)
        with pytest.raises(ConfigurationError, match="no signer"):
            pending.sign()
        assert pending.transaction().inputs[0].script_sig == b""

    def test_signatures_validate_against_addresses(self, result, privkey_a) -> None:
        pending = GeneratorContext(signer=KeySigner([privkey_a])).pending(result)
        pending.sign()
        signable = pending.signable_transaction()
        assert is_fully_signed(signable)
        allowed = {address_to_pubkey_hash(a) for a in pending.addresses}
        for inp in signable.tx.inputs:
            _sig, pubkey = read_pushes(inp.script_sig)
            assert hash160(pubkey) in allowed

    def test_signer_missing_key_is_crypto_error(self, result, privkey_b) -> None:
        pending = GeneratorContext(signer=KeySigner([privkey_b])).pending(result)
        before = pending.id()
        with pytest.raises(CryptoError, match="no private key"):
            pending.sign()
        assert pending.id() == before

    def test_resign_is_idempotent(self, result, privkey_a) -> None:
        pending = GeneratorContext(signer=KeySigner([privkey_a])).pending(result)
        pending.sign()
        first = pending.id()
        pending.sign()
        assert pending.id() == first

    def test_sign_with_keys(self, result, privkey_a) -> None:
        pending = GeneratorContext().pending(result)
        pending.sign_with_keys([privkey_a])
        assert is_fully_signed(pending.signable_transaction())

    def test_sign_with_keys_partial(
        self, utxo_factory, result_factory, privkey_a, privkey_b
    ) -> None:
        utxos = [utxo_factory(privkey_a, 500, vout=0), utxo_factory(privkey_b, 500, vout=1)]
        pending = GeneratorContext().pending(result_factory(utxos))
        pending.sign_with_keys([privkey_a])
        signable = pending.signable_transaction()
        assert verify_input(signable, 0)
        assert not verify_input(signable, 1)
        pending.sign_with_keys([privkey_b])
        assert is_fully_signed(pending.signable_transaction())

    def test_sign_with_invalid_key(self, result) -> None:
        pending = GeneratorContext().pending(result)
        with pytest.raises(CryptoError):
            pending.sign_with_keys([b"\x00" * 32])

    async def test_sign_after_commit_rejected(self, result, privkey_a, transport) -> None:
        pending = GeneratorContext(signer=KeySigner([privkey_a])).pending(result)
        await pending.submit(transport)
        submitted_id = pending.id()
        with pytest.raises(SignAfterCommitError):
            pending.sign()
        with pytest.raises(SignAfterCommitError):
            pending.sign_with_keys([privkey_a])
        assert pending.id() == submitted_id


# ---------------------------------------------------------------------------
# Commit and submit
# ---------------------------------------------------------------------------


class TestSubmit:
    async def test_submit_commits_notifies_and_broadcasts(
        self, result, privkey_a, notifier, transport
    ) -> None:
        generator = GeneratorContext(signer=KeySigner([privkey_a]), notifier=notifier)
        pending = generator.pending(result)
        pending.sign()

        txid = await pending.submit(transport)

        assert txid == "abc"
        assert pending.is_committed
        assert notifier.calls == [pending]
        assert len(transport.submitted) == 1
        wire, allow_orphan = transport.submitted[0]
        assert wire == pending.wire_transaction()
        assert allow_orphan is False

    async def test_second_submit_is_double_commit(self, result, notifier, transport) -> None:
        pending = GeneratorContext(notifier=notifier).pending(result)
        assert await pending.submit(transport) == "abc"

        with pytest.raises(DoubleCommitError):
            await pending.submit(transport)

        assert len(transport.submitted) == 1
        assert len(notifier.calls) == 1

    async def test_example_scenario(self, result, notifier, transport) -> None:
        pending = GeneratorContext(notifier=notifier).pending(result)
        assert pending.fees == 100
        assert pending.is_batch is False
        assert await pending.submit(transport) == "abc"
        assert len(notifier.calls) == 1
        with pytest.raises(DoubleCommitError):
            await pending.submit(transport)
        assert len(transport.submitted) == 1

    async def test_submit_without_notifier(self, result, transport) -> None:
        pending = GeneratorContext().pending(result)
        await pending.submit(transport, allow_orphan=True)
        assert transport.submitted[0][1] is True

    async def test_transport_error_leaves_committed(
        self, result, notifier, transport_factory
    ) -> None:
        failing = transport_factory(error=TransportError("network down"))
        pending = GeneratorContext(notifier=notifier).pending(result)

        with pytest.raises(TransportError, match="network down"):
            await pending.submit(failing)
        assert pending.is_committed

        with pytest.raises(DoubleCommitError):
            await pending.submit(failing)
        assert len(failing.submitted) == 1
        assert len(notifier.calls) == 1

    async def test_notifier_error_skips_transport(
        self, result, notifier_factory, transport
    ) -> None:
        notifier = notifier_factory(error=UtxoContextError("conflict"))
        pending = GeneratorContext(notifier=notifier).pending(result)
        with pytest.raises(UtxoContextError):
            await pending.submit(transport)
        assert pending.is_committed
        assert transport.submitted == []

    async def test_broadcast_carries_signed_payload(self, result, privkey_a, transport) -> None:
        pending = GeneratorContext(signer=KeySigner([privkey_a])).pending(result)
        pending.sign()
        await pending.submit(transport)
        wire = transport.submitted[0][0]
        assert wire.txid == pending.id()
        assert wire.raw_hex == pending.transaction().to_hex()


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class TestLog:
    def test_log_emits_txid(self, result, caplog) -> None:
        pending = GeneratorContext().pending(result)
        with caplog.at_level("INFO", logger="spv_txgen.tx.pending"):
            pending.log()
        assert pending.id() in caplog.text

    def test_log_failure_does_not_raise(self, result, caplog, monkeypatch) -> None:
        pending = GeneratorContext().pending(result)

        def broken() -> None:
            raise RuntimeError("boom")

        monkeypatch.setattr(pending, "wire_transaction", broken)
        with caplog.at_level("ERROR", logger="spv_txgen.tx.pending"):
            pending.log()
        assert "Failed to log" in caplog.text
        assert pending.is_committed is False

    def test_create_skips_id_when_debug_disabled(self, result, caplog, monkeypatch) -> None:
        calls: list[str] = []
        real_id = PendingTransaction.id

        def counting_id(self) -> str:
            calls.append("id")
            return real_id(self)

        monkeypatch.setattr(PendingTransaction, "id", counting_id)
        with caplog.at_level("INFO", logger="spv_txgen.tx.pending"):
            GeneratorContext().pending(result)
        assert calls == []

    def test_create_logs_id_at_debug(self, result, caplog) -> None:
        with caplog.at_level("DEBUG", logger="spv_txgen.tx.pending"):
            pending = GeneratorContext().pending(result)
        assert f"Pending transaction {pending.id()} created" in caplog.text

    def test_sign_skips_id_when_debug_disabled(
        self, result, privkey_a, caplog, monkeypatch
    ) -> None:
        pending = GeneratorContext().pending(result)
        calls: list[str] = []
        real_id = SignableTransaction.id

        def counting_id(self) -> str:
            calls.append("id")
            return real_id(self)

        monkeypatch.setattr(SignableTransaction, "id", counting_id)
        with caplog.at_level("INFO", logger="spv_txgen.tx.pending"):
            pending.sign_with_keys([privkey_a])
        assert calls == []
