"""Pending transaction errors — configuration, signing, commit, UTXO tracking."""

from __future__ import annotations

from spv_txgen.errors.spv_errors import SPVError


class ConfigurationError(SPVError):
    """A required capability is not bound; indicates misuse, never retried."""

    def __init__(self, message: str, *, code: str = "configuration-error") -> None:
        super().__init__(message, status_code=500, code=code)


class CryptoError(SPVError):
    """Key material or signature creation failed."""

    def __init__(self, message: str, *, code: str = "crypto-error") -> None:
        super().__init__(message, status_code=422, code=code)


class PendingTransactionError(SPVError):
    """The assembled transaction does not agree with the UTXOs it claims to spend."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=400, code="pending-tx-invalid")


class DoubleCommitError(SPVError):
    """A pending transaction was committed a second time.

    Correct callers never see this: each instance may be submitted once.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=409, code="double-commit")


class SignAfterCommitError(SPVError):
    """Signing was attempted on a transaction that is already committed."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=409, code="sign-after-commit")


class UtxoContextError(SPVError):
    """The UTXO context refused to track an outgoing transaction."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=409, code="utxo-context-error")
