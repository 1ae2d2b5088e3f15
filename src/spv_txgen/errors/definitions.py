"""Pre-built error instances shared across the package."""

from __future__ import annotations

from spv_txgen.errors.tx_errors import (
    ConfigurationError,
    DoubleCommitError,
    SignAfterCommitError,
)

# -- Configuration ---------------------------------------------------------

ErrNoSigner = ConfigurationError("no signer in tx generator", code="no-signer")

# -- Commit ----------------------------------------------------------------

ErrAlreadyCommitted = DoubleCommitError("pending transaction commit() called multiple times")
ErrSignAfterCommit = SignAfterCommitError("pending transaction is already committed")
