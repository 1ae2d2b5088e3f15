"""Transport errors — submission rejected or network failure."""

from __future__ import annotations

from spv_txgen.errors.spv_errors import SPVError


class TransportError(SPVError):
    """A transport failed to submit a transaction."""

    def __init__(
        self, message: str, *, status_code: int = 502, code: str = "transport-error"
    ) -> None:
        super().__init__(message, status_code=status_code, code=code)


class ARCError(TransportError):
    """Error from ARC transaction broadcaster."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="arc-error")
