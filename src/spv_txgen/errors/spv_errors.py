"""SPVError — root of the spv-txgen error taxonomy.

Every error carries a machine-readable ``code`` and a suggested HTTP status,
so an API layer wrapping the library can translate it without a lookup table.
"""

from __future__ import annotations


class SPVError(Exception):
    """Base error for pending transaction, signing and transport failures.

    Attributes:
        message: Human-readable description.
        status_code: Suggested HTTP status for API layers.
        code: Stable error code, e.g. ``"double-commit"``.
    """

    def __init__(self, message: str, *, status_code: int = 500, code: str = "spv-error") -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def to_dict(self) -> dict[str, str]:
        """JSON error body: ``{"code": ..., "message": ...}``."""
        return {"code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"
