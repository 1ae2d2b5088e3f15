"""Chain access — broadcasting transactions through ARC."""

from spv_txgen.chain.transport import ARCTransport

__all__ = ["ARCTransport"]
