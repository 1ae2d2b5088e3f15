"""ARC — transaction broadcasting and status queries."""

from spv_txgen.chain.arc.models import TXInfo, TXStatus
from spv_txgen.chain.arc.service import ARCService

__all__ = ["ARCService", "TXInfo", "TXStatus"]
