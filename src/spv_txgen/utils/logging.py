"""Root logger setup driven by :class:`~spv_txgen.config.settings.LogConfig`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spv_txgen.config.settings import LogConfig


def configure_logging(config: LogConfig) -> None:
    """Apply the configured level and format to the root logger."""
    logging.basicConfig(level=config.level.value, format=config.format, force=True)
    logging.getLogger(__name__).debug("Logging configured at %s", config.level.value)
