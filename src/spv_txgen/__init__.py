"""spv-txgen — signing and exactly-once submission of generated BSV transactions."""

__version__ = "0.1.0"
