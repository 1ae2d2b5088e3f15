"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``SPVTXGEN_``, nested via ``__``)
2. YAML config file (``SPVTXGEN_CONFIG_PATH`` env var or :meth:`AppConfig.from_yaml`)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class ArcWaitFor(enum.StrEnum):
    """ARC broadcast wait strategy."""

    SEEN_ON_NETWORK = "SEEN_ON_NETWORK"
    STORED = "STORED"
    ANNOUNCED_TO_NETWORK = "ANNOUNCED_TO_NETWORK"
    REQUESTED_BY_NETWORK = "REQUESTED_BY_NETWORK"
    SENT_TO_NETWORK = "SENT_TO_NETWORK"


class LogLevel(enum.StrEnum):
    """Root logger levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ARCConfig(BaseSettings):
    """ARC transaction broadcaster settings."""

    model_config = SettingsConfigDict(
        env_prefix="SPVTXGEN_ARC__",
        case_sensitive=False,
    )

    url: str = "https://arc.taal.com"
    token: str = ""
    deployment_id: str = ""
    callback_url: str = ""
    callback_token: str = ""
    wait_for: ArcWaitFor = ArcWaitFor.SEEN_ON_NETWORK
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")


class SignerConfig(BaseSettings):
    """Keys for the bound transaction signer."""

    model_config = SettingsConfigDict(
        env_prefix="SPVTXGEN_SIGNER__",
        case_sensitive=False,
    )

    wif_keys: list[str] = Field(
        default_factory=list,
        description="WIF-encoded private keys the signer may use",
    )


class LogConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(
        env_prefix="SPVTXGEN_LOG__",
        case_sensitive=False,
    )

    level: LogLevel = LogLevel.INFO
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level configuration.

    Loads settings from environment variables (``SPVTXGEN_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPVTXGEN_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    testnet: bool = False
    config_path: str = ""

    arc: ARCConfig = Field(default_factory=ARCConfig)
    signer: SignerConfig = Field(default_factory=SignerConfig)
    log: LogConfig = Field(default_factory=LogConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        for key, val in _load_yaml(config_path).items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                # YAML fills in keys the environment left unset
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
