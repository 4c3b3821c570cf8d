"""
Agent wallet settings.

A validated, typed settings layer that is the single source of truth for all
configuration. Environment variables (optionally from a `.env` file) are read
and validated at startup so misconfigurations surface early.

Usage:
    from app.core.settings import settings

    store = load_store(settings.WALLET_FILE)
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class SignerType(Enum):
    """Primary signer backends."""

    KEY_FILE = "key_file"
    ENV_PRIVATE_KEY = "env_private_key"
    KEYSTORE = "keystore"
    REMOTE = "remote"
    NONE = "none"


class SettingsValidationError(Exception):
    """Raised when settings validation fails."""

    def __init__(self, field: str, value: Any, message: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid configuration for {field}={value!r}: {message}")


def _parse_int(value: str | None, default: int | None = None) -> int | None:
    """Parse an integer from environment variable."""
    if value is None or value.strip() == "":
        return default
    try:
        return int(value.strip(), 0)  # Support hex with 0x prefix
    except ValueError:
        return default


def _parse_float(value: str | None, default: float | None = None) -> float | None:
    """Parse a float from environment variable."""
    if value is None or value.strip() == "":
        return default
    try:
        return float(value.strip())
    except ValueError:
        return default


def _default_path(env_name: str, relative: str) -> str:
    raw = (os.getenv(env_name) or "").strip()
    if raw:
        return str(Path(raw).expanduser())
    return str(Path.home() / relative)


def _get_version_from_pyproject() -> str:
    """Extract version from pyproject.toml."""
    try:
        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        version: str = str(data.get("project", {}).get("version", "0.0.0"))
        return version
    except (OSError, tomllib.TOMLDecodeError):
        return "0.0.0"


def _signer_type() -> SignerType:
    raw = os.getenv("SIGNER_TYPE", "key_file").strip().lower()
    if raw in [e.value for e in SignerType]:
        return SignerType(raw)
    return SignerType.KEY_FILE


@dataclass
class Settings:
    """
    Unified settings class with validation.

    All configuration is loaded and validated at instantiation time.
    """

    # Project metadata (read from pyproject.toml)
    PROJECT_NAME: str = "mcp-wallet"
    VERSION: str = field(default_factory=_get_version_from_pyproject)

    # Wallet storage
    WALLET_FILE: str = field(default_factory=lambda: _default_path("WALLET_FILE", ".mcp-wallet.json"))
    WALLET_KEY_FILE: str = field(default_factory=lambda: _default_path("WALLET_KEY_FILE", ".mcp-wallet/key.json"))

    # Signer settings
    SIGNER_TYPE: SignerType = field(default_factory=_signer_type)
    PRIVATE_KEY: str | None = field(default_factory=lambda: os.getenv("PRIVATE_KEY"))
    KEYSTORE_PATH: str | None = field(default_factory=lambda: os.getenv("KEYSTORE_PATH"))
    KEYSTORE_PASSWORD: str | None = field(default_factory=lambda: os.getenv("KEYSTORE_PASSWORD"))
    SIGNER_REMOTE_URL: str | None = field(default_factory=lambda: os.getenv("SIGNER_REMOTE_URL"))

    # Chain access
    RPC_URL: str = field(default_factory=lambda: os.getenv("RPC_URL", "http://127.0.0.1:8545").strip())
    HTTP_TIMEOUT_SEC: float = field(default_factory=lambda: _parse_float(os.getenv("HTTP_TIMEOUT_SEC"), 10.0) or 10.0)
    DEFAULT_CHAIN_ID: int = field(default_factory=lambda: _parse_int(os.getenv("DEFAULT_CHAIN_ID"), 1) or 1)

    # Fee defaults for one-shot transfers (20 gwei / 1.5 gwei)
    DEFAULT_MAX_FEE_PER_GAS_WEI: int = field(
        default_factory=lambda: _parse_int(os.getenv("DEFAULT_MAX_FEE_PER_GAS_WEI"), 20_000_000_000) or 0
    )
    DEFAULT_MAX_PRIORITY_FEE_PER_GAS_WEI: int = field(
        default_factory=lambda: _parse_int(os.getenv("DEFAULT_MAX_PRIORITY_FEE_PER_GAS_WEI"), 1_500_000_000) or 0
    )

    # Observability
    WALLET_LOG_LEVEL: str = field(default_factory=lambda: os.getenv("WALLET_LOG_LEVEL", "info").strip().lower())
    WALLET_SERVICE_NAME: str = field(default_factory=lambda: os.getenv("WALLET_SERVICE_NAME", "mcp-wallet").strip())

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate all settings and emit security warnings."""
        import warnings

        errors: list[str] = []

        if not self.RPC_URL.startswith(("http://", "https://")):
            errors.append(f"RPC_URL must be an http(s) URL, got {self.RPC_URL!r}")

        if self.HTTP_TIMEOUT_SEC <= 0:
            errors.append(f"HTTP_TIMEOUT_SEC must be > 0, got {self.HTTP_TIMEOUT_SEC}")

        if self.DEFAULT_CHAIN_ID <= 0:
            errors.append(f"DEFAULT_CHAIN_ID must be > 0, got {self.DEFAULT_CHAIN_ID}")

        if self.DEFAULT_MAX_PRIORITY_FEE_PER_GAS_WEI > self.DEFAULT_MAX_FEE_PER_GAS_WEI:
            errors.append("DEFAULT_MAX_PRIORITY_FEE_PER_GAS_WEI must not exceed DEFAULT_MAX_FEE_PER_GAS_WEI")

        if self.WALLET_LOG_LEVEL not in ("debug", "info", "warning", "error"):
            errors.append(f"WALLET_LOG_LEVEL must be one of debug/info/warning/error, got {self.WALLET_LOG_LEVEL!r}")

        # Signer must be configured for the selected backend
        if self.SIGNER_TYPE == SignerType.ENV_PRIVATE_KEY and not self.PRIVATE_KEY:
            errors.append("PRIVATE_KEY required when SIGNER_TYPE=env_private_key")
        elif self.SIGNER_TYPE == SignerType.KEYSTORE and (not self.KEYSTORE_PATH or not self.KEYSTORE_PASSWORD):
            errors.append("KEYSTORE_PATH and KEYSTORE_PASSWORD required when SIGNER_TYPE=keystore")
        elif self.SIGNER_TYPE == SignerType.REMOTE and not self.SIGNER_REMOTE_URL:
            errors.append("SIGNER_REMOTE_URL required when SIGNER_TYPE=remote")

        if self.SIGNER_TYPE == SignerType.REMOTE and self.SIGNER_REMOTE_URL:
            if self.SIGNER_REMOTE_URL.strip().startswith("http://"):
                warnings.warn(
                    "SIGNER_REMOTE_URL uses plain http: signing requests are not encrypted in transit.",
                    UserWarning,
                    stacklevel=3,
                )

        if errors:
            raise SettingsValidationError("MULTIPLE", None, "; ".join(errors))

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary (redacting secrets)."""
        result: dict[str, Any] = {}
        for key in dir(self):
            if key.startswith("_") or key.isupper() is False:
                continue
            value = getattr(self, key)
            # Redact sensitive values
            if any(s in key.upper() for s in ["SECRET", "PASSWORD", "PRIVATE_KEY", "TOKEN"]):
                result[key] = "***REDACTED***" if value else None
            elif isinstance(value, Enum):
                result[key] = value.value
            else:
                result[key] = value
        return result


# Global settings instance
settings = Settings()
