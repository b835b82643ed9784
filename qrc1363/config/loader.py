"""
qRC-1363 TOML Configuration Loader

Loads config.toml with environment variable overrides, one dataclass per
section (dataclass + from_dict + apply_env + validate).

Environment variable mapping:
    [token] name             → QRC1363_TOKEN_NAME
    [token] symbol           → QRC1363_TOKEN_SYMBOL
    [token] initial_supply   → QRC1363_INITIAL_SUPPLY
    [callbacks] max_call_depth → QRC1363_MAX_CALL_DEPTH
    [logging] level          → QRC1363_LOG_LEVEL
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .. import constants
from ..constants import (
    QRC20_DEFAULT_DECIMALS,
    QRC20_MAX_DECIMALS,
    QRC20_MAX_SUPPLY,
    max_call_depth,
)
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_int(name: str) -> Optional[int]:
    v = os.environ.get(name)
    if not v:
        return None
    try:
        return int(v)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {v!r}") from e


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass
class TokenSectionConfig:
    """[token] section."""
    name: str = "Payable Token"
    symbol: str = "PAY"
    decimals: int = QRC20_DEFAULT_DECIMALS
    initial_supply: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenSectionConfig":
        return cls(
            name=data.get("name", "Payable Token"),
            symbol=data.get("symbol", "PAY"),
            decimals=data.get("decimals", QRC20_DEFAULT_DECIMALS),
            initial_supply=data.get("initial_supply", 0),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("QRC1363_TOKEN_NAME"):
            self.name = v
        if v := os.environ.get("QRC1363_TOKEN_SYMBOL"):
            self.symbol = v
        if (v := _env_int("QRC1363_INITIAL_SUPPLY")) is not None:
            self.initial_supply = v

    def validate(self) -> None:
        if not self.name:
            raise ConfigurationError("token.name cannot be empty")
        if not self.symbol:
            raise ConfigurationError("token.symbol cannot be empty")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int) \
                or not 0 <= self.decimals <= QRC20_MAX_DECIMALS:
            raise ConfigurationError(f"token.decimals must be 0-{QRC20_MAX_DECIMALS}")
        if isinstance(self.initial_supply, bool) or not isinstance(self.initial_supply, int) \
                or self.initial_supply < 0:
            raise ConfigurationError("token.initial_supply must be a non-negative integer")
        if self.initial_supply > QRC20_MAX_SUPPLY:
            raise ConfigurationError(f"token.initial_supply exceeds max {QRC20_MAX_SUPPLY}")


@dataclass
class CallbacksConfig:
    """[callbacks] section."""
    max_call_depth: int = field(default_factory=max_call_depth)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CallbacksConfig":
        return cls(
            max_call_depth=data.get("max_call_depth", max_call_depth()),
        )

    def apply_env(self) -> None:
        if (v := _env_int("QRC1363_MAX_CALL_DEPTH")) is not None:
            self.max_call_depth = v

    def validate(self) -> None:
        if isinstance(self.max_call_depth, bool) or not isinstance(self.max_call_depth, int) \
                or self.max_call_depth < 1:
            raise ConfigurationError("callbacks.max_call_depth must be >= 1")


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"
    console: bool = True
    file_output: bool = False
    file: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=str(data.get("level", "INFO")).upper(),
            console=data.get("console", True),
            file_output=data.get("file_output", False),
            file=data.get("file", ""),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("QRC1363_LOG_LEVEL"):
            self.level = v.upper()

    def validate(self) -> None:
        if self.level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid logging.level: {self.level}")


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


@dataclass
class QRC1363Config:
    """Complete configuration (all sections)."""
    token: TokenSectionConfig = field(default_factory=TokenSectionConfig)
    callbacks: CallbacksConfig = field(default_factory=CallbacksConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QRC1363Config":
        return cls(
            token=TokenSectionConfig.from_dict(data.get("token", {})),
            callbacks=CallbacksConfig.from_dict(data.get("callbacks", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "QRC1363Config":
        """
        Load configuration from a TOML file.

        A missing file yields defaults (with env overrides); a malformed one
        raises ConfigurationError.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.token.apply_env()
        self.callbacks.apply_env()
        self.logging.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        self.token.validate()
        self.callbacks.validate()
        self.logging.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": {
                "name": self.token.name,
                "symbol": self.token.symbol,
                "decimals": self.token.decimals,
                "initial_supply": self.token.initial_supply,
            },
            "callbacks": {
                "max_call_depth": self.callbacks.max_call_depth,
            },
            "logging": {
                "level": self.logging.level,
                "console": self.logging.console,
                "file_output": self.logging.file_output,
                "file": self.logging.file,
            },
        }


def load_config(path: Optional[str] = None) -> QRC1363Config:
    """
    Load and validate configuration.

    Resolution order:
        1. Explicit *path* argument
        2. QRC1363_CONFIG env var
        3. QRC1363_CONFIG from .env (default ./config.toml)
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("QRC1363_CONFIG") or str(constants.QRC1363_CONFIG)

    cfg = QRC1363Config.from_file(path)
    cfg.validate()
    return cfg
