"""
qRC-1363 Configuration

Loads config.toml; environment variables override TOML values.
"""

from .loader import (
    CallbacksConfig,
    LoggingConfig,
    QRC1363Config,
    TokenSectionConfig,
    load_config,
)

__all__ = [
    "CallbacksConfig",
    "LoggingConfig",
    "QRC1363Config",
    "TokenSectionConfig",
    "load_config",
]
