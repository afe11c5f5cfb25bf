"""Configuration for umlmacro."""

from umlmacro.config.loader import (
    DEFAULT_SERVER_URL,
    ExecutorConfig,
    MacroConfig,
    StoreConfig,
    get_config,
    load_config,
    reset_config,
)

__all__ = [
    "DEFAULT_SERVER_URL",
    "ExecutorConfig",
    "MacroConfig",
    "StoreConfig",
    "get_config",
    "load_config",
    "reset_config",
]
