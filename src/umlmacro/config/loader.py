"""YAML configuration loading for umlmacro.

Loads umlmacro.yaml with the PlantUML server, default format and image
store settings.

Example umlmacro.yaml:

    log_level: INFO
    server_url: https://www.plantuml.com/plantuml
    image_format: svg
    timeout: 30

    store:
      dir: .umlmacro/images
      base_url: /plantuml/images
      ttl: 86400

    executor:
      max_workers: 4
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from umlmacro.errors import ConfigurationError
from umlmacro.formats import DEFAULT_FORMAT, ImageFormat
from umlmacro.paths import (
    CONFIG_FILE_NAME,
    get_global_dir,
    get_project_dir,
    resolve_project_path,
)

__all__ = [
    "ExecutorConfig",
    "MacroConfig",
    "StoreConfig",
    "get_config",
    "load_config",
    "reset_config",
]

DEFAULT_SERVER_URL = "https://www.plantuml.com/plantuml"


class StoreConfig(BaseModel):
    """Artifact store configuration."""

    dir: str = Field(
        default=".umlmacro/images",
        description="Directory for rendered artifacts (relative to cwd)",
    )
    base_url: str = Field(
        default="",
        description="Public URL prefix for stored artifacts (file:// URIs when empty)",
    )
    ttl: int = Field(
        default=0,
        ge=0,
        description="Seconds before a stored artifact is evicted (0 = never)",
    )


class ExecutorConfig(BaseModel):
    """Background rendering configuration."""

    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Threads rendering block diagrams in the background",
    )


class MacroConfig(BaseModel):
    """Root configuration for the PlantUML macro."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    server_url: str | None = Field(
        default=DEFAULT_SERVER_URL,
        description="PlantUML server URL (null or empty renders with the local plantuml command)",
    )
    image_format: str = Field(
        default=DEFAULT_FORMAT.value,
        description="Format used when a macro does not name one (png, svg, txt)",
    )
    timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="PlantUML server/command timeout in seconds",
    )
    plantuml_command: str = Field(
        default="plantuml",
        description="Local PlantUML executable used when no server is configured",
    )
    store: StoreConfig = Field(default_factory=StoreConfig)
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)

    def default_server(self) -> str | None:
        """Configured server URL, or None to render locally."""
        if not self.server_url or not self.server_url.strip():
            return None
        return self.server_url.strip()

    def default_format(self) -> ImageFormat:
        """Configured default format, falling back to png when unusable."""
        fmt = ImageFormat.parse(self.image_format)
        if fmt is None:
            logger.warning(
                f"Unknown image_format '{self.image_format}' in configuration, "
                f"using {DEFAULT_FORMAT.value}"
            )
            return DEFAULT_FORMAT
        return fmt

    def get_store_path(self) -> Path:
        """Get resolved path for the artifact store directory."""
        return resolve_project_path(self.store.dir)


def _find_config_file() -> Path | None:
    """Locate a config file when none is given explicitly.

    Resolution order:
    1. UMLMACRO_CONFIG env var
    2. cwd/.umlmacro/umlmacro.yaml
    3. ~/.umlmacro/umlmacro.yaml
    """
    env_config = os.getenv("UMLMACRO_CONFIG")
    if env_config:
        return Path(env_config).expanduser()

    for candidate in (
        get_project_dir() / CONFIG_FILE_NAME,
        get_global_dir() / CONFIG_FILE_NAME,
    ):
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Path | str | None = None) -> MacroConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to config file (overrides resolution)

    Returns:
        Validated MacroConfig (defaults when no file exists)

    Raises:
        ConfigurationError: If the file is unreadable, not YAML, or invalid.
    """
    path = Path(config_path) if config_path is not None else _find_config_file()
    if path is None or not path.exists():
        return MacroConfig()

    try:
        with path.open(encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error reading {path}: {e}") from e

    if raw_data is None:
        raw_data = {}

    try:
        config = MacroConfig.model_validate(raw_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e

    logger.debug(f"Loaded configuration from {path}")
    return config


# Global config instance
_config: MacroConfig | None = None


def get_config(config_path: Path | str | None = None, reload: bool = False) -> MacroConfig:
    """Get or load the global configuration.

    Args:
        config_path: Path to config file (only used on first load)
        reload: Force reload configuration
    """
    global _config

    if _config is None or reload:
        _config = load_config(config_path)

    return _config


def reset_config() -> None:
    """Forget the loaded configuration."""
    global _config
    _config = None
