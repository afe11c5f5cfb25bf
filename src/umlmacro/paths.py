"""Path resolution for umlmacro global and project directories.

- Global: ~/.umlmacro/ (user-wide configuration)
- Project: .umlmacro/ under the working directory (configuration, image store)
"""

from __future__ import annotations

import os
from pathlib import Path

GLOBAL_DIR_NAME = ".umlmacro"
PROJECT_DIR_NAME = ".umlmacro"
CONFIG_FILE_NAME = "umlmacro.yaml"


def get_effective_cwd() -> Path:
    """Get the working directory, honouring UMLMACRO_CWD when set."""
    env_cwd = os.getenv("UMLMACRO_CWD")
    if env_cwd:
        return Path(env_cwd).expanduser().resolve()
    return Path.cwd()


def get_global_dir() -> Path:
    return Path.home() / GLOBAL_DIR_NAME


def get_project_dir() -> Path:
    return get_effective_cwd() / PROJECT_DIR_NAME


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a path relative to the working directory.

    ``~`` is expanded and absolute paths are returned as-is.
    """
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_effective_cwd() / p).resolve()
