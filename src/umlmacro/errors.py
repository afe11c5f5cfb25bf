"""Error taxonomy for the PlantUML macro.

Collaborators raise the specific errors; the resolver wraps whichever one
aborted a render into a single MacroExecutionError that names the diagram.
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "GenerationError",
    "MacroError",
    "MacroExecutionError",
    "StoreIOError",
]

# Sources longer than this are identified by their artifact key in messages
MAX_QUOTED_SOURCE = 200


class MacroError(Exception):
    """Base class for all macro errors."""


class GenerationError(MacroError):
    """The PlantUML server or local command failed or rejected the source."""


class StoreIOError(MacroError):
    """Reading, writing or locating an artifact in the store failed."""


class ConfigurationError(MacroError):
    """A configuration file or server URL could not be used."""


class MacroExecutionError(MacroError):
    """Single failure surfaced to callers of the macro.

    Attributes:
        source: The diagram source that failed to render.
        key: The artifact key of the request, when it was computed.
    """

    def __init__(self, action: str, source: str, key: str | None = None) -> None:
        self.source = source
        self.key = key
        super().__init__(f"Failed to {action} for content [{describe_source(source, key)}]")


def describe_source(source: str, key: str | None = None) -> str:
    """Return the source itself, or its artifact key when the source is large."""
    if len(source) <= MAX_QUOTED_SOURCE:
        return source
    if key is not None:
        return f"key:{key}"
    return source[:MAX_QUOTED_SOURCE] + "..."
