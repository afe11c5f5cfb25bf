"""Output formats understood by the macro."""

from __future__ import annotations

from enum import Enum

__all__ = ["DEFAULT_FORMAT", "ImageFormat"]


class ImageFormat(str, Enum):
    """PlantUML output format.

    Each member knows its PlantUML server request type, which is also the
    file extension used by the artifact store.
    ``svg_inline`` is accepted as input only; requests normalise it to ``svg``
    rendered as raw markup.
    """

    png = "png"
    svg = "svg"
    svg_inline = "svg_inline"
    txt = "txt"

    @property
    def request_type(self) -> str:
        """PlantUML server request type (the path segment after the server URL)."""
        return _REQUEST_TYPES[self]

    @property
    def extension(self) -> str:
        return _REQUEST_TYPES[self]

    @property
    def is_svg(self) -> bool:
        return self in (ImageFormat.svg, ImageFormat.svg_inline)

    @classmethod
    def parse(cls, value: str | ImageFormat | None) -> ImageFormat | None:
        """Parse a format name, returning None for empty or unknown values."""
        if value is None or isinstance(value, ImageFormat):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_REQUEST_TYPES = {
    ImageFormat.png: "png",
    ImageFormat.svg: "svg",
    ImageFormat.svg_inline: "svg",
    ImageFormat.txt: "txt",
}

# Used when neither the request nor the configuration names a usable format
DEFAULT_FORMAT = ImageFormat.png
