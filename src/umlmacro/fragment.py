"""Embeddable output of the macro."""

from __future__ import annotations

import html
from dataclasses import dataclass, replace
from enum import Enum

from umlmacro.transliterate import text_container

__all__ = ["FragmentKind", "RenderedFragment", "Wrapper", "wrap_for_display"]

DIAGRAM_CLASS = "plantuml"


class FragmentKind(str, Enum):
    """How the artifact is represented in the document."""

    IMAGE = "image"  # reference to the stored artifact URL
    RAW = "raw"  # raw markup spliced into the page (inline SVG)
    TEXT = "text"  # escaped plaintext in a monospace container


class Wrapper(str, Enum):
    BLOCK = "block"
    INLINE = "inline"


@dataclass(frozen=True)
class RenderedFragment:
    """A rendered diagram ready to splice into a document.

    Attributes:
        kind: Representation of the artifact.
        body: Image URL for IMAGE, markup for RAW, escaped text for TEXT
            (its container is chosen by the wrapper).
        inline_flow: True when the representation lays out inline by nature.
        wrapper: Container added for the requested display context, if any.
        key: Artifact key the fragment was produced from.
    """

    kind: FragmentKind
    body: str
    inline_flow: bool
    wrapper: Wrapper | None = None
    key: str = ""

    def inner_html(self) -> str:
        if self.kind is FragmentKind.IMAGE:
            return f'<img src="{html.escape(self.body, quote=True)}" alt="PlantUML diagram"/>'
        if self.kind is FragmentKind.TEXT:
            return text_container(self.body, inline=self.wrapper is Wrapper.INLINE)
        return self.body

    def to_html(self) -> str:
        """Serialize the fragment, including its display wrapper."""
        inner = self.inner_html()
        if self.wrapper is Wrapper.BLOCK:
            return f'<div class="{DIAGRAM_CLASS}">{inner}</div>'
        if self.wrapper is Wrapper.INLINE:
            return f'<span class="{DIAGRAM_CLASS}">{inner}</span>'
        return inner


def wrap_for_display(fragment: RenderedFragment, is_inline: bool) -> RenderedFragment:
    """Coerce a fragment to the requested display context.

    Inline-flow representations (images, inline SVG) requested as a block get
    a block container; block-flow representations requested inline get an
    inline container. At most one wrapper applies.
    """
    if not is_inline and fragment.inline_flow:
        wrapper: Wrapper | None = Wrapper.BLOCK
    elif is_inline and not fragment.inline_flow:
        wrapper = Wrapper.INLINE
    else:
        wrapper = None
    return replace(fragment, wrapper=wrapper)
