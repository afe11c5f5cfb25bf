"""Plaintext diagram rendering.

PlantUML's ``txt`` output draws boxes with the Unicode box-drawing block
(U+2500..U+257F). Not every font renders those glyphs on a fixed grid, so
they are mapped to ASCII approximations and the text is escaped into an
HTML fragment in one pass.
"""

from __future__ import annotations

__all__ = [
    "BOX_DRAWING_FIRST",
    "BOX_DRAWING_LAST",
    "BOX_DRAWING_TABLE",
    "MONOSPACE_FONTS",
    "escape_plaintext",
    "text_container",
    "transliterate",
]

BOX_DRAWING_FIRST = 0x2500
BOX_DRAWING_LAST = 0x257F

# Indexed by code point - BOX_DRAWING_FIRST
# fmt: off
BOX_DRAWING_TABLE: tuple[str, ...] = (
    # 2500-250F: light/heavy lines, dashes, down-right corners
    "-", "-", "|", "|", "-", "-", "|", "|", "-", "-", "|", "|", ",", ",", ",", ",",
    # 2510-251F: down-left, up-right, up-left corners, vertical-right tees
    ".", ".", ".", ".", "`", "`", "`", "`", "'", "'", "'", "'", "+", "+", "+", "+",
    # 2520-252F: vertical-right, vertical-left, down-horizontal tees
    "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+",
    # 2530-253F: down-horizontal, up-horizontal tees, crossings
    "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+",
    # 2540-254F: crossings, heavy double dashes
    "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "+", "-", "-", "|", "|",
    # 2550-255F: double lines, double corners, double vertical-right tees
    "=", "#", ",", ",", ",", ".", ".", ".", "`", "`", "`", "'", "'", "'", "#", "#",
    # 2560-256F: double tees, double crossings, arc corners
    "#", "#", "#", "#", "=", "=", "=", "=", "=", "=", "#", "#", "#", ",", ".", "'",
    # 2570-257F: arc corner, diagonals, half lines
    "`", "/", "\\", '"', "-", "|", "-", "|", "-", "|", "-", "|", "-", "|", "-", "|",
)
# fmt: on

# Characters that must be escaped in the HTML fragment
_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    " ": "&nbsp;",
    "\n": "<br/>",
    "\r": "<br/>",
}

MONOSPACE_FONTS = (
    "'SFMono-Regular', Menlo, Monaco, Consolas, 'Liberation Mono', "
    "'Courier New', monospace"
)


def transliterate(char: str) -> str:
    """Map a single character to its ASCII approximation or HTML escape."""
    code = ord(char)
    if BOX_DRAWING_FIRST <= code <= BOX_DRAWING_LAST:
        return BOX_DRAWING_TABLE[code - BOX_DRAWING_FIRST]
    return _ESCAPES.get(char, char)


def escape_plaintext(text: str) -> str:
    """Transliterate and escape PlantUML plaintext output.

    Characters are processed left to right in a single pass. A carriage
    return directly followed by a line feed produces one line break.

    Args:
        text: Decoded ``txt`` output from PlantUML.

    Returns:
        The escaped text, without a container.
    """
    parts: list[str] = []
    length = len(text)
    for index, char in enumerate(text):
        if char == "\r" and index + 1 < length and text[index + 1] == "\n":
            continue
        parts.append(transliterate(char))
    return "".join(parts)


def text_container(body: str, inline: bool = False) -> str:
    """Wrap escaped text in a monospace container.

    Block placement uses a ``div``. Inline placement uses an inline-block
    ``span`` so the text sits inside a line of surrounding content.
    """
    style = f"font-family: {MONOSPACE_FONTS}; white-space: nowrap;"
    if inline:
        return f'<span class="plantuml-text" style="display: inline-block; {style}">{body}</span>'
    return f'<div class="plantuml-text" style="{style}">{body}</div>'
