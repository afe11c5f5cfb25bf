"""SVG post-processing for raw inline embedding."""

from __future__ import annotations

import re

__all__ = ["SCALE_FIT_STYLE", "scale_to_fit"]

# Opening <svg ...> tag (not <svg:foo> or <svgfoo>)
_SVG_TAG = re.compile(r"<svg(?=[\s/>])[^>]*>", re.IGNORECASE)
_STYLE_ATTR = re.compile(r"""\sstyle\s*=\s*(["'])(.*?)\1""", re.IGNORECASE | re.DOTALL)
_DIMENSION_ATTR = re.compile(r"""\s(width|height)\s*=\s*(["'])[^"']*\2""", re.IGNORECASE)
_DIMENSION_DECL = re.compile(r"(?<![\w-])(width|height)\s*:[^;]*;?", re.IGNORECASE)

SCALE_FIT_STYLE = {
    "width": "width:auto;max-width:100%;",
    "height": "height:auto;max-height:100%;",
}


def scale_to_fit(svg: str) -> str:
    """Make the root SVG element scale down to the width of its container.

    Fixed ``width``/``height`` declarations in the opening tag's ``style``
    are replaced with ``auto`` sizing capped at 100%. Dimensions given as
    attributes get the same treatment through ``style``, which takes
    precedence over presentation attributes. Every other attribute and the
    rest of the document are left untouched.

    Args:
        svg: SVG markup as produced by PlantUML.

    Returns:
        The rewritten markup, or the input unchanged when no ``<svg`` opening
        tag is found.
    """
    match = _SVG_TAG.search(svg)
    if match is None:
        return svg

    tag = match.group(0)
    style_match = _STYLE_ATTR.search(tag)
    style = style_match.group(2) if style_match else ""

    dimensions = {m.group(1).lower() for m in _DIMENSION_ATTR.finditer(tag)}
    dimensions.update(m.group(1).lower() for m in _DIMENSION_DECL.finditer(style))
    if not dimensions:
        return svg

    remaining = _DIMENSION_DECL.sub("", style).strip()
    fitted = "".join(SCALE_FIT_STYLE[dim] for dim in ("width", "height") if dim in dimensions)
    new_style = fitted + remaining

    if style_match:
        quote = style_match.group(1)
        new_tag = (
            tag[: style_match.start()]
            + f" style={quote}{new_style}{quote}"
            + tag[style_match.end() :]
        )
    else:
        insert_at = len(tag) - 2 if tag.endswith("/>") else len(tag) - 1
        new_tag = tag[:insert_at] + f' style="{new_style}"' + tag[insert_at:]

    return svg[: match.start()] + new_tag + svg[match.end() :]
