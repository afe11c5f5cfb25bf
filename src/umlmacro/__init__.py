"""umlmacro - PlantUML diagrams embedded in wiki content.

Features:
- Content-addressed image cache keyed by (format, diagram source)
- PlantUML server (HTTP) or local plantuml command rendering
- SVG scale-to-fit and ASCII plaintext rendering
- Inline or block HTML fragments

Usage:
    from umlmacro import MacroContext, MacroParameters, create_macro

    macro = create_macro()
    fragment = macro.execute(MacroParameters(format="svg"), source, MacroContext())
    html = fragment.to_html()

    # Command line
    umlmacro render diagram.puml --format svg
"""

from importlib.metadata import PackageNotFoundError, version
from typing import Any

try:
    __version__ = version("plantuml-macro")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "DiagramArtifactResolver",
    "ImageFormat",
    "MacroContext",
    "MacroExecutionError",
    "MacroParameters",
    "PlantUMLMacro",
    "RenderedFragment",
    "__version__",
    "create_macro",
]

_LAZY = {
    "DiagramArtifactResolver": "umlmacro.resolver",
    "ImageFormat": "umlmacro.formats",
    "MacroContext": "umlmacro.macro",
    "MacroExecutionError": "umlmacro.errors",
    "MacroParameters": "umlmacro.parameters",
    "PlantUMLMacro": "umlmacro.macro",
    "RenderedFragment": "umlmacro.fragment",
    "create_macro": "umlmacro.macro",
}


def __getattr__(name: str) -> Any:
    """Lazy imports so importing the package does not load configuration."""
    module_name = _LAZY.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    import importlib

    return getattr(importlib.import_module(module_name), name)
