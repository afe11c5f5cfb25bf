"""The PlantUML macro as seen by a rendering host.

Inline diagrams render synchronously, since the surrounding line of text
cannot be laid out without them. Block diagrams go through the background
executor unless the host asks for immediate rendering.
"""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path

from umlmacro.config import MacroConfig, get_config
from umlmacro.executor import RenderExecutor
from umlmacro.fragment import RenderedFragment
from umlmacro.generator import PlantUMLGenerator
from umlmacro.parameters import MacroParameters
from umlmacro.resolver import DiagramArtifactResolver
from umlmacro.store import ImageStore

__all__ = ["MacroContext", "PlantUMLMacro", "create_macro"]

DESCRIPTION = "Convert various text input formats into diagram images using PlantUML."
CONTENT_DESCRIPTION = "The textual definition of the diagram"


@dataclass(frozen=True)
class MacroContext:
    """Where the macro is being executed.

    Attributes:
        is_inline: The macro sits inside a paragraph rather than on its own.
        immediate: The host needs the result now and cannot defer rendering.
    """

    is_inline: bool = False
    immediate: bool = False


class PlantUMLMacro:
    """Macro that generates an image from a textual description, using PlantUML."""

    name = "plantuml"
    description = DESCRIPTION
    content_description = CONTENT_DESCRIPTION
    supports_inline_mode = True

    def __init__(self, resolver: DiagramArtifactResolver, executor: RenderExecutor) -> None:
        self.resolver = resolver
        self.executor = executor

    def execute(
        self,
        parameters: MacroParameters,
        content: str,
        context: MacroContext | None = None,
    ) -> RenderedFragment:
        """Render the macro and wait for the result.

        Raises:
            MacroExecutionError: If the diagram cannot be rendered.
        """
        return self.execute_async(parameters, content, context).result()

    def execute_async(
        self,
        parameters: MacroParameters,
        content: str,
        context: MacroContext | None = None,
    ) -> Future[RenderedFragment]:
        """Render the macro, returning a future for the fragment.

        Inline and immediate contexts are rendered on the calling thread and
        come back as an already-completed future.
        """
        context = context or MacroContext()
        request = self.resolver.request_from_parameters(parameters, content)

        if context.is_inline or context.immediate:
            future: Future[RenderedFragment] = Future()
            try:
                future.set_result(self.resolver.resolve_request(request, context.is_inline))
            except Exception as e:
                future.set_exception(e)
            return future

        is_inline = context.is_inline
        return self.executor.submit(
            (request, is_inline),
            lambda: self.resolver.resolve_request(request, is_inline),
        )

    def close(self) -> None:
        """Wait for background renders and stop the executor."""
        self.executor.shutdown()


def create_macro(
    config: MacroConfig | None = None,
    *,
    config_path: Path | str | None = None,
) -> PlantUMLMacro:
    """Assemble a macro from configuration.

    Args:
        config: Configuration to use (loaded via get_config when None)
        config_path: Config file used when loading
    """
    if config is None:
        config = get_config(config_path)

    store = ImageStore(
        store_dir=config.get_store_path(),
        base_url=config.store.base_url,
        ttl=config.store.ttl,
    )
    generator = PlantUMLGenerator(timeout=config.timeout, command=config.plantuml_command)
    resolver = DiagramArtifactResolver(generator, store, config)
    return PlantUMLMacro(resolver, RenderExecutor(config.executor.max_workers))
