"""Diagram artifact resolution.

Turns diagram source into an embeddable fragment:

1. Compute the artifact key from (format, source)
2. Read the artifact from the store, generating it on a miss
3. Post-process it for the format and wrap it for the display context
"""

from __future__ import annotations

from umlmacro.config import MacroConfig
from umlmacro.errors import (
    GenerationError,
    MacroExecutionError,
    StoreIOError,
)
from umlmacro.formats import ImageFormat
from umlmacro.fragment import FragmentKind, RenderedFragment, wrap_for_display
from umlmacro.generator import DiagramGenerator
from umlmacro.keys import artifact_key
from umlmacro.logging import log
from umlmacro.parameters import DiagramRequest, MacroParameters
from umlmacro.store import ArtifactStore
from umlmacro.svg import scale_to_fit
from umlmacro.transliterate import escape_plaintext

__all__ = ["DiagramArtifactResolver"]


class DiagramArtifactResolver:
    """Resolves diagram source to a RenderedFragment.

    Holds no mutable state of its own, so a single instance can serve
    concurrent requests; the store is the only shared resource.

    Args:
        generator: Renders artifacts on a cache miss.
        store: Keeps artifacts between requests.
        config: Supplies the default server URL and format.
    """

    def __init__(
        self,
        generator: DiagramGenerator,
        store: ArtifactStore,
        config: MacroConfig | None = None,
    ) -> None:
        self.generator = generator
        self.store = store
        self.config = config or MacroConfig()

    def build_request(
        self,
        source_text: str,
        fmt: ImageFormat | str | None = None,
        server_url: str | None = None,
        *,
        image_tag: bool = False,
        scale_fit: bool = False,
    ) -> DiagramRequest:
        """Fill in configured defaults for the server URL and format."""
        resolved_format = ImageFormat.parse(fmt) if fmt else None
        if resolved_format is None:
            resolved_format = self.config.default_format()
        return DiagramRequest.create(
            source_text,
            resolved_format,
            server_url or self.config.default_server(),
            image_tag=image_tag,
            scale_fit=scale_fit,
        )

    def request_from_parameters(self, parameters: MacroParameters, content: str) -> DiagramRequest:
        return self.build_request(
            content,
            parameters.format,
            parameters.server,
            image_tag=parameters.image_tag,
            scale_fit=parameters.scale_fit,
        )

    @staticmethod
    def key_for(request: DiagramRequest) -> str:
        return artifact_key(request.format.request_type, request.source_text)

    def resolve(
        self,
        source_text: str,
        fmt: ImageFormat | str | None = None,
        server_url: str | None = None,
        is_inline: bool = False,
        *,
        image_tag: bool = False,
        scale_fit: bool = False,
    ) -> RenderedFragment:
        """Render diagram source to a fragment.

        Args:
            source_text: PlantUML diagram source.
            fmt: Output format (configured default when None).
            server_url: PlantUML server (configured default when None).
            is_inline: Whether the diagram sits inside a line of text.
            image_tag: Reference SVG output as an image instead of inlining it.
            scale_fit: Make inline SVG shrink to the page width.

        Raises:
            MacroExecutionError: If the diagram cannot be rendered for any reason.
        """
        request = self.build_request(
            source_text, fmt, server_url, image_tag=image_tag, scale_fit=scale_fit
        )
        return self.resolve_request(request, is_inline)

    def resolve_request(self, request: DiagramRequest, is_inline: bool = False) -> RenderedFragment:
        """Render an already-resolved request. See resolve()."""
        key = self.key_for(request)
        with log(
            "resolver.resolve",
            key=key,
            format=request.format.value,
            inline=is_inline,
        ) as span:
            try:
                data, generated = self._fetch_artifact(key, request)
                span.add(generated=generated, size=len(data))
                fragment = self._to_fragment(key, request, data)
            except GenerationError as e:
                raise MacroExecutionError(
                    "generate an image using PlantUML", request.source_text, key
                ) from e
            except StoreIOError as e:
                raise MacroExecutionError(
                    "store the image generated by PlantUML", request.source_text, key
                ) from e
            except Exception as e:
                # Anything else, including a malformed server URL
                raise MacroExecutionError(
                    "execute the PlantUML macro", request.source_text, key
                ) from e
            return wrap_for_display(fragment, is_inline)

    def _fetch_artifact(self, key: str, request: DiagramRequest) -> tuple[bytes, bool]:
        """Return the stored artifact, generating it first on a miss."""
        fmt = request.format
        data = self.store.read(key, fmt)
        if data is not None:
            return data, False

        with self.store.write(key, fmt) as sink:
            self.generator.output_image(request.source_text, sink, request.server_url, fmt)

        data = self.store.read(key, fmt)
        if data is None:
            raise StoreIOError(f"Artifact {key}.{fmt.extension} missing right after it was written")
        return data, True

    def _to_fragment(self, key: str, request: DiagramRequest, data: bytes) -> RenderedFragment:
        fmt = request.format
        if fmt is ImageFormat.txt:
            return RenderedFragment(
                kind=FragmentKind.TEXT,
                body=escape_plaintext(data.decode("utf-8")),
                inline_flow=False,
                key=key,
            )
        if fmt.is_svg and not request.image_tag:
            markup = data.decode("utf-8")
            if request.scale_fit:
                markup = scale_to_fit(markup)
            return RenderedFragment(kind=FragmentKind.RAW, body=markup, inline_flow=True, key=key)
        return RenderedFragment(
            kind=FragmentKind.IMAGE,
            body=self.store.url_for(key, fmt),
            inline_flow=True,
            key=key,
        )
