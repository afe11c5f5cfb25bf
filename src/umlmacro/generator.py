"""Diagram generation through a PlantUML server or the local command.

With a server URL the diagram source is encoded with PlantUML's deflate +
base64 variant and fetched from ``{server}/{request_type}/{encoded}``.
Without one, the source is piped through ``plantuml -pipe``.
"""

from __future__ import annotations

import shutil
import subprocess
import zlib
from typing import BinaryIO, Protocol

import httpx

from umlmacro.errors import ConfigurationError, GenerationError
from umlmacro.formats import ImageFormat
from umlmacro.http_client import DEFAULT_TIMEOUT, get_client
from umlmacro.logging import log

__all__ = ["DiagramGenerator", "PlantUMLGenerator", "encode_plantuml"]

# PlantUML's custom base64 alphabet
PLANTUML_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz-_"

# Output option for `plantuml -pipe`; the server's txt endpoint serves Unicode text
LOCAL_OUTPUT_OPTIONS = {
    "png": "-tpng",
    "svg": "-tsvg",
    "txt": "-tutxt",
}

ERROR_HEADER = "X-PlantUML-Diagram-Error"
ERROR_LINE_HEADER = "X-PlantUML-Diagram-Error-Line"


class DiagramGenerator(Protocol):
    """Renders diagram source into an artifact."""

    def generate(self, source: str, fmt: ImageFormat, server_url: str | None) -> bytes: ...

    def output_image(
        self, source: str, sink: BinaryIO, server_url: str | None, fmt: ImageFormat
    ) -> None: ...


def encode_plantuml(source: str) -> str:
    """Encode diagram source for PlantUML server URLs.

    Args:
        source: The PlantUML diagram source.

    Returns:
        Raw-deflated source in PlantUML's base64 alphabet.
    """
    compressed = zlib.compress(source.encode("utf-8"), level=9)[2:-4]
    result = []

    for i in range(0, len(compressed), 3):
        chunk = compressed[i : i + 3]
        if len(chunk) == 3:
            b1, b2, b3 = chunk
            result.append(PLANTUML_ALPHABET[b1 >> 2])
            result.append(PLANTUML_ALPHABET[((b1 & 0x3) << 4) | (b2 >> 4)])
            result.append(PLANTUML_ALPHABET[((b2 & 0xF) << 2) | (b3 >> 6)])
            result.append(PLANTUML_ALPHABET[b3 & 0x3F])
        elif len(chunk) == 2:
            b1, b2 = chunk
            result.append(PLANTUML_ALPHABET[b1 >> 2])
            result.append(PLANTUML_ALPHABET[((b1 & 0x3) << 4) | (b2 >> 4)])
            result.append(PLANTUML_ALPHABET[(b2 & 0xF) << 2])
        else:
            b1 = chunk[0]
            result.append(PLANTUML_ALPHABET[b1 >> 2])
            result.append(PLANTUML_ALPHABET[(b1 & 0x3) << 4])

    return "".join(result)


def _validate_server_url(server_url: str) -> str:
    """Return the server URL without a trailing slash.

    Raises:
        ConfigurationError: If the URL is not an absolute http(s) URL.
    """
    try:
        url = httpx.URL(server_url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"Invalid PlantUML server URL '{server_url}': {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"Invalid PlantUML server URL '{server_url}': expected an http(s) URL"
        )
    return server_url.rstrip("/")


class PlantUMLGenerator:
    """Generates PlantUML artifacts.

    Args:
        timeout: Seconds allowed for a server request or local run.
        command: Local PlantUML executable.
        client: HTTP client (the shared pooled client by default).
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        command: str = "plantuml",
        client: httpx.Client | None = None,
    ) -> None:
        self.timeout = timeout
        self.command = command
        self._client = client

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    def output_image(
        self, source: str, sink: BinaryIO, server_url: str | None, fmt: ImageFormat
    ) -> None:
        """Render the diagram and write the artifact to ``sink``."""
        sink.write(self.generate(source, fmt, server_url))

    def generate(self, source: str, fmt: ImageFormat, server_url: str | None = None) -> bytes:
        """Render the diagram.

        Args:
            source: PlantUML diagram source.
            fmt: Output format.
            server_url: PlantUML server, or None to run the local command.

        Returns:
            The artifact bytes.

        Raises:
            GenerationError: If the server or command fails or rejects the source.
            ConfigurationError: If the server URL is malformed.
        """
        if server_url:
            return self._render_via_server(source, fmt, server_url)
        return self._render_locally(source, fmt)

    def _render_via_server(self, source: str, fmt: ImageFormat, server_url: str) -> bytes:
        base = _validate_server_url(server_url)
        url = f"{base}/{fmt.request_type}/{encode_plantuml(source)}"

        with log("generator.server", format=fmt.request_type, server=base) as span:
            try:
                resp = self.client.get(url, timeout=self.timeout)
            except httpx.InvalidURL as e:
                # Raised before sending, e.g. when the encoded source exceeds the URL limit
                raise GenerationError(
                    f"Diagram too large for a PlantUML server request ({len(url)} character URL): {e}"
                ) from e
            except httpx.HTTPError as e:
                raise GenerationError(f"PlantUML server request failed: {e}") from e

            span.add(status=resp.status_code)

            diagram_error = resp.headers.get(ERROR_HEADER)
            if resp.status_code != 200 or diagram_error:
                detail = diagram_error or f"HTTP {resp.status_code}"
                error_line = resp.headers.get(ERROR_LINE_HEADER)
                if error_line:
                    detail = f"{detail} (line {error_line})"
                raise GenerationError(f"PlantUML server rejected the diagram: {detail}")

            span.add(responseLen=len(resp.content))
            return resp.content

    def _render_locally(self, source: str, fmt: ImageFormat) -> bytes:
        executable = shutil.which(self.command)
        if executable is None:
            raise GenerationError(
                f"No PlantUML server configured and '{self.command}' was not found on PATH"
            )

        cmd = [executable, "-pipe", "-charset", "UTF-8", LOCAL_OUTPUT_OPTIONS[fmt.request_type]]
        with log("generator.local", format=fmt.request_type, command=self.command) as span:
            try:
                proc = subprocess.run(
                    cmd,
                    input=source.encode("utf-8"),
                    capture_output=True,
                    timeout=self.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as e:
                raise GenerationError(f"PlantUML timed out after {self.timeout}s") from e
            except OSError as e:
                raise GenerationError(f"Could not run PlantUML: {e}") from e

            span.add(returncode=proc.returncode)
            if proc.returncode != 0:
                stderr = proc.stderr.decode("utf-8", errors="replace").strip()
                raise GenerationError(
                    f"PlantUML exited with status {proc.returncode}: {stderr or 'no output'}"
                )

            span.add(responseLen=len(proc.stdout))
            return proc.stdout
