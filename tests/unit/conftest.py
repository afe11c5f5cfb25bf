"""Shared fixtures for unit tests."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import BinaryIO

import pytest

from umlmacro.config import MacroConfig, reset_config
from umlmacro.errors import GenerationError
from umlmacro.formats import ImageFormat
from umlmacro.resolver import DiagramArtifactResolver
from umlmacro.store import ImageStore

SVG_OUTPUT = (
    '<?xml version="1.0" encoding="us-ascii" standalone="no"?>'
    '<svg xmlns="http://www.w3.org/2000/svg" height="50px" '
    'style="width:100px;height:50px;background:#FFFFFF;" version="1.1" '
    'viewBox="0 0 100 50" width="100px"><g><text x="5" y="20">A</text></g></svg>'
)

TXT_OUTPUT = "┌─┐\n│A│\n└─┘\n"

PNG_OUTPUT = b"\x89PNG\r\n\x1a\nfake-png"


class FakeGenerator:
    """Records calls and returns canned artifacts per format."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, ImageFormat, str | None]] = []
        self._lock = threading.Lock()

    def generate(self, source: str, fmt: ImageFormat, server_url: str | None = None) -> bytes:
        with self._lock:
            self.calls.append((source, fmt, server_url))
        if self.fail:
            raise GenerationError("Syntax Error? (line 2)")
        if fmt.request_type == "svg":
            return SVG_OUTPUT.encode("utf-8")
        if fmt.request_type == "txt":
            return TXT_OUTPUT.encode("utf-8")
        return PNG_OUTPUT

    def output_image(
        self, source: str, sink: BinaryIO, server_url: str | None, fmt: ImageFormat
    ) -> None:
        sink.write(self.generate(source, fmt, server_url))


@pytest.fixture(autouse=True)
def _fresh_config():
    """Each test starts without a cached global configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    return tmp_path / "images"


@pytest.fixture
def image_store(store_dir: Path) -> ImageStore:
    return ImageStore(store_dir=store_dir, base_url="/plantuml/images")


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def macro_config() -> MacroConfig:
    return MacroConfig(server_url="http://plantuml.test/plantuml", image_format="png")


@pytest.fixture
def resolver(
    fake_generator: FakeGenerator, image_store: ImageStore, macro_config: MacroConfig
) -> DiagramArtifactResolver:
    return DiagramArtifactResolver(fake_generator, image_store, macro_config)


@pytest.fixture
def failing_generator() -> FakeGenerator:
    return FakeGenerator(fail=True)


@pytest.fixture
def svg_output() -> str:
    return SVG_OUTPUT
