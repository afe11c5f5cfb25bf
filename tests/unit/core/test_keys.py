"""Unit tests for artifact key computation."""

from __future__ import annotations

import pytest

from umlmacro.keys import KEY_LENGTH, artifact_key

SOURCE = "@startuml\nAlice -> Bob: hello\n@enduml"


@pytest.mark.unit
@pytest.mark.core
class TestArtifactKey:
    """Keys are a pure, order-sensitive function of (format, source)."""

    def test_same_input_same_key(self) -> None:
        assert artifact_key("svg", SOURCE) == artifact_key("svg", SOURCE)

    def test_key_is_stable_across_processes(self) -> None:
        # Fixed value: keys must not depend on hash randomisation
        assert artifact_key("png", "a") == "5abe2bbd6077772e2e0368c1b70223c1"

    def test_key_is_lowercase_hex(self) -> None:
        key = artifact_key("txt", SOURCE)
        assert len(key) == KEY_LENGTH
        assert all(c in "0123456789abcdef" for c in key)

    def test_format_changes_key(self) -> None:
        assert artifact_key("png", SOURCE) != artifact_key("svg", SOURCE)

    def test_source_changes_key(self) -> None:
        assert artifact_key("png", SOURCE) != artifact_key("png", SOURCE + " ")

    def test_order_sensitive(self) -> None:
        assert artifact_key("png", "svg") != artifact_key("svg", "png")

    def test_boundaries_are_unambiguous(self) -> None:
        assert artifact_key("ab", "c") != artifact_key("a", "bc")
        assert artifact_key("abc", "") != artifact_key("", "abc")

    def test_unicode_source(self) -> None:
        assert artifact_key("txt", "┌─┐ héllo") != artifact_key("txt", "┌─┐ hello")
