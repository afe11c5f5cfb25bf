"""Unit tests for the content-addressed image store."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from umlmacro.errors import StoreIOError
from umlmacro.formats import ImageFormat
from umlmacro.store import ImageStore

KEY = "0123456789abcdef0123456789abcdef"


# =============================================================================
# WRITE / READ
# =============================================================================


@pytest.mark.unit
@pytest.mark.store
class TestReadWrite:
    """Artifacts round-trip through the store."""

    def test_read_missing_returns_none(self, image_store: ImageStore) -> None:
        assert image_store.read(KEY, ImageFormat.png) is None

    def test_write_then_read(self, image_store: ImageStore, store_dir: Path) -> None:
        with image_store.write(KEY, ImageFormat.png) as sink:
            sink.write(b"png-bytes")

        assert image_store.read(KEY, ImageFormat.png) == b"png-bytes"
        assert (store_dir / f"{KEY}.png").read_bytes() == b"png-bytes"

    def test_formats_are_separate(self, image_store: ImageStore) -> None:
        with image_store.write(KEY, ImageFormat.svg) as sink:
            sink.write(b"<svg/>")

        assert image_store.read(KEY, ImageFormat.png) is None
        assert image_store.read(KEY, ImageFormat.svg) == b"<svg/>"

    def test_svg_inline_shares_svg_file(self, image_store: ImageStore) -> None:
        assert image_store.locate(KEY, ImageFormat.svg_inline) == image_store.locate(
            KEY, ImageFormat.svg
        )

    def test_write_creates_directory(self, tmp_path: Path) -> None:
        store = ImageStore(store_dir=tmp_path / "a" / "b")
        with store.write(KEY, ImageFormat.txt) as sink:
            sink.write(b"text")
        assert (tmp_path / "a" / "b" / f"{KEY}.txt").exists()

    def test_overwrite_replaces(self, image_store: ImageStore) -> None:
        for payload in (b"first", b"second"):
            with image_store.write(KEY, ImageFormat.png) as sink:
                sink.write(payload)
        assert image_store.read(KEY, ImageFormat.png) == b"second"

    def test_artifact_is_world_readable(self, image_store: ImageStore) -> None:
        with image_store.write(KEY, ImageFormat.png) as sink:
            sink.write(b"x")
        mode = image_store.locate(KEY, ImageFormat.png).stat().st_mode & 0o777
        assert mode == 0o644


@pytest.mark.unit
@pytest.mark.store
class TestAtomicWrite:
    """A failed write leaves nothing behind."""

    def test_exception_discards_artifact(self, image_store: ImageStore, store_dir: Path) -> None:
        with pytest.raises(RuntimeError):
            with image_store.write(KEY, ImageFormat.png) as sink:
                sink.write(b"partial")
                raise RuntimeError("generation failed")

        assert image_store.read(KEY, ImageFormat.png) is None
        assert list(store_dir.iterdir()) == []

    def test_os_error_becomes_store_error(self, image_store: ImageStore, store_dir: Path) -> None:
        with pytest.raises(StoreIOError):
            with image_store.write(KEY, ImageFormat.png) as sink:
                sink.write(b"partial")
                raise OSError("disk full")

        assert list(store_dir.iterdir()) == []

    def test_existing_artifact_kept_on_failure(self, image_store: ImageStore) -> None:
        with image_store.write(KEY, ImageFormat.png) as sink:
            sink.write(b"good")

        with pytest.raises(RuntimeError):
            with image_store.write(KEY, ImageFormat.png) as sink:
                sink.write(b"bad")
                raise RuntimeError("boom")

        assert image_store.read(KEY, ImageFormat.png) == b"good"

    def test_unreadable_artifact_raises(self, image_store: ImageStore) -> None:
        # A directory where the artifact file should be cannot be read
        image_store.locate(KEY, ImageFormat.png).mkdir(parents=True)

        with pytest.raises(StoreIOError):
            image_store.read(KEY, ImageFormat.png)

    def test_uncreatable_store_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = ImageStore(store_dir=blocker / "images")

        with pytest.raises(StoreIOError):
            with store.write(KEY, ImageFormat.png) as sink:
                sink.write(b"x")


# =============================================================================
# LOCATE / URL
# =============================================================================


@pytest.mark.unit
@pytest.mark.store
class TestUrls:
    """Artifact locations and URLs."""

    def test_locate(self, image_store: ImageStore, store_dir: Path) -> None:
        assert image_store.locate(KEY, ImageFormat.svg) == store_dir / f"{KEY}.svg"

    def test_url_with_base_url(self, image_store: ImageStore) -> None:
        assert image_store.url_for(KEY, ImageFormat.png) == f"/plantuml/images/{KEY}.png"

    def test_base_url_trailing_slash(self, store_dir: Path) -> None:
        store = ImageStore(store_dir=store_dir, base_url="https://wiki.test/images/")
        assert store.url_for(KEY, ImageFormat.svg) == f"https://wiki.test/images/{KEY}.svg"

    def test_file_uri_without_base_url(self, store_dir: Path) -> None:
        store = ImageStore(store_dir=store_dir)
        url = store.url_for(KEY, ImageFormat.png)
        assert url.startswith("file://")
        assert url.endswith(f"/{KEY}.png")


# =============================================================================
# CLEANUP / DELETE
# =============================================================================


@pytest.mark.unit
@pytest.mark.store
class TestCleanup:
    """TTL eviction."""

    def _put(self, store: ImageStore, key: str, age: float = 0) -> Path:
        with store.write(key, ImageFormat.png) as sink:
            sink.write(b"x")
        path = store.locate(key, ImageFormat.png)
        if age:
            old = time.time() - age
            os.utime(path, (old, old))
        return path

    def test_no_ttl_keeps_everything(self, image_store: ImageStore) -> None:
        path = self._put(image_store, KEY, age=10_000)
        assert image_store.cleanup() == 0
        assert path.exists()

    def test_expired_removed(self, store_dir: Path) -> None:
        store = ImageStore(store_dir=store_dir, ttl=60)
        old = self._put(store, "old", age=120)
        fresh = self._put(store, "fresh")

        assert store.cleanup() == 1
        assert not old.exists()
        assert fresh.exists()

    def test_cleanup_missing_dir(self, tmp_path: Path) -> None:
        store = ImageStore(store_dir=tmp_path / "never-created", ttl=60)
        assert store.cleanup() == 0

    def test_delete(self, image_store: ImageStore) -> None:
        self._put(image_store, KEY)
        assert image_store.delete(KEY, ImageFormat.png) is True
        assert image_store.delete(KEY, ImageFormat.png) is False
        assert image_store.read(KEY, ImageFormat.png) is None
