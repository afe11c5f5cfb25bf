"""Content-addressed artifact store for rendered diagrams.

Storage format:
    {store_dir}/
    ├── {key}.png
    ├── {key}.svg
    └── {key}.txt

Writes go to a temporary file that is renamed into place on success, so a
reader never sees a partial artifact and a failed render leaves nothing
behind.
"""

from __future__ import annotations

import os
import tempfile
import time
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Protocol

from umlmacro.errors import StoreIOError
from umlmacro.formats import ImageFormat
from umlmacro.logging import log

__all__ = ["ArtifactStore", "ImageStore"]


class ArtifactStore(Protocol):
    """Where rendered artifacts are kept between requests."""

    def write(self, key: str, fmt: ImageFormat) -> AbstractContextManager[BinaryIO]: ...

    def read(self, key: str, fmt: ImageFormat) -> bytes | None: ...

    def locate(self, key: str, fmt: ImageFormat) -> Path: ...

    def url_for(self, key: str, fmt: ImageFormat) -> str: ...


@dataclass
class ImageStore:
    """File-system artifact store.

    Attributes:
        store_dir: Directory holding the artifacts.
        base_url: URL prefix under which store_dir is served; file:// URIs
            are produced when empty.
        ttl: Seconds before an artifact is evicted by cleanup() (0 = never).
    """

    store_dir: Path
    base_url: str = ""
    ttl: int = 0
    _created: bool = field(default=False, init=False, repr=False)

    def _ensure_dir(self) -> None:
        if self._created:
            return
        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(f"Cannot create image store {self.store_dir}: {e}") from e
        self._created = True

    def locate(self, key: str, fmt: ImageFormat) -> Path:
        """Path of the artifact file for a key (whether or not it exists)."""
        return self.store_dir / f"{key}.{fmt.extension}"

    def url_for(self, key: str, fmt: ImageFormat) -> str:
        """URL under which the artifact can be fetched by a browser."""
        filename = f"{key}.{fmt.extension}"
        if self.base_url:
            return f"{self.base_url.rstrip('/')}/{filename}"
        return self.locate(key, fmt).resolve().as_uri()

    def read(self, key: str, fmt: ImageFormat) -> bytes | None:
        """Read an artifact.

        Returns:
            The artifact bytes, or None when it is not in the store.

        Raises:
            StoreIOError: If the artifact exists but cannot be read.
        """
        path = self.locate(key, fmt)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreIOError(f"Cannot read artifact {path}: {e}") from e

    @contextmanager
    def write(self, key: str, fmt: ImageFormat) -> Iterator[BinaryIO]:
        """Open a sink for an artifact.

        The artifact becomes visible only when the ``with`` block exits
        without an exception.

        Raises:
            StoreIOError: If the sink cannot be opened or committed.
        """
        self._ensure_dir()
        path = self.locate(key, fmt)

        with log("store.write", key=key, format=fmt.extension) as span:
            try:
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.store_dir, prefix=f".{key}.", suffix=".tmp"
                )
            except OSError as e:
                raise StoreIOError(f"Cannot open artifact {path} for writing: {e}") from e

            tmp_path = Path(tmp_name)
            try:
                with os.fdopen(fd, "wb") as sink:
                    yield sink
                span.add(size=tmp_path.stat().st_size)
                # mkstemp creates 0600 files; artifacts are served to browsers
                tmp_path.chmod(0o644)
                os.replace(tmp_path, path)
            except OSError as e:
                tmp_path.unlink(missing_ok=True)
                raise StoreIOError(f"Cannot write artifact {path}: {e}") from e
            except BaseException:
                tmp_path.unlink(missing_ok=True)
                raise

    def delete(self, key: str, fmt: ImageFormat) -> bool:
        """Remove an artifact. Returns True if it existed."""
        path = self.locate(key, fmt)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreIOError(f"Cannot delete artifact {path}: {e}") from e
        return True

    def cleanup(self) -> int:
        """Remove artifacts older than the TTL.

        Returns:
            Number of files cleaned up
        """
        if self.ttl <= 0 or not self.store_dir.exists():
            return 0

        cutoff = time.time() - self.ttl
        cleaned = 0
        with log("store.cleanup", dir=str(self.store_dir), ttl=self.ttl) as span:
            for path in self.store_dir.iterdir():
                if not path.is_file():
                    continue
                try:
                    if path.stat().st_mtime < cutoff:
                        path.unlink()
                        cleaned += 1
                except FileNotFoundError:
                    # Removed by a concurrent cleanup
                    continue
                except OSError as e:
                    raise StoreIOError(f"Cannot clean up {path}: {e}") from e
            span.add(cleaned=cleaned)
        return cleaned
