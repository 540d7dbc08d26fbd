"""Enumerate source images under the configured root."""

from __future__ import annotations

from collections.abc import Iterable
import os
from pathlib import Path

from loguru import logger

from core.models import SourceImage
from core.services.interfaces import SourceDirectoryMissingError
from infrastructure.utils import get_mtime_ns


def relative_key(path: str | Path, root: str | Path) -> str:
    """Path of `path` relative to `root` with `/` separators."""
    rel = os.path.relpath(str(path), str(root))
    return rel.replace(os.sep, "/").replace("\\", "/")


def dedupe_paths(paths: Iterable[str | Path], root: str | Path) -> list[tuple[str, str]]:
    """Return `(path, rel_key)` pairs, dropping later matches of the same key."""
    seen: set[str] = set()
    result: list[tuple[str, str]] = []
    for p in paths:
        key = relative_key(p, root)
        if key in seen:
            logger.debug("Duplicate source match skipped: {}", p)
            continue
        seen.add(key)
        result.append((str(p), key))
    return result


class SourceScanner:
    """Recursive, case-insensitive scan of the source tree."""

    def __init__(self, root: str | Path, extensions: Iterable[str]) -> None:
        self._root = Path(root)
        self._extensions = {e.lower() for e in extensions}

    def iter_candidate_paths(self) -> Iterable[str]:
        """Yield matching file paths in deterministic order."""
        for dirpath, dirnames, filenames in os.walk(self._root):
            dirnames.sort()
            for fn in sorted(filenames):
                if Path(fn).suffix.lower() in self._extensions:
                    yield os.path.join(dirpath, fn)

    def scan(self) -> list[SourceImage]:
        """Return unique source images.

        Raises:
            SourceDirectoryMissingError: The root does not exist.
        """
        if not self._root.is_dir():
            raise SourceDirectoryMissingError(f"Source directory not found: {self._root}")

        images: list[SourceImage] = []
        for path, key in dedupe_paths(self.iter_candidate_paths(), self._root):
            try:
                mtime_ns = get_mtime_ns(path)
            except OSError as ex:
                logger.warning("stat failed for {}: {}", path, ex)
                continue
            images.append(SourceImage(path=path, rel_key=key, mtime_ns=mtime_ns))
        logger.info("Found {} source images in {}", len(images), self._root)
        return images
