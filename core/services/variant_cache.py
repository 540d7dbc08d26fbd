"""Regeneration decisions for derived image variants.

A variant is one (size class, encoding) output of a source image. The cache
compares the target file against the source's modification time according to
the configured `CachePolicy`.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from loguru import logger

from core.config import CachePolicy


@dataclass(frozen=True)
class VariantTarget:
    """One artifact to produce for a source image."""

    kind: str  # "thumb" or "full"
    fmt: str
    path: Path
    width: int
    quality: int


class VariantCache:
    """Decides whether a variant must be (re)generated."""

    def __init__(self, policy: CachePolicy = CachePolicy.FRESHNESS) -> None:
        self._policy = CachePolicy(policy)

    @property
    def policy(self) -> CachePolicy:
        """Active cache policy."""
        return self._policy

    def needs_generation(self, target: str | Path, source_mtime_ns: int) -> bool:
        """Return True when `target` is missing or, under FRESHNESS, older than the source."""
        try:
            st = os.stat(target)
        except FileNotFoundError:
            return True
        except OSError as ex:
            logger.debug("stat failed for {} ({}), regenerating", target, ex)
            return True

        if self._policy is CachePolicy.EXISTENCE:
            return False
        return st.st_mtime_ns < source_mtime_ns
