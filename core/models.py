"""Core domain models for source images and manifest records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SourceImage:
    """An original image file found under the source root."""

    path: str
    rel_key: str
    mtime_ns: int


@dataclass(frozen=True)
class Identity:
    """Stable identity derived from a source file's relative location."""

    id: str
    category: str
    album: str | None
    out_base: str


@dataclass(frozen=True)
class PhotoRecord:
    """A single photo entry of the manifest."""

    id: str
    src: str
    full: str
    alt: str
    category: str
    album: str | None
    exif: str
    width: int
    height: int
    caption: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with stable key order; `caption` only when present."""
        data: dict[str, Any] = {
            "id": self.id,
            "src": self.src,
            "full": self.full,
            "alt": self.alt,
            "category": self.category,
            "album": self.album,
            "exif": self.exif,
            "width": self.width,
            "height": self.height,
        }
        if self.caption:
            data["caption"] = self.caption
        return data
