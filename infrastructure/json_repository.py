"""JSON persistence for the photo manifest.

The manifest is `{"photos": [...]}` with records in a stable key order and
2-space indentation so it stays diffable and hand-editable (captions).
"""

from __future__ import annotations

from collections.abc import Iterable
import json
import os
from pathlib import Path
import tempfile
from typing import Any

from loguru import logger

from core.models import PhotoRecord
from core.services.interfaces import ManifestLoadError

MANIFEST_KEY = "photos"


def _to_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _parse_record(entry: dict[str, Any]) -> PhotoRecord:
    album = entry.get("album")
    caption = entry.get("caption")
    return PhotoRecord(
        id=str(entry["id"]),
        src=str(entry.get("src") or ""),
        full=str(entry.get("full") or ""),
        alt=str(entry.get("alt") or ""),
        category=str(entry.get("category") or ""),
        album=str(album) if album else None,
        exif=str(entry.get("exif") or ""),
        width=_to_int(entry.get("width")),
        height=_to_int(entry.get("height")),
        caption=str(caption) if caption else None,
    )


class JsonManifestRepository:
    """Load and save manifest records as JSON."""

    def load(self, manifest_path: str | Path) -> list[PhotoRecord]:
        """Return records from `manifest_path`.

        Entries that are not objects or lack an `id` are skipped.

        Raises:
            ManifestLoadError: File missing, not valid JSON, or not a manifest.
        """
        path = Path(manifest_path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as ex:
            raise ManifestLoadError(f"Manifest not found: {path}") from ex
        except (OSError, ValueError) as ex:
            raise ManifestLoadError(f"Manifest unreadable: {path}: {ex}") from ex

        if not isinstance(data, dict) or not isinstance(data.get(MANIFEST_KEY), list):
            raise ManifestLoadError(f"Manifest has no '{MANIFEST_KEY}' list: {path}")

        records: list[PhotoRecord] = []
        for entry in data[MANIFEST_KEY]:
            if not isinstance(entry, dict) or not entry.get("id"):
                logger.warning("Manifest entry skipped: {}", entry)
                continue
            records.append(_parse_record(entry))
        return records

    def save(self, manifest_path: str | Path, records: Iterable[PhotoRecord]) -> None:
        """Overwrite `manifest_path` with `records` in the given order."""
        path = Path(manifest_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {MANIFEST_KEY: [r.to_dict() for r in records]}
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"

        fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
            os.replace(tmp, path)
        except OSError:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
        logger.info("Manifest written: {} ({} photos)", path, len(payload[MANIFEST_KEY]))
