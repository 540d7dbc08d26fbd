"""Carry hand-written captions over from a previously generated manifest."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from loguru import logger

from core.models import PhotoRecord
from core.services.interfaces import ManifestLoadError


class CaptionPreserver:
    """Read-only `id -> caption` map built once per run."""

    def __init__(self, captions: Mapping[str, str] | None = None) -> None:
        self._captions: dict[str, str] = dict(captions or {})

    @classmethod
    def from_records(cls, records: Iterable[PhotoRecord]) -> CaptionPreserver:
        """Collect non-empty captions keyed by record id."""
        return cls({r.id: r.caption for r in records if r.caption})

    @classmethod
    def from_manifest(cls, repo, manifest_path: str) -> CaptionPreserver:
        """Load captions from `manifest_path`; an unusable manifest yields an empty map.

        Args:
            repo: Repository with a `load(path)` method returning records.
            manifest_path: Location of the previous manifest.
        """
        try:
            records = repo.load(manifest_path)
        except ManifestLoadError as ex:
            logger.warning("No captions restored, previous manifest unusable: {}", ex)
            return cls()
        preserver = cls.from_records(records)
        logger.info("Loaded {} captions from {}", len(preserver), manifest_path)
        return preserver

    def __len__(self) -> int:
        return len(self._captions)

    def get(self, photo_id: str) -> str | None:
        """Return the caption for `photo_id`, if any."""
        return self._captions.get(photo_id)

    def apply(self, record: PhotoRecord) -> PhotoRecord:
        """Return `record` with its preserved caption attached, or unchanged."""
        caption = self._captions.get(record.id)
        if not caption:
            return record
        return replace(record, caption=caption)
