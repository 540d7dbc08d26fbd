"""Core service result types and errors.

This module defines the dataclasses exchanged between the builder, the
reconciler and the infrastructure layer. Recoverable outcomes are returned as
values; only setup problems are raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from core.models import PhotoRecord


class SourceDirectoryMissingError(FileNotFoundError):
    """The configured source root does not exist."""


class RootLevelFileError(ValueError):
    """An image sits directly under the source root and the policy rejects it."""


class ManifestLoadError(ValueError):
    """A manifest file is missing or cannot be parsed."""


class ResultStatus(Enum):
    """Distinguishes a present value, an absent one, and a failed lookup."""

    PRESENT = "present"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass
class ExifResult:
    """Outcome of reading EXIF tags from raw image bytes.

    Attributes:
        status: PRESENT with `tags`, ABSENT when the image has no EXIF, FAILED
            when the EXIF segment could not be parsed.
        tags: Flat mapping of tag name to raw value.
        error: Failure reason when status is FAILED.
    """

    status: ResultStatus
    tags: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


@dataclass
class EncodedImage:
    """Bytes produced by the image engine with the final pixel dimensions."""

    data: bytes
    width: int
    height: int


@dataclass
class ItemOutcome:
    """Result of processing one source image.

    Attributes:
        rel_key: Normalized relative path of the source.
        record: Manifest record, or None when the item failed or was skipped.
        generated_thumbs: Thumbnail artifacts written for this item.
        generated_fulls: Full-size artifacts written for this item.
        skipped: Artifacts left in place because they were up to date.
        failed: Whether processing raised.
        root_skipped: Whether the root-level policy rejected the file.
        caption_restored: Whether a caption was carried over.
    """

    rel_key: str
    record: PhotoRecord | None = None
    generated_thumbs: int = 0
    generated_fulls: int = 0
    skipped: int = 0
    failed: bool = False
    root_skipped: bool = False
    caption_restored: bool = False


@dataclass
class BuildReport:
    """Aggregate counters for a manifest build run."""

    total: int = 0
    generated_thumbs: int = 0
    generated_fulls: int = 0
    skipped: int = 0
    failed: int = 0
    captions_restored: int = 0
    root_skipped: int = 0
    records: list[PhotoRecord] = field(default_factory=list)

    def add(self, outcome: ItemOutcome) -> None:
        """Fold one item outcome into the counters."""
        self.generated_thumbs += outcome.generated_thumbs
        self.generated_fulls += outcome.generated_fulls
        self.skipped += outcome.skipped
        if outcome.failed:
            self.failed += 1
        if outcome.root_skipped:
            self.root_skipped += 1
        if outcome.caption_restored:
            self.captions_restored += 1
        if outcome.record is not None:
            self.total += 1
            self.records.append(outcome.record)


@dataclass
class DeleteResult:
    """Outcome of a delete operation.

    Attributes:
        success_paths: Paths successfully deleted.
        failed: Tuples of (path, reason) for failures.
        log_path: Optional path to the audit log file.
    """

    success_paths: list[str]
    failed: list[tuple[str, str]]
    log_path: str | None = None


@dataclass
class ReconcileReport:
    """Orphans found by the reconciler and what happened to them."""

    orphans: list[str]
    dry_run: bool
    allowed_count: int = 0
    delete_result: DeleteResult | None = None

    @property
    def deleted_count(self) -> int:
        """Number of orphans actually removed."""
        return len(self.delete_result.success_paths) if self.delete_result else 0
