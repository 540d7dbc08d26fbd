"""Manifest generation: derive variants, metadata and records for every source image.

For each source image the builder classifies its path, regenerates stale
variants through the image engine, formats EXIF metadata and restores any
hand-written caption. Failures are isolated to the image that caused them.
Records are sorted by id before the manifest is written, so the output does
not depend on traversal or completion order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loguru import logger

from core.config import PipelineConfig
from core.models import Identity, PhotoRecord, SourceImage
from core.services.alt_text import derive_alt_text
from core.services.caption_service import CaptionPreserver
from core.services.interfaces import BuildReport, ItemOutcome, RootLevelFileError
from core.services.metadata_service import MetadataExtractor
from core.services.path_classifier import PathClassifier, strip_extension
from core.services.sort_service import SortService
from core.services.variant_cache import VariantCache, VariantTarget


class ManifestBuilder:
    """Drives one generation run over all source images."""

    def __init__(
        self,
        config: PipelineConfig,
        image_service,
        repo,
        exif_reader: Callable,
        scanner,
        sorter: SortService | None = None,
    ) -> None:
        """Create a builder.

        Args:
            config: Paths, sizes and policies for the run.
            image_service: Engine with `write_variant(...)` and `read_dimensions(path)`.
            repo: Manifest repository with `load(path)` and `save(path, records)`.
            exif_reader: Callable turning raw bytes into an `ExifResult`.
            scanner: Source enumerator with `scan()` returning `SourceImage`s.
            sorter: Record sorter (defaults to `SortService`).
        """
        self._cfg = config
        self._images = image_service
        self._repo = repo
        self._scanner = scanner
        self._sorter = sorter or SortService()
        self._classifier = PathClassifier(
            separator=config.id_separator,
            root_policy=config.root_policy,
            uncategorized_label=config.uncategorized_label,
        )
        self._cache = VariantCache(config.cache_policy)
        self._metadata = MetadataExtractor(exif_reader, config.model_replacements)
        self._captions = CaptionPreserver()

    def run(self) -> BuildReport:
        """Process every source image and write the sorted manifest.

        Raises:
            SourceDirectoryMissingError: The source root does not exist.
        """
        sources = self._scanner.scan()
        self._captions = CaptionPreserver.from_manifest(self._repo, self._cfg.manifest_path)

        Path(self._cfg.thumbs_dir).mkdir(parents=True, exist_ok=True)
        Path(self._cfg.full_dir).mkdir(parents=True, exist_ok=True)

        report = BuildReport()
        outcomes = sorted(self._process_all(sources), key=lambda o: o.rel_key)
        for outcome in self._drop_id_collisions(outcomes):
            report.add(outcome)

        report.records = self._sorter.sort(report.records)
        self._repo.save(self._cfg.manifest_path, report.records)
        self._log_summary(report)
        return report

    def _process_all(self, sources: list[SourceImage]) -> Iterable[ItemOutcome]:
        if self._cfg.workers <= 1 or len(sources) <= 1:
            for source in sources:
                yield self.process(source)
            return
        # Each source owns disjoint output paths
        with ThreadPoolExecutor(max_workers=self._cfg.workers) as pool:
            yield from pool.map(self.process, sources)

    def _drop_id_collisions(self, outcomes: list[ItemOutcome]) -> list[ItemOutcome]:
        """Keep the first record per id (by relative path); later ones count as failed."""
        owners: dict[str, str] = {}
        for outcome in outcomes:
            if outcome.record is None:
                continue
            photo_id = outcome.record.id
            owner = owners.get(photo_id)
            if owner is None:
                owners[photo_id] = outcome.rel_key
                continue
            logger.error("Id collision: {} and {} both map to {}", owner, outcome.rel_key, photo_id)
            outcome.record = None
            outcome.caption_restored = False
            outcome.failed = True
        return outcomes

    def process(self, source: SourceImage) -> ItemOutcome:
        """Build the record for one source image; never raises."""
        outcome = ItemOutcome(rel_key=source.rel_key)
        try:
            identity = self._classifier.classify(source.rel_key)
        except RootLevelFileError as ex:
            logger.warning("Skipping {}: {}", source.rel_key, ex)
            outcome.root_skipped = True
            return outcome

        try:
            with open(source.path, "rb") as f:
                data = f.read()
            width, height = self._ensure_variants(source, identity, data, outcome)
            exif = self._metadata.describe(data, source.rel_key)
            record = self._make_record(source, identity, exif, width, height)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("Failed to process {}: {}", source.rel_key, ex)
            outcome.failed = True
            return outcome

        restored = self._captions.apply(record)
        outcome.caption_restored = restored is not record
        outcome.record = restored
        return outcome

    def variant_targets(self, identity: Identity) -> list[VariantTarget]:
        """All artifacts for `identity`, full-size first, primary encoding first."""
        cfg = self._cfg
        targets: list[VariantTarget] = []
        for fmt in cfg.formats:
            targets.append(
                VariantTarget(
                    kind="full",
                    fmt=fmt,
                    path=Path(cfg.full_dir) / f"{identity.out_base}.{fmt}",
                    width=cfg.full_width,
                    quality=cfg.full_quality,
                )
            )
            targets.append(
                VariantTarget(
                    kind="thumb",
                    fmt=fmt,
                    path=Path(cfg.thumbs_dir) / f"{identity.out_base}.{fmt}",
                    width=cfg.thumb_width,
                    quality=cfg.thumb_quality,
                )
            )
        return targets

    def web_paths(self, identity: Identity) -> tuple[str, str]:
        """Return (thumbnail, full) web paths in the primary encoding."""
        fmt = self._cfg.primary_format
        return (
            f"{self._cfg.thumbs_url}/{identity.out_base}.{fmt}",
            f"{self._cfg.full_url}/{identity.out_base}.{fmt}",
        )

    def _ensure_variants(
        self, source: SourceImage, identity: Identity, data: bytes, outcome: ItemOutcome
    ) -> tuple[int, int]:
        """Write stale variants and return the primary full-size dimensions."""
        primary = self._cfg.primary_format
        dims: tuple[int, int] | None = None

        for target in self.variant_targets(identity):
            is_primary_full = target.kind == "full" and target.fmt == primary
            if not self._cache.needs_generation(target.path, source.mtime_ns):
                outcome.skipped += 1
                if is_primary_full:
                    # Final size depends on resizing and orientation, not the source
                    dims = self._images.read_dimensions(target.path)
                continue

            encoded = self._images.write_variant(
                data, target.path, target.width, target.quality, target.fmt
            )
            if target.kind == "full":
                outcome.generated_fulls += 1
            else:
                outcome.generated_thumbs += 1
            if is_primary_full:
                dims = (encoded.width, encoded.height)

        if dims is None:
            raise RuntimeError(f"No dimensions for {source.rel_key}")
        return dims

    def _make_record(
        self, source: SourceImage, identity: Identity, exif: str, width: int, height: int
    ) -> PhotoRecord:
        src, full = self.web_paths(identity)
        stem = strip_extension(source.rel_key.rsplit("/", 1)[-1])
        return PhotoRecord(
            id=identity.id,
            src=src,
            full=full,
            alt=derive_alt_text(stem, identity.category, identity.album, self._cfg.album_aliases),
            category=identity.category,
            album=identity.album,
            exif=exif,
            width=int(width),
            height=int(height),
        )

    def _log_summary(self, report: BuildReport) -> None:
        logger.info(
            "Build complete | source={} photos={} thumbs_generated={} fulls_generated={} "
            "cached={} failed={} captions_restored={} root_skipped={}",
            self._cfg.source_dir,
            report.total,
            report.generated_thumbs,
            report.generated_fulls,
            report.skipped,
            report.failed,
            report.captions_restored,
            report.root_skipped,
        )
