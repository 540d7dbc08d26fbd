"""Orphan reconciliation between the manifest and generated asset directories.

Every record's `src` and `full` web paths are mapped to disk paths and
allowlisted together with their encoding twins (same base name, other
configured encodings). Any other file under the asset roots is an orphan.
"""

from __future__ import annotations

from collections.abc import Iterable
import os
from pathlib import Path, PurePosixPath

from loguru import logger

from core.config import PipelineConfig
from core.models import PhotoRecord
from core.services.interfaces import ReconcileReport

JPEG_FAMILY = {".jpg", ".jpeg"}


def _norm(path: str | Path) -> str:
    return os.path.normcase(os.path.abspath(str(path)))


class OrphanReconciler:
    """Finds (and optionally deletes) generated files the manifest no longer references."""

    def __init__(self, config: PipelineConfig, repo, delete_service) -> None:
        """Create a reconciler.

        Args:
            config: Asset roots, web prefixes and encodings.
            repo: Manifest repository with `load(path)`.
            delete_service: Service with `delete_files(paths, use_recycle_bin)`
                and `write_audit_log(result, log_dir)`.
        """
        self._cfg = config
        self._repo = repo
        self._deleter = delete_service

    def web_to_disk(self, web_path: str) -> Path:
        """Map a manifest web path to its file under the asset roots."""
        cfg = self._cfg
        posix = "/" + web_path.lstrip("/")
        for prefix, root in ((cfg.full_url, cfg.full_dir), (cfg.thumbs_url, cfg.thumbs_dir)):
            prefix = "/" + prefix.strip("/")
            if posix.startswith(prefix + "/"):
                rest = posix[len(prefix) + 1 :]
                return Path(root).joinpath(*PurePosixPath(rest).parts)
        return Path(cfg.public_dir).joinpath(*PurePosixPath(posix.lstrip("/")).parts)

    def twin_paths(self, path: Path) -> list[Path]:
        """`path` plus its siblings in every other configured encoding."""
        result = [path]
        suffix = path.suffix.lower()
        twin_exts = {f".{fmt}" for fmt in self._cfg.formats}
        if suffix in JPEG_FAMILY or suffix in twin_exts:
            for ext in sorted(twin_exts - {suffix}):
                result.append(path.with_suffix(ext))
        return result

    def allowed_paths(self, records: Iterable[PhotoRecord]) -> set[str]:
        """Normalized disk paths legitimately referenced by `records`."""
        allowed: set[str] = set()
        for record in records:
            for web_path in (record.full, record.src):
                if not web_path:
                    continue
                for p in self.twin_paths(self.web_to_disk(web_path)):
                    allowed.add(_norm(p))
        return allowed

    def iter_asset_files(self) -> Iterable[Path]:
        """Yield every non-junk file under the asset roots."""
        junk = set(self._cfg.junk_files)
        for root in (self._cfg.full_dir, self._cfg.thumbs_dir):
            if not os.path.isdir(root):
                logger.info("Asset directory missing, nothing to scan: {}", root)
                continue
            logger.info("Scanning {}", root)
            for dirpath, dirnames, filenames in os.walk(root):
                dirnames.sort()
                for fn in sorted(filenames):
                    if fn in junk:
                        continue
                    yield Path(dirpath) / fn

    def find_orphans(self, records: Iterable[PhotoRecord]) -> tuple[list[str], int]:
        """Return (orphan paths, allowlist size)."""
        allowed = self.allowed_paths(records)
        orphans = [str(p) for p in self.iter_asset_files() if _norm(p) not in allowed]
        return orphans, len(allowed)

    def run(self, delete: bool = False) -> ReconcileReport:
        """Reconcile asset directories against the manifest.

        Args:
            delete: When False (default), only report orphans.

        Raises:
            ManifestLoadError: The manifest cannot be loaded.
        """
        records = self._repo.load(self._cfg.manifest_path)
        orphans, allowed_count = self.find_orphans(records)
        logger.info("{} referenced files (including encoding twins)", allowed_count)
        for p in orphans:
            logger.info("Orphan: {}", p)

        report = ReconcileReport(orphans=orphans, dry_run=not delete, allowed_count=allowed_count)
        if delete and orphans:
            result = self._deleter.delete_files(orphans, use_recycle_bin=self._cfg.use_recycle_bin)
            if self._cfg.delete_log_dir:
                self._deleter.write_audit_log(result, self._cfg.delete_log_dir)
            report.delete_result = result

        if not orphans:
            logger.info("No orphan files found")
        elif report.dry_run:
            logger.info("Found {} orphan files (report only, nothing deleted)", len(orphans))
        else:
            logger.info(
                "Found {} orphan files, deleted {}, failed {}",
                len(orphans),
                report.deleted_count,
                len(report.delete_result.failed) if report.delete_result else 0,
            )
        return report
