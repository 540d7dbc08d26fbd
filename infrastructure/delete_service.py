"""File deletion with per-file error isolation and an audit CSV log.

Files are sent to the recycle bin via send2trash, or unlinked permanently when
the recycle bin is disabled. A failure on one file never stops the rest.
"""

from __future__ import annotations

import csv
from datetime import datetime
import os
from pathlib import Path

from loguru import logger
from send2trash import send2trash

from core.services.interfaces import DeleteResult


class DeleteService:
    """Deletes files and writes audit logs."""

    def delete_files(self, paths: list[str], use_recycle_bin: bool = True) -> DeleteResult:
        """Delete each path individually and report per-path results."""
        success: list[str] = []
        failed: list[tuple[str, str]] = []
        for p in paths:
            normalized_path = os.path.normpath(p)
            if not os.path.exists(normalized_path):
                logger.error("File does not exist: {}", normalized_path)
                failed.append((p, "File does not exist"))
                continue
            try:
                if use_recycle_bin:
                    send2trash(normalized_path)
                else:
                    os.remove(normalized_path)
                success.append(p)
                logger.info("Deleted: {}", normalized_path)
            except (OSError, UnicodeEncodeError) as ex:
                logger.warning("Could not delete {}: {}", normalized_path, ex)
                failed.append((p, str(ex)))
        return DeleteResult(success_paths=success, failed=failed)

    def write_audit_log(self, result: DeleteResult, log_dir: str) -> str | None:
        """Write `delete_<timestamp>.csv` under `log_dir`; return its path."""
        try:
            base_dir = os.path.expandvars(log_dir)
            Path(base_dir).mkdir(parents=True, exist_ok=True)
            ts = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_path = os.path.join(base_dir, f"delete_{ts}.csv")
            with open(log_path, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(["FilePath", "Success", "Reason"])
                for p in result.success_paths:
                    writer.writerow([p, 1, ""])
                for p, reason in result.failed:
                    writer.writerow([p, 0, reason])
            result.log_path = log_path
            logger.info(
                "Delete log written: {} ({} success, {} failed)",
                log_path,
                len(result.success_paths),
                len(result.failed),
            )
            return log_path
        except (OSError, ValueError) as ex:
            logger.error("Write delete log failed: {}", ex)
            return None
