"""Logging initialization utilities using loguru."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger

CONSOLE_FORMAT = "<level>{level: <8}</level> | {message}"


def init_logging(log_dir: str | None = None, level: str = "INFO") -> None:
    """Log to stderr and, when `log_dir` is given, to a rotating file there."""
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, backtrace=False, diagnose=False)

    if log_dir is None:
        return
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(log_path / "assets_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        backtrace=False,
        diagnose=False,
        level="DEBUG" if level == "DEBUG" else "INFO",
    )

