"""Format camera metadata into the manifest's display string."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from loguru import logger

from core.services.interfaces import ExifResult, ResultStatus

EXIF_JOINER = " · "


def clean_model(model: Any, replacements: Iterable[tuple[str, str]] = ()) -> str:
    """Strip padding from a camera model and apply substitutions in order."""
    if model is None:
        return ""
    text = str(model).replace("\x00", "").strip()
    for old, new in replacements:
        text = text.replace(old, new)
    return text.strip()


def _format_number(value: Any) -> str:
    num = float(value)
    if num.is_integer():
        return str(int(num))
    return f"{num:g}"


def format_focal_length(value: Any) -> str:
    """`50.0` -> `"50mm"`; empty for missing or zero values."""
    try:
        if value is None or float(value) <= 0:
            return ""
        return f"{_format_number(value)}mm"
    except (TypeError, ValueError, ZeroDivisionError):
        return ""


def format_aperture(value: Any) -> str:
    """`2.8` -> `"f/2.8"`, `8.0` -> `"f/8"`; one decimal place."""
    try:
        if value is None or float(value) <= 0:
            return ""
        text = f"{float(value):.1f}"
    except (TypeError, ValueError, ZeroDivisionError):
        return ""
    if text.endswith(".0"):
        text = text[:-2]
    return f"f/{text}"


class MetadataExtractor:
    """Wraps an EXIF reader and turns its result into a display string."""

    def __init__(
        self,
        reader: Callable[[bytes], ExifResult],
        model_replacements: Iterable[tuple[str, str]] = (),
    ) -> None:
        self._reader = reader
        self._replacements = tuple(model_replacements)

    def describe(self, data: bytes, label: str = "") -> str:
        """Return `"<model> · <focal>mm · f/<aperture>"`, omitting absent parts."""
        result = self._reader(data)
        if result.status is ResultStatus.FAILED:
            logger.debug("EXIF unavailable for {}: {}", label or "<bytes>", result.error)
            return ""
        if result.status is ResultStatus.ABSENT:
            return ""
        return self.format_tags(result.tags)

    def format_tags(self, tags: dict[str, Any]) -> str:
        """Format a flat tag map (`Model`, `FocalLength`, `FNumber`)."""
        parts = [
            clean_model(tags.get("Model"), self._replacements),
            format_focal_length(tags.get("FocalLength")),
            format_aperture(tags.get("FNumber")),
        ]
        return EXIF_JOINER.join(p for p in parts if p)
