"""Utilities for EXIF extraction and filesystem timestamps.

EXIF reading is best-effort: `read_exif_tags` never raises, it reports a
`ResultStatus` instead so callers can tell "no metadata" from "broken
metadata".
"""

from __future__ import annotations

from io import BytesIO
import os
from typing import Any

from loguru import logger
from PIL import Image, UnidentifiedImageError

from core.services.interfaces import ExifResult, ResultStatus

# Base IFD and Exif sub-IFD tag numbers
TAG_MODEL = 0x0110
TAG_EXIF_IFD = 0x8769
TAG_FNUMBER = 0x829D
TAG_FOCAL_LENGTH = 0x920A

_SUB_IFD_TAGS = {"FNumber": TAG_FNUMBER, "FocalLength": TAG_FOCAL_LENGTH}


def read_exif_tags(data: bytes) -> ExifResult:
    """Extract `Model`, `FocalLength` and `FNumber` from raw image bytes via Pillow."""
    try:
        with Image.open(BytesIO(data)) as im:
            exif = im.getexif()
            if not exif:
                return ExifResult(ResultStatus.ABSENT)
            tags: dict[str, Any] = {}
            model = exif.get(TAG_MODEL)
            if model:
                tags["Model"] = model
            sub_ifd = exif.get_ifd(TAG_EXIF_IFD) or {}
            for name, tag in _SUB_IFD_TAGS.items():
                # Some writers put these in IFD0
                value = sub_ifd.get(tag, exif.get(tag))
                if value is not None:
                    tags[name] = value
    except (OSError, UnidentifiedImageError, ValueError, TypeError, KeyError, SyntaxError) as ex:
        logger.debug("EXIF read failed: {}", ex)
        return ExifResult(ResultStatus.FAILED, error=str(ex))

    if not tags:
        return ExifResult(ResultStatus.ABSENT)
    return ExifResult(ResultStatus.PRESENT, tags=tags)


def get_mtime_ns(path: str) -> int:
    """Modification time of `path` in nanoseconds."""
    return os.stat(path).st_mtime_ns
