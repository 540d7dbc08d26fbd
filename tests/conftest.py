from __future__ import annotations

from pathlib import Path

from loguru import logger
from PIL import Image
import pytest

from core.config import PipelineConfig


def make_image(
    path: Path,
    size: tuple[int, int] = (1200, 800),
    color: tuple[int, int, int] = (120, 80, 40),
    exif: Image.Exif | None = None,
) -> Path:
    """Write a solid-color image; format follows the suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    img = Image.new("RGB", size, color)
    kwargs = {"exif": exif} if exif is not None else {}
    img.save(path, **kwargs)
    return path


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(
        source_dir=str(tmp_path / "originals"),
        thumbs_dir=str(tmp_path / "public" / "images" / "thumbs"),
        full_dir=str(tmp_path / "public" / "images" / "full"),
        manifest_path=str(tmp_path / "src" / "data" / "photos.json"),
        public_dir=str(tmp_path / "public"),
        thumb_width=200,
        full_width=600,
        use_recycle_bin=False,
    )


@pytest.fixture
def log_messages():
    messages: list[str] = []
    handler_id = logger.add(
        lambda m: messages.append(f"{m.record['level'].name}:{m.record['message']}"),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
