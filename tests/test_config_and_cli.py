import json
from pathlib import Path
import sys

from loguru import logger
from PIL import Image
import pytest

from core.config import CachePolicy, PipelineConfig, RootFilePolicy
from infrastructure.settings import JsonSettings
import main


@pytest.fixture(autouse=True)
def _restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def _write_settings(tmp_path, **extra):
    data = {
        "paths": {
            "source": str(tmp_path / "originals"),
            "thumbs": str(tmp_path / "public" / "images" / "thumbs"),
            "full": str(tmp_path / "public" / "images" / "full"),
            "manifest": str(tmp_path / "photos.json"),
            "public": str(tmp_path / "public"),
        },
        "thumbnails": {"width": 100},
        "full": {"width": 200},
        "reconcile": {"use_recycle_bin": False},
    }
    data.update(extra)
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_defaults():
    cfg = PipelineConfig()
    assert cfg.cache_policy is CachePolicy.FRESHNESS
    assert cfg.root_policy is RootFilePolicy.UNCATEGORIZED
    assert cfg.primary_format == "jpg"
    assert cfg.formats == ("jpg", "webp")


def test_from_settings_and_overrides(tmp_path):
    path = _write_settings(
        tmp_path,
        cache={"policy": "existence"},
        output={"formats": ["JPG"]},
        source={"root_policy": "skip", "extensions": ["JPG", ".png"]},
    )
    cfg = PipelineConfig.from_settings(JsonSettings(path), workers=4, manifest_path=None)
    assert cfg.cache_policy is CachePolicy.EXISTENCE
    assert cfg.root_policy is RootFilePolicy.SKIP
    assert cfg.formats == ("jpg",)
    assert cfg.extensions == (".jpg", ".png")
    assert cfg.thumb_width == 100
    assert cfg.workers == 4
    assert cfg.manifest_path == str(tmp_path / "photos.json")


def test_invalid_values_raise():
    with pytest.raises(ValueError):
        PipelineConfig(cache_policy="sometimes")
    with pytest.raises(ValueError):
        PipelineConfig(formats=("gif",))
    with pytest.raises(ValueError):
        PipelineConfig(workers=0)


def test_settings_dotted_get(tmp_path):
    settings = JsonSettings(_write_settings(tmp_path))
    assert settings.get("thumbnails.width") == 100
    assert settings.get("thumbnails.missing", 7) == 7
    assert JsonSettings().get("anything", "d") == "d"


def test_cli_generate_then_reconcile(tmp_path):
    settings = _write_settings(tmp_path)
    src = tmp_path / "originals" / "A"
    src.mkdir(parents=True)
    Image.new("RGB", (400, 300)).save(src / "b.jpg")

    assert main.main(["--settings", str(settings), "generate"]) == 0
    photos = json.loads((tmp_path / "photos.json").read_text(encoding="utf-8"))["photos"]
    assert [p["id"] for p in photos] == ["A__b"]
    assert (photos[0]["width"], photos[0]["height"]) == (200, 150)

    orphan = tmp_path / "public" / "images" / "full" / "zzz.jpg"
    orphan.write_bytes(b"x")
    assert main.main(["--settings", str(settings), "reconcile"]) == 0
    assert orphan.exists()
    assert main.main(["--settings", str(settings), "reconcile", "--delete"]) == 0
    assert not orphan.exists()
    assert (tmp_path / "public" / "images" / "full" / "A" / "b.webp").exists()


def test_cli_missing_source_is_fatal(tmp_path):
    settings = _write_settings(tmp_path)
    assert main.main(["--settings", str(settings), "generate"]) == 1
    assert not Path(tmp_path / "photos.json").exists()


def test_cli_reconcile_without_manifest_is_fatal(tmp_path):
    settings = _write_settings(tmp_path)
    assert main.main(["--settings", str(settings), "reconcile", "--delete"]) == 1


def test_cli_invalid_config(tmp_path):
    settings = _write_settings(tmp_path, cache={"policy": "whenever"})
    assert main.main(["--settings", str(settings), "generate"]) == 2
