import json

import pytest

from core.models import PhotoRecord
from core.services.caption_service import CaptionPreserver
from core.services.interfaces import ManifestLoadError
from infrastructure.json_repository import JsonManifestRepository


def _record(photo_id="A__b", caption=None):
    return PhotoRecord(
        id=photo_id,
        src="/images/thumbs/A/b.jpg",
        full="/images/full/A/b.jpg",
        alt="A photograph",
        category="A",
        album=None,
        exif="",
        width=600,
        height=400,
        caption=caption,
    )


def test_save_uses_stable_key_order_and_omits_empty_caption(tmp_path):
    path = tmp_path / "data" / "photos.json"
    JsonManifestRepository().save(path, [_record(), _record("A__c", caption="Hi")])

    text = path.read_text(encoding="utf-8")
    data = json.loads(text)
    assert list(data) == ["photos"]
    assert list(data["photos"][0]) == [
        "id", "src", "full", "alt", "category", "album", "exif", "width", "height"
    ]
    assert data["photos"][1]["caption"] == "Hi"
    assert text.startswith('{\n  "photos": [')
    assert text.endswith("\n")


def test_load_round_trips_records(tmp_path):
    path = tmp_path / "photos.json"
    repo = JsonManifestRepository()
    repo.save(path, [_record(caption="Hello")])
    assert repo.load(path) == [_record(caption="Hello")]


def test_load_skips_bad_entries(tmp_path, log_messages):
    path = tmp_path / "photos.json"
    path.write_text(json.dumps({"photos": [{"id": "x"}, {"no": "id"}, 5]}), encoding="utf-8")
    records = JsonManifestRepository().load(path)
    assert [r.id for r in records] == ["x"]
    assert any(m.startswith("WARNING:Manifest entry skipped") for m in log_messages)


@pytest.mark.parametrize("content", ["{not json", "[]", '{"items": []}'])
def test_load_rejects_malformed_manifest(tmp_path, content):
    path = tmp_path / "photos.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ManifestLoadError):
        JsonManifestRepository().load(path)


def test_load_missing_manifest(tmp_path):
    with pytest.raises(ManifestLoadError):
        JsonManifestRepository().load(tmp_path / "absent.json")


def test_caption_preserver_applies_only_known_ids():
    preserver = CaptionPreserver.from_records([_record(caption="Hello"), _record("A__c")])
    assert len(preserver) == 1
    assert preserver.apply(_record()).caption == "Hello"
    other = _record("Z__z")
    assert preserver.apply(other) is other


def test_caption_preserver_warns_on_unusable_manifest(tmp_path, log_messages):
    path = tmp_path / "photos.json"
    path.write_text("{broken", encoding="utf-8")
    preserver = CaptionPreserver.from_manifest(JsonManifestRepository(), str(path))
    assert len(preserver) == 0
    assert any(m.startswith("WARNING:") for m in log_messages)


def test_load_tolerates_non_finite_dimensions(tmp_path):
    path = tmp_path / "photos.json"
    path.write_text(
        '{"photos": [{"id": "x", "width": Infinity, "height": NaN, "caption": "c"}]}',
        encoding="utf-8",
    )
    [record] = JsonManifestRepository().load(path)
    assert (record.width, record.height) == (0, 0)
    assert record.caption == "c"
