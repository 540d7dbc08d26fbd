from core.models import PhotoRecord
from core.services.sort_service import SortService


def _record(photo_id):
    return PhotoRecord(
        id=photo_id, src="", full="", alt="", category="", album=None, exif="", width=0, height=0
    )


def test_sorts_by_id_lexicographically_without_mutating_input():
    records = [_record("b"), _record("B__a"), _record("a__z"), _record("a")]
    result = SortService().sort(records)
    assert [r.id for r in result] == ["B__a", "a", "a__z", "b"]
    assert [r.id for r in records] == ["b", "B__a", "a__z", "a"]
