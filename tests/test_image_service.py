from io import BytesIO

from PIL import Image
import pytest

from infrastructure.image_service import ImageService


def _bytes(size=(1200, 800), mode="RGB", fmt="JPEG", exif=None):
    buf = BytesIO()
    kwargs = {"exif": exif} if exif is not None else {}
    Image.new(mode, size).save(buf, fmt, **kwargs)
    return buf.getvalue()


def test_downsizes_keeping_aspect_ratio():
    encoded = ImageService().encode(_bytes(), 600, 80, "jpg")
    assert (encoded.width, encoded.height) == (600, 400)
    with Image.open(BytesIO(encoded.data)) as im:
        assert im.format == "JPEG"
        assert im.size == (600, 400)


def test_never_enlarges():
    encoded = ImageService().encode(_bytes((300, 200)), 600, 80, "webp")
    assert (encoded.width, encoded.height) == (300, 200)
    with Image.open(BytesIO(encoded.data)) as im:
        assert im.format == "WEBP"


def test_applies_exif_orientation():
    exif = Image.Exif()
    exif[0x0112] = 6
    encoded = ImageService().encode(_bytes((400, 200), exif=exif), 1000, 80, "jpg")
    assert (encoded.width, encoded.height) == (200, 400)


def test_rgba_source_encodes_to_jpeg():
    encoded = ImageService().encode(_bytes((50, 50), mode="RGBA", fmt="PNG"), 100, 80, "jpg")
    assert encoded.width == 50


def test_unsupported_format():
    with pytest.raises(ValueError):
        ImageService().encode(_bytes(), 100, 80, "gif")


def test_write_variant_creates_parents_and_reads_back(tmp_path):
    service = ImageService()
    target = tmp_path / "deep" / "dir" / "a.jpg"
    service.write_variant(_bytes(), target, 300, 80, "jpg")
    assert service.read_dimensions(target) == (300, 200)
