"""Image resizing and encoding backed by Pillow.

The service is the pipeline's transcoding engine: given source bytes, a
target width, a quality and an output format it returns encoded bytes with
the final dimensions. EXIF orientation is applied before resizing so the
reported width/height match what a browser displays.
"""

from __future__ import annotations

from io import BytesIO
import os
from pathlib import Path
import tempfile

from loguru import logger
from PIL import Image, ImageOps

from core.services.interfaces import EncodedImage

_PIL_FORMATS = {"jpg": "JPEG", "jpeg": "JPEG", "webp": "WEBP", "png": "PNG"}


def _ensure_dir(p: Path) -> None:
    """Create directory `p` if missing (including parents)."""
    p.mkdir(parents=True, exist_ok=True)


def _write_atomic(target: Path, data: bytes) -> None:
    """Write `data` to a temp file beside `target`, then move it into place."""
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
    except OSError:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def _resample() -> int:
    resampling = getattr(Image, "Resampling", Image)
    return getattr(resampling, "LANCZOS", getattr(resampling, "BICUBIC", 3))


class ImageService:
    """Resize/encode images and read back dimensions of written variants."""

    def encode(self, data: bytes, width: int, quality: int, fmt: str) -> EncodedImage:
        """Encode `data` as `fmt`, downsized to at most `width` pixels wide.

        Images narrower than `width` are never enlarged.

        Raises:
            ValueError: Unsupported `fmt`.
            OSError: The source bytes cannot be decoded or encoded.
        """
        pil_format = _PIL_FORMATS.get(fmt.lower())
        if pil_format is None:
            raise ValueError(f"Unsupported output format: {fmt}")

        with Image.open(BytesIO(data)) as src:
            im = ImageOps.exif_transpose(src)
            if im is None:
                im = src.copy()
            if width and width > 0 and im.width > width:
                height = max(1, round(im.height * width / im.width))
                im = im.resize((width, height), _resample())

            im = self._convert_mode(im, pil_format)
            buf = BytesIO()
            if pil_format == "JPEG":
                im.save(buf, pil_format, quality=quality, optimize=True, progressive=True)
            elif pil_format == "WEBP":
                im.save(buf, pil_format, quality=quality, method=4)
            else:
                im.save(buf, pil_format, optimize=True)
            return EncodedImage(data=buf.getvalue(), width=im.width, height=im.height)

    def write_variant(
        self, data: bytes, target: str | Path, width: int, quality: int, fmt: str
    ) -> EncodedImage:
        """Encode and write a variant to `target`, creating parent directories."""
        encoded = self.encode(data, width, quality, fmt)
        target_path = Path(target)
        _ensure_dir(target_path.parent)
        _write_atomic(target_path, encoded.data)
        logger.debug(
            "Wrote {} ({}x{}, {} bytes)",
            target_path,
            encoded.width,
            encoded.height,
            len(encoded.data),
        )
        return encoded

    def read_dimensions(self, path: str | Path) -> tuple[int, int]:
        """Return (width, height) of an existing image file."""
        with Image.open(path) as im:
            return im.size

    def _convert_mode(self, im: Image.Image, pil_format: str) -> Image.Image:
        has_alpha = "A" in im.mode or "transparency" in im.info
        if pil_format == "JPEG":
            return im if im.mode == "RGB" else im.convert("RGB")
        if pil_format == "WEBP":
            target = "RGBA" if has_alpha else "RGB"
            return im if im.mode == target else im.convert(target)
        if im.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            return im.convert("RGBA" if has_alpha else "RGB")
        return im
