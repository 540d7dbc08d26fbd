"""Alt text derivation for manifest records."""

from __future__ import annotations

from collections.abc import Mapping
import re

# Camera-assigned names carry no meaning for a reader
GENERIC_NAME_RE = re.compile(r"^(IMG|DSC|_DSC|P\d+|[\d\-_]+$)", re.IGNORECASE)
ALT_NOUN = "photograph"


def is_generic_name(stem: str) -> bool:
    """Return True for names like `IMG_1234`, `DSC0042` or `2023-01-05`."""
    return bool(GENERIC_NAME_RE.match(stem))


def album_display_name(album: str, aliases: Mapping[str, str] | None = None) -> str:
    """Human-friendly album label, expanding known abbreviations."""
    if aliases and album in aliases:
        return aliases[album]
    return " ".join(aliases.get(p, p) if aliases else p for p in album.split("/"))


def derive_alt_text(
    stem: str,
    category: str,
    album: str | None = None,
    aliases: Mapping[str, str] | None = None,
) -> str:
    """Build alt text from filename, album and category.

    Example: `("golden-gate", "Travel", "SF")` -> `"golden gate San Francisco Travel photograph"`.
    """
    parts: list[str] = []
    if stem and not is_generic_name(stem):
        parts.append(re.sub(r"[-_]", " ", stem).strip())
    if album:
        parts.append(album_display_name(album, aliases))
    if category:
        parts.append(category)
    parts.append(ALT_NOUN)
    return " ".join(p for p in parts if p)
