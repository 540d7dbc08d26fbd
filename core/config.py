"""Pipeline configuration.

All paths, sizes and policies consumed by the manifest builder and the orphan
reconciler live on `PipelineConfig`. Values can be loaded from a
`JsonSettings`-like object exposing `get(dotted_key, default)`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CachePolicy(str, Enum):
    """When an existing variant is considered up to date."""

    EXISTENCE = "existence"
    FRESHNESS = "freshness"


class RootFilePolicy(str, Enum):
    """How to treat images placed directly under the source root."""

    UNCATEGORIZED = "uncategorized"
    SKIP = "skip"


SUPPORTED_FORMATS = ("jpg", "jpeg", "webp", "png")


@dataclass
class PipelineConfig:
    """Explicit configuration for one pipeline run."""

    source_dir: str = "originals"
    thumbs_dir: str = "public/images/thumbs"
    full_dir: str = "public/images/full"
    manifest_path: str = "src/data/photos.json"
    public_dir: str = "public"

    thumbs_url: str = "/images/thumbs"
    full_url: str = "/images/full"

    thumb_width: int = 800
    thumb_quality: int = 80
    full_width: int = 2400
    full_quality: int = 90

    # First entry is the primary encoding recorded in the manifest
    formats: tuple[str, ...] = ("jpg", "webp")
    extensions: tuple[str, ...] = (".jpg", ".jpeg", ".png", ".webp")

    cache_policy: CachePolicy = CachePolicy.FRESHNESS
    root_policy: RootFilePolicy = RootFilePolicy.UNCATEGORIZED
    uncategorized_label: str = "uncategorized"
    id_separator: str = "__"

    model_replacements: tuple[tuple[str, str], ...] = (
        ("Canon EOS ", ""),
        (" Mark II", " II"),
    )
    album_aliases: dict[str, str] = field(default_factory=lambda: {"SF": "San Francisco"})

    workers: int = 1

    junk_files: tuple[str, ...] = (".DS_Store", "Thumbs.db")
    use_recycle_bin: bool = True
    delete_log_dir: str | None = None

    def __post_init__(self) -> None:
        self.cache_policy = CachePolicy(self.cache_policy)
        self.root_policy = RootFilePolicy(self.root_policy)
        self.formats = tuple(f.lower().lstrip(".") for f in self.formats)
        if not self.formats:
            raise ValueError("At least one output format is required")
        unknown = [f for f in self.formats if f not in SUPPORTED_FORMATS]
        if unknown:
            raise ValueError(f"Unsupported output formats: {unknown}")
        self.extensions = tuple(
            e.lower() if e.startswith(".") else f".{e.lower()}" for e in self.extensions
        )
        if not self.id_separator:
            raise ValueError("id_separator must not be empty")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")

    @property
    def primary_format(self) -> str:
        """Encoding whose web path and dimensions go into the manifest."""
        return self.formats[0]

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> PipelineConfig:
        """Build a config from dotted settings keys; `overrides` win when not None."""
        defaults = cls()

        def _get(key: str, default: Any) -> Any:
            return settings.get(key, default) if settings is not None else default

        replacements = _get("exif.model_replacements", None)
        if replacements is None:
            model_replacements = defaults.model_replacements
        else:
            model_replacements = tuple((str(a), str(b)) for a, b in replacements)

        values: dict[str, Any] = {
            "source_dir": str(_get("paths.source", defaults.source_dir)),
            "thumbs_dir": str(_get("paths.thumbs", defaults.thumbs_dir)),
            "full_dir": str(_get("paths.full", defaults.full_dir)),
            "manifest_path": str(_get("paths.manifest", defaults.manifest_path)),
            "public_dir": str(_get("paths.public", defaults.public_dir)),
            "thumbs_url": str(_get("urls.thumbs", defaults.thumbs_url)).rstrip("/"),
            "full_url": str(_get("urls.full", defaults.full_url)).rstrip("/"),
            "thumb_width": int(_get("thumbnails.width", defaults.thumb_width)),
            "thumb_quality": int(_get("thumbnails.quality", defaults.thumb_quality)),
            "full_width": int(_get("full.width", defaults.full_width)),
            "full_quality": int(_get("full.quality", defaults.full_quality)),
            "formats": tuple(_get("output.formats", defaults.formats)),
            "extensions": tuple(_get("source.extensions", defaults.extensions)),
            "cache_policy": _get("cache.policy", defaults.cache_policy.value),
            "root_policy": _get("source.root_policy", defaults.root_policy.value),
            "uncategorized_label": str(
                _get("source.uncategorized_label", defaults.uncategorized_label)
            ),
            "id_separator": str(_get("manifest.id_separator", defaults.id_separator)),
            "model_replacements": model_replacements,
            "album_aliases": dict(_get("alt.album_aliases", defaults.album_aliases)),
            "workers": int(_get("pipeline.workers", defaults.workers)),
            "junk_files": tuple(_get("reconcile.junk_files", defaults.junk_files)),
            "use_recycle_bin": bool(_get("reconcile.use_recycle_bin", defaults.use_recycle_bin)),
            "delete_log_dir": _get("reconcile.delete_log_dir", defaults.delete_log_dir),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
