"""Derive category, album and a stable id from a source-relative path."""

from __future__ import annotations

import re

from core.config import RootFilePolicy
from core.models import Identity
from core.services.interfaces import RootLevelFileError

_EXT_RE = re.compile(r"\.[^/.]+$")


def strip_extension(name: str) -> str:
    """Remove the last `.ext` of `name`; dotfiles without a stem stay intact."""
    stripped = _EXT_RE.sub("", name)
    return stripped or name


class PathClassifier:
    """Pure mapping from a `/`-separated relative path to an `Identity`."""

    def __init__(
        self,
        separator: str = "__",
        root_policy: RootFilePolicy = RootFilePolicy.UNCATEGORIZED,
        uncategorized_label: str = "uncategorized",
    ) -> None:
        self._sep = separator
        self._root_policy = RootFilePolicy(root_policy)
        self._uncategorized = uncategorized_label

    def classify(self, rel_key: str) -> Identity:
        """Return the identity for `rel_key`.

        Raises:
            RootLevelFileError: The file sits at the source root and the
                policy is `RootFilePolicy.SKIP`.
        """
        parts = [p for p in rel_key.replace("\\", "/").split("/") if p]
        if not parts:
            raise ValueError(f"Empty relative path: {rel_key!r}")

        if len(parts) < 2:
            if self._root_policy is RootFilePolicy.SKIP:
                raise RootLevelFileError(f"Image at source root has no category: {rel_key}")
            category = self._uncategorized
            album = None
        else:
            category = parts[0]
            album = "/".join(parts[1:-1]) if len(parts) > 2 else None

        stem_parts = parts[:-1] + [strip_extension(parts[-1])]
        return Identity(
            id=self._sep.join(stem_parts),
            category=category,
            album=album,
            out_base="/".join(stem_parts),
        )
