"""Per-file classification: detection, override merge, dedup and collisions."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Set

from .logging import get_logger
from .manifest import OverrideTable
from .matcher import SignatureMatcher, identify_licenses
from .models import EMPTY, Classification, FileEntry, License
from .stores import ClassificationTable
from .tokenizer import DEFAULT_QUEUE_SIZE

logger = get_logger("classifier")


def uniq(licenses: Iterable[License]) -> Classification:
    """Collapse duplicate tags, keeping the first occurrence of each."""
    seen: Set[License] = set()
    result: List[License] = []
    for lic in licenses:
        if lic in seen:
            continue
        seen.add(lic)
        result.append(lic)
    return tuple(result)


def collide(licenses: Classification) -> Classification:
    """Flag a genuine license conflict without discarding any tag.

    More than one distinct license-bearing tag (anything other than Docs,
    Empty or Ignore) is a collision: every such tag is kept and marked so the
    reconciler flags all of them unless the manifest documents the exact
    combination.
    """
    bearing = {lic.name for lic in licenses if lic.is_license and not lic.error}
    if len(bearing) < 2:
        return licenses
    return tuple(
        replace(lic, conflict=True) if lic.is_license and not lic.error else lic
        for lic in licenses
    )


class Classifier:
    """Classifies one file at a time; safe to share between worker threads."""

    def __init__(
        self,
        matcher: SignatureMatcher,
        overrides: Optional[OverrideTable] = None,
        *,
        queue_size: int = DEFAULT_QUEUE_SIZE,
    ) -> None:
        self.matcher = matcher
        self.overrides = overrides or OverrideTable()
        self.queue_size = queue_size

    def detect(self, path: Path) -> Classification:
        """Run the tokenizer and matcher over ``path``; I/O failures become an error tag."""
        try:
            with path.open("rb") as handle:
                names = identify_licenses(handle, self.matcher, queue_size=self.queue_size)
        except OSError as exc:
            logger.debug("Failed to read %s: %s", path, exc)
            return (License.from_error(exc),)
        return tuple(License(name) for name in names)

    def classify(self, root: Path, entry: FileEntry) -> Classification:
        """Return the merged classification for one file."""
        if entry.size == 0:
            return (License(EMPTY),)
        detected = self.detect(root / entry.path)
        merged = collide(uniq(self.overrides.lookup(entry.path) + detected))
        logger.debug(
            "Classified %s as %s",
            entry.path,
            ", ".join(lic.render() for lic in merged) or "<unknown>",
        )
        return merged

    def classify_into(self, table: ClassificationTable, root: Path, entry: FileEntry) -> Classification:
        """Classify ``entry`` and merge the result into ``table`` under its lock."""
        result = self.classify(root, entry)
        return table.update(entry.path, lambda existing: collide(uniq(existing + result)))


__all__ = ["Classifier", "collide", "uniq"]
