"""Directory inheritance of LICENSE-file classifications."""

from __future__ import annotations

import posixpath
from typing import Iterator, List, Mapping, Optional, Tuple

from .classifier import collide
from .logging import get_logger
from .manifest import LICENSE_FILE_NAMES
from .models import DOCS, Classification
from .stores import ClassificationTable

logger = get_logger("inheritance")


def _ancestors(path: str) -> Iterator[str]:
    """Yield the sub-directories above ``path``, nearest first.

    The repository root itself is never yielded, so a top-level license
    file is not inherited.
    """
    directory = posixpath.dirname(path)
    while directory:
        yield directory
        directory = posixpath.dirname(directory)


def find_license_source(
    path: str, classifications: Mapping[str, Classification]
) -> Optional[Tuple[str, Classification]]:
    """Return the nearest ancestor license file with a non-empty classification."""
    for directory in _ancestors(path):
        for name in LICENSE_FILE_NAMES:
            candidate = posixpath.join(directory, name)
            licenses = classifications.get(candidate)
            if licenses:
                return candidate, licenses
    return None


def resolve_inheritance(table: ClassificationTable) -> List[str]:
    """Fill empty entries from the nearest license file in an enclosing sub-directory.

    Every tag of that license file except Docs is copied and marked as
    inferred. Lookups use the classifications as they stood before this
    pass, so the outcome does not depend on iteration order. Returns the
    paths that inherited something.
    """
    raw = table.snapshot()
    inherited: List[str] = []
    for path in sorted(raw):
        if raw[path]:
            continue
        source = find_license_source(path, raw)
        if source is None:
            continue
        source_path, licenses = source
        copied = collide(tuple(lic.inherit() for lic in licenses if lic.name != DOCS))
        if not copied:
            logger.debug("%s: nearest license file %s carries only Docs", path, source_path)
            continue
        table.set(path, copied)
        inherited.append(path)
        logger.debug("%s inherits %s from %s", path, ", ".join(map(str, copied)), source_path)
    return inherited


__all__ = ["find_license_source", "resolve_inheritance"]
