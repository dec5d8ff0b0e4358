"""Override table and documented-license manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from .logging import get_logger
from .models import Classification, License, NON_LICENSE_TAGS

logger = get_logger("manifest")

LICENSE_FILE_NAMES: Tuple[str, ...] = (
    "LICENSE",
    "LICENCE",
    "LICENSE.md",
    "LICENCE.md",
    "LICENSE.txt",
    "LICENCE.txt",
)

_GLOB_CHARS = frozenset("*?[")


def _normalise_path(raw: str) -> str:
    path = raw.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


def _is_pattern(path: str) -> bool:
    return any(char in _GLOB_CHARS for char in path)


class OverrideTable:
    """Manually forced tags per path, merged with detection rather than replacing it.

    Keys are exact repository-relative paths or ``fnmatch`` patterns. Exact
    entries are applied first, then every matching pattern in declaration
    order.
    """

    def __init__(self, entries: Mapping[str, Sequence[str]] | None = None) -> None:
        self._exact: Dict[str, Tuple[str, ...]] = {}
        self._patterns: List[Tuple[str, Tuple[str, ...]]] = []
        for raw_path, names in (entries or {}).items():
            path = _normalise_path(raw_path)
            tags = tuple(str(name) for name in names if str(name).strip())
            if not path or not tags:
                continue
            if _is_pattern(path):
                self._patterns.append((path, tags))
            else:
                self._exact[path] = self._exact.get(path, ()) + tags

    def lookup(self, path: str) -> Classification:
        names: List[str] = list(self._exact.get(path, ()))
        for pattern, tags in self._patterns:
            if fnmatchcase(path, pattern):
                names.extend(tags)
        return tuple(License(name) for name in names)

    def __len__(self) -> int:
        return len(self._exact) + len(self._patterns)


@dataclass(frozen=True)
class ManifestEntry:
    """One documented path (a file, or a directory prefix ending in ``/``)."""

    path: str
    licenses: FrozenSet[str] = field(default_factory=frozenset)
    source: str = "config"

    @property
    def is_directory(self) -> bool:
        return self.path.endswith("/")

    def matches(self, path: str) -> bool:
        if self.is_directory:
            return path.startswith(self.path)
        return path == self.path

    def allows(self, names: Iterable[str]) -> bool:
        if not self.licenses:
            return True
        return frozenset(names) == self.licenses


class Manifest:
    """The documented ledger: which paths are expected to carry which licenses."""

    def __init__(self, entries: Iterable[ManifestEntry] = ()) -> None:
        unique: Dict[Tuple[str, FrozenSet[str]], ManifestEntry] = {}
        for entry in entries:
            unique.setdefault((entry.path, entry.licenses), entry)
        self._entries: Tuple[ManifestEntry, ...] = tuple(unique.values())

    @property
    def entries(self) -> Tuple[ManifestEntry, ...]:
        return self._entries

    def documents(self, path: str, licenses: Iterable[License] = ()) -> bool:
        """Return True when some entry covers ``path`` with this tag combination."""
        names = [lic.name for lic in licenses if lic.name not in NON_LICENSE_TAGS]
        return any(entry.matches(path) and entry.allows(names) for entry in self._entries)

    def extra(self, scanned_paths: Iterable[str]) -> List[str]:
        """Return documented paths that match no scanned file, sorted."""
        paths = list(scanned_paths)
        orphaned = {
            entry.path
            for entry in self._entries
            if not any(entry.matches(path) for path in paths)
        }
        return sorted(orphaned)

    def __len__(self) -> int:
        return len(self._entries)


def parse_license_ledger(text: str, *, source: str = "LICENSE") -> List[ManifestEntry]:
    """Collect ``@path [License ...]`` lines from a top-level license file.

    Bundled components are listed in the project's LICENSE file with one
    ``@`` line per vendored path, optionally followed by the licenses it
    carries.
    """
    entries: List[ManifestEntry] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line.startswith("@"):
            continue
        parts = line[1:].split()
        if not parts:
            continue
        path = _normalise_path(parts[0])
        if not path:
            continue
        entries.append(
            ManifestEntry(path=path, licenses=frozenset(parts[1:]), source=source)
        )
    return entries


def find_license_file(root: Path, preferred: Optional[str] = None) -> Optional[Path]:
    candidates = (preferred,) if preferred else LICENSE_FILE_NAMES
    for name in candidates:
        if name is None:
            continue
        path = root / name
        if path.is_file():
            return path
    return None


def load_manifest(
    root: Path,
    documented: Mapping[str, Sequence[str]] | None = None,
    *,
    license_file: Optional[str] = None,
) -> Manifest:
    """Build the manifest from config entries and the root license file's ``@`` lines."""
    entries: List[ManifestEntry] = []
    for raw_path, names in (documented or {}).items():
        path = _normalise_path(raw_path)
        if not path:
            continue
        entries.append(
            ManifestEntry(path=path, licenses=frozenset(str(name) for name in names))
        )

    ledger = find_license_file(root, license_file)
    if ledger is not None:
        try:
            text = ledger.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("Unable to read license ledger %s: %s", ledger, exc)
        else:
            parsed = parse_license_ledger(text, source=ledger.name)
            logger.debug("Loaded %d documented entries from %s", len(parsed), ledger.name)
            entries.extend(parsed)
    elif license_file:
        logger.warning("Configured license file %s not found under %s", license_file, root)

    return Manifest(entries)


__all__ = [
    "LICENSE_FILE_NAMES",
    "Manifest",
    "ManifestEntry",
    "OverrideTable",
    "find_license_file",
    "load_manifest",
    "parse_license_ledger",
]
