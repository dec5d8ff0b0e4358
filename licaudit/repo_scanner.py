"""Repository discovery and tree walking."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .logging import get_logger
from .models import FileEntry

_VCS_DIRS = {".git", ".hg", ".svn"}

# Guards against symlink loops and absurdly deep paths while searching upwards.
_ROOT_SEARCH_PATIENCE = 10000

logger = get_logger("scanner")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .licaudit.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in rel_path.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.is_file():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    """Apply rules in order; the last matching rule decides."""
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def find_repo_root(start: Path) -> Path:
    """Walk upwards from ``start`` to the directory holding ``.git``.

    Falls back to ``start`` itself when no repository is found.
    """
    start = start.expanduser().resolve()
    current = start
    patience = _ROOT_SEARCH_PATIENCE
    while patience > 0:
        if (current / ".git").is_dir():
            return current
        if current.parent == current:
            break
        current = current.parent
        patience -= 1
    logger.debug("No .git directory above %s; using it as the root", start)
    return start


class RepoScanner:
    """Walks a repository and reports every path that is not ignored."""

    def __init__(self, exclude_paths: Sequence[str] = ()) -> None:
        self._extra_rules: List[IgnoreRule] = []
        for pattern in exclude_paths:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                self._extra_rules.append(rule)

    def load_rules(self, root: Path) -> List[IgnoreRule]:
        return parse_gitignore(root / ".gitignore") + list(self._extra_rules)

    def walk(self, root: Path) -> Iterator[FileEntry]:
        """Yield an entry for every non-ignored directory, symlink and file under ``root``."""
        rules = self.load_rules(root)
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in _VCS_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if should_ignore(rel_path, True, rules):
                    continue
                is_link = (current_dir / name).is_symlink()
                yield FileEntry(path=rel_path, size=0, is_dir=True, is_symlink=is_link)
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if should_ignore(rel_path, False, rules):
                    continue
                path = current_dir / filename
                try:
                    stat_result = path.lstat()
                except OSError as exc:
                    logger.warning("Unable to stat %s: %s", rel_path, exc)
                    continue
                yield FileEntry(
                    path=rel_path,
                    size=stat_result.st_size,
                    is_symlink=path.is_symlink(),
                )

    def scan(self, root: str | Path) -> List[FileEntry]:
        """Return the regular, non-symlink files the classifier should inspect."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Repository path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Repository path is not a directory: {root}")

        files = [
            entry
            for entry in self.walk(root_path)
            if not entry.is_dir and not entry.is_symlink
        ]
        logger.debug("Scanner discovered %d files under %s", len(files), root_path)
        return files


def resolve_root(path: Optional[str]) -> Path:
    """Return the explicit scan root, or discover one from the working directory."""
    if path:
        return Path(path).expanduser().resolve()
    return find_repo_root(Path.cwd())


__all__ = [
    "IgnoreRule",
    "RepoScanner",
    "build_ignore_rule",
    "find_repo_root",
    "parse_gitignore",
    "resolve_root",
    "should_ignore",
]
