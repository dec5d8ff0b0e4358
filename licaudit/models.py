"""Core data models shared across licaudit components."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Tuple

APACHE = "Apache"
DOCS = "Docs"
EMPTY = "Empty"
IGNORE = "Ignore"
UNKNOWN = "Unknown"

# Tags that never need a manifest entry when they stand alone.
TRIVIAL_LICENSES = frozenset({APACHE, DOCS, EMPTY, IGNORE})

# Tags that describe a file without naming a license.
NON_LICENSE_TAGS = frozenset({DOCS, EMPTY, IGNORE})


@dataclass(frozen=True)
class License:
    """A classification tag for one file.

    The textual suffixes used in reports (``~`` for inherited, ``!`` for
    undocumented) are kept as flags and only rendered by :meth:`render`.
    ``conflict`` marks a tag that collided with another license for the same
    file; it is never rendered.
    """

    name: str
    inferred: bool = False
    undocumented: bool = False
    error: bool = False
    conflict: bool = False

    @classmethod
    def from_error(cls, exc: BaseException) -> "License":
        message = str(exc) or exc.__class__.__name__
        return cls(name=f"Error: {message}", error=True)

    @property
    def is_trivial(self) -> bool:
        """Only a detected or overridden tag can be trivial; an inherited one never is."""
        return not self.error and not self.inferred and self.name in TRIVIAL_LICENSES

    @property
    def is_ignore(self) -> bool:
        return self.name == IGNORE and not self.inferred and not self.error

    @property
    def is_license(self) -> bool:
        return self.name not in NON_LICENSE_TAGS

    @property
    def failing(self) -> bool:
        return self.undocumented or self.error

    def inherit(self) -> "License":
        return License(name=self.name, inferred=True, error=self.error)

    def mark_undocumented(self) -> "License":
        if self.undocumented:
            return self
        return replace(self, undocumented=True)

    def render(self) -> str:
        text = self.name
        if self.inferred:
            text += "~"
        if self.undocumented or self.error:
            text += "!"
        return text

    def __str__(self) -> str:
        return self.render()


Classification = Tuple[License, ...]


@dataclass(frozen=True)
class FileEntry:
    """One path reported by the tree walker, relative to the repository root."""

    path: str
    size: int
    is_dir: bool = False
    is_symlink: bool = False


@dataclass
class FileVerdict:
    """Final, rendered outcome for one scanned file."""

    path: str
    licenses: List[str]
    ignored: bool = False
    failed: bool = False

    @property
    def summary(self) -> str:
        return ", ".join(self.licenses)


@dataclass
class AuditReport:
    """Everything the reporter needs: per-file verdicts and orphaned manifest entries."""

    root: str
    files: List[FileVerdict] = field(default_factory=list)
    extras: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.extras) or any(verdict.failed for verdict in self.files)

    def failures(self) -> List[FileVerdict]:
        return [verdict for verdict in self.files if verdict.failed]

    def to_dict(self) -> Dict[str, object]:
        return {
            "root": self.root,
            "failed": self.failed,
            "files": [
                {
                    "path": verdict.path,
                    "licenses": list(verdict.licenses),
                    "ignored": verdict.ignored,
                    "failed": verdict.failed,
                }
                for verdict in self.files
            ],
            "extras": list(self.extras),
        }
