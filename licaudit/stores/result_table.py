"""Lock-protected classification table shared by classification workers."""

from __future__ import annotations

import threading
from typing import Callable, Dict, Iterator, List, Mapping, Tuple

from ..models import Classification

Merge = Callable[[Classification], Classification]


class TableFrozenError(RuntimeError):
    """Raised when a write is attempted after the table was frozen for reporting."""


class ClassificationTable:
    """Maps repository-relative paths to their ordered license tags.

    Every mutation is a single read-modify-write performed under one lock;
    callers never hold the lock across I/O. Entries are created on first
    write and never removed. :meth:`freeze` makes the table read-only.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Classification] = {}
        self._lock = threading.Lock()
        self._frozen = False

    def ensure(self, path: str) -> None:
        """Create an empty (unknown) entry for ``path`` if none exists."""
        with self._lock:
            self._check_writable()
            self._entries.setdefault(path, ())

    def update(self, path: str, merge: Merge) -> Classification:
        """Atomically replace the entry for ``path`` with ``merge(existing)``."""
        with self._lock:
            self._check_writable()
            merged = tuple(merge(self._entries.get(path, ())))
            self._entries[path] = merged
            return merged

    def set(self, path: str, licenses: Classification) -> None:
        self.update(path, lambda _existing: licenses)

    def get(self, path: str) -> Classification:
        with self._lock:
            return self._entries.get(path, ())

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def snapshot(self) -> Mapping[str, Classification]:
        """Return a point-in-time copy of every entry."""
        with self._lock:
            return dict(self._entries)

    def items(self) -> Iterator[Tuple[str, Classification]]:
        """Iterate entries sorted by path."""
        snapshot = self.snapshot()
        for path in sorted(snapshot):
            yield path, snapshot[path]

    def paths(self) -> List[str]:
        return sorted(self.snapshot())

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_writable(self) -> None:
        if self._frozen:
            raise TableFrozenError("Classification table is read-only once reporting begins")


__all__ = ["ClassificationTable", "TableFrozenError"]
