"""Cross-check final classifications against the documented manifest."""

from __future__ import annotations

from pathlib import Path
from typing import List

from .filekind import KindInferrer
from .logging import get_logger
from .manifest import Manifest
from .models import UNKNOWN, AuditReport, Classification, FileVerdict, License
from .stores import ClassificationTable

logger = get_logger("reconciler")


def needs_documentation(licenses: Classification) -> bool:
    """A lone trivial tag is self-explanatory; anything else must be in the manifest."""
    if len(licenses) != 1:
        return True
    only = licenses[0]
    return not only.is_trivial or only.conflict


def _mark(licenses: Classification) -> Classification:
    return tuple(
        lic.mark_undocumented() if (not lic.is_trivial or lic.conflict) else lic
        for lic in licenses
    )


def reconcile(table: ClassificationTable, manifest: Manifest) -> List[str]:
    """Mark undocumented tags in place and return the affected paths."""
    flagged: List[str] = []
    for path, licenses in table.items():
        if not licenses or not needs_documentation(licenses):
            continue
        if manifest.documents(path, licenses):
            logger.debug("%s is documented in the manifest", path)
            continue
        marked = _mark(licenses)
        if marked != licenses:
            table.set(path, marked)
            flagged.append(path)
    return flagged


def fill_kinds(table: ClassificationTable, inferrer: KindInferrer, root: Path) -> List[str]:
    """Give still-unclassified files a best-effort kind tag."""
    filled: List[str] = []
    for path, licenses in table.items():
        if licenses:
            continue
        kind = inferrer.infer(root, path)
        if kind is None:
            continue
        table.set(path, (License(kind),))
        filled.append(path)
    return filled


def _verdict(path: str, licenses: Classification) -> FileVerdict:
    if not licenses:
        return FileVerdict(path=path, licenses=[f"{UNKNOWN}!"], failed=True)
    ignored = any(lic.is_ignore for lic in licenses)
    failed = not ignored and any(lic.failing for lic in licenses)
    return FileVerdict(
        path=path,
        licenses=[lic.render() for lic in licenses],
        ignored=ignored,
        failed=failed,
    )


def build_report(table: ClassificationTable, manifest: Manifest, root: Path) -> AuditReport:
    """Produce verdicts sorted by path plus the manifest's orphaned entries."""
    verdicts = [_verdict(path, licenses) for path, licenses in table.items()]
    extras = manifest.extra(verdict.path for verdict in verdicts)
    for extra in extras:
        logger.debug("Manifest entry %s matches no scanned file", extra)
    return AuditReport(root=str(root), files=verdicts, extras=extras)


__all__ = ["build_report", "fill_kinds", "needs_documentation", "reconcile"]
