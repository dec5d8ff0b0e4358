"""Audit pipeline orchestration: scan, classify, inherit, reconcile."""

from __future__ import annotations

import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Set

from .classifier import Classifier
from .config import AuditConfig, load_config
from .filekind import KindInferrer
from .inheritance import resolve_inheritance
from .logging import get_logger
from .manifest import Manifest, OverrideTable, load_manifest
from .matcher import SignatureMatcher
from .models import AuditReport, FileEntry, License
from .reconciler import build_report, fill_kinds, reconcile
from .repo_scanner import RepoScanner
from .signatures import discover_signatures
from .stores import ClassificationTable


def default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass
class AuditSettings:
    """Effective run settings after merging config and caller overrides."""

    workers: int
    queue_size: int


class Orchestrator:
    """Coordinates one audit run over a repository."""

    def __init__(
        self,
        scanner: RepoScanner | None = None,
        matcher: SignatureMatcher | None = None,
        overrides: OverrideTable | None = None,
        manifest: Manifest | None = None,
        kind_inferrer: KindInferrer | None = None,
        table_factory=ClassificationTable,
    ) -> None:
        self._scanner_override = scanner
        self._matcher_override = matcher
        self._overrides_override = overrides
        self._manifest_override = manifest
        self._kind_override = kind_inferrer
        self._table_factory = table_factory
        self.logger = get_logger("orchestrator")

    def run_audit(
        self,
        path: str | Path,
        *,
        workers: Optional[int] = None,
        config: Optional[AuditConfig] = None,
    ) -> AuditReport:
        """Classify every file under ``path`` and return the final verdicts."""
        root = Path(path).expanduser().resolve()
        config = config or load_config(root)
        settings = AuditSettings(
            workers=workers if workers is not None else (config.workers or default_workers()),
            queue_size=config.queue_size,
        )
        self.logger.info("Auditing %s with %d workers", root, settings.workers)

        scanner = self._scanner_override or RepoScanner(config.exclude_paths)
        files = scanner.scan(root)
        self.logger.debug("Scanner discovered %d files", len(files))

        classifier = Classifier(
            self._matcher_override or self._build_matcher(config),
            self._overrides_override or OverrideTable(config.overrides),
            queue_size=settings.queue_size,
        )
        manifest = self._manifest_override or load_manifest(
            root, config.documented, license_file=config.license_file
        )

        table = self._table_factory()
        self._classify_all(classifier, table, root, files, settings.workers)

        # Everything below runs only after every worker has joined.
        inherited = resolve_inheritance(table)
        self.logger.debug("%d files inherited a directory license", len(inherited))

        flagged = reconcile(table, manifest)
        self.logger.debug("%d files carry undocumented licenses", len(flagged))

        inferrer = self._kind_override or KindInferrer(config.kinds)
        filled = fill_kinds(table, inferrer, root)
        self.logger.debug("%d files classified by kind", len(filled))

        table.freeze()
        report = build_report(table, manifest, root)
        self.logger.info(
            "Audit finished: %d files, %d failures, %d extra manifest entries",
            len(report.files),
            len(report.failures()),
            len(report.extras),
        )
        return report

    def _build_matcher(self, config: AuditConfig) -> SignatureMatcher:
        signatures = discover_signatures(
            config.signatures.enabled, config.signatures.extra
        )
        return SignatureMatcher(signatures)

    def _classify_all(
        self,
        classifier: Classifier,
        table: ClassificationTable,
        root: Path,
        files: Iterable[FileEntry],
        workers: int,
    ) -> None:
        """Run the classifier over ``files`` on a bounded pool; returns once all have joined."""
        if workers < 1:
            raise ValueError("Audit requires workers >= 1")
        window = workers * 2
        in_flight: Dict[Future, FileEntry] = {}

        def _drain(pending: Set[Future]) -> None:
            for future in pending:
                entry = in_flight.pop(future)
                exc = future.exception()
                if exc is not None:
                    self.logger.error("Classifier crashed on %s: %s", entry.path, exc)
                    table.update(entry.path, lambda _existing, exc=exc: (License.from_error(exc),))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="licaudit") as pool:
            for entry in files:
                table.ensure(entry.path)
                while len(in_flight) >= window:
                    done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                    _drain(done)
                future = pool.submit(classifier.classify_into, table, root, entry)
                in_flight[future] = entry
            if in_flight:
                done, _ = wait(in_flight)
                _drain(done)


__all__ = ["AuditSettings", "Orchestrator", "default_workers"]
