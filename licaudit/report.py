"""Rendering of audit reports for terminals and machines."""

from __future__ import annotations

import json
from typing import List, TextIO

from .models import AuditReport

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

_ERROR_LABEL = "Error"
_EXTRA_LABEL = "Extra-License!"


def _row(status: str, licenses: str, path: str) -> str:
    return f"{status:<6}{licenses:>40} {path}"


def render_text(report: AuditReport, *, quiet: bool = False) -> List[str]:
    """Return one line per reported file, then one per orphaned manifest entry.

    Ignored files are never shown. In quiet mode only failures are listed.
    """
    lines: List[str] = []
    for verdict in report.files:
        if verdict.ignored:
            continue
        if quiet and not verdict.failed:
            continue
        status = _ERROR_LABEL if verdict.failed else ""
        lines.append(_row(status, verdict.summary, verdict.path))
    for extra in report.extras:
        lines.append(_row(_ERROR_LABEL, _EXTRA_LABEL, extra))
    return lines


def render_json(report: AuditReport) -> str:
    return json.dumps(report.to_dict(), indent=2, sort_keys=True)


def write_report(report: AuditReport, stream: TextIO, *, fmt: str = "text", quiet: bool = False) -> int:
    """Write the report and return the process exit code it implies."""
    if fmt == "json":
        stream.write(render_json(report) + "\n")
    elif fmt == "text":
        for line in render_text(report, quiet=quiet):
            stream.write(line + "\n")
    else:
        raise ValueError(f"Unknown report format: {fmt}")
    return exit_code(report)


def exit_code(report: AuditReport) -> int:
    return EXIT_FAILED if report.failed else EXIT_OK


__all__ = [
    "EXIT_FAILED",
    "EXIT_OK",
    "EXIT_USAGE",
    "exit_code",
    "render_json",
    "render_text",
    "write_report",
]
