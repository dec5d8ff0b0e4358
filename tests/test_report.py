"""Tests for report rendering and exit codes."""

from __future__ import annotations

import io
import json

import pytest

from licaudit.models import AuditReport, FileVerdict
from licaudit.report import EXIT_FAILED, EXIT_OK, render_text, write_report


def _report() -> AuditReport:
    return AuditReport(
        root="/repo",
        files=[
            FileVerdict(path="LICENSE", licenses=["Apache"]),
            FileVerdict(path="gen/out.c", licenses=["Ignore", "MIT!"], ignored=True),
            FileVerdict(path="vendor/lib.js", licenses=["MIT!"], failed=True),
        ],
        extras=["vendor/gone.js"],
    )


def test_render_text_rows_are_aligned() -> None:
    lines = render_text(_report())

    assert lines == [
        f"{'':<6}{'Apache':>40} LICENSE",
        f"{'Error':<6}{'MIT!':>40} vendor/lib.js",
        f"{'Error':<6}{'Extra-License!':>40} vendor/gone.js",
    ]


def test_render_text_quiet_lists_only_failures() -> None:
    lines = render_text(_report(), quiet=True)

    assert [line.split()[-1] for line in lines] == ["vendor/lib.js", "vendor/gone.js"]


def test_write_report_text_returns_failure_code() -> None:
    stream = io.StringIO()

    status = write_report(_report(), stream)

    assert status == EXIT_FAILED
    assert stream.getvalue().count("\n") == 3


def test_write_report_json_includes_ignored_files() -> None:
    stream = io.StringIO()

    write_report(_report(), stream, fmt="json")
    payload = json.loads(stream.getvalue())

    assert payload["failed"] is True
    assert payload["extras"] == ["vendor/gone.js"]
    assert [entry["path"] for entry in payload["files"]] == ["LICENSE", "gen/out.c", "vendor/lib.js"]


def test_clean_report_exits_zero() -> None:
    report = AuditReport(root="/repo", files=[FileVerdict(path="a.py", licenses=["Apache~"])])

    assert write_report(report, io.StringIO()) == EXIT_OK


def test_write_report_rejects_unknown_format() -> None:
    with pytest.raises(ValueError, match="Unknown report format"):
        write_report(_report(), io.StringIO(), fmt="xml")
