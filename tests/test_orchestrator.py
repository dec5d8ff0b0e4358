"""End-to-end audits over throwaway repositories."""

from __future__ import annotations

from typing import Iterable, List

import pytest

from licaudit.config import AuditConfig
from licaudit.matcher import SignatureMatcher
from licaudit.orchestrator import Orchestrator, default_workers
from licaudit.signatures import discover_signatures
from tests._fixtures.repo_builder import APACHE_HEADER, MIT_HEADER, RepoBuilder

APACHE_LICENSE = """
Apache License
Version 2.0, January 2004
http://www.apache.org/licenses/
"""


def test_apache_repository_passes(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "LICENSE": APACHE_LICENSE,
            "src/app.py": APACHE_HEADER + "\nprint('hello')\n",
            "src/__init__.py": "",
        }
    )

    report = repo_builder.audit()
    verdicts = {verdict.path: verdict for verdict in report.files}

    assert not report.failed
    assert verdicts["LICENSE"].licenses == ["Apache"]
    assert verdicts["src/app.py"].licenses == ["Apache"]
    assert verdicts["src/__init__.py"].licenses == ["Empty"]
    assert [verdict.path for verdict in report.files] == sorted(verdicts)


def test_root_license_does_not_cover_headerless_files(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "LICENSE": APACHE_LICENSE,
            "main.go": "package main\n",
            "cmd/tool/run.go": "package tool\n",
        }
    )

    report = repo_builder.audit()
    verdicts = {verdict.path: verdict for verdict in report.files}

    assert report.failed
    assert verdicts["LICENSE"].licenses == ["Apache"]
    assert verdicts["main.go"].licenses == ["Unknown!"]
    assert verdicts["cmd/tool/run.go"].licenses == ["Unknown!"]


def test_unclassified_file_is_unknown(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"notes.txt": "just some words\n"})

    report = repo_builder.audit()

    assert report.failed
    assert report.files[0].licenses == ["Unknown!"]


def test_undocumented_license_fails_until_listed(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "LICENSE": APACHE_LICENSE,
            "vendor/lib.js": MIT_HEADER,
        }
    )

    failing = repo_builder.verdicts()["vendor/lib.js"]
    assert failing.failed
    assert failing.licenses == ["MIT!"]

    repo_builder.write({"LICENSE": APACHE_LICENSE + "\n@vendor/lib.js MIT\n"})
    report = repo_builder.audit()

    assert not report.failed
    assert {v.path: v for v in report.files}["vendor/lib.js"].licenses == ["MIT"]


def test_directory_entry_documents_every_file_below(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "third_party/a/one.c": MIT_HEADER,
            "third_party/b/two.c": MIT_HEADER,
        }
    )

    report = repo_builder.audit(config=AuditConfig(documented={"third_party/": []}))

    assert not report.failed
    assert report.extras == []


def test_conflicting_licenses_are_all_flagged(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"mixed.c": APACHE_HEADER + MIT_HEADER})

    verdict = repo_builder.verdicts()["mixed.c"]

    assert verdict.failed
    assert verdict.licenses == ["Apache!", "MIT!"]


def test_documented_combination_resolves_conflict(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"mixed.c": APACHE_HEADER + MIT_HEADER})

    report = repo_builder.audit(
        config=AuditConfig(documented={"mixed.c": ["Apache", "MIT"]})
    )

    assert not report.failed
    assert report.files[0].licenses == ["Apache", "MIT"]


def test_partial_documentation_does_not_resolve_conflict(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"mixed.c": APACHE_HEADER + MIT_HEADER})

    report = repo_builder.audit(config=AuditConfig(documented={"mixed.c": ["MIT"]}))

    assert report.failed
    assert report.files[0].licenses == ["Apache!", "MIT!"]


def test_orphaned_manifest_entry_is_reported(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"LICENSE": APACHE_LICENSE + "\n@vendor/gone.js MIT\n"})

    report = repo_builder.audit()

    assert report.extras == ["vendor/gone.js"]
    assert report.failed


def test_docs_license_file_blocks_inheritance(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "LICENSE": APACHE_LICENSE,
            "docs/LICENSE": "See the project website for details.\n",
            "docs/guide.txt": "How to use the thing.\n",
        }
    )

    verdicts = repo_builder.verdicts(
        config=AuditConfig(overrides={"docs/LICENSE": ["Docs"]})
    )

    assert verdicts["docs/LICENSE"].licenses == ["Docs"]
    assert not verdicts["docs/LICENSE"].failed
    assert verdicts["docs/guide.txt"].licenses == ["Unknown!"]


def test_override_is_merged_with_detection(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"LICENSE": APACHE_LICENSE})

    report = repo_builder.audit(
        config=AuditConfig(overrides={"LICENSE": ["Docs"]})
    )
    verdicts = {verdict.path: verdict for verdict in report.files}

    assert not report.failed
    assert verdicts["LICENSE"].licenses == ["Docs", "Apache"]


def test_nearest_license_file_wins(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "LICENSE": APACHE_LICENSE,
            "vendor/LICENSE": MIT_HEADER,
            "vendor/util.js": "module.exports = {};\n",
        }
    )

    verdicts = repo_builder.verdicts(
        config=AuditConfig(documented={"vendor/": ["MIT"]})
    )

    assert verdicts["vendor/util.js"].licenses == ["MIT~"]
    assert not verdicts["vendor/util.js"].failed


def test_ignored_files_never_fail(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "generated/out.c": MIT_HEADER,
            "generated/blob.txt": "opaque\n",
        }
    )

    report = repo_builder.audit(
        config=AuditConfig(overrides={"generated/*": ["Ignore"]})
    )

    assert not report.failed
    assert all(verdict.ignored for verdict in report.files)


def test_unclassified_image_gets_a_kind(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"assets/logo.png": b"\x89PNG\r\n\x1a\n\x00\x00"})

    verdict = repo_builder.verdicts()["assets/logo.png"]

    assert verdict.licenses == ["Image"]
    assert not verdict.failed


def test_audit_is_repeatable(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "LICENSE": APACHE_LICENSE,
            "a.c": APACHE_HEADER + MIT_HEADER,
            "b/c.py": "pass\n",
            "d.txt": "",
        }
    )

    first = repo_builder.audit(workers=1).to_dict()
    second = repo_builder.audit(workers=4).to_dict()

    assert first == second


def test_gitignored_files_are_not_reported(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".gitignore": "build/\n",
            "LICENSE": APACHE_LICENSE,
            "build/output.txt": "artifact\n",
        }
    )

    paths = set(repo_builder.verdicts())

    assert "build/output.txt" not in paths
    assert ".gitignore" in paths


def test_missing_repository_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        Orchestrator().run_audit(tmp_path / "absent", config=AuditConfig())


def test_default_workers_is_bounded() -> None:
    assert 1 <= default_workers() <= 32


def test_inherited_license_needs_a_manifest_entry(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "vendor/lib/LICENSE": APACHE_LICENSE,
            "vendor/lib/inflate.c": "int inflate(void);\n",
        }
    )

    failing = repo_builder.verdicts()["vendor/lib/inflate.c"]
    assert failing.licenses == ["Apache~!"]
    assert failing.failed

    report = repo_builder.audit(
        config=AuditConfig(documented={"vendor/lib/": ["Apache"]})
    )
    assert not report.failed


class _ExplodingMatcher(SignatureMatcher):
    """Fails on any file containing the word ``explode``."""

    def scan(self, tokens: Iterable[str]) -> List[str]:
        words = list(tokens)
        if "explode" in words:
            raise RuntimeError("matcher blew up")
        return super().scan(words)


def test_crashed_worker_tags_its_file_with_an_error(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "bad.c": "please explode now\n",
            "good.c": APACHE_HEADER,
            "more/good.h": APACHE_HEADER,
        }
    )
    orchestrator = Orchestrator(matcher=_ExplodingMatcher(discover_signatures()))

    report = orchestrator.run_audit(
        repo_builder.path(), workers=2, config=AuditConfig()
    )
    verdicts = {verdict.path: verdict for verdict in report.files}

    assert report.failed
    assert verdicts["bad.c"].licenses == ["Error: matcher blew up!"]
    assert verdicts["bad.c"].failed
    assert verdicts["good.c"].licenses == ["Apache"]
    assert verdicts["more/good.h"].licenses == ["Apache"]
