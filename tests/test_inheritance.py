"""Tests for licaudit.inheritance."""

from __future__ import annotations

from licaudit.inheritance import find_license_source, resolve_inheritance
from licaudit.models import License
from licaudit.stores import ClassificationTable


def _table(entries: dict[str, tuple[License, ...]]) -> ClassificationTable:
    table = ClassificationTable()
    for path, licenses in entries.items():
        table.set(path, licenses)
    return table


def test_child_inherits_apache_from_directory_license() -> None:
    table = _table(
        {
            "lib/LICENSE": (License("Apache"),),
            "lib/util/helpers.c": (),
        }
    )

    assert resolve_inheritance(table) == ["lib/util/helpers.c"]
    inherited = table.get("lib/util/helpers.c")
    assert [lic.render() for lic in inherited] == ["Apache~"]
    assert inherited[0].inferred


def test_root_license_is_not_inherited() -> None:
    table = _table(
        {
            "LICENSE": (License("Apache"),),
            "main.go": (),
            "cmd/tool/run.go": (),
        }
    )

    assert resolve_inheritance(table) == []
    assert table.get("main.go") == ()
    assert table.get("cmd/tool/run.go") == ()


def test_docs_license_file_contributes_nothing() -> None:
    table = _table(
        {
            "vendor/LICENSE": (License("MIT"),),
            "vendor/docs/LICENSE": (License("Docs"),),
            "vendor/docs/page.html": (),
        }
    )

    assert resolve_inheritance(table) == []
    assert table.get("vendor/docs/page.html") == ()


def test_nearest_license_file_wins() -> None:
    table = _table(
        {
            "third_party/LICENSE.txt": (License("Apache"),),
            "third_party/vendor/LICENCE.md": (License("BSD"),),
            "third_party/vendor/pkg/x.js": (),
            "third_party/src/y.js": (),
        }
    )

    resolve_inheritance(table)

    assert [lic.render() for lic in table.get("third_party/vendor/pkg/x.js")] == ["BSD~"]
    assert [lic.render() for lic in table.get("third_party/src/y.js")] == ["Apache~"]


def test_unclassified_license_file_is_skipped() -> None:
    table = _table(
        {
            "vendor/LICENSE": (License("Apache"),),
            "vendor/zlib/LICENSE": (),
            "vendor/zlib/inflate.c": (),
        }
    )

    source = find_license_source("vendor/zlib/inflate.c", table.snapshot())

    assert source == ("vendor/LICENSE", (License("Apache"),))


def test_inheritance_reads_raw_classifications_only() -> None:
    table = _table(
        {
            "pkg/LICENSE": (License("MIT"),),
            "pkg/a/LICENSE": (),
            "pkg/a/b.c": (),
        }
    )

    resolve_inheritance(table)

    # pkg/a/LICENSE inherits too, but pkg/a/b.c resolves against pkg/LICENSE directly.
    assert [lic.render() for lic in table.get("pkg/a/LICENSE")] == ["MIT~"]
    assert [lic.render() for lic in table.get("pkg/a/b.c")] == ["MIT~"]


def test_no_license_file_leaves_entry_empty() -> None:
    table = _table({"orphan.bin": ()})

    assert resolve_inheritance(table) == []
    assert table.get("orphan.bin") == ()
