"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from licaudit.models import AuditReport, FileVerdict
from licaudit.service import create_app


class _StubOrchestrator:
    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []

    def run_audit(self, path: str, *, workers: int | None = None) -> AuditReport:
        self.calls.append({"path": path, "workers": workers})
        if not Path(path).exists():
            raise FileNotFoundError(f"Repository path not found: {path}")
        return AuditReport(
            root=path,
            files=[
                FileVerdict(path="LICENSE", licenses=["Apache"]),
                FileVerdict(path="vendor/lib.js", licenses=["MIT!"], failed=True),
            ],
            extras=[],
        )


@pytest.fixture
def orchestrator() -> _StubOrchestrator:
    return _StubOrchestrator()


@pytest.fixture
def client(orchestrator: _StubOrchestrator) -> TestClient:
    return TestClient(create_app(lambda: orchestrator))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_audit_endpoint_returns_verdicts(
    client: TestClient, orchestrator: _StubOrchestrator, tmp_path: Path
) -> None:
    response = client.post("/audit", json={"path": str(tmp_path), "workers": 2})

    assert response.status_code == 200
    payload = response.json()
    assert payload["failed"] is True
    assert [entry["path"] for entry in payload["files"]] == ["LICENSE", "vendor/lib.js"]
    assert orchestrator.calls == [{"path": str(tmp_path), "workers": 2}]


def test_audit_endpoint_quiet_keeps_failures(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/audit", json={"path": str(tmp_path), "quiet": True})

    assert response.status_code == 200
    assert [entry["path"] for entry in response.json()["files"]] == ["vendor/lib.js"]


def test_audit_endpoint_missing_path(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/audit", json={"path": str(tmp_path / "absent")})

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_audit_endpoint_rejects_unknown_signature_names(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "main.c").write_text("int main(void);\n", encoding="utf-8")
    (repo / ".licaudit.yml").write_text("signatures:\n  enabled: [NoSuchLicense]\n", encoding="utf-8")
    client = TestClient(create_app())

    response = client.post("/audit", json={"path": str(repo)})

    assert response.status_code == 400
    assert "NoSuchLicense" in response.json()["detail"]


def test_audit_endpoint_rejects_negative_workers(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "main.c").write_text("int main(void);\n", encoding="utf-8")
    client = TestClient(create_app())

    response = client.post("/audit", json={"path": str(repo), "workers": -2})

    assert response.status_code == 400
    assert "workers" in response.json()["detail"]
