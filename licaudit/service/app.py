"""FastAPI application entrypoint for licaudit service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..config import ConfigError
from ..models import AuditReport
from ..orchestrator import Orchestrator


class AuditRequest(BaseModel):
    path: str
    quiet: bool = False
    workers: int | None = None


class FileVerdictModel(BaseModel):
    path: str
    licenses: List[str]
    ignored: bool
    failed: bool


class AuditResponse(BaseModel):
    root: str
    failed: bool
    files: List[FileVerdictModel]
    extras: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def _to_response(report: AuditReport, *, quiet: bool) -> AuditResponse:
    files = [
        FileVerdictModel(
            path=verdict.path,
            licenses=list(verdict.licenses),
            ignored=verdict.ignored,
            failed=verdict.failed,
        )
        for verdict in report.files
        if not quiet or verdict.failed
    ]
    return AuditResponse(
        root=report.root,
        failed=report.failed,
        files=files,
        extras=list(report.extras),
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing audit runs."""

    app = FastAPI(title="licaudit", version=__version__)

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request to keep state predictable.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/audit", response_model=AuditResponse)
    async def audit_repo(
        payload: AuditRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> AuditResponse:
        def _run_audit() -> AuditReport:
            return orchestrator.run_audit(payload.path, workers=payload.workers)

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run_audit)
        return _to_response(report, quiet=payload.quiet)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
