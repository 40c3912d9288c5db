"""FastAPI application for running analyses over HTTP."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import get_analyzer_options
from ..orchestrator import RepositoryAnalyzer

AnalyzerFactory = Callable[[str], RepositoryAnalyzer]


class AnalyzeRequest(BaseModel):
    path: str
    ignore: Optional[List[str]] = None
    include_tests: bool = False
    include_cochange: bool = True


class HealthResponse(BaseModel):
    status: str


def create_app(analyzer_factory: AnalyzerFactory = RepositoryAnalyzer) -> FastAPI:
    """Create the FastAPI application exposing repository analysis."""

    app = FastAPI(title="Repo Archaeologist Service", version="1.0.0")

    async def get_factory() -> AnalyzerFactory:
        return analyzer_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze")
    async def analyze_repo(
        payload: AnalyzeRequest,
        factory: AnalyzerFactory = Depends(get_factory),
    ) -> Dict[str, Any]:
        options = get_analyzer_options(
            ignore=payload.ignore,
            include_tests=payload.include_tests,
            include_cochange=payload.include_cochange,
        )
        analyzer = factory(payload.path)
        # run() owns its event loop, so it goes to a worker thread.
        result = await asyncio.to_thread(analyzer.run, options)
        return result.to_dict()

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["AnalyzeRequest", "create_app", "run_service"]
