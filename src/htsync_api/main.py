"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from htsync.config import get_config
from htsync.engine import SyncEngine, build_directory, build_engine
from htsync.errors import HtsyncError, InvalidInput
from htsync.services.directory import DirectoryPort

from htsync_api.config import settings
from htsync_api.routers import users, webhooks

log = logging.getLogger(__name__)


def create_app(
    engine: SyncEngine | None = None,
    directory_factory: Callable[[], DirectoryPort] | None = None,
) -> FastAPI:
    """Build the webhook app. Collaborators default to the global SyncConfig."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.engine = engine or build_engine(get_config())
        app.state.directory_factory = directory_factory or (lambda: build_directory(get_config()))
        yield

    app = FastAPI(
        title="htsync",
        description="Keeps NGINX htpasswd partitions in sync with the user directory",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        log.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        fields = sorted({".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()} - {""})
        message = f"Missing or invalid fields: {', '.join(fields)}" if fields else "Invalid request body"
        return JSONResponse(status_code=400, content={"success": False, "error": message})

    @app.exception_handler(HtsyncError)
    async def htsync_error(request: Request, exc: HtsyncError):
        status_code = 400 if isinstance(exc, InvalidInput) else 500
        log.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"success": False, "error": exc.message})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        log.exception("%s %s failed", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

    @app.get("/health")
    async def health():
        return {"status": "OK", "service": "htsync"}

    app.include_router(webhooks.router)
    app.include_router(users.router)
    return app


app = create_app()


def run(host: str | None = None, port: int | None = None):
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("htsync_api.main:app", host=host or settings.host, port=port or settings.port)
