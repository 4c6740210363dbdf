from __future__ import annotations

import logging
import os
from typing import Final

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from code_broker.api.routes import router as api_router
from code_broker.core.config import get_settings
from code_broker.core.errors import UnsupportedLanguageError
from code_broker.core.logging import setup_logging


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Code Execution Broker",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )

    @app.exception_handler(UnsupportedLanguageError)
    def unsupported_language(_: Request, exc: UnsupportedLanguageError) -> JSONResponse:
        logger.info("rejected request: %s", exc)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content="Unsupported language")

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(api_router)
    return app


app: Final[FastAPI] = create_app()


def run() -> None:
    """Run the API using Uvicorn.

    This is for local/dev usage. Production deployments should use a process manager
    and configure workers according to their environment.
    """
    import uvicorn

    host: str = os.environ.get("HOST", "127.0.0.1")
    port_str: str | None = os.environ.get("PORT")
    port: int = int(port_str) if port_str else 8080
    uvicorn.run("code_broker.main:app", host=host, port=port, log_level="info")
