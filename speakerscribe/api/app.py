"""
speakerscribe.api.app - FastAPI application factory.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from speakerscribe import __version__
from speakerscribe.api import routes
from speakerscribe.config import ScribeConfig, load_config
from speakerscribe.storage import BlobStore
from speakerscribe.transcribe.engine import create_engine_from_config

logger = logging.getLogger(__name__)


def create_app(
    config: ScribeConfig | None = None,
    engine=None,
    store: BlobStore | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        config: Resolved configuration (loaded from cwd/env when omitted)
        engine: Object with ``transcribe(audio, mime_type)``; built from
            config when omitted
        store: Blob store; a filesystem store under ``config.storage_dir``
            when omitted
    """
    config = config or load_config()

    app = FastAPI(title="Speakerscribe API", version=__version__)
    app.state.config = config
    app.state.engine = engine or create_engine_from_config(config)
    app.state.store = store or BlobStore(
        root=config.storage_dir,
        secret=config.storage_secret,
        base_url=config.base_url,
    )

    # CORS middleware for browser front ends
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body.", "details": str(exc.errors())},
        )

    app.include_router(routes.router, prefix="/api")

    logger.info(
        "Proxy ready: model=%s, mock=%s, max upload=%dMB",
        config.llm_model,
        config.mock_mode,
        config.max_file_size_mb,
    )
    return app
