"""FastAPI service for ContactPro."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..errors import ContactError, ImportInProgressError, NotFoundError
from ..manager import ContactManager
from .dependencies import get_settings
from .routers import contacts_router, data_router

logger = logging.getLogger(__name__)

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def _status_for(exc: ContactError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ImportInProgressError):
        return 409
    return 400


def create_app(manager: Optional[ContactManager] = None) -> FastAPI:
    """Build the app around ``manager`` (created from settings on first use when omitted)."""
    app = FastAPI(
        title="ContactPro API",
        version=__version__,
        description="REST interface for the ContactPro contact list.",
    )
    app.state.manager = manager

    origins = [*ALLOWED_ORIGINS, get_settings().allowed_frontend]
    origins = [origin for origin in origins if origin]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(ContactError)
    async def contact_error_handler(request: Request, exc: ContactError) -> JSONResponse:
        status_code = _status_for(exc)
        logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/health")
    def health_check() -> dict:
        """Health check endpoint with storage configuration."""
        settings = get_settings()
        return {
            "status": "ok",
            "time": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "storage": settings.storage_backend,
        }

    app.include_router(contacts_router, prefix="/contacts", tags=["contacts"])
    app.include_router(data_router, tags=["data"])
    return app


load_dotenv()
app = create_app()
