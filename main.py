"""
Main API module for the Shortlink Platform.

Responsibilities:
    - Expose REST endpoints for allocating short codes and redirecting
    - Count clicks without delaying the redirect
    - Map the error taxonomy (shortlink.errors) to HTTP status codes

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - One storage handle per app, shared by Allocator, Resolver and ClickRecorder.
    - Backend chosen by SHORTLINK_STORAGE_BACKEND (memory by default).

Routes:
    POST /shorten              {longUrl, customAlias?} -> {shortUrl, shortCode}
    GET  /stats/{short_code}   stored mapping incl. clickCount (no click counted)
    GET  /health               liveness
    GET  /{short_code}         301 redirect to the long URL

LLM Prompt Example:
    "Explain how to structure a FastAPI service with an application factory,
    injected dependencies, and a clean separation between API and business logic."
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, Field

from shortlink.analytics.base import BaseClickRecorder
from shortlink.analytics.clicks import ClickRecorder
from shortlink.config import settings
from shortlink.errors import (
    AllocationExhausted,
    BackendError,
    ConflictError,
    NotFoundError,
    ShortlinkError,
    ValidationError,
)
from shortlink.manager.allocator import Allocator
from shortlink.manager.generator import BaseCodeGenerator
from shortlink.manager.resolver import Resolver
from shortlink.storage.base import BaseStorage
from shortlink.storage.storage_factory import get_storage

# Error class -> HTTP status. Exhaustion and backend errors share 500 but keep
# their own messages so clients can tell "try again" apart from a hard failure.
STATUS_BY_ERROR = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    AllocationExhausted: 500,
    BackendError: 500,
}


class ShortenRequest(BaseModel):
    """Request payload for allocating a short code."""

    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing URL reaches the allocator and gets its message.
    long_url: Optional[str] = Field(default=None, alias="longUrl")
    custom_alias: Optional[str] = Field(default=None, alias="customAlias")


def create_app(
    storage: Optional[BaseStorage] = None,
    click_recorder: Optional[BaseClickRecorder] = None,
    generator: Optional[BaseCodeGenerator] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage: Mapping backend; chosen from the environment when omitted.
        click_recorder: Fire-and-forget increment dispatcher; a thread-pool
            ClickRecorder over `storage` when omitted.
        generator: Code generator override (tests script collisions with it).

    Returns:
        FastAPI: A fully configured application instance with isolated state.
    """
    log = logging.getLogger("shortlink")

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage if storage is not None else get_storage()
    clicks = click_recorder or ClickRecorder(
        storage, max_workers=settings.CLICK_WORKERS, max_pending=settings.CLICK_MAX_PENDING
    )
    allocator = Allocator(storage, generator=generator)
    resolver = Resolver(storage, clicks)
    log.info("Shortlink storage backend: %s", type(storage).__name__)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        # Let queued click increments finish before the process exits.
        clicks.shutdown(wait=True)

    app = FastAPI(
        title="Shortlink Platform",
        description="URL shortener with collision-safe code allocation and click counting",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.storage = storage
    app.state.allocator = allocator
    app.state.resolver = resolver
    app.state.clicks = clicks

    # ----------------------------------------------------------------
    # Error mapping
    # ----------------------------------------------------------------
    @app.exception_handler(ShortlinkError)
    async def shortlink_error_handler(_request: Request, exc: ShortlinkError) -> JSONResponse:
        status = next(
            (code for cls, code in STATUS_BY_ERROR.items() if isinstance(exc, cls)),
            500,
        )
        return JSONResponse(status_code=status, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if any(err.get("type") == "json_invalid" for err in errors):
            message = "Invalid request: Malformed JSON"
        else:
            message = "Invalid request: Missing or malformed body"
        return JSONResponse(status_code=400, content={"error": message})

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/shorten")
    def shorten(req: ShortenRequest) -> Dict[str, Any]:
        """
        Allocate a short code for a long URL.

        Returns:
            dict: {"shortUrl": ..., "shortCode": ...}

        Errors (body {"error": msg}):
            400 invalid URL / alias, 409 alias taken,
            500 code space exhausted or backend failure.
        """
        allocation = allocator.allocate(req.long_url, req.custom_alias)
        return allocation.to_dict()

    @app.get("/stats/{short_code}")
    def stats(short_code: str) -> Dict[str, Any]:
        """Stored mapping with its current click count; does not count a click."""
        return resolver.lookup(short_code).to_dict()

    # Catch-all path segment: must stay the last route registered.
    @app.get("/{short_code}")
    def redirect(short_code: str) -> RedirectResponse:
        """Permanent redirect to the long URL; the click is counted in the background."""
        long_url = resolver.resolve(short_code)
        return RedirectResponse(url=long_url, status_code=301)

    return app


# Backward compatibility for uvicorn and legacy imports:
# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
