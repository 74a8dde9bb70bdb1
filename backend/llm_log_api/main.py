from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from llm_log_api.api.router import router as api_router
from llm_log_api.core.config import Settings, settings as default_settings
from llm_log_api.core.errors import LogApiError, NotFoundError, StorageError
from llm_log_api.core.logging import configure_logging
from llm_log_api.db.store import LogStore, create_store

logger = logging.getLogger("llm_log_api")

CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Origin", "Content-Length", "Content-Type", "Authorization"]

GENERIC_ERROR = "Internal server error"


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[LogStore] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: configuration; defaults to the environment-loaded singleton.
        store: storage to serve from. When omitted, one is built from settings
            at startup and disposed at shutdown.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)

        owned = store is None
        app.state.store = create_store(settings) if owned else store
        logger.info("Using %s storage backend", app.state.store.backend)

        try:
            if settings.DB_AUTO_MIGRATE:
                await app.state.store.create_schema()
            # Refuse to serve without a reachable store
            await app.state.store.ping()
        except StorageError:
            logger.critical("Storage is unreachable; refusing to start")
            if owned:
                await app.state.store.dispose()
            raise

        yield

        if owned:
            await app.state.store.dispose()

    app = FastAPI(
        title="LLM Call Log API",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # -------------------------
    # Middleware
    # -------------------------

    # Request-id + timing; also the last stop for unclassified errors, so
    # those 500s still pass back through CORS
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
            response = ORJSONResponse(status_code=500, content={"error": GENERIC_ERROR})

        response.headers["x-request-id"] = request_id
        response.headers["x-response-ms"] = f"{(time.perf_counter() - start) * 1000:.2f}"
        return response

    app.add_middleware(GZipMiddleware, minimum_size=1024)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=False,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )

    # -------------------------
    # Routes
    # -------------------------
    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(api_router)

    # -------------------------
    # Error handling
    # -------------------------
    @app.exception_handler(LogApiError)
    async def log_api_error_handler(request: Request, exc: LogApiError):
        if isinstance(exc, StorageError):
            # Details stay in the log (already written with traceback by the store)
            logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc.message)
            message = GENERIC_ERROR
        else:
            if isinstance(exc, NotFoundError):
                logger.debug("Not found on %s %s", request.method, request.url.path)
            message = exc.message
        return ORJSONResponse(status_code=exc.status_code, content={"error": message})

    return app


app = create_app()
