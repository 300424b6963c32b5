"""
FastAPI application for the comparable property engine.

Production deployment configuration via environment variables.
Every error response is the envelope {"error": message}.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.comp_engine import (
    CompEngineError,
    InvalidSearchError,
    PropertyNotFoundError,
    StorageError,
)
from core.storage import PropertyStore
from utils.config import Config
from web.cma_routes import router as cma_router
from web.deps import RequestTimeout
from web.property_routes import router as property_router


logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one line: 'field: reason; ...'."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())[1:])
        message = err.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Map engine errors and framework errors onto the error envelope."""

    @app.exception_handler(InvalidSearchError)
    async def invalid_search(request: Request, exc: InvalidSearchError):
        return error_response(400, str(exc))

    @app.exception_handler(PropertyNotFoundError)
    async def not_found(request: Request, exc: PropertyNotFoundError):
        return error_response(404, "Property not found")

    @app.exception_handler(StorageError)
    async def storage_failure(request: Request, exc: StorageError):
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return error_response(500, "Storage unavailable, please retry")

    @app.exception_handler(CompEngineError)
    async def engine_failure(request: Request, exc: CompEngineError):
        logger.error("Engine failure on %s: %s", request.url.path, exc)
        return error_response(500, str(exc))

    @app.exception_handler(RequestTimeout)
    async def timed_out(request: Request, exc: RequestTimeout):
        logger.warning("Timeout on %s: %s", request.url.path, exc)
        return error_response(504, str(exc))

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return error_response(500, "Internal server error")


def create_app(
    config: Optional[Config] = None,
    store: Optional[PropertyStore] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration (default: loaded from environment)
        store: Property store (default: built from config on first request)
        clock: Timestamp source for CMA reports (default: wall clock)
    """
    config = config or Config.load()

    app = FastAPI(
        title="Comparable Property Engine",
        description="Similar listings and comparative market analysis",
        version=APP_VERSION,
        debug=config.debug,
    )
    app.state.config = config
    app.state.store = store
    app.state.clock = clock

    # Healthcheck endpoints: no dependencies, no IO
    @app.get("/", include_in_schema=False)
    def root():
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        return {"status": "ok"}

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    register_error_handlers(app)

    app.include_router(property_router)
    app.include_router(cma_router)

    @app.on_event("startup")
    def on_startup():
        logger.info("Comparable Property Engine %s started", APP_VERSION)
        logger.info("Configuration: %s", config.to_dict())

    return app


# Create app instance for uvicorn
app = create_app()
