"""
FastAPI application factory for ArchGraph.

Exposes the graph editor service over HTTP with request timing, consistent
error bodies and CORS.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..services.graph_editor import GraphEditorService, create_storage_backend
from ..shared import (
    ArchGraphError, ConfigurationError, GraphIntegrityError, SchemaError, Settings,
    get_logger, get_metrics, get_model_client_from_settings, get_settings, setup_logging,
)
from .models import ErrorResponse
from .routers import chat, graph, health

API_PREFIX = "/api/v1"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, error: str, message: str, details: Optional[dict] = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details, timestamp=_timestamp())
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def build_default_service(settings: Settings) -> GraphEditorService:
    """Build the service from settings; chat stays disabled without an API key."""
    logger = get_logger(__name__)
    storage = create_storage_backend(settings)

    model_client = None
    try:
        model_client = get_model_client_from_settings(settings)
    except ConfigurationError as e:
        logger.warning(f"Chat disabled: {e}")

    return GraphEditorService(storage=storage, model_client=model_client, settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger = get_logger(__name__)
    setup_logging()
    logger.info(f"Starting {app.title} with {app.state.graph_editor.storage.name} storage")

    yield

    logger.info(f"Shutting down {app.title}")


def create_app(service: Optional[GraphEditorService] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        service: Graph editor service to expose; built from settings when omitted
        settings: Configuration, defaults to the environment settings

    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
        Architecture graph editing API:
        - Graph: read and replace a project's architecture graph
        - Deltas: apply partial changes with integrity-preserving merges
        - Chat: describe a change in plain language and let a model draft the delta
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.graph_editor = service or build_default_service(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        get_metrics().record_api_request(
            endpoint=request.url.path,
            method=request.method,
            duration_seconds=process_time,
            status_code=response.status_code
        )

        return response

    @app.exception_handler(SchemaError)
    async def schema_error_handler(request: Request, exc: SchemaError):
        return _error(400, "SchemaError", exc.message, {"errors": exc.errors})

    @app.exception_handler(GraphIntegrityError)
    async def integrity_error_handler(request: Request, exc: GraphIntegrityError):
        return _error(400, "GraphIntegrityError", "Invalid graph structure", {"errors": exc.errors})

    @app.exception_handler(ArchGraphError)
    async def archgraph_error_handler(request: Request, exc: ArchGraphError):
        logger = get_logger(__name__)
        logger.error(f"{type(exc).__name__} in {request.method} {request.url}: {exc}")
        return _error(500, type(exc).__name__, str(exc))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _error(exc.status_code, "HTTPException", str(exc.detail))

    app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
    app.include_router(graph.router, prefix=API_PREFIX, tags=["Graph"])
    app.include_router(chat.router, prefix=API_PREFIX, tags=["Chat"])

    return app
