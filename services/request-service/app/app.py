"""
Main FastAPI application.

This file wires together all layers:
- Domain: Item request entities and rules
- Repositories: Data access
- Services: Business logic orchestration
- Routers: HTTP endpoints
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, settings
from .database import create_db_engine, create_session_factory, init_db
from .metrics import metrics_endpoint, track_request_metrics
from .repositories.postgres_repository import PostgresItemRequestRepository
from .repositories.request_repository import IItemRequestRepository
from .routers import batch_router, health_router, heatmap_router, request_router
from .services.batch_service import BatchService
from .services.heatmap_service import HeatmapService
from .services.request_service import ItemRequestService

logging.basicConfig(format="%(message)s", stream=sys.stdout, level=settings.LOG_LEVEL)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


def attach_services(app: FastAPI, repository: IItemRequestRepository, config: Settings) -> None:
    """
    Build the services around ``repository`` and store them on ``app.state``.

    Args:
        app: Application whose state receives the services
        repository: Item request store shared by all services
        config: Service settings
    """
    app.state.repository = repository
    app.state.request_service = ItemRequestService(
        repository, page_size=config.PAGINATION_PAGE_SIZE
    )
    app.state.batch_service = BatchService(repository)
    app.state.heatmap_service = HeatmapService(repository)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: owns the database engine."""
    config: Settings = app.state.settings
    logger.info("Starting Request Service...", service=config.SERVICE_NAME)

    try:
        engine = create_db_engine(config)
        init_db(engine)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    attach_services(
        app, PostgresItemRequestRepository(create_session_factory(engine)), config
    )
    logger.info("Request Service started successfully")

    yield

    logger.info("Shutting down Request Service...")
    engine.dispose()
    logger.info("Request Service shut down complete")


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use, defaults to environment settings

    Returns:
        Configured application (the database connects on startup)
    """
    config = config or settings

    application = FastAPI(
        title="Item Request Service",
        description="Item request lifecycle, query and batch administration",
        version=config.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    application.state.settings = config

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add request ID for distributed tracing."""
        request_id = request.headers.get("X-Request-ID", f"req-{id(request)}")

        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        structlog.contextvars.clear_contextvars()

        return response

    @application.middleware("http")
    async def track_metrics(request: Request, call_next):
        """Track Prometheus metrics."""
        start_time = time.time()
        response = await call_next(request)
        track_request_metrics(
            request.method, request.url.path, response.status_code, time.time() - start_time
        )
        return response

    application.include_router(request_router.router)
    application.include_router(batch_router.router)
    application.include_router(heatmap_router.router)
    application.include_router(health_router.router)
    application.add_api_route("/metrics", metrics_endpoint, methods=["GET"])

    @application.get("/")
    async def root():
        """Root endpoint with service information."""
        return {
            "service": config.SERVICE_NAME,
            "version": config.SERVICE_VERSION,
            "status": "operational",
            "docs": "/api/docs",
            "health": "/api/v1/health",
            "ready": "/api/v1/ready",
        }

    @application.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Report malformed query parameters as invalid input."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or "request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": {
                    "success": False,
                    "error": "invalid_input",
                    "message": f"Validation failed for {field}: {first.get('msg', 'invalid value')}",
                    "details": {"field": field},
                }
            },
        )

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
                "request_id": request.headers.get("X-Request-ID"),
            },
        )

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.app:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
