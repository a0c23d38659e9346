"""Main FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import APIError, api_error_handler, validation_error_handler
from app.api.middleware import CorrelationIdMiddleware
from app.api.routes import health_router, resources_router
from app.core.config import Settings, get_settings
from app.core.logging import get_logger, setup_logging
from app.services.audit import AuditService

settings = get_settings()
setup_logging(settings)
logger = get_logger(__name__)

# Response headers browsers may read on cross-origin downloads.
EXPOSED_HEADERS = [
    "ETag",
    "Last-Modified",
    "Content-Disposition",
    "Content-Range",
    "X-Correlation-Id",
]


def build_audit_service(current: Settings) -> AuditService:
    """Create the download audit service from the audit section."""
    return AuditService(
        enabled=current.audit.enabled,
        storage_dir=current.audit.storage_dir,
        retention_days=current.audit.retention_days,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Checks the asset root and prepares the audit service on ``app.state``.
    """
    current = get_settings()
    asset_root = Path(current.assets.root_path).resolve()
    logger.info(
        "Starting Data Assets API",
        extra={"version": current.version, "asset_root": str(asset_root)},
    )
    if not asset_root.is_dir():
        # Requests will answer 404 until the folder appears.
        logger.warning("Asset root is not a directory", extra={"asset_root": str(asset_root)})

    audit_service = build_audit_service(current)
    await audit_service.cleanup_old_files()
    app.state.audit_service = audit_service

    yield
    logger.info("Shutting down Data Assets API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    current = get_settings()
    app = FastAPI(
        title=current.app_name,
        description="Authenticated file downloads with conditional GET and byte ranges",
        version=current.version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        debug=current.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=current.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=EXPOSED_HEADERS,
    )
    # Added last, so it is outermost and tags every response.
    app.add_middleware(CorrelationIdMiddleware)

    app.add_exception_handler(APIError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError,
        validation_error_handler,  # type: ignore[arg-type]
    )

    app.include_router(health_router)
    app.include_router(resources_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
