"""
Nebula Workspace API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.database import init_db
from app.core.middleware import (
    CSRFMiddleware,
    NavigationGateMiddleware,
    SecurityHeadersMiddleware,
    UnhandledErrorMiddleware,
)
from app.core.redis import close_redis
from app.api.v1 import router as api_v1_router

settings = get_settings()
log = structlog.get_logger()


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request validation failures as 400 with the field errors."""
    log.info("request.validation_failed", path=request.url.path, error_count=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation failed",
            "errors": jsonable_encoder(exc.errors(), exclude={"ctx", "input", "url"}),
        },
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Nebula Workspace",
        description="Workspaces, projects, tasks and notes for small teams.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Middleware (add_middleware prepends, so the last one added runs first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(NavigationGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )
    app.add_middleware(UnhandledErrorMiddleware)

    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint for startup probes."""
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("Nebula starting", strict_scoping=settings.strict_scoping)
        if settings.create_tables:
            await init_db()

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Nebula shutting down")
        await close_redis()

    return app


app = create_app()
