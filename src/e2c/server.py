"""FastAPI application factory and server configuration."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from e2c.config import get_settings
from e2c.db.base import close_db, init_db
from e2c.errors import E2CError, e2c_error_handler
from e2c.logging_config import setup_logging
from e2c.middleware import (
    AuthMiddleware,
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
)
from e2c.routes import auth, languages, problems


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan manager."""
    # Startup
    await init_db()

    yield

    # Shutdown
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.add_exception_handler(E2CError, e2c_error_handler)

    # Middleware; the last one added runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(AuthMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Routes
    app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(problems.router, prefix="/api/v1/problems", tags=["problems"])
    app.include_router(
        languages.router, prefix="/api/v1/languages", tags=["languages"]
    )

    # Health check
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "enlighten2code"}

    @app.get("/")
    async def root():
        return JSONResponse(
            content={
                "service": settings.app_name,
                "version": "0.1.0",
                "docs": "/docs" if settings.debug else None,
            }
        )

    return app


app = create_app()
