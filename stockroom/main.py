"""
FastAPI application for Stockroom.

To run: uvicorn stockroom.main:app --reload
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from stockroom.core.config import settings
from stockroom.core.database import init_db, close_db, check_db_connection
from stockroom.api.v1 import api_router
from stockroom.error_handlers import (
    AppException,
    app_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
    generic_exception_handler
)
from stockroom.logging_config import setup_logging
from stockroom.middleware import limiter, RequestLoggingMiddleware, rate_limit_exceeded_handler

logger = setup_logging(
    settings.log_level,
    log_dir=settings.log_dir or None,
    max_bytes=settings.log_max_bytes,
    backup_count=settings.log_backup_count
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")

    # Production schemas come from Alembic migrations
    if settings.debug:
        logger.info("Debug mode: creating database tables")
        await init_db()

    yield

    logger.info("Shutting down application")
    await close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Stockroom - products, suppliers and an atomic stock transaction ledger",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

app.state.limiter = limiter

app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include API routers
app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs" if settings.debug else "disabled",
        "api_v1": "/api/v1"
    }


@app.get("/health")
async def health_check():
    """Health check including database reachability."""
    database_ok = await check_db_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "ok" if database_ok else "unreachable",
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "stockroom.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
