"""Main FastAPI Application

Wires middleware, global exception handlers and the API routers from
`presentation`.

Run locally for development with:

    uvicorn main:app --reload

The daily batch is triggered by POST /api/v1/cron/job-search, or by
`run_discovery.py` at the repository root.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from core.config import settings
from core.database import init_db, close_db, health_check as database_health_check
from core.exceptions import DomainException
from infrastructure.cache.redis_cache_service import cache_service
from presentation.api.v1.endpoints import (
    cron_router,
    insights_router,
    job_postings_router,
    preferences_router,
)
from presentation.api.v1.errors import to_http_exception


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"🚀 Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")

    await init_db()
    logger.info("✅ Database initialized")

    await cache_service.connect()

    yield

    # Shutdown
    logger.info("👋 Shutting down gracefully...")
    await cache_service.disconnect()
    await close_db()
    logger.info("✅ Database connections closed")


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Discovers job postings, scores them against candidate profiles and surfaces the best matches",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)


# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global Exception Handler
@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException):
    """Handle domain-level exceptions that escaped an endpoint"""
    logger.warning(f"Domain exception: {str(exc)}")
    error = to_http_exception(exc, f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.detail}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler"""
    logger.opt(exception=exc).error(f"Unhandled exception: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Candidate-facing endpoints
app.include_router(
    preferences_router,
    prefix="/api/v1/job-search",
    tags=["Preferences"]
)

app.include_router(
    insights_router,
    prefix="/api/v1/job-search",
    tags=["Insights"]
)

app.include_router(
    job_postings_router,
    prefix="/api/v1/job-search",
    tags=["Matches"]
)

# Scheduler trigger
app.include_router(
    cron_router,
    prefix="/api/v1/cron",
    tags=["Batch"]
)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    database_ok = await database_health_check()
    return {
        "status": "healthy" if database_ok else "degraded",
        "service": "job-discovery",
        "database": database_ok,
        "cache": cache_service.connected,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
