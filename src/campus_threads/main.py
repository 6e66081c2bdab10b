"""Main entry point for the Campus Threads API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from campus_threads.api.v1 import (
    drafts_router,
    follow_requests_router,
    follows_router,
    media_router,
    polls_router,
    posts_router,
    system_router,
    users_router,
    webhooks_router,
)
from campus_threads.core.errors import CampusThreadsError
from campus_threads.core.logging import configure_logging
from campus_threads.core.settings import settings
from campus_threads.services.publisher import ScheduledPostWorker

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Campus Threads API",
    description="Social graph and content core for a campus microblogging app",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(users_router, prefix="/api/v1")
app.include_router(follows_router, prefix="/api/v1")
app.include_router(follow_requests_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(drafts_router, prefix="/api/v1")
app.include_router(polls_router, prefix="/api/v1")
app.include_router(media_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")
app.include_router(webhooks_router, prefix="/api/v1")


@app.exception_handler(CampusThreadsError)
async def domain_error_handler(request: Request, exc: CampusThreadsError) -> JSONResponse:
    """Translate service-layer errors into HTTP responses."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    if settings.publish_worker_enabled:
        worker = ScheduledPostWorker()
        await worker.start()
        app.state.publish_worker = worker
        logger.info(
            "Scheduled post worker started (interval %ss)",
            settings.publish_sweep_interval_seconds,
        )
    else:
        app.state.publish_worker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: ScheduledPostWorker | None = getattr(app.state, "publish_worker", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("campus_threads.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
