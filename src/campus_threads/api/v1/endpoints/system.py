"""System endpoints: scheduled-post trigger and public configuration."""

from __future__ import annotations

import hmac
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Header, HTTPException, status
from fastapi.responses import JSONResponse

from campus_threads.api.v1.dependencies import SessionDep
from campus_threads.core.settings import settings
from campus_threads.services.publisher import process_scheduled_posts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.post("/process-scheduled")
def process_scheduled(
    db: SessionDep,
    x_cron_secret: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """Publish every scheduled post that is due.

    Meant to be called by an external timer. When ``CRON_SECRET`` is set the
    caller must send it in ``X-Cron-Secret``.
    """
    if settings.cron_secret and not hmac.compare_digest(x_cron_secret or "", settings.cron_secret):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid cron secret")

    try:
        result = process_scheduled_posts(db)
    except Exception as exc:  # noqa: BLE001 - reported to the timer as a failed run
        logger.exception("Scheduled post sweep failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(exc) or "Unknown error"},
        )
    return JSONResponse(
        content={
            "success": True,
            "published": result.published,
            "skipped": result.skipped,
            "failed": result.failed,
        }
    )


@router.get("/config")
def get_public_config() -> dict[str, Any]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "auth": {
            "jwt_algorithm": settings.identity_jwt_algorithm,
            "webhook_enabled": bool(settings.identity_webhook_secret),
        },
        "listings": {
            "default_page_size": settings.default_page_size,
            "max_page_size": settings.max_page_size,
            "search_result_limit": settings.search_result_limit,
        },
        "publishing": {
            "worker_enabled": settings.publish_worker_enabled,
            "sweep_interval_seconds": settings.publish_sweep_interval_seconds,
            "cron_secret_required": bool(settings.cron_secret),
        },
    }
