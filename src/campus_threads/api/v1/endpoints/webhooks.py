"""Inbound webhooks from the identity provider."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status

from campus_threads.api.v1.dependencies import SessionDep
from campus_threads.core.settings import settings
from campus_threads.services.webhooks import WebhookVerificationError, handle_identity_event, verify_webhook

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/identity")
async def identity_webhook(request: Request, db: SessionDep) -> dict[str, bool]:
    """Receive a signed user lifecycle event and upsert the matching user.

    Returns 400 without writing anything when verification fails.
    """
    if not settings.identity_webhook_secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Identity webhook is not configured",
        )
    payload = await request.body()
    try:
        event = verify_webhook(settings.identity_webhook_secret, payload, request.headers)
    except WebhookVerificationError as exc:
        logger.warning("Rejected identity webhook: %s", exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    handle_identity_event(db, event)
    return {"received": True}
