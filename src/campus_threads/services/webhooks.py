"""Identity-provider webhooks.

Deliveries are signed by Svix: ``svix-id``, ``svix-timestamp`` and
``svix-signature`` headers checked against the ``whsec_`` signing secret.
Verification (signature, secret rotation and the five minute timestamp
window) is delegated to :class:`svix.webhooks.Webhook`.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session
from svix.webhooks import Webhook, WebhookVerificationError

from campus_threads.models import User
from campus_threads.schemas.user import UserSync
from campus_threads.services.user_service import sync_user

logger = logging.getLogger(__name__)

HANDLED_EVENTS = ("user.created", "user.updated")

__all__ = ["WebhookVerificationError", "verify_webhook", "handle_identity_event"]


def verify_webhook(secret: str, payload: bytes | str, headers: Mapping[str, str]) -> dict[str, Any]:
    """Verify a delivery and return its decoded JSON body.

    Raises:
        WebhookVerificationError: On missing headers, a timestamp outside the
            tolerance window, a bad signature or a body that is not UTF-8 JSON.
    """
    if isinstance(payload, bytes):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError as err:
            raise WebhookVerificationError("Webhook body is not valid UTF-8") from err

    try:
        webhook = Webhook(secret)
    except ValueError as err:
        raise WebhookVerificationError("Webhook secret is not valid base64") from err

    try:
        event = webhook.verify(payload, dict(headers.items()))
    except ValueError as err:
        raise WebhookVerificationError("Malformed webhook signature or body") from err
    if not isinstance(event, dict):
        raise WebhookVerificationError("Webhook body is not a JSON object")
    return event


def _primary_email(data: Mapping[str, Any]) -> str | None:
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for address in addresses:
        if primary_id and address.get("id") == primary_id:
            return address.get("email_address")
    return addresses[0].get("email_address") if addresses else None


def handle_identity_event(db: Session, event: Mapping[str, Any]) -> User | None:
    """Apply a verified identity event. Unknown event types are ignored."""
    event_type = event.get("type")
    if event_type not in HANDLED_EVENTS:
        logger.info("Ignoring identity webhook event %s", event_type)
        return None

    data = event.get("data") or {}
    email = _primary_email(data)
    if not data.get("id") or not email:
        logger.warning("Identity webhook %s without subject or email, skipping", event_type)
        return None

    user, created = sync_user(
        db,
        UserSync(
            external_id=data["id"],
            email=email,
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            image_url=data.get("image_url"),
            username=data.get("username"),
        ),
    )
    logger.info("Identity webhook %s applied to user %s (created=%s)", event_type, user.id, created)
    return user
