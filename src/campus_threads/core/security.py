"""Verification of identity-provider session tokens.

The identity provider issues JWTs whose ``sub`` claim is the opaque external
subject id. This module only checks the token and extracts that subject; the
lookup of the matching user record happens in the identity resolver.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from campus_threads.core.errors import AuthenticationRequired
from campus_threads.core.settings import settings


def decode_subject(token: str) -> str:
    """Return the external subject carried by a session token.

    Raises:
        AuthenticationRequired: If the token is malformed, expired, signed with
            the wrong key, or has no subject.
    """
    options = {"verify_aud": settings.identity_jwt_audience is not None}
    kwargs: dict[str, Any] = {}
    if settings.identity_jwt_audience is not None:
        kwargs["audience"] = settings.identity_jwt_audience
    if settings.identity_jwt_issuer is not None:
        kwargs["issuer"] = settings.identity_jwt_issuer
    try:
        payload = jwt.decode(
            token,
            settings.identity_jwt_key,
            algorithms=[settings.identity_jwt_algorithm],
            options=options,
            **kwargs,
        )
    except JWTError as err:
        raise AuthenticationRequired("Could not validate credentials") from err

    subject = payload.get("sub")
    if not subject:
        raise AuthenticationRequired("Could not validate credentials")
    return str(subject)


def create_access_token(subject: str, extra_claims: dict[str, Any] | None = None) -> str:
    """Mint a session token for ``subject``.

    Used by tests and local tooling; production tokens come from the identity
    provider and only need to be verifiable with the same key.
    """
    to_encode: dict[str, Any] = {"sub": subject}
    if settings.identity_jwt_issuer is not None:
        to_encode["iss"] = settings.identity_jwt_issuer
    if settings.identity_jwt_audience is not None:
        to_encode["aud"] = settings.identity_jwt_audience
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = datetime.now(UTC) + timedelta(
        minutes=settings.access_token_expire_minutes
    )
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.identity_jwt_key,
        algorithm=settings.identity_jwt_algorithm,
    )
    return encoded_jwt
