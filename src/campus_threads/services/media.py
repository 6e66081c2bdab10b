"""Blob storage client and media reference resolution.

Storage handles are opaque strings issued by the blob store. Before anything
is shown to a client it is turned into a fetchable URL here; references that
are already URLs pass through unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

import httpx

from campus_threads.core.settings import settings
from campus_threads.schemas.common import MediaRef

logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404


class MediaStorageError(RuntimeError):
    """Raised when the blob store cannot be reached or answers with an error."""


class BlobStorage(Protocol):
    """Operations the core needs from blob storage."""

    def generate_upload_url(self) -> str:
        """Return a one-time upload target."""

    def get_url(self, handle: str) -> str | None:
        """Resolve a storage handle to a fetchable URL, or None if unknown."""


class HttpBlobStorage:
    """Blob storage reached over its HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        headers = {}
        key = api_key if api_key is not None else settings.storage_api_key
        if key:
            headers["Authorization"] = f"Bearer {key}"
        self._client = client or httpx.Client(
            base_url=base_url or settings.storage_base_url,
            timeout=timeout or settings.storage_http_timeout_seconds,
            headers=headers,
        )

    def generate_upload_url(self) -> str:
        try:
            response = self._client.post("/api/storage/upload-urls")
            response.raise_for_status()
        except httpx.HTTPError as err:
            raise MediaStorageError(f"Could not create upload URL: {err}") from err
        return str(response.json()["url"])

    def get_url(self, handle: str) -> str | None:
        try:
            response = self._client.get(f"/api/storage/files/{handle}/url")
        except httpx.HTTPError as err:
            raise MediaStorageError(f"Could not resolve storage handle {handle}: {err}") from err
        if response.status_code == HTTP_NOT_FOUND:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as err:
            raise MediaStorageError(f"Could not resolve storage handle {handle}: {err}") from err
        url = response.json().get("url")
        return str(url) if url else None

    def close(self) -> None:
        self._client.close()


def as_media_ref(value: MediaRef | dict[str, Any] | str | None) -> MediaRef | None:
    """Normalise stored or submitted media values to a :class:`MediaRef`."""
    if value is None or value == "":
        return None
    if isinstance(value, MediaRef):
        return value
    return MediaRef.model_validate(value)


class MediaResolver:
    """Turns media references into displayable URLs."""

    def __init__(self, storage: BlobStorage, max_workers: int | None = None) -> None:
        self.storage = storage
        self.max_workers = max(1, max_workers or settings.media_resolve_workers)

    def resolve(self, ref: MediaRef | dict[str, Any] | str | None) -> str | None:
        """Resolve one reference. URLs pass through; handles go to storage."""
        media_ref = as_media_ref(ref)
        if media_ref is None:
            return None
        if media_ref.kind == "url":
            return media_ref.value
        return self.storage.get_url(media_ref.value)

    def _resolve_quietly(self, ref: MediaRef | dict[str, Any] | str | None) -> str | None:
        try:
            return self.resolve(ref)
        except Exception as err:  # noqa: BLE001 - one bad reference must not fail the list
            logger.warning("Dropping unresolvable media reference %r: %s", ref, err)
            return None

    def resolve_many(self, refs: Iterable[MediaRef | dict[str, Any] | str] | None) -> list[str]:
        """Resolve each reference in parallel, dropping any that fail.

        The result keeps the input order of the survivors and may be shorter
        than the input. This never raises for a single bad reference.
        """
        items: Sequence[Any] = list(refs or [])
        if not items:
            return []
        if len(items) == 1:
            urls = [self._resolve_quietly(items[0])]
        else:
            workers = min(self.max_workers, len(items))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                urls = list(pool.map(self._resolve_quietly, items))
        return [url for url in urls if url]

    def generate_upload_url(self) -> str:
        return self.storage.generate_upload_url()


_media_resolver: MediaResolver | None = None


def get_media_resolver() -> MediaResolver:
    """Return the process-wide resolver backed by HTTP blob storage."""
    global _media_resolver
    if _media_resolver is None:
        _media_resolver = MediaResolver(HttpBlobStorage())
    return _media_resolver
