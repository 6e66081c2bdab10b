"""Blob storage endpoints: upload targets and handle resolution."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from campus_threads.api.v1.dependencies import CurrentUserDep, MediaResolverDep
from campus_threads.core.errors import NotFound
from campus_threads.schemas.common import MediaRef
from campus_threads.services.media import MediaStorageError

router = APIRouter(prefix="/media", tags=["media"])


class UploadUrlResponse(BaseModel):
    upload_url: str


class ResolveRequest(BaseModel):
    refs: list[MediaRef]


class ResolveResponse(BaseModel):
    urls: list[str]


@router.post("/upload-url", response_model=UploadUrlResponse)
def generate_upload_url(current_user: CurrentUserDep, resolver: MediaResolverDep) -> UploadUrlResponse:
    """Return a one-time upload target for the authenticated caller."""
    try:
        return UploadUrlResponse(upload_url=resolver.generate_upload_url())
    except MediaStorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Blob storage unavailable: {exc}",
        ) from exc


@router.get("/files/{handle}/url")
def get_file_url(handle: str, resolver: MediaResolverDep) -> dict[str, str]:
    """Resolve a storage handle to a fetchable URL."""
    try:
        url = resolver.resolve(MediaRef.handle(handle))
    except MediaStorageError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Blob storage unavailable: {exc}",
        ) from exc
    if url is None:
        raise NotFound("File not found")
    return {"url": url}


@router.post("/resolve", response_model=ResolveResponse)
def resolve_media(payload: ResolveRequest, resolver: MediaResolverDep) -> ResolveResponse:
    """Resolve a list of references; unresolvable entries are dropped."""
    return ResolveResponse(urls=resolver.resolve_many(payload.refs))
