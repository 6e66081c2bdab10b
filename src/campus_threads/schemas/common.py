"""Shared Pydantic schemas: media references and pagination."""
from __future__ import annotations

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from campus_threads.core.settings import settings

T = TypeVar("T")

URL_PREFIX = "http"


class MediaRef(BaseModel):
    """Tagged reference to an image or other media.

    ``kind`` says how to read ``value``: a fetchable URL, or an opaque handle
    issued by blob storage that must be resolved before display.
    """

    kind: Literal["url", "handle"]
    value: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _coerce_bare_string(cls, data: Any) -> Any:
        # Older clients send bare strings; sniff them once at the boundary.
        if isinstance(data, str):
            return cls.parse_legacy(data).model_dump()
        return data

    @classmethod
    def parse_legacy(cls, value: str) -> MediaRef:
        """Build a reference from an untagged string using the ``http`` prefix rule."""
        kind: Literal["url", "handle"] = "url" if value.startswith(URL_PREFIX) else "handle"
        return cls.model_construct(kind=kind, value=value)

    @classmethod
    def url(cls, value: str) -> MediaRef:
        return cls(kind="url", value=value)

    @classmethod
    def handle(cls, value: str) -> MediaRef:
        return cls(kind="handle", value=value)


class PaginationOpts(BaseModel):
    """Page request: how many items and where to continue from."""

    num_items: int = Field(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Maximum number of items to return",
    )
    cursor: str | None = Field(None, description="Opaque cursor from a previous page")


class Page(BaseModel, Generic[T]):
    """One page of a listing plus the cursor needed to fetch the next one."""

    page: list[T]
    continue_cursor: str | None = Field(None, description="Cursor for the next page")
    is_done: bool
