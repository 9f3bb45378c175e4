"""API envelope and per-category scrape results.

All API responses are wrapped in the envelope:
{ success: bool, data: T | None, error: str | None, meta: dict | None }
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from acquisition.models.content import ContentItem

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for all API responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None


class ScrapeStatus(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    CACHED = "cached"
    FAILED = "failed"


class ResultSource(str, Enum):
    FRESH = "fresh"
    CACHE = "cache"


class CategoryResult(BaseModel):
    """Outcome of acquiring one category.

    ``data`` is empty only when ``status`` is ``failed``.
    """

    data: list[ContentItem] = Field(default_factory=list)
    status: ScrapeStatus
    source: ResultSource | None = None
    error: str | None = None


class ProgressUpdate(BaseModel):
    phase: str
    percent: int = Field(ge=0, le=100)
    message: str
    status: ScrapeStatus | None = None


class SeenItemsRequest(BaseModel):
    """Body of ``POST /api/v1/content/seen``."""

    ids: list[str] = Field(min_length=1)
