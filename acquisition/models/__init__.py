"""Public models for the acquisition service."""

from acquisition.models.content import CachedContent, Category, ContentItem, generate_id
from acquisition.models.responses import (
    ApiResponse,
    CategoryResult,
    ProgressUpdate,
    ResultSource,
    ScrapeStatus,
    SeenItemsRequest,
)

__all__ = [
    "ApiResponse",
    "CachedContent",
    "Category",
    "CategoryResult",
    "ContentItem",
    "ProgressUpdate",
    "ResultSource",
    "ScrapeStatus",
    "SeenItemsRequest",
    "generate_id",
]
