"""Content endpoints.

- GET  /api/v1/content — scrape all categories (cache first unless use_cache=false)
- GET  /api/v1/content/items — all cached items, flattened
- GET  /api/v1/content/new — cached items not yet marked as seen
- POST /api/v1/content/seen — mark items as seen by id
- GET  /api/v1/content/{category} — cached items of one category
- POST /api/v1/content/{category}/retry — re-scrape one category
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from acquisition.middleware.error_handler import UnknownCategoryError
from acquisition.models.content import Category
from acquisition.models.responses import ApiResponse, ScrapeStatus, SeenItemsRequest
from acquisition.services.coordinator import ScrapeCoordinator

logger = logging.getLogger(__name__)


def _parse_category(name: str) -> Category:
    category = Category.parse(name)
    if category is None:
        raise UnknownCategoryError(f"Unknown category '{name}'", category=name)
    return category


def create_content_router(*, coordinator: ScrapeCoordinator | Any) -> APIRouter:
    """Factory that creates the content router with injected dependencies."""
    content_router = APIRouter(prefix="/api/v1/content", tags=["content"])

    @content_router.get("")
    async def scrape_all(use_cache: bool = True) -> dict:
        content = await coordinator.scrape_all(use_cache=use_cache)
        return ApiResponse(
            success=True,
            data=content.model_dump(mode="json"),
            meta={"counts": content.counts()},
        ).model_dump()

    @content_router.get("/items")
    async def all_items() -> dict:
        items = coordinator.get_all_items(coordinator.get_cached())
        return ApiResponse(
            success=True,
            data=[item.model_dump(mode="json") for item in items],
            meta={"total": len(items)},
        ).model_dump()

    @content_router.get("/new")
    async def new_items() -> dict:
        items = coordinator.get_new_items(coordinator.get_all_items(coordinator.get_cached()))
        return ApiResponse(
            success=True,
            data=[item.model_dump(mode="json") for item in items],
            meta={"total": len(items)},
        ).model_dump()

    @content_router.post("/seen")
    async def mark_seen(body: SeenItemsRequest) -> dict:
        wanted = set(body.ids)
        items = [
            item
            for item in coordinator.get_all_items(coordinator.get_cached())
            if item.id in wanted
        ]
        marked = coordinator.mark_seen(items)
        unknown = sorted(wanted - {item.id for item in items})
        return ApiResponse(
            success=True,
            data={"marked": marked},
            meta={"unknown_ids": unknown} if unknown else None,
        ).model_dump()

    @content_router.get("/{category}")
    async def category_items(category: str) -> dict:
        parsed = _parse_category(category)
        cached = coordinator.get_cached()
        items = cached.items_for(parsed) if cached else []
        return ApiResponse(
            success=True,
            data=[item.model_dump(mode="json") for item in items],
            meta={"category": parsed.value, "total": len(items)},
        ).model_dump()

    @content_router.post("/{category}/retry")
    async def retry_category(category: str) -> dict:
        parsed = _parse_category(category)
        result = await coordinator.retry_category(parsed.value)
        succeeded = result.status is not ScrapeStatus.FAILED
        return ApiResponse(
            success=succeeded,
            data=result.model_dump(mode="json"),
            error=result.error if not succeeded else None,
        ).model_dump()

    return content_router
