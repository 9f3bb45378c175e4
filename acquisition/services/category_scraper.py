"""Fetch and extract one content category.

A category is backed by one or more origin pages. Pages are fetched one
after another; a page that cannot be fetched contributes nothing, and the
items of all pages are merged without duplicates. An empty result is a
normal outcome here and is left to the retry orchestrator to judge.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from acquisition.extractors.base import BaseExtractor, dedupe
from acquisition.extractors.publications import EREF_HOST, parse_deposit_date
from acquisition.models.content import Category, ContentItem, generate_id
from acquisition.models.normalizer import clean_text
from acquisition.services.page_fetcher import PageFetcher

logger = logging.getLogger(__name__)


class CategoryScraper:
    def __init__(
        self,
        *,
        category: Category,
        source_urls: list[str],
        extractor: BaseExtractor,
        fetcher: PageFetcher,
    ) -> None:
        self.category = category
        self.source_urls = list(source_urls)
        self._extractor = extractor
        self._fetcher = fetcher

    async def scrape(self) -> list[ContentItem]:
        items: list[ContentItem] = []
        for url in self.source_urls:
            html = await self._fetcher.fetch_page(url)
            if html is None:
                logger.warning(
                    "No page for %s from %s",
                    self.category.value,
                    url,
                    extra={"category": self.category.value, "target_url": url},
                )
                continue
            page_items = self._extractor.extract(html, url)
            logger.info(
                "Extracted %d %s items from %s",
                len(page_items),
                self.category.value,
                url,
                extra={"category": self.category.value, "item_count": len(page_items)},
            )
            items.extend(page_items)

        items = await self.enrich(dedupe(items))
        return self._extractor.order(items)

    async def enrich(self, items: list[ContentItem]) -> list[ContentItem]:
        """Hook for a second pass over the merged items."""
        return items


class PublicationsScraper(CategoryScraper):
    """Publications, optionally with exact deposit dates from eref detail pages.

    Each detail page costs a full proxy-chain fetch, so enrichment is off by
    default and limited to the first ``date_limit`` publications.
    """

    def __init__(
        self,
        *,
        fetch_dates: bool = False,
        date_limit: int = 10,
        detail_delay_ms: int = 200,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._fetch_dates = fetch_dates
        self._date_limit = date_limit
        self._detail_delay_s = detail_delay_ms / 1000
        self._sleep = sleep

    async def enrich(self, items: list[ContentItem]) -> list[ContentItem]:
        if not self._fetch_dates or not items:
            return items

        enriched = list(items)
        for position, item in enumerate(enriched[: self._date_limit]):
            if EREF_HOST not in item.url:
                continue
            deposited = await self._deposit_date(item.url)
            if deposited:
                enriched[position] = item.model_copy(
                    update={"date": deposited, "id": generate_id(item.title, deposited)}
                )
            if self._detail_delay_s > 0:
                await self._sleep(self._detail_delay_s)
        return enriched

    async def _deposit_date(self, url: str) -> str | None:
        html = await self._fetcher.fetch_page(url)
        if html is None:
            return None
        return parse_deposit_date(clean_text(self._extractor.parse(html).get_text(" ")))
