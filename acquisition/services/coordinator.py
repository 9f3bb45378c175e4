"""Concurrent acquisition of all six content categories.

``scrape_all`` serves a valid cache without touching the network. Otherwise
every category runs concurrently through the retry orchestrator, progress is
reported as each one settles, and the merged result replaces the cache.
A category that fails outright simply contributes an empty list.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from acquisition.config.proxies import ProxyDescriptor
from acquisition.models.content import CachedContent, Category, ContentItem
from acquisition.models.responses import CategoryResult, ProgressUpdate, ScrapeStatus
from acquisition.proxy.health import ProxyHealthChecker
from acquisition.services.observer import ScrapeObserver, notify
from acquisition.services.retry import RetryOrchestrator
from acquisition.services.scrape_log import SYSTEM_CATEGORY, ScrapeEvent, ScrapeEventLog
from acquisition.storage.content_cache import ContentCache
from acquisition.storage.seen_items import SeenItemsStore

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "Unknown category"

ScrapeFn = Callable[[], Awaitable[list[ContentItem]]]
ProgressCallback = Callable[[ProgressUpdate], None]

_LABELS = {
    Category.NEWS: "News",
    Category.EVENTS: "Events",
    Category.LECTURES: "Lectures",
    Category.PUBLICATIONS: "Publications",
    Category.MEMBERS: "Members",
    Category.PROJECTS: "Projects",
}


class ScrapeCoordinator:
    """Runs category scrapes and owns the merged content cache.

    Parameters
    ----------
    scrapers:
        One scrape callable per category.
    orchestrator:
        Retry and cache-fallback wrapper applied to every category.
    cache:
        Merged content cache.
    seen_items:
        Tracker behind ``get_new_items`` / ``mark_seen``.
    event_log:
        Receives the ``system`` session markers.
    observer:
        Optional observer for progress and health notifications.
    health_checker, proxies:
        When both are given, the current health summary is reported to the
        observer before a fresh scrape.
    max_retries:
        Attempts per category.
    """

    def __init__(
        self,
        *,
        scrapers: dict[Category, ScrapeFn],
        orchestrator: RetryOrchestrator,
        cache: ContentCache,
        seen_items: SeenItemsStore,
        event_log: ScrapeEventLog,
        observer: ScrapeObserver | None = None,
        health_checker: ProxyHealthChecker | None = None,
        proxies: list[ProxyDescriptor] | None = None,
        max_retries: int = 3,
    ) -> None:
        self._scrapers = scrapers
        self._orchestrator = orchestrator
        self._cache = cache
        self._seen_items = seen_items
        self._event_log = event_log
        self._observer = observer
        self._health_checker = health_checker
        self._proxies = proxies or []
        self._max_retries = max_retries

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------

    async def scrape_all(
        self,
        use_cache: bool = True,
        on_progress: ProgressCallback | None = None,
    ) -> CachedContent:
        self._event_log.log(SYSTEM_CATEGORY, ScrapeEvent.START, {"use_cache": use_cache})

        if use_cache and self._cache.is_valid():
            cached = self._cache.get()
            if cached is not None:
                return self._serve_cache(cached, on_progress)

        if self._health_checker is not None and self._proxies:
            healthy, total = self._health_checker.get_health_summary(self._proxies)
            notify(self._observer, "on_proxy_health", healthy, total)

        categories = list(self._scrapers)
        for category in categories:
            notify(self._observer, "on_category_status", category.value, ScrapeStatus.LOADING, 0)
        self._report(on_progress, ProgressUpdate(phase="all", percent=0, message="Fetching all content..."))

        completed = 0

        async def run(category: Category) -> tuple[Category, CategoryResult]:
            nonlocal completed
            result = await self._run_category(category)
            completed += 1
            self._report(
                on_progress,
                ProgressUpdate(
                    phase=category.value,
                    percent=round(completed / len(categories) * 100),
                    message=f"Fetching {_LABELS[category]}...",
                    status=result.status,
                ),
            )
            return category, result

        settled = await asyncio.gather(*(run(category) for category in categories))

        merged = CachedContent(**{category.value: result.data for category, result in settled})
        stored = self._cache.set(merged)

        total = len(stored.all_items())
        self._event_log.log(SYSTEM_CATEGORY, ScrapeEvent.SUCCESS, {"total_items": total})
        self._report(on_progress, ProgressUpdate(phase="done", percent=100, message=f"Found {total} items"))
        logger.info(
            "Scrape finished: %s",
            ", ".join(f"{count} {name}" for name, count in stored.counts().items()),
            extra={"item_count": total},
        )
        return stored

    async def retry_category(self, category: str) -> CategoryResult:
        """Re-run one category; on success its cached items are replaced."""
        parsed = Category.parse(category)
        if parsed is None or parsed not in self._scrapers:
            return CategoryResult(data=[], status=ScrapeStatus.FAILED, error=UNKNOWN_CATEGORY)

        result = await self._run_category(parsed)
        if result.status is ScrapeStatus.SUCCESS:
            self._cache.update_category(parsed, result.data)
        return result

    async def _run_category(self, category: Category) -> CategoryResult:
        try:
            return await self._orchestrator.scrape_with_retry(
                category, self._scrapers[category], self._max_retries
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Category %s crashed", category.value, extra={"category": category.value})
            return CategoryResult(data=[], status=ScrapeStatus.FAILED, error=str(exc) or type(exc).__name__)

    def _serve_cache(
        self, cached: CachedContent, on_progress: ProgressCallback | None
    ) -> CachedContent:
        cached_at = cached.cached_at.isoformat() if cached.cached_at else None
        self._event_log.log(SYSTEM_CATEGORY, ScrapeEvent.CACHED, {"cached_at": cached_at})
        for category in Category:
            count = len(cached.items_for(category))
            status = ScrapeStatus.CACHED if count else ScrapeStatus.FAILED
            notify(self._observer, "on_category_status", category.value, status, count)
        self._report(on_progress, ProgressUpdate(phase="cache", percent=100, message="Using cached content"))
        logger.info("Serving cached content from %s", cached_at)
        return cached

    def _report(self, on_progress: ProgressCallback | None, update: ProgressUpdate) -> None:
        notify(self._observer, "on_progress", update.percent, update.message)
        if on_progress is not None:
            try:
                on_progress(update)
            except Exception:  # noqa: BLE001
                logger.exception("Progress callback failed")

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def get_cached(self) -> CachedContent | None:
        return self._cache.get()

    @staticmethod
    def get_all_items(content: CachedContent | None) -> list[ContentItem]:
        return content.all_items() if content is not None else []

    def get_new_items(self, items: list[ContentItem]) -> list[ContentItem]:
        return self._seen_items.filter_unseen(items)

    def mark_seen(self, items: list[ContentItem]) -> int:
        return self._seen_items.mark_seen(items)
