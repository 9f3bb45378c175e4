"""Per-category retry with linear backoff and cache fallback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from acquisition.models.content import Category, ContentItem
from acquisition.models.responses import CategoryResult, ResultSource, ScrapeStatus
from acquisition.services.observer import ScrapeObserver, notify
from acquisition.services.scrape_log import ScrapeEvent, ScrapeEventLog
from acquisition.storage.content_cache import ContentCache

logger = logging.getLogger(__name__)

EMPTY_RESULT = "empty result"

ScrapeFn = Callable[[], Awaitable[list[ContentItem]]]


class RetryOrchestrator:
    """Runs a category scrape up to ``max_retries`` times.

    A non-empty result succeeds immediately. Exceptions and empty results are
    retried after ``backoff_ms * attempt``. When attempts run out, cached items
    for the category are served if there are any; otherwise the result is
    ``failed`` with no data and the last error message.
    """

    def __init__(
        self,
        *,
        event_log: ScrapeEventLog,
        cache: ContentCache,
        observer: ScrapeObserver | None = None,
        backoff_ms: int = 500,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._event_log = event_log
        self._cache = cache
        self._observer = observer
        self._backoff_s = backoff_ms / 1000
        self._sleep = sleep

    async def scrape_with_retry(
        self,
        category: Category | str,
        scrape_fn: ScrapeFn,
        max_retries: int = 3,
    ) -> CategoryResult:
        name = category.value if isinstance(category, Category) else category
        attempts = max(max_retries, 1)

        self._event_log.log(name, ScrapeEvent.START, {"max_retries": attempts})
        notify(self._observer, "on_category_status", name, ScrapeStatus.LOADING, 0)

        last_error = EMPTY_RESULT
        for attempt in range(1, attempts + 1):
            try:
                items = await scrape_fn()
            except Exception as exc:  # noqa: BLE001
                last_error = str(exc) or type(exc).__name__
                logger.warning(
                    "Scrape attempt %d/%d for %s raised: %s",
                    attempt,
                    attempts,
                    name,
                    last_error,
                    extra={"category": name, "attempt": attempt, "error_reason": last_error},
                )
                details: dict[str, Any] = {"attempt": attempt, "error": last_error}
            else:
                if items:
                    self._event_log.log(
                        name, ScrapeEvent.SUCCESS, {"count": len(items), "attempt": attempt}
                    )
                    notify(self._observer, "on_category_status", name, ScrapeStatus.SUCCESS, len(items))
                    return CategoryResult(
                        data=list(items),
                        status=ScrapeStatus.SUCCESS,
                        source=ResultSource.FRESH,
                    )
                last_error = EMPTY_RESULT
                details = {"attempt": attempt, "reason": EMPTY_RESULT}

            if attempt < attempts:
                self._event_log.log(name, ScrapeEvent.RETRY, details)
                await self._sleep(self._backoff_s * attempt)

        return self._fallback(name, last_error)

    def _fallback(self, name: str, error: str) -> CategoryResult:
        parsed = Category.parse(name)
        cached = self._cache.get_category(parsed) if parsed is not None else []
        if cached:
            self._event_log.log(name, ScrapeEvent.CACHED, {"count": len(cached)})
            notify(self._observer, "on_category_status", name, ScrapeStatus.CACHED, len(cached))
            return CategoryResult(
                data=cached,
                status=ScrapeStatus.CACHED,
                source=ResultSource.CACHE,
            )

        self._event_log.log(name, ScrapeEvent.FAILED, {"error": error})
        notify(self._observer, "on_category_status", name, ScrapeStatus.FAILED, 0)
        notify(self._observer, "on_category_error", name, error)
        return CategoryResult(data=[], status=ScrapeStatus.FAILED, error=error)
