"""Cached content document (``cached_content`` key).

The whole document is rewritten on every change, so readers never see a
half-merged scrape.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from acquisition.models.content import CachedContent, Category, ContentItem
from acquisition.storage.app_settings import AppSettingsStore
from acquisition.storage.kv_store import CACHED_CONTENT_KEY, ResilientStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentCache:
    """Reads and writes the merged scrape result.

    Parameters
    ----------
    store:
        Durable store wrapper.
    app_settings:
        Source of ``cache_expiry_hours``, read on every write.
    clock:
        Wall clock returning an aware datetime. Injected by tests.
    """

    def __init__(
        self,
        store: ResilientStore,
        app_settings: AppSettingsStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._app_settings = app_settings
        self._clock = clock

    def get(self) -> CachedContent | None:
        raw = self._store.get(CACHED_CONTENT_KEY)
        if raw is None:
            return None
        try:
            return CachedContent.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Discarding malformed cached content: %s", exc)
            return None

    def set(self, content: CachedContent) -> CachedContent:
        """Stamp ``cached_at`` / ``expires_at`` and persist *content*."""
        now = self._clock()
        stamped = content.model_copy(
            update={
                "cached_at": now,
                "expires_at": now + timedelta(hours=self._app_settings.cache_expiry_hours),
            }
        )
        self._store.set(CACHED_CONTENT_KEY, stamped.model_dump(mode="json"))
        return stamped

    def is_valid(self) -> bool:
        cached = self.get()
        if cached is None or cached.expires_at is None:
            return False
        return cached.expires_at > self._clock()

    def get_category(self, category: Category) -> list[ContentItem]:
        cached = self.get()
        return cached.items_for(category) if cached else []

    def update_category(self, category: Category, items: list[ContentItem]) -> CachedContent:
        cached = self.get() or CachedContent()
        return self.set(cached.model_copy(update={category.value: items}))

    def clear(self) -> None:
        self._store.delete(CACHED_CONTENT_KEY)
