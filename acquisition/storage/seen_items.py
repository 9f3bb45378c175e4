"""Tracking of items already shown to the operator (``seen_items`` key)."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from typing import Any

from acquisition.models.content import ContentItem
from acquisition.storage.kv_store import ResilientStore

SEEN_ITEMS_KEY = "seen_items"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SeenItemsStore:
    def __init__(
        self,
        store: ResilientStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    def _load(self) -> dict[str, Any]:
        data = self._store.get(SEEN_ITEMS_KEY, {})
        if not isinstance(data, dict) or not isinstance(data.get("items"), dict):
            return {"items": {}, "last_check": None}
        return data

    def is_seen(self, item_id: str) -> bool:
        return item_id in self._load()["items"]

    def filter_unseen(self, items: Iterable[ContentItem]) -> list[ContentItem]:
        seen = self._load()["items"]
        return [item for item in items if item.id not in seen]

    def mark_seen(self, items: Iterable[ContentItem]) -> int:
        """Record *items* as seen; returns how many were recorded."""
        data = self._load()
        now = self._clock().isoformat()
        count = 0
        for item in items:
            data["items"][item.id] = {"title": item.title, "date": item.date, "seen_at": now}
            count += 1
        data["last_check"] = now
        self._store.set(SEEN_ITEMS_KEY, data)
        return count

    def recently_seen(self, limit: int = 10) -> list[dict[str, Any]]:
        entries = [{"id": item_id, **info} for item_id, info in self._load()["items"].items()]
        entries.sort(key=lambda e: e.get("seen_at") or "", reverse=True)
        return entries[:limit]

    def get_stats(self) -> dict[str, Any]:
        data = self._load()
        return {"total": len(data["items"]), "last_check": data.get("last_check")}

    def clear(self) -> None:
        self._store.delete(SEEN_ITEMS_KEY)
