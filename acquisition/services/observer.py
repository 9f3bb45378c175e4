"""Observer interface for scrape progress, plus the dashboard snapshot.

Observers are notified of every category transition, progress step and
health summary. A failing observer is logged and otherwise ignored; it can
never change the outcome of an acquisition.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Protocol

from acquisition.models.responses import ScrapeStatus

logger = logging.getLogger(__name__)

# Most recent category errors kept for the dashboard
_MAX_DASHBOARD_ERRORS = 20


class ScrapeObserver(Protocol):
    def on_category_status(self, category: str, status: ScrapeStatus, count: int) -> None: ...

    def on_progress(self, percent: int, message: str) -> None: ...

    def on_proxy_health(self, healthy: int, total: int) -> None: ...

    def on_category_error(self, category: str, message: str) -> None: ...


def notify(observer: ScrapeObserver | None, method: str, *args: Any) -> None:
    """Invoke ``observer.<method>(*args)`` if present; log and drop any error."""
    if observer is None:
        return
    callback = getattr(observer, method, None)
    if callback is None:
        return
    try:
        callback(*args)
    except Exception:  # noqa: BLE001
        logger.exception("Observer %s.%s failed", type(observer).__name__, method)


class ObserverGroup:
    """Fans notifications out to several observers."""

    def __init__(self, *observers: ScrapeObserver | None) -> None:
        self._observers = [o for o in observers if o is not None]

    def on_category_status(self, category: str, status: ScrapeStatus, count: int) -> None:
        for observer in self._observers:
            notify(observer, "on_category_status", category, status, count)

    def on_progress(self, percent: int, message: str) -> None:
        for observer in self._observers:
            notify(observer, "on_progress", percent, message)

    def on_proxy_health(self, healthy: int, total: int) -> None:
        for observer in self._observers:
            notify(observer, "on_proxy_health", healthy, total)

    def on_category_error(self, category: str, message: str) -> None:
        for observer in self._observers:
            notify(observer, "on_category_error", category, message)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DashboardState:
    """Observer that keeps the latest state of every category for the API."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._categories: dict[str, dict[str, Any]] = {}
        self._progress: dict[str, Any] = {"percent": 0, "message": ""}
        self._proxy_health: dict[str, Any] = {"healthy": 0, "total": 0, "checked_at": None}
        self._errors: list[dict[str, str]] = []

    def on_category_status(self, category: str, status: ScrapeStatus, count: int) -> None:
        self._categories[category] = {
            "status": ScrapeStatus(status).value,
            "count": count,
            "updated_at": self._clock().isoformat(),
        }

    def on_progress(self, percent: int, message: str) -> None:
        self._progress = {"percent": percent, "message": message}

    def on_proxy_health(self, healthy: int, total: int) -> None:
        self._proxy_health = {
            "healthy": healthy,
            "total": total,
            "checked_at": self._clock().isoformat(),
        }

    def on_category_error(self, category: str, message: str) -> None:
        self._errors.append({
            "category": category,
            "message": message,
            "timestamp": self._clock().isoformat(),
        })
        del self._errors[:-_MAX_DASHBOARD_ERRORS]

    @property
    def proxy_health(self) -> dict[str, Any]:
        return dict(self._proxy_health)

    def snapshot(self) -> dict[str, Any]:
        return {
            "categories": {name: dict(state) for name, state in self._categories.items()},
            "progress": dict(self._progress),
            "proxy_health": dict(self._proxy_health),
            "errors": list(self._errors),
        }
