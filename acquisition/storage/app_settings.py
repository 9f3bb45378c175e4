"""Persisted application settings (``app_settings`` key)."""

from __future__ import annotations

import logging
from typing import Any

from acquisition.storage.kv_store import ResilientStore

logger = logging.getLogger(__name__)

APP_SETTINGS_KEY = "app_settings"


class AppSettingsStore:
    """Operator-tunable settings that survive restarts.

    ``preferred_proxy`` records the index of the last proxy that returned a
    valid page. It is informational; fetch order always comes from scores.
    """

    def __init__(self, store: ResilientStore, default_cache_expiry_hours: int = 24) -> None:
        self._store = store
        self._defaults: dict[str, Any] = {
            "cache_expiry_hours": default_cache_expiry_hours,
            "preferred_proxy": None,
        }

    def get(self) -> dict[str, Any]:
        stored = self._store.get(APP_SETTINGS_KEY, {})
        if not isinstance(stored, dict):
            logger.warning("Ignoring malformed app settings: %r", stored)
            stored = {}
        return {**self._defaults, **stored}

    def update(self, **changes: Any) -> dict[str, Any]:
        updated = {**self.get(), **changes}
        self._store.set(APP_SETTINGS_KEY, updated)
        return updated

    @property
    def cache_expiry_hours(self) -> int:
        value = self.get().get("cache_expiry_hours")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        if value is not None:
            logger.warning("Ignoring invalid cache_expiry_hours: %r", value)
        return self._defaults["cache_expiry_hours"]

    @property
    def preferred_proxy(self) -> int | None:
        return self.get().get("preferred_proxy")

    def set_preferred_proxy(self, index: int) -> None:
        if self.preferred_proxy != index:
            self.update(preferred_proxy=index)
