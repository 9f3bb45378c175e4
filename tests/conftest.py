"""Shared test fixtures and hypothesis strategies for the acquisition test suite."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
from hypothesis import strategies as st

from acquisition.config.settings import AcquisitionSettings
from acquisition.models.content import Category
from acquisition.proxy.scorer import ProxyReputationStore
from acquisition.services.scrape_log import ScrapeEventLog
from acquisition.storage.app_settings import AppSettingsStore
from acquisition.storage.content_cache import ContentCache
from acquisition.storage.kv_store import MemoryStore, ResilientStore
from acquisition.storage.seen_items import SeenItemsStore
from helpers import FrozenClock


# ---------------------------------------------------------------------------
# Settings fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path) -> AcquisitionSettings:
    """Test settings with zero delays and a temporary state directory."""
    return AcquisitionSettings(
        proxy_retry_delay_ms=0,
        retry_backoff_ms=0,
        detail_fetch_delay_ms=0,
        storage_dir=str(tmp_path / "state"),
        log_export_dir=str(tmp_path / "logs"),
    )


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> ResilientStore:
    return ResilientStore(MemoryStore())


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def app_settings(store: ResilientStore) -> AppSettingsStore:
    return AppSettingsStore(store)


@pytest.fixture
def cache(store: ResilientStore, app_settings: AppSettingsStore, clock: FrozenClock) -> ContentCache:
    return ContentCache(store, app_settings, clock=clock)


@pytest.fixture
def seen_items(store: ResilientStore) -> SeenItemsStore:
    return SeenItemsStore(store)


@pytest.fixture
def scorer(store: ResilientStore) -> ProxyReputationStore:
    return ProxyReputationStore(store)


@pytest.fixture
def event_log() -> ScrapeEventLog:
    return ScrapeEventLog()


@pytest.fixture
def mock_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for clients whose requests are answered by a handler function."""

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _build


# ---------------------------------------------------------------------------
# Hypothesis strategies (reusable across property tests)
# ---------------------------------------------------------------------------

categories = st.sampled_from(list(Category))

# Outcome sequences for one proxy (True = success)
outcome_sequences = st.lists(st.booleans(), min_size=0, max_size=40)

latencies = st.floats(min_value=0.0, max_value=60000.0, allow_nan=False, allow_infinity=False)

html_markers = st.sampled_from([
    "<!DOCTYPE html>",
    "<html>",
    "<body>",
    "<head>",
    "<div>",
    "<meta charset='utf-8'>",
    "<link rel='x'>",
])

log_events = st.sampled_from(["start", "success", "retry", "failed", "cached"])
