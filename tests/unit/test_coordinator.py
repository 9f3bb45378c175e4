"""Unit tests for the scrape coordinator."""

import asyncio
from datetime import timedelta

import pytest

from acquisition.models.content import CachedContent, Category
from acquisition.models.responses import ScrapeStatus
from acquisition.services.coordinator import UNKNOWN_CATEGORY, ScrapeCoordinator
from acquisition.services.observer import DashboardState
from acquisition.services.retry import RetryOrchestrator
from helpers import SleepRecorder, make_item

COUNTS = {
    Category.NEWS: 5,
    Category.EVENTS: 3,
    Category.LECTURES: 2,
    Category.PUBLICATIONS: 0,
    Category.MEMBERS: 4,
    Category.PROJECTS: 1,
}


class _Counting:
    """Scrape function returning *count* fresh items, or raising when count is 0."""

    def __init__(self, category: Category, count: int) -> None:
        self.category = category
        self.count = count
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if not self.count:
            raise RuntimeError("All proxies failed")
        return [make_item(self.category, n) for n in range(self.count)]


@pytest.fixture
def scrapers() -> dict[Category, _Counting]:
    return {category: _Counting(category, count) for category, count in COUNTS.items()}


@pytest.fixture
def dashboard() -> DashboardState:
    return DashboardState()


@pytest.fixture
def coordinator(scrapers, cache, seen_items, event_log, dashboard) -> ScrapeCoordinator:
    orchestrator = RetryOrchestrator(
        event_log=event_log,
        cache=cache,
        observer=dashboard,
        backoff_ms=0,
        sleep=SleepRecorder(),
    )
    return ScrapeCoordinator(
        scrapers=scrapers,
        orchestrator=orchestrator,
        cache=cache,
        seen_items=seen_items,
        event_log=event_log,
        observer=dashboard,
    )


class TestScrapeAll:
    @pytest.mark.asyncio
    async def test_merges_all_categories(self, coordinator, cache):
        updates = []

        content = await coordinator.scrape_all(use_cache=False, on_progress=updates.append)

        assert content.counts() == {c.value: n for c, n in COUNTS.items()}
        assert len(content.all_items()) == 15
        assert content.publications == []
        assert cache.is_valid() is True
        assert updates[0].percent == 0
        assert updates[-1].percent == 100
        assert updates[-1].message == "Found 15 items"
        percents = [u.percent for u in updates]
        assert percents == sorted(percents)

    @pytest.mark.asyncio
    async def test_progress_per_category(self, coordinator):
        updates = []
        await coordinator.scrape_all(use_cache=False, on_progress=updates.append)

        per_category = [u for u in updates if u.phase in {c.value for c in Category}]

        assert len(per_category) == 6
        assert per_category[-1].percent == 100
        failed = [u for u in per_category if u.status is ScrapeStatus.FAILED]
        assert [u.phase for u in failed] == ["publications"]

    @pytest.mark.asyncio
    async def test_valid_cache_skips_network(self, coordinator, cache, scrapers, event_log):
        cache.set(CachedContent(news=[make_item(Category.NEWS, 1)]))
        updates = []

        content = await coordinator.scrape_all(use_cache=True, on_progress=updates.append)

        assert len(content.news) == 1
        assert all(s.calls == 0 for s in scrapers.values())
        assert [u.message for u in updates] == ["Using cached content"]
        assert [(e.category, e.event) for e in event_log.get_logs()] == [
            ("system", "start"),
            ("system", "cached"),
        ]

    @pytest.mark.asyncio
    async def test_repeated_cache_hits_are_identical(self, coordinator, scrapers):
        await coordinator.scrape_all(use_cache=False)
        for scraper in scrapers.values():
            scraper.calls = 0

        first = await coordinator.scrape_all(use_cache=True)
        second = await coordinator.scrape_all(use_cache=True)

        assert all(s.calls == 0 for s in scrapers.values())
        assert first.model_dump_json() == second.model_dump_json()

    @pytest.mark.asyncio
    async def test_categories_run_concurrently(self, cache, seen_items, event_log):
        gate = asyncio.Event()
        started: set[Category] = set()

        def gated(category: Category):
            async def scrape():
                started.add(category)
                if len(started) == len(Category):
                    gate.set()
                await gate.wait()
                return [make_item(category, 0)]

            return scrape

        orchestrator = RetryOrchestrator(
            event_log=event_log, cache=cache, backoff_ms=0, sleep=SleepRecorder()
        )
        coordinator = ScrapeCoordinator(
            scrapers={category: gated(category) for category in Category},
            orchestrator=orchestrator,
            cache=cache,
            seen_items=seen_items,
            event_log=event_log,
        )

        content = await asyncio.wait_for(coordinator.scrape_all(use_cache=False), timeout=2)

        assert started == set(Category)
        assert len(content.all_items()) == len(Category)

    @pytest.mark.asyncio
    async def test_expired_cache_is_refreshed(self, coordinator, cache, clock, scrapers):
        cache.set(CachedContent(news=[make_item(Category.NEWS, 1)]))
        clock.now += timedelta(hours=25)

        content = await coordinator.scrape_all()

        assert scrapers[Category.NEWS].calls == 1
        assert len(content.news) == 5

    @pytest.mark.asyncio
    async def test_failed_category_uses_previous_cache(self, coordinator, cache):
        cache.set(CachedContent(publications=[make_item(Category.PUBLICATIONS, 1)]))

        content = await coordinator.scrape_all(use_cache=False)

        assert len(content.publications) == 1

    @pytest.mark.asyncio
    async def test_session_markers(self, coordinator, event_log):
        await coordinator.scrape_all(use_cache=False)

        entries = event_log.get_logs()

        assert (entries[0].category, entries[0].event) == ("system", "start")
        assert (entries[-1].category, entries[-1].event) == ("system", "success")
        assert entries[-1].details == {"total_items": 15}

    @pytest.mark.asyncio
    async def test_dashboard_reflects_outcome(self, coordinator, dashboard):
        await coordinator.scrape_all(use_cache=False)

        snapshot = dashboard.snapshot()

        assert snapshot["categories"]["news"]["status"] == "success"
        assert snapshot["categories"]["publications"]["status"] == "failed"
        assert snapshot["progress"]["percent"] == 100

    @pytest.mark.asyncio
    async def test_crashing_progress_callback_is_ignored(self, coordinator):
        def explode(update):
            raise RuntimeError("ui gone")

        content = await coordinator.scrape_all(use_cache=False, on_progress=explode)

        assert len(content.all_items()) == 15


class TestRetryCategory:
    @pytest.mark.asyncio
    async def test_success_updates_cache(self, coordinator, cache):
        cache.set(CachedContent(news=[make_item(Category.NEWS, 99)]))

        result = await coordinator.retry_category("events")

        assert result.status is ScrapeStatus.SUCCESS
        assert len(cache.get_category(Category.EVENTS)) == 3
        assert len(cache.get_category(Category.NEWS)) == 1

    @pytest.mark.asyncio
    async def test_unknown_category(self, coordinator):
        result = await coordinator.retry_category("gallery")
        assert result.status is ScrapeStatus.FAILED
        assert result.error == UNKNOWN_CATEGORY
        assert result.data == []

    @pytest.mark.asyncio
    async def test_failure_leaves_cache_alone(self, coordinator, cache):
        cache.set(CachedContent(publications=[make_item(Category.PUBLICATIONS, 1)]))

        result = await coordinator.retry_category("publications")

        assert result.status is ScrapeStatus.CACHED
        assert len(cache.get_category(Category.PUBLICATIONS)) == 1


class TestItems:
    def test_get_all_items_order(self):
        content = CachedContent(
            projects=[make_item(Category.PROJECTS, 1)],
            news=[make_item(Category.NEWS, 1)],
            members=[make_item(Category.MEMBERS, 1)],
        )

        items = ScrapeCoordinator.get_all_items(content)

        assert [i.category for i in items] == ["news", "member", "project"]

    def test_get_all_items_none(self):
        assert ScrapeCoordinator.get_all_items(None) == []

    def test_new_items_and_mark_seen(self, coordinator):
        items = [make_item(Category.NEWS, n) for n in range(3)]

        assert coordinator.mark_seen(items[:2]) == 2

        assert coordinator.get_new_items(items) == [items[2]]
