"""Component wiring shared by the HTTP app and tests."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from acquisition.config.proxies import ProxyDescriptor, load_proxies
from acquisition.config.settings import AcquisitionSettings
from acquisition.extractors.registry import ExtractorRegistry, default_registry
from acquisition.models.content import Category
from acquisition.proxy.health import ProxyHealthChecker
from acquisition.proxy.scorer import ProxyReputationStore
from acquisition.services.category_scraper import CategoryScraper, PublicationsScraper
from acquisition.services.coordinator import ScrapeCoordinator
from acquisition.services.observer import DashboardState, ObserverGroup, ScrapeObserver
from acquisition.services.page_fetcher import PageFetcher
from acquisition.services.retry import RetryOrchestrator
from acquisition.services.scrape_log import ScrapeEventLog
from acquisition.storage.app_settings import AppSettingsStore
from acquisition.storage.content_cache import ContentCache
from acquisition.storage.kv_store import JsonFileStore, KeyValueStore, ResilientStore
from acquisition.storage.seen_items import SeenItemsStore

logger = logging.getLogger(__name__)


@dataclass
class Components:
    settings: AcquisitionSettings
    client: httpx.AsyncClient
    owns_client: bool
    proxies: list[ProxyDescriptor]
    store: ResilientStore
    app_settings: AppSettingsStore
    cache: ContentCache
    seen_items: SeenItemsStore
    scorer: ProxyReputationStore
    health_checker: ProxyHealthChecker
    fetcher: PageFetcher
    event_log: ScrapeEventLog
    dashboard: DashboardState
    observer: ObserverGroup
    registry: ExtractorRegistry
    orchestrator: RetryOrchestrator
    coordinator: ScrapeCoordinator

    async def aclose(self) -> None:
        if self.owns_client:
            await self.client.aclose()


def category_sources(settings: AcquisitionSettings) -> dict[Category, list[str]]:
    return {
        Category.NEWS: [settings.base_url, settings.news_url],
        Category.EVENTS: [settings.events_url],
        Category.LECTURES: [settings.lectures_url],
        Category.PUBLICATIONS: [settings.publications_url],
        Category.MEMBERS: [settings.members_url],
        Category.PROJECTS: [settings.projects_url],
    }


def build_components(
    settings: AcquisitionSettings,
    store: KeyValueStore | None = None,
    client: httpx.AsyncClient | None = None,
    observer: ScrapeObserver | None = None,
) -> Components:
    """Build every acquisition component from *settings*.

    Parameters
    ----------
    settings:
        Service configuration.
    store:
        Durable store; defaults to a ``JsonFileStore`` under ``storage_dir``.
    client:
        HTTP client; when omitted one is created and closed by ``aclose``.
    observer:
        Extra observer notified alongside the dashboard.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(settings.fetch_timeout_ms / 1000))

    resilient = ResilientStore(
        store
        or JsonFileStore(
            settings.storage_dir,
            max_bytes=settings.storage_max_bytes,
            fsync=settings.storage_fsync,
        )
    )
    proxies = load_proxies(settings.proxies_path)

    app_settings = AppSettingsStore(resilient, default_cache_expiry_hours=settings.cache_expiry_hours)
    cache = ContentCache(resilient, app_settings)
    seen_items = SeenItemsStore(resilient)
    scorer = ProxyReputationStore(resilient)

    dashboard = DashboardState()
    observers = ObserverGroup(dashboard, observer)

    health_checker = ProxyHealthChecker(
        client,
        settings.probe_url,
        timeout_ms=settings.health_timeout_ms,
        ttl_seconds=settings.health_ttl_seconds,
    )
    fetcher = PageFetcher(
        client=client,
        proxies=proxies,
        scorer=scorer,
        app_settings=app_settings,
        timeout_ms=settings.fetch_timeout_ms,
        retry_delay_ms=settings.proxy_retry_delay_ms,
        min_valid_length=settings.min_valid_length,
    )
    event_log = ScrapeEventLog(max_logs=settings.max_logs)
    registry = default_registry()

    scrapers: dict[Category, CategoryScraper] = {}
    for category, urls in category_sources(settings).items():
        if category is Category.PUBLICATIONS:
            scrapers[category] = PublicationsScraper(
                category=category,
                source_urls=urls,
                extractor=registry.get(category),
                fetcher=fetcher,
                fetch_dates=settings.fetch_publication_dates,
                date_limit=settings.publication_date_limit,
                detail_delay_ms=settings.detail_fetch_delay_ms,
            )
        else:
            scrapers[category] = CategoryScraper(
                category=category,
                source_urls=urls,
                extractor=registry.get(category),
                fetcher=fetcher,
            )

    orchestrator = RetryOrchestrator(
        event_log=event_log,
        cache=cache,
        observer=observers,
        backoff_ms=settings.retry_backoff_ms,
    )
    coordinator = ScrapeCoordinator(
        scrapers={category: scraper.scrape for category, scraper in scrapers.items()},
        orchestrator=orchestrator,
        cache=cache,
        seen_items=seen_items,
        event_log=event_log,
        observer=observers,
        health_checker=health_checker,
        proxies=proxies,
        max_retries=settings.max_retries,
    )

    logger.info("Acquisition components ready with %d proxies", len(proxies))
    return Components(
        settings=settings,
        client=client,
        owns_client=owns_client,
        proxies=proxies,
        store=resilient,
        app_settings=app_settings,
        cache=cache,
        seen_items=seen_items,
        scorer=scorer,
        health_checker=health_checker,
        fetcher=fetcher,
        event_log=event_log,
        dashboard=dashboard,
        observer=observers,
        registry=registry,
        orchestrator=orchestrator,
        coordinator=coordinator,
    )
