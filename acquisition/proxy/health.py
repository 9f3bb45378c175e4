"""Advisory proxy liveness probes.

Each proxy is probed with a HEAD request for a fixed URL. Verdicts are cached
per proxy index for a TTL. The fetch path never consults these verdicts; they
feed the dashboard and the readiness endpoint only.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

import httpx

from acquisition.config.proxies import ProxyDescriptor
from acquisition.proxy.types import HealthResult, ProxyHealthRecord
from acquisition.services.observer import ScrapeObserver, notify

logger = logging.getLogger(__name__)

_NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


class ProxyHealthChecker:
    """Probes proxies and caches the verdicts in memory.

    Parameters
    ----------
    client:
        Shared async HTTP client.
    probe_url:
        Target URL requested through each proxy.
    timeout_ms:
        Per-probe timeout.
    ttl_seconds:
        How long a verdict stays fresh.
    clock:
        Wall clock in epoch seconds.
    monotonic:
        Monotonic clock in seconds, used for latency.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        probe_url: str,
        timeout_ms: int = 5000,
        ttl_seconds: int = 300,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._probe_url = probe_url
        self._timeout_s = timeout_ms / 1000
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock
        self._monotonic = monotonic
        self._records: dict[int, ProxyHealthRecord] = {}
        self.last_healthy_count: int | None = None

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _is_fresh(self, record: ProxyHealthRecord) -> bool:
        return self._now_ms() - record.checked_at_epoch_ms < self._ttl_ms

    async def check_proxy(self, proxy: ProxyDescriptor, index: int | None = None) -> HealthResult:
        """Return the cached verdict if fresh, otherwise probe *proxy*."""
        key = proxy.index if index is None else index
        cached = self._records.get(key)
        if cached is not None and self._is_fresh(cached):
            return HealthResult(cached.healthy, cached.latency_ms, from_cache=True)

        start = self._monotonic()
        healthy = False
        try:
            response = await asyncio.wait_for(
                self._client.head(
                    proxy.proxied_url(self._probe_url),
                    headers=_NO_STORE_HEADERS,
                    timeout=self._timeout_s,
                ),
                timeout=self._timeout_s,
            )
            healthy = response.is_success
        except Exception as exc:  # noqa: BLE001
            logger.debug(
                "Health probe failed for %s: %s",
                proxy.name,
                exc,
                extra={"proxy_index": key, "proxy_name": proxy.name},
            )
        latency_ms = (self._monotonic() - start) * 1000

        self._records[key] = ProxyHealthRecord(
            healthy=healthy,
            latency_ms=latency_ms,
            checked_at_epoch_ms=self._now_ms(),
        )
        return HealthResult(healthy, latency_ms, from_cache=False)

    async def get_healthy_proxies(
        self, proxies: list[ProxyDescriptor]
    ) -> list[tuple[ProxyDescriptor, HealthResult]]:
        """Probe all *proxies* concurrently; healthy ones sorted by latency."""
        results = await asyncio.gather(*(self.check_proxy(p) for p in proxies))
        healthy = [(p, r) for p, r in zip(proxies, results) if r.healthy]
        healthy.sort(key=lambda pair: pair[1].latency_ms)
        self.last_healthy_count = len(healthy)
        return healthy

    def get_health_summary(self, proxies: list[ProxyDescriptor]) -> tuple[int, int]:
        """Count fresh healthy verdicts without probing."""
        healthy = 0
        for proxy in proxies:
            record = self._records.get(proxy.index)
            if record is not None and record.healthy and self._is_fresh(record):
                healthy += 1
        return healthy, len(proxies)

    def get_records(self) -> dict[int, ProxyHealthRecord]:
        return dict(self._records)

    def clear_cache(self) -> None:
        self._records.clear()

    async def run_health_checks(
        self, proxies: list[ProxyDescriptor], observer: ScrapeObserver | None = None
    ) -> tuple[int, int]:
        """Probe every proxy once and report the summary to *observer*."""
        healthy = await self.get_healthy_proxies(proxies)
        total = len(proxies)
        logger.info("Proxy health: %d/%d healthy", len(healthy), total)
        notify(observer, "on_proxy_health", len(healthy), total)
        return len(healthy), total

    async def health_check_loop(
        self,
        proxies: list[ProxyDescriptor],
        interval_seconds: float,
        observer: ScrapeObserver | None = None,
    ) -> None:
        """Probe all proxies every *interval_seconds* until cancelled."""
        while True:
            await self.run_health_checks(proxies, observer)
            await asyncio.sleep(interval_seconds)
