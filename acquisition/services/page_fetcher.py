"""Fetch an origin page through the proxy chain.

Proxies are tried one at a time in score order. The first payload that
passes validation wins; every other outcome (network error, timeout,
non-2xx, too short, not HTML) is recorded as a failure for that proxy and
the next one is tried. ``fetch_page`` returns ``None`` when the chain is
exhausted and never raises.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from acquisition.config.proxies import ProxyDescriptor
from acquisition.proxy.scorer import ProxyReputationStore
from acquisition.storage.app_settings import AppSettingsStore

logger = logging.getLogger(__name__)

# Real origin pages are 10KB+; proxy error pages are usually under 1KB
MIN_VALID_LENGTH = 5000

_HTML_MARKERS = ("<!doctype", "<html", "<body", "<head", "<div", "<meta", "<link")
_SNIFF_LENGTH = 500

_REQUEST_HEADERS = {
    "Accept": "text/html,application/xhtml+xml",
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


@dataclass(frozen=True)
class PayloadVerdict:
    is_html: bool
    length: int

    def acceptable(self, min_length: int = MIN_VALID_LENGTH) -> bool:
        return self.is_html and self.length >= min_length


def classify_payload(text: str) -> PayloadVerdict:
    """Decide whether *text* looks like an HTML document.

    JSON objects and arrays are rejected outright. Otherwise one of the usual
    HTML markers must appear in the first 500 characters.
    """
    trimmed = (text or "").strip()
    if not trimmed or trimmed[0] in "{[":
        return PayloadVerdict(is_html=False, length=len(text or ""))
    head = trimmed[:_SNIFF_LENGTH].lower()
    return PayloadVerdict(
        is_html=any(marker in head for marker in _HTML_MARKERS),
        length=len(text),
    )


def unwrap_envelope(text: str, field: str) -> str:
    """Return ``text[field]`` if *text* is a JSON object carrying it, else *text*."""
    if not text.lstrip().startswith("{"):
        return text
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(data, dict):
        contents = data.get(field)
        if isinstance(contents, str) and contents:
            return contents
    return text


class PageFetcher:
    """Tries each configured proxy in score order until one returns a valid page.

    Parameters
    ----------
    client:
        Shared async HTTP client.
    proxies:
        The configured proxy chain.
    scorer:
        Reputation table; consulted for order and updated after every attempt.
    app_settings:
        Receives the advisory ``preferred_proxy`` on success.
    timeout_ms:
        Default per-attempt timeout.
    retry_delay_ms:
        Pause between consecutive proxy attempts.
    min_valid_length:
        Minimum payload length accepted as a real page.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        proxies: list[ProxyDescriptor],
        scorer: ProxyReputationStore,
        app_settings: AppSettingsStore | None = None,
        timeout_ms: int = 30000,
        retry_delay_ms: int = 350,
        min_valid_length: int = MIN_VALID_LENGTH,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._proxies = proxies
        self._scorer = scorer
        self._app_settings = app_settings
        self._timeout_ms = timeout_ms
        self._retry_delay_s = retry_delay_ms / 1000
        self._min_valid_length = min_valid_length
        self._monotonic = monotonic
        self._sleep = sleep

    @property
    def proxies(self) -> list[ProxyDescriptor]:
        return list(self._proxies)

    async def fetch_page(self, url: str, timeout_ms: int | None = None) -> str | None:
        timeout_s = (timeout_ms if timeout_ms is not None else self._timeout_ms) / 1000
        ranked = self._scorer.get_sorted_proxies(self._proxies)

        for position, candidate in enumerate(ranked):
            if position > 0 and self._retry_delay_s > 0:
                await self._sleep(self._retry_delay_s)

            text = await self._attempt(candidate.proxy, url, timeout_s)
            if text is not None:
                return text

        logger.error(
            "All %d proxies failed for %s",
            len(ranked),
            url,
            extra={"target_url": url},
        )
        return None

    async def _attempt(self, proxy: ProxyDescriptor, url: str, timeout_s: float) -> str | None:
        """One request through *proxy*; records the outcome and returns the page or None."""
        context = {"proxy_index": proxy.index, "proxy_name": proxy.name, "target_url": url}
        start = self._monotonic()

        try:
            response = await asyncio.wait_for(
                self._client.get(
                    proxy.proxied_url(url),
                    headers=_REQUEST_HEADERS,
                    timeout=timeout_s,
                    follow_redirects=True,
                ),
                timeout=timeout_s,
            )
        except Exception as exc:  # noqa: BLE001
            reason = "timeout" if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)) else str(exc)
            logger.warning(
                "Proxy %s failed: %s",
                proxy.name,
                reason,
                extra={**context, "error_reason": reason or type(exc).__name__},
            )
            self._scorer.record_failure(proxy.index)
            return None

        if not response.is_success:
            logger.warning(
                "Proxy %s returned HTTP %d",
                proxy.name,
                response.status_code,
                extra={**context, "status_code": response.status_code},
            )
            self._scorer.record_failure(proxy.index)
            return None

        text = response.text
        if proxy.envelope_field:
            text = unwrap_envelope(text, proxy.envelope_field)

        verdict = classify_payload(text)
        if not verdict.acceptable(self._min_valid_length):
            logger.warning(
                "Proxy %s returned unusable payload (%d chars, html=%s)",
                proxy.name,
                verdict.length,
                verdict.is_html,
                extra={**context, "payload_length": verdict.length},
            )
            self._scorer.record_failure(proxy.index)
            return None

        latency_ms = (self._monotonic() - start) * 1000
        self._scorer.record_success(proxy.index, latency_ms)
        if self._app_settings is not None:
            self._app_settings.set_preferred_proxy(proxy.index)
        logger.info(
            "Fetched %s via %s",
            url,
            proxy.name,
            extra={**context, "latency_ms": round(latency_ms), "payload_length": verdict.length},
        )
        return text
