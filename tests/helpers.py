"""Builders shared by unit and property tests."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx

from acquisition.config.proxies import ProxyDescriptor
from acquisition.models.content import Category, ContentItem


def make_html(length: int = 20000, body: str = "") -> str:
    """An HTML document padded to exactly *length* characters."""
    head = f"<!DOCTYPE html><html><head><title>t</title></head><body>{body}"
    tail = "</body></html>"
    padding = max(length - len(head) - len(tail), 0)
    return head + ("x" * padding) + tail


def make_item(category: Category, n: int) -> ContentItem:
    return ContentItem.create(category, title=f"{category.value} item {n}", date="01.01.2025")


def make_proxies(*names: str) -> list[ProxyDescriptor]:
    """Proxies routed to ``https://<name>.proxy.test/?url=...``."""
    return [
        ProxyDescriptor(
            index=i,
            name=name,
            url_template=f"https://{name}.proxy.test/?url={{url_encoded}}",
        )
        for i, name in enumerate(names)
    ]


def proxy_name(request: httpx.Request) -> str:
    return request.url.host.split(".")[0]


class FrozenClock:
    """Settable wall clock returning aware datetimes."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
