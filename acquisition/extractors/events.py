"""Events extractor.

Collects internal links under ``/en/events/`` that point at event pages
(AI days, lecture series, workshops, archive). When several links share a
URL, the longest title wins. The date is the year in the URL, else
``Ongoing``; items are ordered newest year first.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from acquisition.extractors.base import BaseExtractor
from acquisition.models.content import Category, ContentItem
from acquisition.models.normalizer import clean_text

_YEAR_RE = re.compile(r"20\d{2}")
_EVENT_MARKERS = (
    "/events/ai_day",
    "/events/lecture_series",
    "/events/workshop",
    "/events/archive",
)
_SITE_HOST = "rais2.uni-bayreuth.de"
_MIN_TITLE_LENGTH = 5
ONGOING = "Ongoing"


def _year_key(date: str) -> int:
    match = re.match(r"\d+", date)
    return int(match.group()) if match else -1


class EventsExtractor(BaseExtractor):
    category = Category.EVENTS

    def extract(self, html: str, page_url: str) -> list[ContentItem]:
        root = self.content_root(self.parse(html))
        by_url: dict[str, tuple[str, str]] = {}

        for link in root.find_all("a", href=True):
            url = self.resolve_link(link, page_url)
            if url is None or not self._is_event_page(url):
                continue

            title = self.text_of(link)
            title_attr = clean_text(str(link.get("title") or ""))
            if len(title_attr) > len(title):
                title = title_attr
            if len(title) < _MIN_TITLE_LENGTH or self.is_nav(title):
                continue
            if "Overview" in title or title == "...more":
                continue

            year = _YEAR_RE.search(url)
            date = year.group() if year else ONGOING
            existing = by_url.get(url)
            if existing is None or len(title) > len(existing[0]):
                by_url[url] = (title, date)

        return [
            ContentItem.create(self.category, title=title, date=date, url=url)
            for url, (title, date) in by_url.items()
        ]

    def order(self, items: list[ContentItem]) -> list[ContentItem]:
        return sorted(items, key=lambda item: _year_key(item.date), reverse=True)

    @staticmethod
    def _is_event_page(url: str) -> bool:
        parsed = urlparse(url)
        if not (parsed.hostname or "").endswith(_SITE_HOST):
            return False
        if "/en/events/" not in parsed.path:
            return False
        return any(marker in url for marker in _EVENT_MARKERS)
