"""News extractor.

News appears in two places: the sidebar of the home page (one ``<p>`` per
item with a ``DD.MM.YYYY`` date, a ``<strong>`` title and a link) and the
table on the news index (date cell, then a cell holding the titled link).
Both layouts are recognised on any page.
"""

from __future__ import annotations

import re

from bs4 import Tag

from acquisition.extractors.base import BaseExtractor, dedupe
from acquisition.models.content import Category, ContentItem

_DATE_RE = re.compile(r"(\d{2}\.\d{2}\.\d{4})")
_MIN_TITLE_LENGTH = 6


class NewsExtractor(BaseExtractor):
    category = Category.NEWS

    def extract(self, html: str, page_url: str) -> list[ContentItem]:
        soup = self.parse(html)
        items: list[ContentItem] = []

        sidebar = soup.select_one("section.news, .sidebar.news")
        if sidebar is not None:
            for paragraph in sidebar.find_all("p"):
                item = self._from_sidebar(paragraph, page_url)
                if item is not None:
                    items.append(item)

        for row in soup.find_all("tr"):
            item = self._from_table_row(row, page_url)
            if item is not None:
                items.append(item)

        return dedupe(items)

    def _from_sidebar(self, paragraph: Tag, page_url: str) -> ContentItem | None:
        match = _DATE_RE.search(paragraph.get_text())
        strong = paragraph.find("strong")
        link = paragraph.find("a", href=True)
        if match is None or strong is None or link is None:
            return None
        return self._build(self.text_of(strong), match.group(1), link, page_url)

    def _from_table_row(self, row: Tag, page_url: str) -> ContentItem | None:
        cells = row.find_all("td")
        if len(cells) < 2:
            return None
        match = _DATE_RE.search(cells[0].get_text())
        link = cells[1].find("a", href=True)
        if match is None or link is None:
            return None
        return self._build(self.text_of(link), match.group(1), link, page_url)

    def _build(self, title: str, date: str, link: Tag, page_url: str) -> ContentItem | None:
        if len(title) < _MIN_TITLE_LENGTH or self.is_nav(title):
            return None
        url = self.resolve_link(link, page_url)
        if url is None:
            return None
        return ContentItem.create(self.category, title=title, date=date, url=url)
