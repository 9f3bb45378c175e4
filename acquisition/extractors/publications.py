"""Publications extractor.

The publication list is grouped by year: a paragraph holding only the year
(``<p><strong>2025</strong></p>``) opens a group, and each following
paragraph carries the authors in ``<i>`` and the title as an eref link in
``<strong>``. The numeric eref id grows with deposit time and orders
publications within a year.

Detail pages on eref carry the exact deposit date; ``parse_deposit_date``
reads it for the optional date enrichment pass.
"""

from __future__ import annotations

import re
from datetime import date

from bs4 import Tag

from acquisition.extractors.base import BaseExtractor, dedupe
from acquisition.models.content import Category, ContentItem

EREF_HOST = "eref.uni-bayreuth.de"

_YEAR_HEADER_RE = re.compile(r"^(20\d{2})$")
_EREF_ID_RE = re.compile(r"eref\.uni-bayreuth\.de/(\d+)")
_DEPOSITED_RE = re.compile(r"Date Deposited:\s*(\d{1,2})\s+(\w+)\s+(\d{4})", re.IGNORECASE)
_TRAILING_SEPARATORS_RE = re.compile(r"[;\s]+$")
_MIN_TITLE_LENGTH = 10

_MONTHS = {
    "jan": "01", "feb": "02", "mar": "03", "apr": "04",
    "may": "05", "jun": "06", "jul": "07", "aug": "08",
    "sep": "09", "oct": "10", "nov": "11", "dec": "12",
}


def eref_id(url: str) -> int:
    match = _EREF_ID_RE.search(url)
    return int(match.group(1)) if match else 0


def parse_deposit_date(text: str) -> str | None:
    """Find ``Date Deposited: 22 Dec 2025`` in *text* and return ``22.12.2025``."""
    match = _DEPOSITED_RE.search(text)
    if match is None:
        return None
    day, month_name, year = match.groups()
    month = _MONTHS.get(month_name[:3].lower(), "01")
    return f"{int(day):02d}.{month}.{year}"


def publication_year(value: str) -> int:
    """Year of a ``YYYY`` or ``DD.MM.YYYY`` date; 0 if there is none."""
    part = value.split(".")[2] if value.count(".") == 2 else value
    return int(part) if part.isdigit() else 0


class PublicationsExtractor(BaseExtractor):
    category = Category.PUBLICATIONS

    def __init__(self, current_year: int | None = None) -> None:
        self._current_year = current_year

    def extract(self, html: str, page_url: str) -> list[ContentItem]:
        root = self.content_root(self.parse(html))
        year = str(self._current_year or date.today().year)
        items: list[ContentItem] = []

        for paragraph in root.find_all("p"):
            header = _YEAR_HEADER_RE.match(self.text_of(paragraph))
            if header:
                year = header.group(1)
                continue

            link = paragraph.select_one(f'strong > a[href*="{EREF_HOST}"]')
            if link is None:
                continue
            item = self._build(link, year, page_url, authors=self._authors(paragraph))
            if item is not None:
                items.append(item)

        if not items:
            for link in root.select(f'a[href*="{EREF_HOST}"]'):
                item = self._build(link, year, page_url, authors="")
                if item is not None and not self.is_nav(item.title):
                    items.append(item)

        return dedupe(items, by_title=True)

    def order(self, items: list[ContentItem]) -> list[ContentItem]:
        """Newest year first, then highest eref id first."""
        return sorted(
            items,
            key=lambda item: (publication_year(item.date), getattr(item, "eref_id", 0) or 0),
            reverse=True,
        )

    def _authors(self, paragraph: Tag) -> str:
        italic = paragraph.find("i")
        if italic is None:
            return ""
        return _TRAILING_SEPARATORS_RE.sub("", self.text_of(italic)).strip()

    def _build(self, link: Tag, year: str, page_url: str, authors: str) -> ContentItem | None:
        title = self.text_of(link)
        if len(title) < _MIN_TITLE_LENGTH:
            return None
        url = self.resolve_link(link, page_url)
        if url is None:
            return None
        return ContentItem.create(
            self.category,
            title=title,
            date=year,
            summary=authors,
            url=url,
            pillar="",
            eref_id=eref_id(url),
        )
