"""Abstract base class for category-specific HTML extractors.

Each extractor handles a single content category and turns the HTML of one
origin page into ``ContentItem`` objects. Extraction is pure: no network
access, no state between calls.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from bs4 import BeautifulSoup, Tag

from acquisition.models.content import Category, ContentItem
from acquisition.models.normalizer import absolute_url, clean_text, is_content_href

logger = logging.getLogger(__name__)

# Site chrome that shows up as link text on every page
NAV_ITEMS = frozenset({
    "Close", "Back", "Overview", "Home", "About", "Research",
    "Education", "Events", "News", "Newsletter", "Contact",
    "Deutsch", "English", "Intranet", "menu bar", "Mobile Menu",
    "Search", "Print page", "Sitemap",
})

PILLARS = (
    "AI Technology",
    "AI for Life Science",
    "AI for Physical Science",
    "AI for Humanities",
    "AI & Society",
)

_HEADING_TAGS = ("h2", "h3", "h4")


class BaseExtractor(ABC):
    """Abstract base extractor that all category extractors extend.

    Subclasses MUST set ``category`` as a class attribute and implement
    ``extract``. ``order`` may be overridden to sort the merged items of a
    category once all its pages have been extracted.
    """

    category: Category

    @abstractmethod
    def extract(self, html: str, page_url: str) -> list[ContentItem]:
        """Extract items from *html*.

        Parameters
        ----------
        html:
            A validated origin page.
        page_url:
            The URL the page was fetched from; relative links resolve
            against it.

        Returns
        -------
        list[ContentItem]
            Items in document order, without duplicates.
        """
        ...

    def order(self, items: list[ContentItem]) -> list[ContentItem]:
        return items

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def parse(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")

    @staticmethod
    def content_root(soup: BeautifulSoup) -> Tag:
        """The ``#content`` element, else ``<body>``, else the whole document."""
        return soup.select_one("#content") or soup.body or soup

    @staticmethod
    def text_of(element: Tag | None) -> str:
        if element is None:
            return ""
        return clean_text(element.get_text())

    @staticmethod
    def is_nav(title: str) -> bool:
        return title in NAV_ITEMS

    @staticmethod
    def resolve_link(link: Tag, page_url: str) -> str | None:
        href = str(link.get("href") or "")
        if not is_content_href(href):
            return None
        return absolute_url(href, page_url)

    @staticmethod
    def pillar_heading(element: Tag, pillars: tuple[str, ...]) -> str | None:
        """Return the pillar named by *element* if it is a heading, else None."""
        if element.name not in _HEADING_TAGS:
            return None
        text = clean_text(element.get_text())
        for pillar in pillars:
            if pillar in text:
                return pillar
        return None


def dedupe(items: list[ContentItem], by_title: bool = False) -> list[ContentItem]:
    """Drop items whose id (and optionally title) was already seen."""
    seen_ids: set[str] = set()
    seen_titles: set[str] = set()
    unique: list[ContentItem] = []
    for item in items:
        if item.id in seen_ids or (by_title and item.title in seen_titles):
            continue
        seen_ids.add(item.id)
        seen_titles.add(item.title)
        unique.append(item)
    return unique
