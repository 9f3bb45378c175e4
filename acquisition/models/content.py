"""Content items and the cached content document.

Items keep extractor-specific fields (``pillar``, ``authors``, ``eref_id``,
``year`` ...) as pydantic extras so the cache round-trips them untouched.
"""

from __future__ import annotations

import hashlib
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """The six content categories, in merge order."""

    NEWS = "news"
    EVENTS = "events"
    LECTURES = "lectures"
    PUBLICATIONS = "publications"
    MEMBERS = "members"
    PROJECTS = "projects"

    @property
    def item_label(self) -> str:
        """Singular label stamped on each item's ``category`` field."""
        return _ITEM_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> Category | None:
        try:
            return cls(value)
        except ValueError:
            return None


_ITEM_LABELS = {
    Category.NEWS: "news",
    Category.EVENTS: "event",
    Category.LECTURES: "lecture",
    Category.PUBLICATIONS: "publication",
    Category.MEMBERS: "member",
    Category.PROJECTS: "project",
}


def generate_id(title: str, date: str = "") -> str:
    """Deterministic 12-hex-char identifier derived from ``title|date``."""
    digest = hashlib.sha1(f"{title}|{date}".encode("utf-8")).hexdigest()
    return digest[:12]


class ContentItem(BaseModel):
    """A single scraped item."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    date: str = ""
    summary: str = ""
    url: str = ""
    category: str

    @classmethod
    def create(
        cls,
        category: Category,
        title: str,
        date: str = "",
        summary: str = "",
        url: str = "",
        **extra: object,
    ) -> ContentItem:
        return cls(
            id=generate_id(title, date),
            title=title,
            date=date,
            summary=summary,
            url=url,
            category=category.item_label,
            **extra,
        )


class CachedContent(BaseModel):
    """Merged result of a scrape, persisted under ``cached_content``."""

    news: list[ContentItem] = Field(default_factory=list)
    events: list[ContentItem] = Field(default_factory=list)
    lectures: list[ContentItem] = Field(default_factory=list)
    publications: list[ContentItem] = Field(default_factory=list)
    members: list[ContentItem] = Field(default_factory=list)
    projects: list[ContentItem] = Field(default_factory=list)
    cached_at: datetime | None = None
    expires_at: datetime | None = None

    def items_for(self, category: Category) -> list[ContentItem]:
        return getattr(self, category.value)

    def counts(self) -> dict[str, int]:
        return {c.value: len(self.items_for(c)) for c in Category}

    def all_items(self) -> list[ContentItem]:
        """Flatten the six lists in category order."""
        items: list[ContentItem] = []
        for category in Category:
            items.extend(self.items_for(category))
        return items
