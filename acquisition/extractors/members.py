"""Members extractor.

Walks the page in document order. Pillar headings set the current pillar;
links whose text looks like a person's name, or that point at a university
profile, become members of that pillar.
"""

from __future__ import annotations

from datetime import date

from acquisition.extractors.base import PILLARS, BaseExtractor, dedupe
from acquisition.models.content import Category, ContentItem

MEMBER_PILLARS = PILLARS + ("Coordination", "Administration")

_WALKED_TAGS = ["h2", "h3", "h4", "div", "p", "li", "a", "article"]
_PROFILE_PATHS = ("/person/", "/members/", "/staff/")


def looks_like_name(text: str) -> bool:
    lowered = text.lower()
    return " " in text or "prof" in lowered or "dr." in lowered


def is_profile_link(href: str) -> bool:
    return "uni-bayreuth.de" in href and any(path in href for path in _PROFILE_PATHS)


class MembersExtractor(BaseExtractor):
    category = Category.MEMBERS

    def __init__(self, current_year: int | None = None) -> None:
        self._current_year = current_year

    def extract(self, html: str, page_url: str) -> list[ContentItem]:
        root = self.content_root(self.parse(html))
        year = str(self._current_year or date.today().year)
        pillar = ""
        items: list[ContentItem] = []

        for element in root.find_all(_WALKED_TAGS):
            heading = self.pillar_heading(element, MEMBER_PILLARS)
            if heading is not None:
                pillar = heading
                continue

            link = element if element.name == "a" else element.find("a", href=True)
            if link is None or not link.get("href"):
                continue

            href = str(link["href"])
            name = self.text_of(link)
            if not 3 <= len(name) <= 100 or self.is_nav(name):
                continue
            if not (looks_like_name(name) or is_profile_link(href)):
                continue

            url = self.resolve_link(link, page_url)
            if url is None:
                continue

            # The id keys on the pillar, not the date, so it is stable across years
            item = ContentItem.create(self.category, title=name, date=pillar or "member", url=url)
            items.append(item.model_copy(update={"date": year, "pillar": pillar}))

        return dedupe(items, by_title=True)
