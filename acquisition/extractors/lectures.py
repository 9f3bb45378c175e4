"""Lecture series extractor.

The lecture page is an accordion: each ``dt.fse-accordion-heading`` holds the
talk title and the following ``dd`` holds a link and an abstract. If no
accordion is present, short blocks that mention a date or a speaker are
picked up instead.
"""

from __future__ import annotations

import re

from bs4 import Tag

from acquisition.extractors.base import BaseExtractor
from acquisition.models.content import Category, ContentItem
from acquisition.models.normalizer import truncate

_SUMMARY_LIMIT = 220
_TITLE_LIMIT = 80
_DATE_RE = re.compile(r"\d{1,2}\.\d{1,2}\.\d{4}")
_SPEAKER_HINTS = ("prof", "dr.", "speaker", "lecture on", "talk on")
ONGOING = "Ongoing"


class LecturesExtractor(BaseExtractor):
    category = Category.LECTURES

    def extract(self, html: str, page_url: str) -> list[ContentItem]:
        root = self.content_root(self.parse(html))
        items: list[ContentItem] = []

        accordion = root.select_one("dl.accordion")
        if accordion is not None:
            for heading in accordion.select("dt.fse-accordion-heading"):
                item = self._from_accordion(heading, page_url)
                if item is not None:
                    items.append(item)

        if not items:
            items = self._scan_blocks(root, page_url)
        return items

    def _from_accordion(self, heading: Tag, page_url: str) -> ContentItem | None:
        anchor = heading.select_one("a:not(.close)")
        title = self.text_of(anchor)
        if len(title) < 5 or self.is_nav(title):
            return None

        url = page_url
        summary = ""
        body = heading.find_next_sibling()
        if body is not None and body.name == "dd":
            link = body.select_one('a[href]:not([href^="javascript"])')
            if link is not None:
                url = self.resolve_link(link, page_url) or page_url
            summary = truncate(self.text_of(body.find("p")), _SUMMARY_LIMIT)

        return ContentItem.create(self.category, title=title, date=ONGOING, summary=summary, url=url)

    def _scan_blocks(self, root: Tag, page_url: str) -> list[ContentItem]:
        items: list[ContentItem] = []
        for block in root.find_all(["div", "article", "li", "p"]):
            text = self.text_of(block)
            if not 20 <= len(text) <= 500:
                continue
            date_match = _DATE_RE.search(text)
            lowered = text.lower()
            if date_match is None and not any(hint in lowered for hint in _SPEAKER_HINTS):
                continue

            link = block.find("a", href=True)
            url = (self.resolve_link(link, page_url) if link is not None else None) or page_url

            title = self.text_of(block.find(["strong", "b", "h3", "h4"])) or self.text_of(link)
            if not title:
                title = truncate(text, _TITLE_LIMIT + 3)
            if len(title) < 10 or self.is_nav(title):
                continue

            items.append(
                ContentItem.create(
                    self.category,
                    title=title,
                    date=date_match.group() if date_match else ONGOING,
                    summary=truncate(text, _SUMMARY_LIMIT),
                    url=url,
                )
            )
        return items
