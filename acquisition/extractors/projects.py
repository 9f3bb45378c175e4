"""Research projects extractor.

Walks the page in document order like the members extractor. Each block
whose first link points at a project or research page becomes a project of
the current pillar; text following the title becomes its summary.
"""

from __future__ import annotations

from acquisition.extractors.base import PILLARS, BaseExtractor, dedupe
from acquisition.models.content import Category, ContentItem
from acquisition.models.normalizer import truncate

_WALKED_TAGS = ["h2", "h3", "h4", "div", "article", "li", "dt", "dd", "p"]
_PROJECT_HINTS = ("/projects/", "/research/", "uni-bayreuth.de")
_SUMMARY_LIMIT = 150
ONGOING = "Ongoing"


class ProjectsExtractor(BaseExtractor):
    category = Category.PROJECTS

    def extract(self, html: str, page_url: str) -> list[ContentItem]:
        root = self.content_root(self.parse(html))
        pillar = ""
        items: list[ContentItem] = []

        for element in root.find_all(_WALKED_TAGS):
            heading = self.pillar_heading(element, PILLARS)
            if heading is not None:
                pillar = heading
                continue

            link = element.find("a", href=True)
            if link is None:
                continue

            href = str(link["href"])
            title = self.text_of(link)
            if not 5 <= len(title) <= 300 or self.is_nav(title):
                continue
            if not any(hint in href for hint in _PROJECT_HINTS):
                continue

            url = self.resolve_link(link, page_url)
            if url is None:
                continue

            item = ContentItem.create(
                self.category,
                title=title,
                date=pillar or "project",
                summary=self._summary(self.text_of(element), title),
                url=url,
            )
            items.append(item.model_copy(update={"date": ONGOING, "pillar": pillar}))

        return dedupe(items, by_title=True)

    @staticmethod
    def _summary(block_text: str, title: str) -> str:
        if len(block_text) <= len(title) + 20:
            return ""
        _, _, after = block_text.partition(title)
        return truncate(after[:200].strip(), _SUMMARY_LIMIT)
