"""Pluggable extractor registry.

Maps ``Category`` → ``BaseExtractor`` instance. Adding a category requires
only an extractor subclass and a ``register()`` call.
"""

from __future__ import annotations

import logging

from acquisition.extractors.base import BaseExtractor
from acquisition.extractors.events import EventsExtractor
from acquisition.extractors.lectures import LecturesExtractor
from acquisition.extractors.members import MembersExtractor
from acquisition.extractors.news import NewsExtractor
from acquisition.extractors.projects import ProjectsExtractor
from acquisition.extractors.publications import PublicationsExtractor
from acquisition.middleware.error_handler import UnknownCategoryError
from acquisition.models.content import Category

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """Registry that maps categories to their extractor implementations."""

    def __init__(self) -> None:
        self._extractors: dict[Category, BaseExtractor] = {}

    def register(self, extractor: BaseExtractor) -> None:
        """Register an extractor for its declared ``category``.

        Raises
        ------
        ValueError
            If an extractor for the same category is already registered.
        """
        category = extractor.category
        if category in self._extractors:
            raise ValueError(f"Extractor for category '{category.value}' is already registered")
        self._extractors[category] = extractor
        logger.debug("Registered extractor for category '%s'", category.value)

    def get(self, category: Category | str) -> BaseExtractor:
        """Return the extractor for *category*.

        Raises
        ------
        UnknownCategoryError
            If *category* is not a known category or has no extractor.
        """
        parsed = category if isinstance(category, Category) else Category.parse(category)
        if parsed is None or parsed not in self._extractors:
            name = category.value if isinstance(category, Category) else category
            raise UnknownCategoryError(f"Unknown category '{name}'", category=name)
        return self._extractors[parsed]

    def list_categories(self) -> list[Category]:
        return list(self._extractors.keys())


def default_registry() -> ExtractorRegistry:
    """A registry with the six built-in extractors."""
    registry = ExtractorRegistry()
    for extractor in (
        NewsExtractor(),
        EventsExtractor(),
        LecturesExtractor(),
        PublicationsExtractor(),
        MembersExtractor(),
        ProjectsExtractor(),
    ):
        registry.register(extractor)
    return registry
