"""HTML extractors, one per content category."""

from acquisition.extractors.base import BaseExtractor
from acquisition.extractors.registry import ExtractorRegistry, default_registry

__all__ = ["BaseExtractor", "ExtractorRegistry", "default_registry"]
