"""Text and URL normalization shared by the extractors.

Handles:
- Whitespace normalization (non-breaking and zero-width spaces become spaces,
  runs collapse to a single space, ends trimmed)
- Resolving relative links against the page they came from
- Truncating summaries with an ellipsis
"""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

_INVISIBLE_RE = re.compile("[\u00a0\u200b]")
_WHITESPACE_RE = re.compile(r"\s+")

# Links that never point at content
_SKIPPED_SCHEMES = ("#", "javascript:", "mailto:", "tel:")


def clean_text(text: str | None) -> str:
    """Normalize whitespace in extracted text; ``None`` becomes ``""``."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", _INVISIBLE_RE.sub(" ", text)).strip()


def is_content_href(href: str) -> bool:
    href = href.strip()
    return bool(href) and not href.startswith(_SKIPPED_SCHEMES)


def absolute_url(href: str, base_url: str) -> str | None:
    """Resolve *href* against *base_url*; ``None`` if it is not an http(s) URL."""
    href = href.strip()
    if not href:
        return None
    resolved = href if href.startswith("http") else urljoin(base_url, href)
    parsed = urlparse(resolved)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return resolved


def truncate(text: str, limit: int) -> str:
    """Cut *text* to at most *limit* characters, ending in ``...`` when cut."""
    if len(text) <= limit:
        return text
    return text[: max(limit - 3, 0)] + "..."
