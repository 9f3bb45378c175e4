"""Unit tests for text and URL normalization helpers."""

from acquisition.models.normalizer import (
    absolute_url,
    clean_text,
    is_content_href,
    truncate,
)


class TestCleanText:
    def test_collapses_whitespace(self):
        assert clean_text("  AI \n\t Day  ") == "AI Day"

    def test_invisible_spaces(self):
        assert clean_text("AI\u00a0Day\u200b2025") == "AI Day 2025"

    def test_none(self):
        assert clean_text(None) == ""


class TestLinks:
    def test_content_hrefs(self):
        assert is_content_href("/en/news/") is True
        assert is_content_href("#top") is False
        assert is_content_href("javascript:void(0)") is False
        assert is_content_href("mailto:info@example.org") is False
        assert is_content_href("   ") is False

    def test_relative_link_resolves(self):
        base = "https://www.rais2.uni-bayreuth.de/en/events/index.html"
        assert absolute_url("ai_day/", base) == "https://www.rais2.uni-bayreuth.de/en/events/ai_day/"
        assert absolute_url("/en/news/", base) == "https://www.rais2.uni-bayreuth.de/en/news/"

    def test_absolute_link_kept(self):
        assert absolute_url("https://eref.uni-bayreuth.de/1", "https://x.test/") == "https://eref.uni-bayreuth.de/1"

    def test_non_http_rejected(self):
        assert absolute_url("ftp://files.test/a", "https://x.test/") is None
        assert absolute_url("", "https://x.test/") is None


class TestTruncate:
    def test_short_text_untouched(self):
        assert truncate("short", 10) == "short"

    def test_long_text_gets_ellipsis(self):
        result = truncate("a" * 30, 10)
        assert result == "aaaaaaa..."
        assert len(result) == 10
