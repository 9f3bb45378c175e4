"""Resilient content acquisition for the RAIS2 newsletter.

Fetches research-group pages through scored CORS proxies, validates payloads,
retries per category and falls back to cached content.
"""

__version__ = "1.0.0"
