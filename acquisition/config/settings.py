"""Pydantic Settings for the acquisition service.

All environment variables use the ACQUISITION_ prefix.
Example: ACQUISITION_PORT=8001, ACQUISITION_FETCH_TIMEOUT_MS=20000
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

_SITE = "https://www.rais2.uni-bayreuth.de/en"

DEFAULT_PROXIES_PATH = str(Path(__file__).with_name("proxies.yaml"))


class AcquisitionSettings(BaseSettings):
    """Acquisition service configuration validated from environment variables."""

    # Service
    port: int = 8001
    log_level: str = "INFO"

    # Origin site
    base_url: str = f"{_SITE}/"
    news_url: str = f"{_SITE}/news/index.php"
    events_url: str = f"{_SITE}/events/index.html"
    lectures_url: str = f"{_SITE}/events/lecture_series/index.html"
    publications_url: str = f"{_SITE}/research/publications/index.php"
    members_url: str = f"{_SITE}/about/members/index.html"
    projects_url: str = f"{_SITE}/research/projects/index.html"

    # Proxies
    proxies_path: str = DEFAULT_PROXIES_PATH

    # Page fetching
    fetch_timeout_ms: int = Field(default=30000, ge=1000)
    proxy_retry_delay_ms: int = Field(default=350, ge=0)
    min_valid_length: int = Field(default=5000, ge=0)  # Real pages are 10KB+

    # Proxy health probes
    health_probe_url: str | None = None  # Falls back to base_url
    health_timeout_ms: int = Field(default=5000, ge=100)
    health_ttl_seconds: int = Field(default=300, ge=0)  # 5 minutes
    health_check_interval_seconds: int = Field(default=300, ge=1)

    # Retry orchestration
    max_retries: int = Field(default=3, ge=1)
    retry_backoff_ms: int = Field(default=500, ge=0)

    # Content cache
    cache_expiry_hours: int = Field(default=24, ge=1)

    # Scrape event log
    max_logs: int = Field(default=500, ge=1)
    log_export_dir: str = "data/logs"

    # Durable state
    storage_dir: str = "data/state"
    storage_max_bytes: int | None = Field(default=5_000_000, ge=1)
    storage_fsync: bool = False

    # Publication detail dates (slow: one extra fetch per publication)
    fetch_publication_dates: bool = False
    publication_date_limit: int = Field(default=10, ge=0)
    detail_fetch_delay_ms: int = Field(default=200, ge=0)

    model_config = {"env_prefix": "ACQUISITION_"}

    @property
    def probe_url(self) -> str:
        """URL used for proxy liveness probes."""
        return self.health_probe_url or self.base_url
