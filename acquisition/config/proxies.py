"""CORS proxy descriptors and YAML loader.

Proxies are plain data records (name + URL template) rather than closures, so
the chain can be configured from YAML and serialized into diagnostics. A single
``build_proxied_url`` turns a template and a target URL into the relay URL.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

_PLACEHOLDERS = ("{url}", "{url_encoded}")

# Same character set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


class ProxyDescriptor(BaseModel):
    """A single CORS relay in the configured chain.

    ``index`` is the ordinal position in the chain. It keys the persisted
    reputation table and breaks ties between equally scored proxies.
    """

    model_config = {"frozen": True}

    index: int = Field(default=0, ge=0)
    name: str = Field(min_length=1)
    url_template: str
    envelope_field: str | None = None

    @field_validator("url_template")
    @classmethod
    def _has_placeholder(cls, value: str) -> str:
        if not any(p in value for p in _PLACEHOLDERS):
            raise ValueError("url_template must contain {url} or {url_encoded}")
        return value

    def proxied_url(self, target_url: str) -> str:
        return build_proxied_url(self.url_template, target_url)


def build_proxied_url(template: str, target_url: str) -> str:
    """Substitute *target_url* into a proxy URL template."""
    encoded = quote(target_url, safe=_URI_COMPONENT_SAFE)
    return template.replace("{url_encoded}", encoded).replace("{url}", target_url)


_FALLBACK_PROXIES: list[dict] = [
    {"name": "corsproxy.io", "url_template": "https://corsproxy.io/?{url_encoded}"},
    {"name": "allorigins-raw", "url_template": "https://api.allorigins.win/raw?url={url_encoded}"},
    {"name": "cors.sh", "url_template": "https://proxy.cors.sh/{url}"},
]


def _index_entries(entries: list[dict]) -> list[ProxyDescriptor]:
    proxies: list[ProxyDescriptor] = []
    for raw in entries:
        try:
            proxies.append(
                ProxyDescriptor.model_validate({**raw, "index": len(proxies)})
            )
        except Exception as exc:
            logger.error("Invalid proxy entry %r: %s — skipping", raw, exc)
    return proxies


def load_proxies(yaml_path: str) -> list[ProxyDescriptor]:
    """Parse the proxy chain YAML into indexed ProxyDescriptor objects.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        Descriptors in configured order, indexed 0..N-1. If the file is
        missing or malformed, the built-in tier-1 chain is returned.
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Proxy config not found at %s — using built-in chain", yaml_path)
        return _index_entries(_FALLBACK_PROXIES)

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse proxy config YAML at %s: %s", yaml_path, exc)
        return _index_entries(_FALLBACK_PROXIES)

    if not isinstance(raw, dict) or not isinstance(raw.get("proxies"), list):
        logger.warning("Proxy config missing 'proxies' list — using built-in chain")
        return _index_entries(_FALLBACK_PROXIES)

    proxies = _index_entries([e for e in raw["proxies"] if isinstance(e, dict)])
    if not proxies:
        logger.warning("Proxy config at %s has no valid entries — using built-in chain", yaml_path)
        return _index_entries(_FALLBACK_PROXIES)

    logger.info("Loaded %d proxies from %s", len(proxies), yaml_path)
    return proxies
