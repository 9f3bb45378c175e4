"""Configuration module — settings and the proxy chain."""

from acquisition.config.proxies import ProxyDescriptor, build_proxied_url, load_proxies
from acquisition.config.settings import AcquisitionSettings

__all__ = [
    "AcquisitionSettings",
    "ProxyDescriptor",
    "build_proxied_url",
    "load_proxies",
]
