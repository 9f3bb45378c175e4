"""Proxy reputation scoring and liveness probes."""

from acquisition.proxy.health import ProxyHealthChecker
from acquisition.proxy.scorer import ProxyReputationStore
from acquisition.proxy.types import HealthResult, ProxyHealthRecord, ProxyScoreEntry, RankedProxy

__all__ = [
    "HealthResult",
    "ProxyHealthChecker",
    "ProxyHealthRecord",
    "ProxyReputationStore",
    "ProxyScoreEntry",
    "RankedProxy",
]
