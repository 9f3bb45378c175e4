"""Proxy reputation and health data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from acquisition.config.proxies import ProxyDescriptor

# Neutral prior for a proxy that has never been tried
UNTESTED_SUCCESS_RATE = 0.5
# Pessimistic latency assumed until a proxy has succeeded once
UNTESTED_LATENCY_MS = 10000.0


@dataclass
class ProxyScoreEntry:
    """Cumulative outcome counters for one proxy. Latency accrues on success only."""

    successes: int = 0
    failures: int = 0
    total_latency_ms: float = 0.0

    @property
    def attempts(self) -> int:
        return self.successes + self.failures

    @property
    def success_rate(self) -> float:
        if self.attempts == 0:
            return UNTESTED_SUCCESS_RATE
        return self.successes / self.attempts

    @property
    def avg_latency_ms(self) -> float:
        if self.successes == 0:
            return UNTESTED_LATENCY_MS
        # Clamped so a 0 ms success cannot divide by zero
        return max(self.total_latency_ms / self.successes, 1.0)

    @property
    def score(self) -> float:
        return self.success_rate * (UNTESTED_LATENCY_MS / self.avg_latency_ms)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict) -> ProxyScoreEntry:
        return cls(
            successes=max(int(raw.get("successes", 0)), 0),
            failures=max(int(raw.get("failures", 0)), 0),
            total_latency_ms=max(float(raw.get("total_latency_ms", 0.0)), 0.0),
        )


@dataclass(frozen=True)
class RankedProxy:
    """A proxy with its current score, as returned by the scorer."""

    index: int
    proxy: ProxyDescriptor
    score: float
    success_rate: float
    avg_latency_ms: float


@dataclass
class ProxyHealthRecord:
    """Last probe verdict for one proxy. Kept in memory only."""

    healthy: bool
    latency_ms: float
    checked_at_epoch_ms: float


@dataclass(frozen=True)
class HealthResult:
    healthy: bool
    latency_ms: float
    from_cache: bool = False
