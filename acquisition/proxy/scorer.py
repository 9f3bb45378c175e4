"""Persistent proxy reputation and score-based ordering.

Every fetch outcome is recorded against the proxy's ordinal index. The score
``success_rate * (10000 / avg_latency_ms)`` rewards proxies that are both
reliable and fast; an untested proxy starts from a neutral 0.5 success rate
and a pessimistic 10 s latency, which places it below any proxy with a decent
record but never excludes it.

The table is written through to the store after every mutation. Mutations
are synchronous, so concurrent fetches on one event loop cannot interleave
inside an update.
"""

from __future__ import annotations

import logging

from acquisition.config.proxies import ProxyDescriptor
from acquisition.proxy.types import ProxyScoreEntry, RankedProxy
from acquisition.storage.kv_store import ResilientStore

logger = logging.getLogger(__name__)

PROXY_SCORES_KEY = "proxy_scores"


class ProxyReputationStore:
    """Per-proxy success/failure/latency counters keyed by proxy index."""

    def __init__(self, store: ResilientStore, key: str = PROXY_SCORES_KEY) -> None:
        self._store = store
        self._key = key
        self._entries: dict[int, ProxyScoreEntry] = {}
        self.load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace in-memory entries with the persisted table."""
        raw = self._store.get(self._key, {})
        entries: dict[int, ProxyScoreEntry] = {}
        if isinstance(raw, dict):
            for key, value in raw.items():
                try:
                    entries[int(key)] = ProxyScoreEntry.from_dict(value)
                except (TypeError, ValueError, AttributeError):
                    logger.warning("Skipping malformed proxy score entry %r", key)
        else:
            logger.warning("Ignoring malformed proxy score table")
        self._entries = entries

    def save(self) -> None:
        self._store.set(
            self._key,
            {str(index): entry.to_dict() for index, entry in sorted(self._entries.items())},
        )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _entry(self, index: int) -> ProxyScoreEntry:
        return self._entries.setdefault(index, ProxyScoreEntry())

    def record_success(self, index: int, latency_ms: float) -> None:
        entry = self._entry(index)
        entry.successes += 1
        entry.total_latency_ms += max(latency_ms, 0.0)
        self.save()

    def record_failure(self, index: int) -> None:
        self._entry(index).failures += 1
        self.save()

    def reset(self) -> None:
        self._entries.clear()
        self.save()
        logger.info("Proxy reputation table reset")

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def get_entry(self, index: int) -> ProxyScoreEntry:
        entry = self._entries.get(index)
        if entry is None:
            return ProxyScoreEntry()
        return ProxyScoreEntry(entry.successes, entry.failures, entry.total_latency_ms)

    def success_rate(self, index: int) -> float:
        return self.get_entry(index).success_rate

    def avg_latency_ms(self, index: int) -> float:
        return self.get_entry(index).avg_latency_ms

    def score(self, index: int) -> float:
        return self.get_entry(index).score

    def get_sorted_proxies(self, proxies: list[ProxyDescriptor]) -> list[RankedProxy]:
        """Rank *proxies* by score, best first. Ties keep configured order."""
        ranked = []
        for proxy in proxies:
            entry = self.get_entry(proxy.index)
            ranked.append(
                RankedProxy(
                    index=proxy.index,
                    proxy=proxy,
                    score=entry.score,
                    success_rate=entry.success_rate,
                    avg_latency_ms=entry.avg_latency_ms,
                )
            )
        # sorted() is stable, so equal scores stay in configured order
        return sorted(ranked, key=lambda r: r.score, reverse=True)

    def get_stats(self, proxies: list[ProxyDescriptor]) -> list[dict]:
        stats = []
        for proxy in proxies:
            entry = self.get_entry(proxy.index)
            stats.append({
                "index": proxy.index,
                "name": proxy.name,
                "successes": entry.successes,
                "failures": entry.failures,
                "success_rate": round(entry.success_rate, 4),
                "avg_latency_ms": round(entry.avg_latency_ms, 1),
                "score": round(entry.score, 4),
                "tested": entry.attempts > 0,
            })
        return stats
