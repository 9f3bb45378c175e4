"""Property tests for proxy reputation scoring.

Validates that failures never raise a score, that successes at a steady
latency never lower it, that untested proxies are not starved, that ranking
is descending and stable, and that the table survives a reload.
"""

from __future__ import annotations

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from acquisition.proxy.scorer import ProxyReputationStore
from acquisition.proxy.types import ProxyScoreEntry
from acquisition.storage.kv_store import MemoryStore, ResilientStore
from conftest import outcome_sequences
from helpers import make_proxies


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

steady_latencies = st.integers(min_value=1, max_value=60000)

# Per-proxy history: list of (success?, latency)
histories = st.lists(
    st.lists(st.tuples(st.booleans(), steady_latencies), max_size=20),
    min_size=1,
    max_size=8,
)


def _fresh_scorer() -> ProxyReputationStore:
    return ProxyReputationStore(ResilientStore(MemoryStore()))


def _replay(scorer: ProxyReputationStore, histories: list[list[tuple[bool, int]]]) -> None:
    for index, history in enumerate(histories):
        for success, latency in history:
            if success:
                scorer.record_success(index, latency)
            else:
                scorer.record_failure(index)


# ---------------------------------------------------------------------------
# Monotonicity
# ---------------------------------------------------------------------------


@settings(max_examples=100)
@given(outcomes=outcome_sequences, latency=steady_latencies)
def test_steady_latency_score_follows_outcomes(outcomes: list[bool], latency: int):
    """With one latency throughout, a success never lowers and a failure never raises the score."""
    scorer = _fresh_scorer()
    scorer.record_success(0, latency)

    for success in outcomes:
        before = scorer.score(0)
        if success:
            scorer.record_success(0, latency)
            assert scorer.score(0) >= before
        else:
            scorer.record_failure(0)
            assert scorer.score(0) <= before


@settings(max_examples=100)
@given(latency=steady_latencies)
def test_failure_ranks_below_success(latency: int):
    scorer = _fresh_scorer()
    scorer.record_success(0, latency)
    scorer.record_failure(0)
    scorer.record_success(1, latency)
    scorer.record_success(1, latency)

    ranked = scorer.get_sorted_proxies(make_proxies("mixed", "steady"))

    assert [r.index for r in ranked] == [1, 0]


@settings(max_examples=100)
@given(outcomes=outcome_sequences, latency=st.floats(min_value=0.0, max_value=60000.0, allow_nan=False))
def test_metrics_stay_in_range(outcomes: list[bool], latency: float):
    entry = ProxyScoreEntry()
    for success in outcomes:
        if success:
            entry.successes += 1
            entry.total_latency_ms += latency
        else:
            entry.failures += 1

    assert 0.0 <= entry.success_rate <= 1.0
    assert entry.avg_latency_ms >= 1.0
    assert entry.score >= 0.0


# ---------------------------------------------------------------------------
# Untested proxies are not starved
# ---------------------------------------------------------------------------


@settings(max_examples=100)
@given(
    outcomes=st.lists(st.booleans(), min_size=1, max_size=30),
    latency=st.integers(min_value=10000, max_value=60000),
)
def test_untested_outranks_worse_proxy(outcomes: list[bool], latency: int):
    successes = sum(outcomes)
    assume(successes / len(outcomes) < 0.5)

    scorer = _fresh_scorer()
    for success in outcomes:
        if success:
            scorer.record_success(0, latency)
        else:
            scorer.record_failure(0)

    ranked = scorer.get_sorted_proxies(make_proxies("seasoned", "newcomer"))

    assert ranked[0].index == 1
    assert ranked[0].score > 0


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


@settings(max_examples=100)
@given(histories=histories)
def test_ranking_is_descending_and_stable(histories):
    scorer = _fresh_scorer()
    _replay(scorer, histories)
    proxies = make_proxies(*(f"p{i}" for i in range(len(histories))))

    ranked = scorer.get_sorted_proxies(proxies)

    assert sorted(r.index for r in ranked) == list(range(len(proxies)))
    for first, second in zip(ranked, ranked[1:]):
        assert first.score >= second.score
        if first.score == second.score:
            assert first.index < second.index


@settings(max_examples=100)
@given(histories=histories)
def test_table_survives_reload(histories):
    store = ResilientStore(MemoryStore())
    scorer = ProxyReputationStore(store)
    _replay(scorer, histories)

    reloaded = ProxyReputationStore(store)

    for index in range(len(histories)):
        assert reloaded.get_entry(index) == scorer.get_entry(index)
