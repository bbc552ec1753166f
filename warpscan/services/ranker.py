"""Latency ranking of endpoint scores.

Scores are ordered by ascending average latency. Equal latencies are broken
by address family, address and port so a ranking is reproducible.
"""

from __future__ import annotations

from collections.abc import Iterable

from warpscan.models.endpoint import EndpointScore


def _rank_key(score: EndpointScore) -> tuple[int, tuple[int, int, int]]:
    return (score.average_latency_ms, score.endpoint.sort_key)


def rank(scores: Iterable[EndpointScore]) -> list[EndpointScore]:
    """Return *scores* sorted fastest first."""
    return sorted(scores, key=_rank_key)


def top(scores: Iterable[EndpointScore], k: int) -> list[EndpointScore]:
    """Return the *k* fastest scores (fewer if there are not enough).

    Raises ``ValueError`` if *k* is negative.
    """
    if k < 0:
        raise ValueError(f"k must not be negative (got {k})")
    return rank(scores)[:k]
