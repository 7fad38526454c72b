"""Reduce a process snapshot to bounded top-N views."""

from collections.abc import Iterable

from sysdash.models import ProcessSample

TOP_N = 10

RankedView = tuple[ProcessSample, ...]


def rank_by_memory(samples: Iterable[ProcessSample], limit: int = TOP_N) -> RankedView:
    """Return the `limit` samples with the largest resident memory."""
    return _top(samples, lambda p: p.memory_rss, limit)


def rank_by_cpu(samples: Iterable[ProcessSample], limit: int = TOP_N) -> RankedView:
    """Return the `limit` samples with the highest CPU percentage."""
    return _top(samples, lambda p: p.cpu_percent, limit)


def rank(samples: Iterable[ProcessSample], limit: int = TOP_N) -> tuple[RankedView, RankedView]:
    """
    Rank one snapshot both ways.

    Returns:
        A ``(by_memory, by_cpu)`` pair. Each ranking works on its own copy of
        the samples, so neither sees the other's ordering.
    """
    samples = tuple(samples)
    return rank_by_memory(samples, limit), rank_by_cpu(samples, limit)


def _top(samples, key, limit: int) -> RankedView:
    # sorted() is stable with reverse=True: equal keys keep snapshot order
    ordered = sorted(samples, key=key, reverse=True)
    return tuple(ordered[: max(limit, 0)])
