"""Tests for process ranking."""

import random

from sysdash.models import ProcessSample
from sysdash.ranking import TOP_N, rank, rank_by_cpu, rank_by_memory


def make_sample(pid: int, rss: int = 0, cpu: float = 0.0, name: str | None = None) -> ProcessSample:
    return ProcessSample(
        pid=pid,
        name=name if name is not None else f"proc{pid}",
        cpu_percent=cpu,
        memory_percent=0.0,
        memory_rss=rss,
    )


def random_samples(count: int, seed: int) -> list[ProcessSample]:
    rng = random.Random(seed)
    return [
        make_sample(pid, rss=rng.randint(0, 50) * 1024, cpu=round(rng.uniform(0, 150), 1))
        for pid in range(1, count + 1)
    ]


class TestRankByMemory:
    """Tests for rank_by_memory."""

    def test_sorted_descending_and_bounded(self):
        """Output is sorted by RSS, largest first, and holds at most 10 entries."""
        for seed in range(20):
            view = rank_by_memory(random_samples(40, seed))

            assert len(view) <= TOP_N
            rss = [p.memory_rss for p in view]
            assert rss == sorted(rss, reverse=True)

    def test_keeps_the_largest(self):
        """No excluded sample has more RSS than the smallest included one."""
        samples = random_samples(40, seed=7)
        view = rank_by_memory(samples)

        excluded = [p for p in samples if p not in view]
        assert max(p.memory_rss for p in excluded) <= view[-1].memory_rss

    def test_ties_keep_snapshot_order(self):
        """Three processes with equal RSS stay in their input order at the top."""
        samples = [make_sample(pid, rss=100 + pid) for pid in range(10, 22)]
        p1, p2, p3 = make_sample(1, rss=1000), make_sample(2, rss=1000), make_sample(3, rss=1000)
        # 15 processes, the tied ones spread through the input
        samples.insert(2, p1)
        samples.insert(8, p2)
        samples.insert(13, p3)
        assert len(samples) == 15

        view = rank_by_memory(samples)

        assert len(view) == 10
        assert view[:3] == (p1, p2, p3)

    def test_fewer_than_limit(self):
        """Fewer than 10 samples are all returned, unpadded."""
        samples = [make_sample(1, rss=5), make_sample(2, rss=9)]

        assert rank_by_memory(samples) == (samples[1], samples[0])

    def test_empty(self):
        """An empty snapshot yields an empty view."""
        assert rank_by_memory([]) == ()


class TestRankByCpu:
    """Tests for rank_by_cpu."""

    def test_sorted_descending_and_bounded(self):
        """Output is sorted by CPU%, highest first, and holds at most 10 entries."""
        for seed in range(20):
            view = rank_by_cpu(random_samples(40, seed))

            assert len(view) <= TOP_N
            cpu = [p.cpu_percent for p in view]
            assert cpu == sorted(cpu, reverse=True)

    def test_ties_keep_snapshot_order(self):
        """Equal CPU% entries keep their relative input order."""
        samples = [make_sample(pid, cpu=5.0) for pid in range(1, 6)]

        assert rank_by_cpu(samples) == tuple(samples)

    def test_above_100_percent(self):
        """Multi-core readings above 100% rank first."""
        samples = [make_sample(1, cpu=99.0), make_sample(2, cpu=250.0)]

        assert rank_by_cpu(samples)[0].pid == 2

    def test_custom_limit(self):
        """A custom limit bounds the view."""
        assert len(rank_by_cpu(random_samples(20, seed=1), limit=3)) == 3


class TestRank:
    """Tests for ranking one snapshot both ways."""

    def test_rankings_are_independent(self):
        """Ranking by memory does not leak its order into the CPU ranking."""
        samples = [
            make_sample(1, rss=10, cpu=90.0),
            make_sample(2, rss=30, cpu=10.0),
            make_sample(3, rss=20, cpu=50.0),
        ]

        by_memory, by_cpu = rank(samples)

        assert [p.pid for p in by_memory] == [2, 3, 1]
        assert [p.pid for p in by_cpu] == [1, 3, 2]

    def test_input_is_not_mutated(self):
        """The caller's list keeps its order."""
        samples = random_samples(25, seed=3)
        original = list(samples)

        rank(samples)

        assert samples == original

    def test_idempotent(self):
        """Ranking the same snapshot twice gives identical views."""
        samples = random_samples(30, seed=11)

        assert rank(samples) == rank(samples)

    def test_accepts_generator(self):
        """A one-shot iterable is read once and feeds both rankings."""
        samples = random_samples(12, seed=5)

        by_memory, by_cpu = rank(p for p in samples)

        assert len(by_memory) == 10
        assert len(by_cpu) == 10

    def test_empty(self):
        """Both views are empty for an empty snapshot."""
        assert rank([]) == ((), ())
