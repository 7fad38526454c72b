"""Data models for sysdash."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ProcessSample:
    """Immutable sample of one process, taken during a single tick."""

    pid: int
    name: str
    cpu_percent: float  # 0.0 - 100.0 * core_count
    memory_percent: float
    memory_rss: int  # Bytes


@dataclass(slots=True, frozen=True)
class MemoryStats:
    """Virtual memory totals in bytes."""

    total: int = 0
    used: int = 0
    free: int = 0

    @property
    def used_percent(self) -> float:
        """Share of total memory in use, 0.0 when the total is unknown."""
        if self.total <= 0:
            return 0.0
        return self.used / self.total * 100


@dataclass(slots=True, frozen=True)
class NetworkCounters:
    """Network counters summed over all interfaces."""

    bytes_sent: int = 0
    bytes_recv: int = 0
    packets_sent: int = 0
    packets_recv: int = 0


@dataclass(slots=True, frozen=True)
class SystemSnapshot:
    """Everything read during one tick."""

    memory: MemoryStats
    cpu_percent: float
    network: NetworkCounters
    processes: tuple[ProcessSample, ...]
