"""Sampling engine for sysdash: metrics provider and the background sampler."""

import logging
import threading
from typing import Protocol

import psutil

from sysdash.layout import render_frame
from sysdash.models import MemoryStats, NetworkCounters, ProcessSample, SystemSnapshot
from sysdash.ranking import TOP_N, rank
from sysdash.surface import DisplaySurface

logger = logging.getLogger(__name__)

PROCESS_ATTRS = ["pid", "name", "cpu_percent", "memory_percent", "memory_info"]


class MetricsProvider(Protocol):
    """Point-in-time reads of host metrics."""

    def read_memory(self) -> MemoryStats: ...

    def read_cpu_percent(self) -> float: ...

    def read_network_counters(self) -> NetworkCounters: ...

    def list_processes(self) -> list[ProcessSample]: ...

    def sample(self) -> SystemSnapshot: ...


class PsutilProvider:
    """
    MetricsProvider backed by psutil.

    A failed read degrades only the field it was for: the field takes its
    zero value for the current tick and the next tick tries again.
    """

    def __init__(self) -> None:
        """Initialize the provider and prime the CPU counters."""
        # First call returns 0.0; later calls measure since the previous one
        try:
            psutil.cpu_percent(interval=None)
        except (psutil.Error, OSError):
            logger.debug("Could not prime CPU counters", exc_info=True)

    def read_memory(self) -> MemoryStats:
        try:
            mem = psutil.virtual_memory()
        except (psutil.Error, OSError):
            logger.debug("virtual_memory() failed", exc_info=True)
            return MemoryStats()
        return MemoryStats(total=mem.total, used=mem.used, free=mem.free)

    def read_cpu_percent(self) -> float:
        try:
            return float(psutil.cpu_percent(interval=None))
        except (psutil.Error, OSError):
            logger.debug("cpu_percent() failed", exc_info=True)
            return 0.0

    def read_network_counters(self) -> NetworkCounters:
        try:
            counters = psutil.net_io_counters()
        except (psutil.Error, OSError):
            logger.debug("net_io_counters() failed", exc_info=True)
            return NetworkCounters()
        # None when the host has no network interfaces
        if counters is None:
            return NetworkCounters()
        return NetworkCounters(
            bytes_sent=counters.bytes_sent,
            bytes_recv=counters.bytes_recv,
            packets_sent=counters.packets_sent,
            packets_recv=counters.packets_recv,
        )

    def list_processes(self) -> list[ProcessSample]:
        """
        Sample every running process.

        Processes whose resident memory cannot be read are dropped. A missing
        name, CPU% or memory% falls back to an empty or zero value. Processes
        that exit or deny access mid-read are skipped.
        """
        samples: list[ProcessSample] = []

        for proc in psutil.process_iter(attrs=PROCESS_ATTRS):
            try:
                info = proc.info
                mem_info = info.get("memory_info")
                if mem_info is None:
                    continue

                samples.append(
                    ProcessSample(
                        pid=info.get("pid") or proc.pid,
                        name=info.get("name") or "",
                        cpu_percent=info.get("cpu_percent") or 0.0,
                        memory_percent=info.get("memory_percent") or 0.0,
                        memory_rss=mem_info.rss,
                    )
                )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue

        return samples

    def sample(self) -> SystemSnapshot:
        """Read every metric for one tick."""
        return SystemSnapshot(
            memory=self.read_memory(),
            cpu_percent=self.read_cpu_percent(),
            network=self.read_network_counters(),
            processes=tuple(self.list_processes()),
        )


class Sampler:
    """
    Background sampler: sample -> rank -> lay out -> draw, once per interval.

    Runs in a daemon thread and is the only writer to the surface. The stop
    event is checked between ticks, never during one, so a frame that has
    started drawing is always flushed.
    """

    def __init__(
        self,
        provider: MetricsProvider,
        surface: DisplaySurface,
        interval: float = 1.0,
        top_n: int = TOP_N,
    ) -> None:
        """
        Initialize the Sampler.

        Args:
            provider: Source of metrics.
            surface: Surface that frames are drawn to.
            interval: Seconds to sleep between ticks. Default 1.0s.
            top_n: Length of each ranked process view.
        """
        self._provider = provider
        self._surface = surface
        self._interval = interval
        self._top_n = top_n
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def ticks(self) -> int:
        """Number of completed ticks."""
        return self._ticks

    @property
    def is_running(self) -> bool:
        """Check if the sampler thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampler thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="Sampler",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Signal the sampler to stop and wait for it to finish its current tick.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Sampler did not stop within %ss", timeout)
                return
            self._thread = None

    def tick(self) -> None:
        """Run one complete sample and draw cycle."""
        snapshot = self._provider.sample()
        by_memory, by_cpu = rank(snapshot.processes, self._top_n)
        render_frame(self._surface, snapshot, by_memory, by_cpu)
        self._ticks += 1

    def _run(self) -> None:
        """Main loop running in the background thread."""
        logger.debug("Sampler started, interval %.2fs", self._interval)
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                # Keep sampling; the next tick starts from scratch
                logger.exception("Sampler tick failed")

            # Sleep for the interval, or until stop is requested
            self._stop_event.wait(timeout=self._interval)
        logger.debug("Sampler stopped after %d ticks", self._ticks)
