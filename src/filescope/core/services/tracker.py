from __future__ import annotations

"""
Performance Tracking Service.

Holds the counters of a pipeline run (processed, failed, skipped, bytes) and
derives progress, throughput and timing figures from them. Counters are
updated from many worker threads, so every access goes through one lock.
Once finish() has been called the state is frozen and late updates are
ignored with a warning.
"""

import logging
import threading
import time
from typing import Callable, Optional

import psutil

from filescope.domain.analysis_models import MetricsSnapshot

logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024


def current_rss_bytes() -> int:
    """Resident set size of the current process."""
    return int(psutil.Process().memory_info().rss)


class PerformanceTracker:
    """
    Synchronized metrics owner for a single run.

    The clock and memory probe are injectable so timing-dependent behavior
    can be tested deterministically.
    """

    def __init__(
            self,
            clock: Callable[[], float] = time.monotonic,
            wall_clock: Callable[[], float] = time.time,
            memory_probe: Callable[[], int] = current_rss_bytes,
    ) -> None:
        self._clock = clock
        self._wall_clock = wall_clock
        self._memory_probe = memory_probe
        self._lock = threading.Lock()
        self._final: Optional[MetricsSnapshot] = None
        self._init_state(self._probe_memory())

    def _init_state(self, memory_start: int) -> None:
        self._total_files = 0
        self._processed = 0
        self._failed = 0
        self._skipped = 0
        self._total_bytes = 0
        self._start_mono = self._clock()
        self._start_wall = self._wall_clock()
        self._end_mono: Optional[float] = None
        self._end_wall: Optional[float] = None
        self._memory_start = memory_start
        self._final = None

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def set_total_files(self, total: int) -> None:
        with self._lock:
            if self._final is not None:
                logger.warning("PerformanceTracker is already finished, cannot set total files.")
                return
            self._total_files = int(total)

    def update_file_stats(
            self,
            processed: int = 0,
            failed: int = 0,
            skipped: int = 0,
            bytes_processed: int = 0,
    ) -> Optional[int]:
        """
        Add deltas to the counters.

        Args:
            processed: Files analyzed successfully.
            failed: Files that exhausted their retries.
            skipped: Files never attempted.
            bytes_processed: Bytes of the processed files.

        Returns:
            Optional[int]: Handled-file count after the update, or None if
                           the tracker is finished and the update was dropped.
        """
        if min(processed, failed, skipped, bytes_processed) < 0:
            raise ValueError("Metric deltas must be non-negative.")

        with self._lock:
            if self._final is not None:
                logger.warning("PerformanceTracker is already finished, cannot update stats.")
                return None
            self._processed += processed
            self._failed += failed
            self._skipped += skipped
            self._total_bytes += bytes_processed
            return self._processed + self._failed + self._skipped

    def finish(self) -> MetricsSnapshot:
        """
        Freeze the counters, stamp the end time and return the final snapshot.

        Repeated calls return the same snapshot. This is the only snapshot
        that measures the final memory figure.
        """
        memory_end = self._probe_memory()
        with self._lock:
            if self._final is not None:
                logger.warning("PerformanceTracker is already finished.")
                return self._final
            self._end_mono = self._clock()
            self._end_wall = self._wall_clock()
            self._final = self._build_snapshot(memory_end)
            return self._final

    def reset(self) -> None:
        """Reinitialize every counter and restart the clock for reuse."""
        memory_start = self._probe_memory()
        with self._lock:
            self._init_state(memory_start)

    # -------------------------------------------------------------------------
    # Derived figures
    # -------------------------------------------------------------------------

    @property
    def is_finished(self) -> bool:
        with self._lock:
            return self._final is not None

    def get_progress_percentage(self) -> float:
        with self._lock:
            return self._progress()

    def get_processing_speed(self) -> float:
        """Throughput of processed bytes in MB/s."""
        with self._lock:
            return self._speed()

    def get_average_processing_time(self) -> float:
        """Elapsed milliseconds per handled file."""
        with self._lock:
            return self._average_ms()

    def get_memory_growth(self) -> float:
        """Resident memory growth since the start, in MB."""
        return (self._probe_memory() - self._memory_start) / _BYTES_PER_MB

    @property
    def total_files(self) -> int:
        with self._lock:
            return self._total_files

    def snapshot(self) -> MetricsSnapshot:
        """
        Current counters; the frozen final snapshot once finished.

        Live snapshots do not probe memory: their memory_end_bytes repeats
        memory_start_bytes.
        """
        with self._lock:
            if self._final is not None:
                return self._final
            return self._build_snapshot(self._memory_start)

    # -------------------------------------------------------------------------
    # Internals (caller holds the lock)
    # -------------------------------------------------------------------------

    def _handled(self) -> int:
        return self._processed + self._failed + self._skipped

    def _elapsed(self) -> float:
        end = self._end_mono if self._end_mono is not None else self._clock()
        return max(end - self._start_mono, 0.0)

    def _progress(self) -> float:
        if self._total_files <= 0:
            return 0.0
        return 100.0 * self._handled() / self._total_files

    def _speed(self) -> float:
        elapsed = self._elapsed()
        if elapsed <= 0:
            return 0.0
        return self._total_bytes / _BYTES_PER_MB / elapsed

    def _average_ms(self) -> float:
        handled = self._handled()
        if handled <= 0:
            return 0.0
        return self._elapsed() * 1000.0 / handled

    def _build_snapshot(self, memory_end: int) -> MetricsSnapshot:
        return MetricsSnapshot(
            total_files=self._total_files,
            processed=self._processed,
            failed=self._failed,
            skipped=self._skipped,
            total_bytes=self._total_bytes,
            start_time=self._start_wall,
            end_time=self._end_wall,
            elapsed_seconds=self._elapsed(),
            average_processing_ms=self._average_ms(),
            throughput_mbps=self._speed(),
            memory_start_bytes=self._memory_start,
            memory_end_bytes=memory_end,
        )

    def _probe_memory(self) -> int:
        try:
            return int(self._memory_probe())
        except (psutil.Error, OSError) as e:
            logger.debug(f"Memory probe failed: {e}")
            return 0


def log_performance_report(metrics: MetricsSnapshot) -> None:
    """Emit the final throughput and memory report."""
    growth_mb = (metrics.memory_end_bytes - metrics.memory_start_bytes) / _BYTES_PER_MB
    logger.info("Performance report:")
    logger.info(f"- Elapsed: {metrics.elapsed_seconds:.2f} s")
    logger.info(f"- Average processing time: {metrics.average_processing_ms:.2f} ms/file")
    logger.info(f"- Throughput: {metrics.throughput_mbps:.2f} MB/s")
    logger.info(f"- Current memory: {metrics.memory_end_bytes / _BYTES_PER_MB:.2f} MB")
    logger.info(f"- Memory growth: {growth_mb:.2f} MB")
    logger.info(f"- Processed: {metrics.processed} files")
    logger.info(f"- Failed: {metrics.failed} files")
    logger.info(f"- Skipped: {metrics.skipped} files")
    logger.info(f"- Total: {metrics.total_files} files")
