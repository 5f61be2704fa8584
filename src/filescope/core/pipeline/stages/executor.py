from __future__ import annotations

"""
Retrying Analysis Executor.

Runs one analyze call per attempt under a limiter permit and retries failures
with a deterministic exponential backoff (retry_delay_ms * 2^attempt, no
jitter). Errors never leave this stage: once retries are exhausted the file
gets an explicit terminal-failure result. Each file updates the metrics
exactly once, with its terminal outcome.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from filescope.core.concurrency.limiter import ConcurrencyLimiter
from filescope.core.services.registry import Analyzer
from filescope.core.services.tracker import PerformanceTracker
from filescope.domain.analysis_models import (
    AnalysisOptions,
    AnalysisResult,
    FileTask,
    failure_result,
    success_result,
)

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# BACKOFF SCHEDULE
# -----------------------------------------------------------------------------

def backoff_delay_ms(base_delay_ms: int, attempt: int) -> int:
    """Delay before retrying after the given zero-based failed attempt."""
    return base_delay_ms * (2 ** attempt)


def backoff_schedule_ms(options: AnalysisOptions) -> List[int]:
    """Every delay a persistently failing file will wait through."""
    return [backoff_delay_ms(options.retry_delay_ms, a) for a in range(options.max_retries)]


# -----------------------------------------------------------------------------
# EXECUTOR
# -----------------------------------------------------------------------------

class RetryExecutor:
    """
    Wraps analyze calls with permit acquisition, retries and metric updates.

    One executor is shared by every worker of a run; it holds no per-file
    state, so concurrent run() calls are safe.
    """

    def __init__(
            self,
            limiter: ConcurrencyLimiter,
            tracker: PerformanceTracker,
            options: AnalysisOptions,
            sleep: Optional[Callable[[float], None]] = None,
            on_handled: Optional[Callable[[int], None]] = None,
    ) -> None:
        """
        Args:
            limiter: Shared limiter bounding in-flight analyze calls.
            tracker: Metrics owner updated once per file.
            options: Validated analysis options (retries and delays).
            sleep: Backoff sleep override, receives seconds.
            on_handled: Called with the handled-file count after each update.
        """
        self._limiter = limiter
        self._tracker = tracker
        self._options = options
        self._sleep = sleep
        self._on_handled = on_handled

    def run(
            self,
            task: FileTask,
            analyze: Analyzer,
            cancel_event: Optional[threading.Event] = None,
    ) -> Optional[AnalysisResult]:
        """
        Analyze one file until it succeeds or runs out of retries.

        Args:
            task: The file to analyze.
            analyze: Callable taking (path, name, extension, size).
            cancel_event: Optional signal checked before each permit
                          acquisition and before each backoff sleep.

        Returns:
            Optional[AnalysisResult]: The terminal outcome, or None if the
                                      run was cancelled before the file was
                                      ever admitted (counted as skipped).
        """
        max_retries = self._options.max_retries
        attempt = 0
        last_error = ""

        while True:
            if _is_set(cancel_event):
                return self._cancelled(task, attempt, last_error)

            self._limiter.acquire()
            try:
                payload = analyze(task.path, task.name, task.extension, task.size)
            except Exception as e:
                last_error = f"{type(e).__name__}: {e}"
                logger.warning(
                    f"Analysis attempt {attempt + 1}/{max_retries + 1} failed for "
                    f"{task.path}: {last_error}"
                )
            else:
                self._record(processed=1, bytes_processed=task.size)
                return success_result(task, payload, attempts=attempt + 1)
            finally:
                self._limiter.release()

            if attempt >= max_retries:
                logger.error(f"Giving up on {task.path} after {attempt + 1} attempts: {last_error}")
                self._record(failed=1)
                return failure_result(task, last_error, attempts=attempt + 1)

            if _is_set(cancel_event):
                return self._cancelled(task, attempt + 1, last_error)

            delay_s = backoff_delay_ms(self._options.retry_delay_ms, attempt) / 1000.0
            logger.debug(f"Retrying {task.path} in {delay_s:.3f}s")
            pause(delay_s, cancel_event, self._sleep)
            attempt += 1

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _cancelled(self, task: FileTask, attempts: int, last_error: str) -> Optional[AnalysisResult]:
        if attempts == 0:
            logger.debug(f"Cancelled before admission: {task.path}")
            self._record(skipped=1)
            return None

        logger.warning(f"Retry of {task.path} cancelled after {attempts} attempts.")
        self._record(failed=1)
        return failure_result(task, f"{last_error} (retry cancelled)", attempts=attempts)

    def _record(self, processed: int = 0, failed: int = 0, skipped: int = 0, bytes_processed: int = 0) -> None:
        handled = self._tracker.update_file_stats(
            processed=processed,
            failed=failed,
            skipped=skipped,
            bytes_processed=bytes_processed,
        )
        if handled is not None and self._on_handled is not None:
            self._on_handled(handled)


def pause(
        seconds: float,
        cancel_event: Optional[threading.Event] = None,
        sleep: Optional[Callable[[float], None]] = None,
) -> None:
    """Sleep, waking early when the cancel event is set (unless sleep is overridden)."""
    if sleep is not None:
        sleep(seconds)
    elif cancel_event is not None:
        cancel_event.wait(seconds)
    else:
        time.sleep(seconds)


def _is_set(event: Optional[threading.Event]) -> bool:
    return event is not None and event.is_set()
