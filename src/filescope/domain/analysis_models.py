from __future__ import annotations

"""
Analysis Pipeline Domain Data Models.

Defines the immutable structures exchanged between the pipeline stages
(collection, batching, execution, finalization) and the interface layers.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from filescope.domain import constants as const

# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AnalysisOptions:
    """
    Immutable configuration of a pipeline run.

    Attributes:
        concurrent_limit: Maximum number of simultaneous analyze calls.
        batch_size: Maximum number of files per batch.
        max_batch_bytes: Maximum cumulative byte size per batch.
        max_file_size: Files above this size are skipped unattempted.
        max_retries: Retry attempts allowed after the first failure.
        retry_delay_ms: Base delay of the exponential backoff.
        enable_progress: Log periodic progress notifications.
        enable_performance_monitoring: Log the final throughput/memory report.
        batch_delay_ms: Fixed pacing delay between consecutive batches.
        progress_interval: Number of handled files between notifications.
    """
    concurrent_limit: int = const.DEFAULT_CONCURRENT_LIMIT
    batch_size: int = const.DEFAULT_BATCH_SIZE
    max_batch_bytes: int = const.DEFAULT_MAX_BATCH_BYTES
    max_file_size: int = const.DEFAULT_MAX_FILE_SIZE
    max_retries: int = const.DEFAULT_MAX_RETRIES
    retry_delay_ms: int = const.DEFAULT_RETRY_DELAY_MS
    enable_progress: bool = True
    enable_performance_monitoring: bool = False
    batch_delay_ms: int = const.DEFAULT_BATCH_DELAY_MS
    progress_interval: int = const.DEFAULT_PROGRESS_INTERVAL

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

# -----------------------------------------------------------------------------
# WORK UNITS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FileTask:
    """
    A file queued for analysis.

    Attributes:
        path: Filesystem path of the file.
        name: Base filename.
        extension: Extension including the dot.
        size: Size in bytes.
        priority: Derived priority score (higher runs first).
        order: Position in the priority-sorted collection.
    """
    path: str
    name: str
    extension: str
    size: int
    priority: int
    order: int = 0


@dataclass(frozen=True)
class Batch:
    """Ordered group of tasks bounded by count and cumulative byte size."""
    tasks: Tuple[FileTask, ...]
    total_bytes: int

    def __len__(self) -> int:
        return len(self.tasks)

# -----------------------------------------------------------------------------
# OUTCOMES
# -----------------------------------------------------------------------------

class ResultStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class AnalysisResult:
    """
    Terminal outcome of analyzing a single file.

    Attributes:
        path: Path of the analyzed file.
        name: Base filename.
        extension: File extension.
        size: File size in bytes.
        priority: Priority score the file was scheduled with.
        status: success, empty (analyzer returned no result) or failed.
        payload: Analyzer output for successful runs.
        error: Last error message for terminal failures.
        attempts: Number of analyze calls performed.
        order: Collection order, used to sort the final output.
    """
    path: str
    name: str
    extension: str
    size: int
    priority: int
    status: ResultStatus
    payload: Any = None
    error: str = ""
    attempts: int = 1
    order: int = 0

    @property
    def is_failure(self) -> bool:
        return self.status is ResultStatus.FAILED

    @property
    def has_output(self) -> bool:
        """True for results that belong in the final output list."""
        return self.status is not ResultStatus.EMPTY

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


def success_result(task: FileTask, payload: Any, attempts: int) -> AnalysisResult:
    """Build the result of an analyze call; a None payload is a valid empty outcome."""
    status = ResultStatus.EMPTY if payload is None else ResultStatus.SUCCESS
    return AnalysisResult(
        path=task.path,
        name=task.name,
        extension=task.extension,
        size=task.size,
        priority=task.priority,
        status=status,
        payload=payload,
        attempts=attempts,
        order=task.order,
    )


def failure_result(task: FileTask, error: str, attempts: int) -> AnalysisResult:
    """Build the explicit terminal-failure marker for a task."""
    return AnalysisResult(
        path=task.path,
        name=task.name,
        extension=task.extension,
        size=task.size,
        priority=task.priority,
        status=ResultStatus.FAILED,
        error=error,
        attempts=attempts,
        order=task.order,
    )

# -----------------------------------------------------------------------------
# METRICS AND REPORTING
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class MetricsSnapshot:
    """
    Point-in-time copy of the performance counters.

    Attributes:
        total_files: Files discovered (collected plus skipped).
        processed: Files analyzed successfully (including empty outcomes).
        failed: Files that exhausted their retries.
        skipped: Files never attempted (oversized or cancelled).
        total_bytes: Bytes of successfully processed files.
        start_time: Wall-clock start (epoch seconds).
        end_time: Wall-clock end, None while the run is active.
        elapsed_seconds: Duration up to end_time or now.
        average_processing_ms: Elapsed milliseconds per handled file.
        throughput_mbps: Processed megabytes per second.
        memory_start_bytes: Resident memory at start.
        memory_end_bytes: Resident memory at the snapshot.
    """
    total_files: int
    processed: int
    failed: int
    skipped: int
    total_bytes: int
    start_time: float
    end_time: Optional[float]
    elapsed_seconds: float
    average_processing_ms: float
    throughput_mbps: float
    memory_start_bytes: int = 0
    memory_end_bytes: int = 0

    @property
    def handled(self) -> int:
        return self.processed + self.failed + self.skipped

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProgressEvent:
    """Live progress notification emitted while batches run."""
    handled: int
    total: int
    processed: int
    failed: int
    skipped: int
    percentage: float
    throughput_mbps: float


class PipelineState(str, Enum):
    IDLE = "idle"
    COLLECTING = "collecting"
    BATCHING = "batching"
    RUNNING = "running"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineReport:
    """
    Unified result object of a complete pipeline execution.

    Attributes:
        results: Ordered output (successes and terminal-failure markers).
        metrics: Frozen metrics snapshot.
        batch_count: Number of batches built.
        batch_bytes: Byte total of each batch.
        state: Final state of the orchestrator.
        cancelled: True if the run was interrupted by a cancellation signal.
        collected_bytes: Byte total of all collected tasks.
    """
    results: List[AnalysisResult]
    metrics: MetricsSnapshot
    batch_count: int = 0
    batch_bytes: List[int] = field(default_factory=list)
    state: PipelineState = PipelineState.DONE
    cancelled: bool = False
    collected_bytes: int = 0

    @property
    def failures(self) -> List[AnalysisResult]:
        return [r for r in self.results if r.is_failure]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "cancelled": self.cancelled,
            "batches": self.batch_count,
            "batch_bytes": list(self.batch_bytes),
            "collected_bytes": self.collected_bytes,
            "metrics": self.metrics.to_dict(),
            "results": [r.to_dict() for r in self.results],
        }
