from __future__ import annotations

"""
Analysis orchestration pipeline.

This module drives a complete analysis run:
1. Validates options and resolves the analyzer (failures raise SetupError).
2. Collects and prioritizes files from the project tree.
3. Packs the tasks into count/byte-bounded batches.
4. Runs the batches one after another, fanning each batch out to worker
   threads that share a single ConcurrencyLimiter.
5. Freezes the metrics, logs the summary and returns the ordered report.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from filescope.core.concurrency.limiter import ConcurrencyLimiter
from filescope.core.pipeline.stages.batcher import build_batches
from filescope.core.pipeline.stages.collector import collect_files
from filescope.core.pipeline.stages.executor import RetryExecutor, pause
from filescope.core.pipeline.stages.validator import validate_options
from filescope.core.services.registry import Analyzer, AnalyzerRegistry, create_default_registry
from filescope.core.services.tracker import PerformanceTracker, log_performance_report
from filescope.domain.analysis_models import (
    AnalysisOptions,
    AnalysisResult,
    Batch,
    MetricsSnapshot,
    PipelineReport,
    PipelineState,
    ProgressEvent,
)
from filescope.domain.errors import SetupError
from filescope.domain.tree_models import TreeNode

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]
OptionsInput = Union[AnalysisOptions, Mapping[str, Any], None]


class AnalysisOrchestrator:
    """
    State machine composing collection, batching, execution and finalization.

    The orchestrator can be reused for several sequential runs; each run
    resets the tracker and starts from IDLE. Running it from two threads at
    once is rejected with a SetupError.
    """

    def __init__(
            self,
            options: OptionsInput = None,
            registry: Optional[AnalyzerRegistry] = None,
            analyzer_name: Optional[str] = None,
            limiter: Optional[ConcurrencyLimiter] = None,
            tracker: Optional[PerformanceTracker] = None,
            sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        """
        Args:
            options: AnalysisOptions or a raw mapping, validated on each run.
            registry: Analyzer catalog; a registry with the heuristic
                      analyzer is created when omitted.
            analyzer_name: Registry key to use; the registry default if None.
            limiter: Shared limiter override (must not exceed concurrent_limit).
            tracker: Metrics owner override.
            sleep: Override for backoff and inter-batch sleeps (seconds).
        """
        self._raw_options = options
        self._registry = registry if registry is not None else create_default_registry()
        self._analyzer_name = analyzer_name
        self._limiter_override = limiter
        self._tracker = tracker if tracker is not None else PerformanceTracker()
        self._sleep = sleep

        self._run_lock = threading.Lock()
        self._state = PipelineState.IDLE
        self._history: List[PipelineState] = [PipelineState.IDLE]
        self._limiter: Optional[ConcurrencyLimiter] = None
        self._options: Optional[AnalysisOptions] = None
        self._on_progress: Optional[ProgressCallback] = None

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def state_history(self) -> List[PipelineState]:
        """States visited by the most recent run, in order."""
        return list(self._history)

    @property
    def tracker(self) -> PerformanceTracker:
        return self._tracker

    @property
    def limiter(self) -> Optional[ConcurrencyLimiter]:
        """Limiter of the most recent run."""
        return self._limiter

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def run(
            self,
            root: TreeNode,
            on_progress: Optional[ProgressCallback] = None,
            cancel_event: Optional[threading.Event] = None,
    ) -> PipelineReport:
        """
        Analyze every eligible file of the tree.

        Args:
            root: Pre-filtered project tree.
            on_progress: Optional callback receiving ProgressEvent objects.
            cancel_event: Optional signal that stops admitting new work.

        Returns:
            PipelineReport: Ordered results, frozen metrics and batch layout.

        Raises:
            SetupError: On invalid options, an unknown analyzer, an invalid
                        root, or a concurrent run on the same orchestrator.
        """
        if not self._run_lock.acquire(blocking=False):
            raise SetupError("Orchestrator is already running.")
        try:
            return self._execute(root, on_progress, cancel_event)
        except BaseException:
            self._transition(PipelineState.FAILED)
            raise
        finally:
            self._on_progress = None
            self._run_lock.release()

    def _execute(
            self,
            root: TreeNode,
            on_progress: Optional[ProgressCallback],
            cancel_event: Optional[threading.Event],
    ) -> PipelineReport:
        self._history = []
        self._transition(PipelineState.IDLE)
        self._tracker.reset()
        self._on_progress = on_progress

        # ---------------------------------------------------------------------
        # 1) Setup validation
        # ---------------------------------------------------------------------
        options, warnings = validate_options(self._raw_options)
        for warning in warnings:
            logger.warning(f"Configuration Warning: {warning}")

        if not isinstance(root, TreeNode):
            raise SetupError(f"Pipeline root must be a TreeNode, got {type(root).__name__}.")

        analyzer = self._registry.get(self._analyzer_name)
        limiter = self._resolve_limiter(options)
        self._options = options
        self._limiter = limiter

        # ---------------------------------------------------------------------
        # 2) Collection
        # ---------------------------------------------------------------------
        self._transition(PipelineState.COLLECTING)
        collection = collect_files(root, options)
        self._tracker.set_total_files(len(collection.files) + collection.skipped)
        self._skip_remaining(collection.skipped)

        # ---------------------------------------------------------------------
        # 3) Batching
        # ---------------------------------------------------------------------
        self._transition(PipelineState.BATCHING)
        plan = build_batches(collection.files, options)

        # ---------------------------------------------------------------------
        # 4) Running
        # ---------------------------------------------------------------------
        self._transition(PipelineState.RUNNING)
        # Set on KeyboardInterrupt so workers stop admitting files
        cancel = cancel_event if cancel_event is not None else threading.Event()
        results, cancelled = self._run_batches(plan.batches, analyzer, options, limiter, cancel)

        # ---------------------------------------------------------------------
        # 5) Finalizing
        # ---------------------------------------------------------------------
        self._transition(PipelineState.FINALIZING)
        metrics = self._tracker.finish()
        self._log_summary(metrics, cancelled)
        if options.enable_performance_monitoring:
            log_performance_report(metrics)

        output = sorted((r for r in results if r.has_output), key=lambda r: r.order)
        self._transition(PipelineState.DONE)

        return PipelineReport(
            results=output,
            metrics=metrics,
            batch_count=len(plan),
            batch_bytes=list(plan.batch_bytes),
            state=PipelineState.DONE,
            cancelled=cancelled,
            collected_bytes=collection.total_bytes,
        )

    def _run_batches(
            self,
            batches: List[Batch],
            analyzer: Analyzer,
            options: AnalysisOptions,
            limiter: ConcurrencyLimiter,
            cancel_event: threading.Event,
    ) -> Tuple[List[AnalysisResult], bool]:
        executor = RetryExecutor(
            limiter,
            self._tracker,
            options,
            sleep=self._sleep,
            on_handled=self._notify_progress,
        )
        results: List[AnalysisResult] = []
        cancelled = False

        if not batches:
            return results, cancelled

        with ThreadPoolExecutor(max_workers=options.concurrent_limit, thread_name_prefix="AnalysisWorker") as pool:
            for index, batch in enumerate(batches):
                if index > 0 and options.batch_delay_ms > 0:
                    pause(options.batch_delay_ms / 1000.0, cancel_event, self._sleep)

                if cancel_event.is_set():
                    remaining = sum(len(b) for b in batches[index:])
                    logger.warning(f"Run cancelled: {remaining} files in {len(batches) - index} batches not started.")
                    self._skip_remaining(remaining)
                    cancelled = True
                    break

                logger.info(
                    f"Batch {index + 1}/{len(batches)}: {len(batch)} files, {batch.total_bytes} bytes"
                )
                futures = [pool.submit(executor.run, task, analyzer, cancel_event) for task in batch.tasks]

                # Await the whole fan-out before the next batch starts
                try:
                    for future in futures:
                        result = future.result()
                        if result is not None:
                            results.append(result)
                except KeyboardInterrupt:
                    cancel_event.set()
                    raise

        return results, cancelled or cancel_event.is_set()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _resolve_limiter(self, options: AnalysisOptions) -> ConcurrencyLimiter:
        if self._limiter_override is None:
            return ConcurrencyLimiter(options.concurrent_limit)

        limiter = self._limiter_override
        if limiter.permits > options.concurrent_limit:
            raise SetupError(
                f"Injected limiter allows {limiter.permits} permits, "
                f"above concurrent_limit={options.concurrent_limit}."
            )
        limiter.reset_high_water_mark()
        return limiter

    def _skip_remaining(self, count: int) -> None:
        if count <= 0:
            return
        handled = self._tracker.update_file_stats(skipped=count)
        if handled is not None:
            self._notify_progress(handled, step=count)

    def _notify_progress(self, handled: int, step: int = 1) -> None:
        """
        Emit a ProgressEvent when the last `step` handled files crossed an
        interval boundary or completed the run.
        """
        options = self._options
        if options is None:
            return

        total = self._tracker.total_files
        interval = options.progress_interval
        if handled < total and handled // interval == (handled - step) // interval:
            return

        snapshot = self._tracker.snapshot()
        percentage = 100.0 * handled / total if total > 0 else 0.0
        event = ProgressEvent(
            handled=handled,
            total=total,
            processed=snapshot.processed,
            failed=snapshot.failed,
            skipped=snapshot.skipped,
            percentage=percentage,
            throughput_mbps=snapshot.throughput_mbps,
        )

        if options.enable_progress:
            logger.info(
                f"Progress: {handled}/{total} files ({percentage:.1f}%), "
                f"{event.throughput_mbps:.2f} MB/s"
            )

        callback = self._on_progress
        if callback is not None:
            try:
                callback(event)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    def _transition(self, state: PipelineState) -> None:
        if state is not PipelineState.IDLE:
            logger.info(f"Pipeline state: {self._state.value} -> {state.value}")
        self._state = state
        self._history.append(state)

    def _log_summary(self, metrics: MetricsSnapshot, cancelled: bool) -> None:
        status = "cancelled" if cancelled else "finished"
        logger.info(
            f"Analysis {status}: processed={metrics.processed}, failed={metrics.failed}, "
            f"skipped={metrics.skipped}, total={metrics.total_files} "
            f"in {metrics.elapsed_seconds:.2f}s ({metrics.throughput_mbps:.2f} MB/s)"
        )


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def run_analysis(
        root: TreeNode,
        options: OptionsInput = None,
        *,
        analyzer: Optional[Analyzer] = None,
        registry: Optional[AnalyzerRegistry] = None,
        analyzer_name: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
) -> PipelineReport:
    """
    One-shot helper building an orchestrator and running it once.

    Args:
        root: Pre-filtered project tree.
        options: AnalysisOptions or a raw mapping.
        analyzer: A bare analyze callable; takes precedence over registry.
        registry: Analyzer catalog to resolve analyzer_name from.
        analyzer_name: Registry key; the registry default when None.
        on_progress: Optional progress callback.
        cancel_event: Optional cancellation signal.

    Returns:
        PipelineReport: The run report.
    """
    if analyzer is not None:
        registry = AnalyzerRegistry()
        registry.register("custom", analyzer, default=True)
        analyzer_name = "custom"

    orchestrator = AnalysisOrchestrator(options, registry=registry, analyzer_name=analyzer_name)
    return orchestrator.run(root, on_progress=on_progress, cancel_event=cancel_event)
