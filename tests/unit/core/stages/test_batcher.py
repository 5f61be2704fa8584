from __future__ import annotations

"""
Unit tests for the Batch Building Stage.

Covers the count cap, the byte cap, the single-oversized-file exception,
and order preservation.
"""

from typing import List

from filescope.core.pipeline.stages.batcher import build_batches
from filescope.domain.analysis_models import AnalysisOptions, FileTask


def _tasks(sizes: List[int]) -> List[FileTask]:
    return [
        FileTask(path=f"/p/f{i}.py", name=f"f{i}.py", extension=".py", size=s, priority=0, order=i)
        for i, s in enumerate(sizes)
    ]


def test_count_cap_splits_batches() -> None:
    plan = build_batches(_tasks([10] * 25), AnalysisOptions(batch_size=10))

    assert [len(b) for b in plan.batches] == [10, 10, 5]
    assert plan.batch_bytes == [100, 100, 50]


def test_byte_cap_splits_batches() -> None:
    plan = build_batches(_tasks([40, 40, 40, 10]), AnalysisOptions(batch_size=10, max_batch_bytes=100))

    assert [len(b) for b in plan.batches] == [2, 2]
    assert plan.batch_bytes == [80, 50]
    assert all(total <= 100 for total in plan.batch_bytes)


def test_oversized_file_gets_its_own_batch() -> None:
    plan = build_batches(_tasks([10, 500, 10]), AnalysisOptions(max_batch_bytes=100))

    assert [len(b) for b in plan.batches] == [1, 1, 1]
    assert plan.batch_bytes == [10, 500, 10]


def test_order_is_preserved_without_loss_or_duplication() -> None:
    tasks = _tasks([30, 70, 20, 90, 5, 60])
    plan = build_batches(tasks, AnalysisOptions(batch_size=2, max_batch_bytes=100))

    flattened = [t for b in plan.batches for t in b.tasks]
    assert flattened == tasks


def test_no_files_yields_no_batches() -> None:
    plan = build_batches([], AnalysisOptions())
    assert len(plan) == 0
    assert plan.batch_bytes == []
