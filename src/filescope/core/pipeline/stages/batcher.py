from __future__ import annotations

"""
Batch Building Stage.

Greedily packs priority-ordered tasks into batches bounded by a file count
(batch_size) and a cumulative byte cap (max_batch_bytes). The two limits are
independent options. A single file larger than the byte cap still gets its
own batch; files are never split, dropped or duplicated.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from filescope.domain.analysis_models import AnalysisOptions, Batch, FileTask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchPlan:
    """Ordered batches plus the byte total of each one."""
    batches: List[Batch]
    batch_bytes: List[int]

    def __len__(self) -> int:
        return len(self.batches)


def build_batches(files: Sequence[FileTask], options: AnalysisOptions) -> BatchPlan:
    """
    Pack tasks into count/byte-bounded batches, preserving their order.

    A task is appended to the current batch unless that would push the batch
    over max_batch_bytes or the batch already holds batch_size tasks; in that
    case the current batch is flushed and a new one starts with the task.

    Args:
        files: Tasks in priority order.
        options: Validated analysis options.

    Returns:
        BatchPlan: The batches and their byte totals.
    """
    batches: List[Batch] = []
    current: List[FileTask] = []
    current_bytes = 0

    for task in files:
        over_bytes = current_bytes + task.size > options.max_batch_bytes
        over_count = len(current) >= options.batch_size

        if current and (over_bytes or over_count):
            batches.append(Batch(tasks=tuple(current), total_bytes=current_bytes))
            current = []
            current_bytes = 0

        current.append(task)
        current_bytes += task.size

    if current:
        batches.append(Batch(tasks=tuple(current), total_bytes=current_bytes))

    logger.debug(
        f"Built {len(batches)} batches from {len(files)} files "
        f"(batch_size={options.batch_size}, max_batch_bytes={options.max_batch_bytes})"
    )
    return BatchPlan(batches=batches, batch_bytes=[b.total_bytes for b in batches])
