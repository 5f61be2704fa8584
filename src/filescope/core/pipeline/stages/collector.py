from __future__ import annotations

"""
File Collection Stage.

Walks the (already filtered) project tree depth-first, drops files above the
size cap, and turns the remaining files into priority-ordered FileTasks. Only
sizes already present on the tree are read; no filesystem I/O happens here.
"""

import logging
from dataclasses import dataclass, replace
from typing import List

from filescope.core.pipeline.components.filters import marker_priority_weight
from filescope.domain import constants as const
from filescope.domain.analysis_models import AnalysisOptions, FileTask
from filescope.domain.tree_models import TreeNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionResult:
    """
    Output of the collection stage.

    Attributes:
        files: Tasks sorted by descending priority (stable).
        total_bytes: Byte total of the collected tasks.
        skipped: Number of files dropped for exceeding max_file_size.
    """
    files: List[FileTask]
    total_bytes: int
    skipped: int


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def calculate_priority(name: str, extension: str, size: int) -> int:
    """
    Compute the scheduling priority of a file.

    +100 for core code extensions, +50/+25/+0 by size bucket
    (<10KiB / <50KiB / larger), and a negative weight for test markers
    in the name.

    Args:
        name: Base filename.
        extension: Extension including the dot.
        size: Size in bytes.

    Returns:
        int: Priority score; higher values are analyzed first.
    """
    priority = 0

    if extension.lower() in const.CORE_CODE_EXTENSIONS:
        priority += const.CORE_CODE_WEIGHT

    if size < const.SIZE_SMALL_LIMIT:
        priority += const.SIZE_SMALL_WEIGHT
    elif size < const.SIZE_MEDIUM_LIMIT:
        priority += const.SIZE_MEDIUM_WEIGHT
    else:
        priority += const.SIZE_LARGE_WEIGHT

    priority += marker_priority_weight(name)
    return priority


def collect_files(root: TreeNode, options: AnalysisOptions) -> CollectionResult:
    """
    Collect analyzable files from a tree and order them by priority.

    Directories are traversed depth-first in child order. Oversized files
    are counted as skipped and never become tasks. The final sort is stable,
    so ties keep their traversal order.

    Args:
        root: Root node of the project tree.
        options: Validated analysis options.

    Returns:
        CollectionResult: Sorted tasks, their byte total and the skip count.
    """
    files: List[FileTask] = []
    total_bytes = 0
    skipped = 0

    stack: List[TreeNode] = [root]
    while stack:
        node = stack.pop()

        if node.is_directory:
            # Reverse push keeps the left-to-right child order on pop
            stack.extend(reversed(node.children))
            continue

        size = max(int(node.size or 0), 0)
        if size > options.max_file_size:
            logger.debug(f"Skipping oversized file: {node.path} ({size / 1024:.1f}KB)")
            skipped += 1
            continue

        files.append(FileTask(
            path=node.path,
            name=node.name,
            extension=node.extension or "",
            size=size,
            priority=calculate_priority(node.name, node.extension or "", size),
        ))
        total_bytes += size

    files.sort(key=lambda task: task.priority, reverse=True)
    ordered = [replace(task, order=index) for index, task in enumerate(files)]

    logger.info(
        f"Collected {len(ordered)} files ({total_bytes / 1024 / 1024:.2f} MB). "
        f"Skipped {skipped} oversized files."
    )
    return CollectionResult(files=ordered, total_bytes=total_bytes, skipped=skipped)
