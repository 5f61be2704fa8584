from __future__ import annotations

"""
Project Tree Discovery Service.

Builds the TreeNode input of the analysis pipeline from a directory on disk.
Noise directories and files are pruned with the default exclusion patterns,
optional .gitignore rules and an optional extension whitelist. Children are
sorted by name so repeated scans produce the same traversal order.
"""

import logging
import os
import re
from typing import Iterable, List, Optional, Set

from filescope.core.pipeline.components.filters import (
    compile_patterns,
    default_exclude_patterns,
    load_gitignore_patterns,
    matches_any,
)
from filescope.domain.errors import SetupError
from filescope.domain.tree_models import TreeNode, directory_node, file_node

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


# ==============================================================================
# PUBLIC API
# ==============================================================================

def build_project_tree(
        root_path: str,
        *,
        exclude_patterns: Optional[List[str]] = None,
        respect_gitignore: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
        extensions: Optional[Iterable[str]] = None,
) -> TreeNode:
    """
    Scan a directory into a filtered TreeNode hierarchy.

    Args:
        root_path: Project directory to scan.
        exclude_patterns: Regexes matched against entry names; the default
                          noise patterns are used when None.
        respect_gitignore: Also exclude entries listed in the root .gitignore.
        max_depth: Deepest directory level descended into (root is 0).
        extensions: Optional whitelist of file extensions ('.py' or 'py').

    Returns:
        TreeNode: Directory node for root_path.

    Raises:
        SetupError: If root_path is not an existing directory.
    """
    root_abs = os.path.abspath(root_path)
    if not os.path.isdir(root_abs):
        raise SetupError(f"Invalid input directory: {root_abs}")

    exclusions = list(exclude_patterns) if exclude_patterns is not None else default_exclude_patterns()
    if respect_gitignore:
        git_patterns = load_gitignore_patterns(root_abs)
        if git_patterns:
            logger.debug(f"Loaded {len(git_patterns)} patterns from .gitignore")
            exclusions.extend(git_patterns)

    exclude_rx = compile_patterns(exclusions)
    allowed = _normalize_extensions(extensions)

    tree = _scan_directory(root_abs, 0, max_depth, exclude_rx, allowed)
    file_count = sum(1 for _ in tree.iter_files())
    logger.info(f"Scanned {root_abs}: {file_count} files")
    return tree


# ==============================================================================
# INTERNAL HELPERS
# ==============================================================================

def _normalize_extensions(extensions: Optional[Iterable[str]]) -> Optional[Set[str]]:
    if extensions is None:
        return None
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return normalized or None


def _scan_directory(
        path: str,
        depth: int,
        max_depth: int,
        exclude_rx: List[re.Pattern],
        allowed: Optional[Set[str]],
) -> TreeNode:
    children: List[TreeNode] = []

    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.warning(f"Cannot read directory {path}: {e}")
        return directory_node(path)

    for entry in entries:
        if matches_any(entry.name, exclude_rx):
            continue

        try:
            if entry.is_dir(follow_symlinks=False):
                if depth >= max_depth:
                    logger.debug(f"Depth limit reached, not descending into {entry.path}")
                    continue
                children.append(_scan_directory(entry.path, depth + 1, max_depth, exclude_rx, allowed))
            elif entry.is_file():
                if allowed is not None and _extension_of(entry.name) not in allowed:
                    continue
                children.append(file_node(entry.path, entry.stat().st_size))
        except OSError as e:
            logger.warning(f"Cannot stat {entry.path}: {e}")

    return directory_node(path, children)


def _extension_of(name: str) -> str:
    return os.path.splitext(name)[1].lower()
