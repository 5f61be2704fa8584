from __future__ import annotations

"""
Unit tests for the File Collection Stage.

Verifies:
1. Priority scoring (core extensions, size buckets, test markers).
2. Oversized files are skipped and counted, never turned into tasks.
3. Stable ordering by descending priority with collection indexes.
"""

from typing import Callable

from filescope.core.pipeline.stages.collector import calculate_priority, collect_files
from filescope.domain.analysis_models import AnalysisOptions
from filescope.domain.tree_models import TreeNode, directory_node, file_node


def test_priority_core_small_file() -> None:
    assert calculate_priority("app.ts", ".ts", 1024) == 150


def test_priority_size_buckets() -> None:
    assert calculate_priority("notes.txt", ".txt", 10 * 1024 - 1) == 50
    assert calculate_priority("notes.txt", ".txt", 10 * 1024) == 25
    assert calculate_priority("notes.txt", ".txt", 50 * 1024) == 0


def test_priority_test_markers() -> None:
    """End-to-end markers win over unit markers when both are present."""
    assert calculate_priority("Button.test.tsx", ".tsx", 100) == 130
    assert calculate_priority("login.cy.ts", ".ts", 100) == 120
    assert calculate_priority("flow.e2e.spec.ts", ".ts", 100) == 120


def test_priority_has_no_style_or_type_definition_weight() -> None:
    """Only core code extensions carry an extension weight."""
    assert calculate_priority("site.css", ".css", 100) == 50
    assert calculate_priority("theme.scss", ".scss", 100) == 50
    assert calculate_priority("env.d.ts", ".ts", 100) == 150
    assert calculate_priority("tool.py", ".py", 100) == 150


def test_priority_is_case_insensitive_on_extension() -> None:
    assert calculate_priority("Main.PY", ".PY", 100) == 150


def test_oversized_files_are_skipped(make_tree: Callable[..., TreeNode]) -> None:
    tree = make_tree({"a.py": 100, "big.py": 200 * 1024, "b.css": 500})
    options = AnalysisOptions(max_file_size=100 * 1024)

    result = collect_files(tree, options)

    assert [t.name for t in result.files] == ["a.py", "b.css"]
    assert result.skipped == 1
    assert result.total_bytes == 600


def test_file_exactly_at_cap_is_kept(make_tree: Callable[..., TreeNode]) -> None:
    tree = make_tree({"edge.py": 1000})
    result = collect_files(tree, AnalysisOptions(max_file_size=1000))
    assert len(result.files) == 1
    assert result.skipped == 0


def test_sorting_is_stable_and_indexed() -> None:
    tree = directory_node("/p", [
        file_node("/p/z.css", 100),
        directory_node("/p/src", [
            file_node("/p/src/b.py", 100),
            file_node("/p/src/a.py", 100),
        ]),
        file_node("/p/y.css", 100),
    ])

    result = collect_files(tree, AnalysisOptions())

    # Equal priorities keep depth-first traversal order
    assert [t.name for t in result.files] == ["b.py", "a.py", "z.css", "y.css"]
    assert [t.order for t in result.files] == [0, 1, 2, 3]


def test_empty_tree() -> None:
    result = collect_files(directory_node("/empty"), AnalysisOptions())
    assert result.files == []
    assert result.skipped == 0
    assert result.total_bytes == 0
