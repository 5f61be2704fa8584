from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures: fast analysis options, synthetic project trees and an
   instrumented analyzer that records calls and peak concurrency.
"""

import os
import sys
import threading
import time
from typing import Any, Callable, Dict, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from filescope.domain.analysis_models import AnalysisOptions  # noqa: E402
from filescope.domain.tree_models import TreeNode, directory_node, file_node  # noqa: E402


# -----------------------------------------------------------------------------
# Test Doubles
# -----------------------------------------------------------------------------
class RecordingAnalyzer:
    """
    Thread-safe analyzer double.

    Records every call, tracks the peak number of concurrent calls and can
    be told to fail a number of times per path or to return None.
    """

    def __init__(
            self,
            delay: float = 0.0,
            failures: Optional[Dict[str, int]] = None,
            always_fail: bool = False,
            empty_paths: Optional[List[str]] = None,
    ) -> None:
        self.delay = delay
        self.failures = dict(failures or {})
        self.always_fail = always_fail
        self.empty_paths = set(empty_paths or [])
        self.calls: List[str] = []
        self.call_times: Dict[str, List[float]] = {}
        self.in_flight = 0
        self.peak = 0
        self._lock = threading.Lock()

    def __call__(self, path: str, name: str, extension: str, size: int) -> Any:
        with self._lock:
            self.calls.append(path)
            self.call_times.setdefault(path, []).append(time.monotonic())
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
            remaining = self.failures.get(path, 0)
            if remaining:
                self.failures[path] = remaining - 1
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.always_fail or remaining:
                raise RuntimeError(f"analysis failed for {name}")
            if path in self.empty_paths:
                return None
            return {"name": name, "size": size}
        finally:
            with self._lock:
                self.in_flight -= 1


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def fast_options() -> AnalysisOptions:
    """Options with zero delays so pipeline tests run instantly."""
    return AnalysisOptions(
        concurrent_limit=5,
        batch_size=10,
        max_file_size=100 * 1024,
        max_retries=3,
        retry_delay_ms=0,
        batch_delay_ms=0,
        enable_progress=False,
    )


@pytest.fixture
def make_tree() -> Callable[..., TreeNode]:
    """
    Build a flat synthetic project tree.

    Usage: make_tree({"a.py": 100, "b.css": 2000})
    """

    def _make(files: Dict[str, int], root: str = "/project") -> TreeNode:
        children = [file_node(f"{root}/{name}", size) for name, size in files.items()]
        return directory_node(root, children)

    return _make


@pytest.fixture
def recording_analyzer() -> RecordingAnalyzer:
    return RecordingAnalyzer()
