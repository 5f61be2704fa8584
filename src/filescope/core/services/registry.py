from __future__ import annotations

"""
Analyzer Registry Service.

Maps analyzer names to analyze callables. A registry is an ordinary object
handed to each orchestrator, so several pipelines with different analyzers
can run side by side in one process.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from filescope.core.analysis.heuristic import HeuristicAnalyzer
from filescope.domain.errors import SetupError

logger = logging.getLogger(__name__)

# analyze(path, name, extension, size) -> payload | None, raises on failure
Analyzer = Callable[[str, str, str, int], Any]


class AnalyzerRegistry:
    """
    Thread-safe catalog of analyzers with an optional default entry.
    """

    def __init__(self) -> None:
        self._analyzers: Dict[str, Analyzer] = {}
        self._default: Optional[str] = None
        self._lock = threading.Lock()

    def register(self, name: str, analyzer: Analyzer, *, default: bool = False) -> None:
        """
        Add or replace an analyzer.

        The first registered analyzer becomes the default unless another one
        is registered with default=True.

        Args:
            name: Lookup key.
            analyzer: Callable taking (path, name, extension, size).
            default: Make this analyzer the default.
        """
        if not name:
            raise SetupError("Analyzer name must be a non-empty string.")
        if not callable(analyzer):
            raise SetupError(f"Analyzer '{name}' is not callable.")

        with self._lock:
            if name in self._analyzers:
                logger.debug(f"Registry: Replacing analyzer '{name}'.")
            self._analyzers[name] = analyzer
            if default or self._default is None:
                self._default = name

    def unregister(self, name: str) -> None:
        with self._lock:
            self._analyzers.pop(name, None)
            if self._default == name:
                self._default = next(iter(self._analyzers), None)

    def get(self, name: Optional[str] = None) -> Analyzer:
        """
        Resolve an analyzer by name, or the default one.

        Raises:
            SetupError: If the name is unknown or the registry is empty.
        """
        with self._lock:
            key = name or self._default
            if key is None:
                raise SetupError("No analyzer registered.")
            try:
                return self._analyzers[key]
            except KeyError:
                available = ", ".join(sorted(self._analyzers)) or "none"
                raise SetupError(f"Unknown analyzer '{key}'. Available: {available}.") from None

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._analyzers)

    @property
    def default_name(self) -> Optional[str]:
        with self._lock:
            return self._default

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._analyzers


def create_default_registry() -> AnalyzerRegistry:
    """Build a registry holding the offline heuristic analyzer as default."""
    registry = AnalyzerRegistry()
    registry.register("heuristic", HeuristicAnalyzer(), default=True)
    return registry
