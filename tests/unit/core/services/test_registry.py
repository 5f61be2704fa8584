from __future__ import annotations

"""
Unit tests for the Analyzer Registry Service.
"""

import pytest

from filescope.core.analysis.heuristic import HeuristicAnalyzer
from filescope.core.services.registry import AnalyzerRegistry, create_default_registry
from filescope.domain.errors import SetupError


def _noop(path: str, name: str, extension: str, size: int) -> dict:
    return {}


def test_first_registration_becomes_default() -> None:
    registry = AnalyzerRegistry()
    registry.register("a", _noop)
    registry.register("b", lambda *a: None)

    assert registry.default_name == "a"
    assert registry.get() is _noop


def test_explicit_default_wins() -> None:
    registry = AnalyzerRegistry()
    registry.register("a", _noop)
    registry.register("b", _noop, default=True)
    assert registry.default_name == "b"


def test_unknown_name_lists_available() -> None:
    registry = AnalyzerRegistry()
    registry.register("heuristic", _noop)

    with pytest.raises(SetupError, match="heuristic"):
        registry.get("remote")


def test_empty_registry_raises() -> None:
    with pytest.raises(SetupError, match="No analyzer"):
        AnalyzerRegistry().get()


@pytest.mark.parametrize("name,analyzer", [("", _noop), ("x", "not callable")])
def test_invalid_registrations(name, analyzer) -> None:
    with pytest.raises(SetupError):
        AnalyzerRegistry().register(name, analyzer)


def test_unregister_moves_default() -> None:
    registry = AnalyzerRegistry()
    registry.register("a", _noop)
    registry.register("b", _noop)

    registry.unregister("a")

    assert "a" not in registry
    assert registry.default_name == "b"
    assert registry.names() == ["b"]


def test_registries_are_independent() -> None:
    first = create_default_registry()
    second = create_default_registry()
    first.register("extra", _noop)

    assert "extra" not in second
    assert isinstance(second.get(), HeuristicAnalyzer)
