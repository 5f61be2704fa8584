from __future__ import annotations

"""
Unit tests for the File Filtering and Classification Engine.
"""

import logging
from pathlib import Path

import pytest

from filescope.core.pipeline.components.filters import (
    compile_patterns,
    default_exclude_patterns,
    is_documentation,
    is_resource_file,
    is_test,
    load_gitignore_patterns,
    marker_priority_weight,
    matches_any,
)


@pytest.mark.parametrize("name,excluded", [
    ("node_modules", True),
    (".git", True),
    ("__pycache__", True),
    ("debug.log", True),
    ("yarn.lock", True),
    (".env.local", True),
    ("src", False),
    ("builder.py", False),
    ("environment.ts", False),
])
def test_default_exclusions(name: str, excluded: bool) -> None:
    assert matches_any(name, compile_patterns(default_exclude_patterns())) is excluded


def test_invalid_pattern_is_discarded(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        compiled = compile_patterns(["(unclosed", r"\.py$"])
    assert len(compiled) == 1
    assert "Discarding invalid pattern" in caplog.text


@pytest.mark.parametrize("name,weight", [
    ("app.test.ts", -20),
    ("app.spec.js", -20),
    ("checkout.e2e.ts", -30),
    ("login.cy.js", -30),
    ("flow.e2e.test.ts", -30),
    ("app.ts", 0),
])
def test_marker_priority_weight(name: str, weight: int) -> None:
    assert marker_priority_weight(name) == weight


@pytest.mark.parametrize("name,expected", [
    ("test_utils.py", True),
    ("utils_test.go", True),
    ("UserServiceTest.java", True),
    ("Button.spec.tsx", True),
    ("contest.py", False),
    ("utils.py", False),
])
def test_is_test(name: str, expected: bool) -> None:
    assert is_test(name) is expected


def test_resource_and_documentation_classification() -> None:
    assert is_resource_file("package.json")
    assert is_resource_file("Dockerfile")
    assert not is_resource_file("main.py")
    assert is_documentation("README.md")
    assert is_documentation("LICENSE")
    assert not is_documentation("config.yaml")


def test_gitignore_translation(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_text("# comment\n\n/build/\n*.tmp\n!important.tmp\n", encoding="utf-8")

    compiled = compile_patterns(load_gitignore_patterns(str(tmp_path)))

    assert matches_any("build", compiled)
    assert matches_any("cache.tmp", compiled)
    assert not matches_any("main.py", compiled)
    assert len(compiled) == 2


def test_missing_gitignore(tmp_path: Path) -> None:
    assert load_gitignore_patterns(str(tmp_path)) == []
