from __future__ import annotations

"""
File Filtering and Classification Engine.

Implements regex-based exclusion logic used while building the project tree,
translates .gitignore globs into regexes, and provides the name-based
classification (test markers, resources) shared by the collector and the
reference analyzer.
"""

import fnmatch
import logging
import os
import re
from typing import List, Optional, Set

from filescope.domain import constants as const

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# REGEX AND FILENAME CONSTANTS
# -----------------------------------------------------------------------------

_RESOURCE_EXTENSIONS: Set[str] = {
    ".md", ".markdown", ".rst", ".txt",
    ".json", ".yaml", ".yml", ".toml", ".xml", ".csv", ".ini", ".cfg", ".conf", ".properties",
}

_DOCUMENTATION_EXTENSIONS: Set[str] = {".md", ".markdown", ".rst", ".txt"}

_RESOURCE_FILENAMES: Set[str] = {
    "Dockerfile", "Makefile", "LICENSE", "CHANGELOG", "README", "Procfile",
    ".dockerignore", ".editorconfig", ".gitignore",
}

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------

def default_exclude_patterns() -> List[str]:
    """
    Get the system-level exclusion patterns applied to entry names.

    Identifies dependency folders, build artifacts, VCS metadata, logs,
    lockfiles and environment files that never need analysis.

    Returns:
        List[str]: List of regex patterns for common exclusions.
    """
    return [
        r"^(node_modules|\.git|\.DS_Store|dist|build|\.next|\.turbo|coverage|\.nyc_output)$",
        r"^(__pycache__|\.idea|\.vscode|\.venv|venv|\.mypy_cache|\.pytest_cache)$",
        r".*\.pyc$",
        r".*\.log$",
        r".*\.lock$",
        r"^\.env",
    ]

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def compile_patterns(patterns: List[str]) -> List[re.Pattern]:
    """
    Transform raw regex strings into compiled Pattern objects.

    Malformed regex strings are discarded with a warning instead of
    aborting the scan.

    Args:
        patterns: List of raw regex strings.

    Returns:
        List[re.Pattern]: Compiled regex objects.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            logger.warning(f"Discarding invalid pattern '{p}': {e}")
    return compiled


def matches_any(name: str, compiled_patterns: List[re.Pattern]) -> bool:
    """
    Verify if a string matches at least one compiled regex pattern.

    Args:
        name: Entry name or relative path to evaluate.
        compiled_patterns: Pre-compiled regex objects.

    Returns:
        bool: True if any match is found.
    """
    return any(rx.search(name) for rx in compiled_patterns)

# -----------------------------------------------------------------------------
# FILE CLASSIFICATION LOGIC
# -----------------------------------------------------------------------------

def marker_priority_weight(file_name: str) -> int:
    """
    Priority adjustment for test files, detected by name markers.

    End-to-end markers ('.e2e.', '.cy.') weigh more than unit markers
    ('.test.', '.spec.'); only the first matching marker counts.

    Args:
        file_name: Target filename.

    Returns:
        int: Negative weight for test files, 0 otherwise.
    """
    for marker, weight in const.TEST_MARKER_WEIGHTS:
        if marker in file_name:
            return weight
    return 0


def is_test(file_name: str) -> bool:
    """
    Classify a file as a test suite based on polyglot naming conventions.

    Args:
        file_name: Target filename.

    Returns:
        bool: True if the filename matches common test patterns.
    """
    if marker_priority_weight(file_name) != 0:
        return True
    pattern = (
        r"^(test_.*|.*_test|Test.*|.*Test|.*Tests|.*TestCase)"
        r"\.(py|js|ts|jsx|tsx|java|kt|go|rs|cs|cpp|c|h|hpp|swift|php)$"
    )
    return re.match(pattern, file_name) is not None


def is_resource_file(file_name: str) -> bool:
    """
    Classify a file as a non-code project resource (config or docs).

    Args:
        file_name: Target filename.

    Returns:
        bool: True if the file is identified as a resource.
    """
    if file_name in _RESOURCE_FILENAMES:
        return True
    _, ext = os.path.splitext(file_name)
    return ext.lower() in _RESOURCE_EXTENSIONS


def is_documentation(file_name: str) -> bool:
    _, ext = os.path.splitext(file_name)
    return ext.lower() in _DOCUMENTATION_EXTENSIONS or file_name in ("README", "CHANGELOG", "LICENSE")

# -----------------------------------------------------------------------------
# GITIGNORE INTEGRATION
# -----------------------------------------------------------------------------

def load_gitignore_patterns(root_path: str) -> List[str]:
    """
    Parse a .gitignore file and translate its glob rules into Python regexes.

    Negation rules ('!pattern') are not supported and are skipped.

    Args:
        root_path: Directory containing the .gitignore file.

    Returns:
        List[str]: List of equivalent regex strings.
    """
    gitignore_path = os.path.join(root_path, ".gitignore")
    if not os.path.exists(gitignore_path):
        return []

    regex_patterns: List[str] = []
    try:
        with open(gitignore_path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or line.startswith("!"):
                    continue

                regex = _gitignore_to_regex(line)
                if regex:
                    regex_patterns.append(regex)
    except OSError as e:
        logger.warning(f"Failed to read {gitignore_path}: {e}")

    return regex_patterns


def _gitignore_to_regex(glob_pattern: str) -> Optional[str]:
    """
    Translate gitignore/shell glob syntax to a Python regex.

    Anchored patterns ('/build') keep their leading slash stripped; directory
    markers ('logs/') are matched by name.

    Args:
        glob_pattern: Raw glob pattern from .gitignore.

    Returns:
        Optional[str]: Regex string, or None for patterns that reduce to nothing.
    """
    cleaned = glob_pattern.strip().rstrip("/").lstrip("/")
    if not cleaned:
        return None
    return fnmatch.translate(cleaned)
