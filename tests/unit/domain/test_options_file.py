from __future__ import annotations

"""
Unit tests for the options file persistence.

Verifies:
1. Default options generation.
2. Missing files fall back to defaults, corrupted files raise SetupError.
3. Save/Load round trip without touching real user data.
"""

import json
from unittest.mock import patch

import pytest

from filescope.domain.analysis_models import AnalysisOptions
from filescope.domain.config import (
    default_options_path,
    get_default_options,
    load_options_file,
    save_options_file,
)
from filescope.domain.errors import SetupError


@pytest.fixture
def mock_user_data_dir(tmp_path):
    """Redirect the user data directory into a temporary folder."""
    data_dir = tmp_path / "Filescope"
    with patch("filescope.domain.config.get_user_data_dir", return_value=str(data_dir)):
        yield data_dir


def test_default_options_match_dataclass() -> None:
    defaults = get_default_options()
    assert defaults["concurrent_limit"] == 5
    assert defaults["batch_size"] == 10
    assert defaults["max_file_size"] == 100 * 1024
    assert defaults["max_retries"] == 3
    assert defaults["retry_delay_ms"] == 1000
    assert defaults["enable_performance_monitoring"] is False


def test_missing_file_returns_empty(mock_user_data_dir) -> None:
    assert load_options_file() == {}


def test_save_then_load(mock_user_data_dir) -> None:
    path = save_options_file(AnalysisOptions(concurrent_limit=2))

    assert path == default_options_path()
    assert load_options_file()["concurrent_limit"] == 2


def test_corrupted_file_raises(tmp_path) -> None:
    target = tmp_path / "options.json"
    target.write_text("{ not json", encoding="utf-8")

    with pytest.raises(SetupError, match="Failed to load"):
        load_options_file(str(target))


def test_non_object_file_raises(tmp_path) -> None:
    target = tmp_path / "options.json"
    target.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

    with pytest.raises(SetupError, match="JSON object"):
        load_options_file(str(target))
