from __future__ import annotations

"""
Unit tests for the Options Validation Service.
"""

import pytest

from filescope.core.pipeline.stages.validator import validate_options
from filescope.domain.analysis_models import AnalysisOptions
from filescope.domain.errors import SetupError


def test_none_yields_defaults() -> None:
    options, warnings = validate_options(None)
    assert options == AnalysisOptions()
    assert warnings == []


def test_dataclass_passthrough() -> None:
    original = AnalysisOptions(concurrent_limit=2, batch_size=3)
    options, warnings = validate_options(original)
    assert options == original
    assert warnings == []


def test_partial_mapping_merges_defaults() -> None:
    options, _ = validate_options({"max_retries": 0, "retry_delay_ms": None})
    assert options.max_retries == 0
    assert options.retry_delay_ms == AnalysisOptions().retry_delay_ms


def test_unknown_keys_produce_warnings() -> None:
    options, warnings = validate_options({"concurrency": 3})
    assert options.concurrent_limit == 5
    assert any("concurrency" in w for w in warnings)


@pytest.mark.parametrize("key,value", [
    ("concurrent_limit", 0),
    ("batch_size", 0),
    ("max_batch_bytes", 0),
    ("max_retries", -1),
    ("retry_delay_ms", -5),
    ("progress_interval", 0),
])
def test_out_of_range_values_raise(key: str, value: int) -> None:
    with pytest.raises(SetupError, match=key):
        validate_options({key: value})


def test_numeric_strings_are_coerced_with_warning() -> None:
    options, warnings = validate_options({"concurrent_limit": "3", "enable_progress": "off"})
    assert options.concurrent_limit == 3
    assert options.enable_progress is False
    assert len(warnings) == 2


def test_strict_mode_rejects_coercion() -> None:
    with pytest.raises(SetupError):
        validate_options({"concurrent_limit": "3"}, strict=True)


def test_bool_is_not_an_int() -> None:
    with pytest.raises(SetupError):
        validate_options({"batch_size": True})


def test_non_mapping_raises() -> None:
    with pytest.raises(SetupError, match="Invalid options type"):
        validate_options(["concurrent_limit", 3])  # type: ignore[arg-type]
