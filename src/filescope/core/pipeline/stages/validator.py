from __future__ import annotations

"""
Options Validation Service.

Acts as the primary gatekeeper for the pipeline, ensuring that the analysis
options conform to the expected schema. Handles type coercion and default
value injection, and rejects values that cannot form a valid run before any
file is touched.
"""

import logging
from dataclasses import asdict, fields
from typing import Any, Dict, List, Mapping, Tuple, Union

from filescope.domain.analysis_models import AnalysisOptions
from filescope.domain.errors import SetupError

logger = logging.getLogger(__name__)

# Minimum accepted value for every integer option
_INT_MINIMUMS: Dict[str, int] = {
    "concurrent_limit": 1,
    "batch_size": 1,
    "max_batch_bytes": 1,
    "max_file_size": 0,
    "max_retries": 0,
    "retry_delay_ms": 0,
    "batch_delay_ms": 0,
    "progress_interval": 1,
}

_BOOL_FIELDS: Tuple[str, ...] = ("enable_progress", "enable_performance_monitoring")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_options(
        options: Union[AnalysisOptions, Mapping[str, Any], None],
        *,
        strict: bool = False,
) -> Tuple[AnalysisOptions, List[str]]:
    """
    Validate and normalize analysis options.

    Converts untrusted inputs (CLI flags, JSON files) into a typed, immutable
    AnalysisOptions. Missing keys take their defaults. Coercions are reported
    as warnings; impossible values raise SetupError.

    Args:
        options: An AnalysisOptions instance, a raw mapping, or None for defaults.
        strict: If True, type mismatches raise instead of being coerced.

    Returns:
        Tuple[AnalysisOptions, List[str]]: Normalized options and warnings.

    Raises:
        SetupError: If a value is out of range or (strict) of the wrong type.
    """
    warnings: List[str] = []

    if options is None:
        raw: Dict[str, Any] = {}
    elif isinstance(options, AnalysisOptions):
        raw = asdict(options)
    elif isinstance(options, Mapping):
        raw = dict(options)
    else:
        raise SetupError(
            f"Invalid options type: expected mapping, received {type(options).__name__}."
        )

    defaults = asdict(AnalysisOptions())
    known = {f.name for f in fields(AnalysisOptions)}

    for key in sorted(set(raw) - known):
        msg = f"Unknown option '{key}' ignored."
        warnings.append(msg)
        logger.debug(msg)

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in raw.items() if k in known and v is not None})

    for field_name, minimum in _INT_MINIMUMS.items():
        value = _as_int(merged[field_name], field_name, warnings, strict)
        if value < minimum:
            raise SetupError(
                f"Invalid option '{field_name}': {value} (must be >= {minimum})."
            )
        merged[field_name] = value

    for field_name in _BOOL_FIELDS:
        merged[field_name] = _as_bool(merged[field_name], field_name, warnings, strict)

    return AnalysisOptions(**merged), warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_int(value: Any, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce numeric inputs into native integers."""
    if isinstance(value, bool):
        raise SetupError(f"Invalid option '{field}': expected int, received bool.")
    if isinstance(value, int):
        return value

    if not strict:
        if isinstance(value, float) and value.is_integer():
            warnings.append(f"Option '{field}' converted from float {value} to int.")
            return int(value)
        if isinstance(value, str):
            try:
                parsed = int(value.strip())
            except ValueError:
                pass
            else:
                warnings.append(f"Option '{field}' converted from '{value}' to {parsed}.")
                return parsed

    raise SetupError(
        f"Invalid option '{field}': expected int, received {type(value).__name__} ({value!r})."
    )


def _as_bool(value: Any, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Option '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Option '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Option '{field}' converted from '{value}' to False.")
                return False

    raise SetupError(
        f"Invalid option '{field}': expected bool, received {type(value).__name__}."
    )
