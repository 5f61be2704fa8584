from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of analysis options as JSON. Values read from disk
are returned raw; normalization and validation belong to the validator stage.
"""

import json
import logging
import os
from dataclasses import asdict
from typing import Any, Dict, Optional

from filescope.domain.analysis_models import AnalysisOptions
from filescope.domain.errors import SetupError
from filescope.infra.fs import get_user_data_dir, safe_mkdir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "options.json"


def default_options_path() -> str:
    """Location of the user-level options file."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


def get_default_options() -> Dict[str, Any]:
    """
    Generate the default runtime options.

    Returns:
        Dict[str, Any]: Default option values keyed by field name.
    """
    return asdict(AnalysisOptions())

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_options_file(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load raw option overrides from a JSON file.

    A missing file is not an error: an empty mapping is returned so the
    defaults apply. A file that exists but cannot be parsed aborts the run.

    Args:
        path: Options file location. Defaults to the user data directory.

    Returns:
        Dict[str, Any]: The raw overrides found in the file.

    Raises:
        SetupError: If the file is unreadable, not JSON, or not an object.
    """
    target = path or default_options_path()

    if not os.path.exists(target):
        logger.debug(f"Options file not found at {target}. Using defaults.")
        return {}

    try:
        with open(target, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SetupError(f"Failed to load options file '{target}': {e}") from e

    if not isinstance(data, dict):
        raise SetupError(f"Options file '{target}' must contain a JSON object.")

    logger.debug(f"Loaded {len(data)} option overrides from {target}")
    return data


def save_options_file(options: AnalysisOptions, path: Optional[str] = None) -> str:
    """
    Persist options to disk.

    Args:
        options: The options to save.
        path: Destination file. Defaults to the user data directory.

    Returns:
        str: The path that was written.
    """
    target = path or default_options_path()
    ok, err = safe_mkdir(os.path.dirname(os.path.abspath(target)))
    if not ok:
        raise SetupError(f"Cannot create options directory for '{target}': {err}")

    with open(target, "w", encoding="utf-8") as f:
        json.dump(asdict(options), f, ensure_ascii=False, indent=4)
    logger.debug(f"Options saved to {target}")
    return target
