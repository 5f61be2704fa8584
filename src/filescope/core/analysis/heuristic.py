from __future__ import annotations

"""
Heuristic Analyzer.

Reference analyzer that never calls a model API: it classifies a file from
its name and extension, then streams text content to count lines and
estimate tokens. Token counts come from tiktoken, which fetches its BPE
encoding on first use; without network access the estimate degrades to the
characters-per-token heuristic.
"""

import logging
from typing import Any, Dict, Optional

from filescope.core.pipeline.components import filters
from filescope.core.pipeline.components.reader import stream_file_content
from filescope.core.processing.tokenizer import DEFAULT_MODEL, count_tokens
from filescope.domain import constants as const

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# CLASSIFICATION
# -----------------------------------------------------------------------------

def classify_file(name: str, extension: str) -> str:
    """
    Map a file to one of the analysis type labels.

    Order matters: '.d.ts' files are 'type' even though '.ts' is core code,
    and 'Button.test.tsx' is a 'test' rather than a 'component'.

    Args:
        name: File name including extension.
        extension: Lower-cased extension with leading dot.

    Returns:
        str: One of the keys of FILE_TYPE_LABELS.
    """
    ext = extension.lower()
    if ext in const.STYLE_EXTENSIONS:
        return "style"
    if ext in const.ASSET_EXTENSIONS:
        return "asset"
    if name.lower().endswith(const.TYPE_DEFINITION_SUFFIX):
        return "type"
    if filters.is_test(name):
        return "test"
    if ext in const.CORE_CODE_EXTENSIONS:
        return "component"
    if filters.is_documentation(name):
        return "documentation"
    if filters.is_resource_file(name):
        return "config"
    return "other"


# -----------------------------------------------------------------------------
# ANALYZER
# -----------------------------------------------------------------------------

class HeuristicAnalyzer:
    """
    Callable analyzer producing a descriptive payload per file.

    Asset files are never opened. Text files with no non-blank line yield
    None, which the pipeline records as an empty outcome.
    """

    def __init__(self, model: str = DEFAULT_MODEL, count_token_estimate: bool = True) -> None:
        self.model = model
        self.count_token_estimate = count_token_estimate

    def __call__(self, path: str, name: str, extension: str, size: int) -> Optional[Dict[str, Any]]:
        file_type = classify_file(name, extension)
        payload: Dict[str, Any] = {
            "name": name,
            "path": path,
            "type": file_type,
            "description": f"{const.FILE_TYPE_LABELS[file_type]}: {name}",
            "size": size,
            "extension": extension,
            "line_count": 0,
            "token_estimate": 0,
        }

        if file_type == "asset":
            return payload

        # Read errors propagate to the executor
        line_count = 0
        chunks = []
        for line in stream_file_content(path):
            if line.strip():
                line_count += 1
            if self.count_token_estimate:
                chunks.append(line)

        if line_count == 0:
            logger.debug(f"No content in {path}")
            return None

        payload["line_count"] = line_count
        if self.count_token_estimate:
            payload["token_estimate"] = count_tokens("".join(chunks), self.model)

        return payload

    def __repr__(self) -> str:
        return f"HeuristicAnalyzer(model={self.model!r})"

