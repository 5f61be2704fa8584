from __future__ import annotations

"""
Domain Constants.

Priority weights used to order collected files, default option values, and
the file-type tables shared by the scanner and the reference analyzer.
"""

from typing import Dict, FrozenSet, Tuple

# -----------------------------------------------------------------------------
# UNITS
# -----------------------------------------------------------------------------
KIB = 1024
MIB = 1024 * 1024

# -----------------------------------------------------------------------------
# OPTION DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_CONCURRENT_LIMIT = 5
DEFAULT_BATCH_SIZE = 10
DEFAULT_MAX_BATCH_BYTES = 10 * MIB
DEFAULT_MAX_FILE_SIZE = 100 * KIB
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_BATCH_DELAY_MS = 100
DEFAULT_PROGRESS_INTERVAL = 10

# -----------------------------------------------------------------------------
# PRIORITY WEIGHTS
# -----------------------------------------------------------------------------
CORE_CODE_EXTENSIONS: FrozenSet[str] = frozenset({
    ".js", ".ts", ".jsx", ".tsx", ".vue", ".svelte", ".astro", ".py",
})
CORE_CODE_WEIGHT = 100

# Ordered: end-to-end markers are checked first, the first match wins.
TEST_MARKER_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    (".e2e.", -30),
    (".cy.", -30),
    (".test.", -20),
    (".spec.", -20),
)

SIZE_SMALL_LIMIT = 10 * KIB
SIZE_MEDIUM_LIMIT = 50 * KIB
SIZE_SMALL_WEIGHT = 50
SIZE_MEDIUM_WEIGHT = 25
SIZE_LARGE_WEIGHT = 0

# -----------------------------------------------------------------------------
# FILE TYPE TABLES
# -----------------------------------------------------------------------------
STYLE_EXTENSIONS: FrozenSet[str] = frozenset({".css", ".scss", ".less", ".sass"})

ASSET_EXTENSIONS: FrozenSet[str] = frozenset({
    ".svg", ".png", ".jpg", ".jpeg", ".webp", ".avif", ".ico", ".gif", ".bmp",
    ".tiff", ".woff", ".woff2", ".ttf", ".otf",
})

TYPE_DEFINITION_SUFFIX = ".d.ts"

FILE_TYPE_LABELS: Dict[str, str] = {
    "component": "Source module",
    "style": "Stylesheet",
    "asset": "Static asset",
    "type": "Type definitions",
    "test": "Test suite",
    "config": "Configuration file",
    "documentation": "Documentation",
    "other": "Unrecognized file type",
}
