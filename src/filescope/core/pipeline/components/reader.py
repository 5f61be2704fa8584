from __future__ import annotations

"""
Resilient File Reading Component.

Streams file content line by line. Undecodable byte sequences are replaced
instead of raising, so binary artifacts never abort an analysis.
"""

from typing import Iterator, Optional

# -----------------------------------------------------------------------------
# STREAM READING OPERATIONS
# -----------------------------------------------------------------------------

def stream_file_content(file_path: str) -> Iterator[str]:
    """
    Generate a line-by-line stream of file content.

    Args:
        file_path: Path to the target file.

    Yields:
        str: Sanitized lines from the file.
    """
    with open(file_path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            yield line


def read_text(file_path: str, limit: Optional[int] = None) -> str:
    """
    Read a file as text, optionally truncated to a number of characters.

    Args:
        file_path: Path to the target file.
        limit: Maximum characters to return; None reads everything.

    Returns:
        str: Decoded content.
    """
    with open(file_path, "r", encoding="utf-8", errors="replace") as f:
        return f.read() if limit is None else f.read(limit)
