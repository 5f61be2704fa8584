from __future__ import annotations

"""
Directory Tree Structure Data Models.

Provides the recursive node type handed to the analysis pipeline. Trees are
produced by the scanner service (or any external builder) and are treated as
read-only by every pipeline stage.
"""

import os
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Tuple

NODE_FILE = "file"
NODE_DIRECTORY = "directory"

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TreeNode:
    """
    Represents a file or directory entry in the project tree.

    Attributes:
        name: Base name of the entry.
        path: Filesystem path of the entry.
        kind: Either 'file' or 'directory'.
        size: Size in bytes (0 for directories).
        extension: File extension including the dot ('' when absent).
        children: Ordered child nodes (directories only).
    """
    name: str
    path: str
    kind: str = NODE_FILE
    size: int = 0
    extension: str = ""
    children: Tuple["TreeNode", ...] = field(default_factory=tuple)

    @property
    def is_file(self) -> bool:
        return self.kind == NODE_FILE

    @property
    def is_directory(self) -> bool:
        return self.kind == NODE_DIRECTORY

    def iter_files(self) -> Iterator["TreeNode"]:
        """Yield every file node below this one in depth-first order."""
        if self.is_file:
            yield self
            return
        for child in self.children:
            yield from child.iter_files()


def file_node(path: str, size: int, name: str = "", extension: Optional[str] = None) -> TreeNode:
    """Build a file node, deriving name and extension from the path when omitted."""
    base = name or os.path.basename(path)
    if extension is None:
        _, extension = os.path.splitext(base)
    return TreeNode(name=base, path=path, kind=NODE_FILE, size=int(size), extension=extension)


def directory_node(path: str, children: Sequence[TreeNode] = (), name: str = "") -> TreeNode:
    """Build a directory node from already constructed children."""
    base = name or os.path.basename(os.path.normpath(path)) or path
    return TreeNode(name=base, path=path, kind=NODE_DIRECTORY, children=tuple(children))
