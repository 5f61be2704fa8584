from __future__ import annotations

"""
Pipeline Error Taxonomy.

Only SetupError is allowed to escape the orchestrator. AnalyzeError is raised
by analyzers and is always contained by the retry executor.
"""


class FilescopeError(Exception):
    """Base class for every error raised by this package."""


class SetupError(FilescopeError):
    """Invalid configuration or wiring detected before any file is analyzed."""


class AnalyzeError(FilescopeError):
    """
    An analyzer rejected or failed to process a file.

    Attributes:
        path: Path of the file being analyzed, when known.
    """

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path
