"""Exception hierarchy shared by the walkers, the renderer and the CLI."""

from typing import Optional


class SnapTreeError(Exception):
    """Base class for all snaptree errors."""


class DuplicateVisitError(SnapTreeError):
    """A directory was recorded twice in the same snapshot."""

    def __init__(self, path: str):
        super().__init__(f"duplicated directory: {path}")
        self.path = path


class TraversalAbortedError(SnapTreeError):
    """Traversal stopped on a fatal error.

    Attributes:
        path: Directory whose read failed
        kind: ``ErrorKind`` of the failure
        error: The original exception
    """

    def __init__(self, path: str, kind, error: Optional[BaseException] = None):
        message = f"traversal aborted at {path}: {error}" if error else f"traversal aborted at {path}"
        super().__init__(message)
        self.path = path
        self.kind = kind
        self.error = error


class OutputWriteError(SnapTreeError):
    """The rendered tree could not be written to the output stream."""
