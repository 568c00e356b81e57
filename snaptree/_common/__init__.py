"""Common components shared between the sync and aio walkers.

This internal package contains non-I/O code that is identical between
both implementations. It should NOT be imported directly by users.

Components here include:
- Configuration classes (WalkConfig, RenderOptions)
- The snapshot data model (DirectoryEntry, DirectoryTree, TraversalOutcome)
- The exception hierarchy

Important: This package must NEVER import from sync or aio to avoid
circular dependencies.
"""

from .config import (
    DEFAULT_IGNORE,
    DEFAULT_QUEUE_SIZE,
    WalkConfig,
    RenderOptions,
)
from .exceptions import (
    SnapTreeError,
    DuplicateVisitError,
    TraversalAbortedError,
    OutputWriteError,
)
from .model import (
    ErrorKind,
    TraversalStatus,
    DirectoryEntry,
    FailureRecord,
    DirectoryTree,
    TraversalOutcome,
    normalize_root,
)

__all__ = [
    'DEFAULT_IGNORE',
    'DEFAULT_QUEUE_SIZE',
    'WalkConfig',
    'RenderOptions',
    'SnapTreeError',
    'DuplicateVisitError',
    'TraversalAbortedError',
    'OutputWriteError',
    'ErrorKind',
    'TraversalStatus',
    'DirectoryEntry',
    'FailureRecord',
    'DirectoryTree',
    'TraversalOutcome',
    'normalize_root',
]
