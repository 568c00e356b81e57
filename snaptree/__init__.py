"""snaptree - Concurrent directory snapshots rendered as tree listings.

snaptree reads a directory subtree with a bounded pool of workers into an
in-memory DirectoryTree, then renders it as an indented or full-path listing
with optional colors, an ignore list and totals.

Choose your engine:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Threads:
    from snaptree.sync import walk_tree

Asyncio:
    from snaptree.aio import walk_tree_async
━━━━━━━━━━━━━━━━━━━━━━━━━━

Both engines produce the same TraversalOutcome; render it with
snaptree.render.render_tree, or do everything at once with snaptree.api.run.
"""

__version__ = "0.13.1"

from ._common import (
    DEFAULT_IGNORE,
    WalkConfig,
    RenderOptions,
    SnapTreeError,
    DuplicateVisitError,
    TraversalAbortedError,
    OutputWriteError,
    ErrorKind,
    TraversalStatus,
    DirectoryEntry,
    FailureRecord,
    DirectoryTree,
    TraversalOutcome,
    normalize_root,
)
from .adapters import EntryReader, ScandirEntryReader
from .error_policies import (
    Severity,
    classify_error,
    ErrorPolicy,
    ContinueOnErrorsPolicy,
    FailFastPolicy,
)
from .render import Role, paint, RenderResult, TreeRenderer, render_tree
from . import sync
from . import aio

__all__ = [
    "__version__",
    "sync",
    "aio",
    "DEFAULT_IGNORE",
    "WalkConfig",
    "RenderOptions",
    "SnapTreeError",
    "DuplicateVisitError",
    "TraversalAbortedError",
    "OutputWriteError",
    "ErrorKind",
    "TraversalStatus",
    "DirectoryEntry",
    "FailureRecord",
    "DirectoryTree",
    "TraversalOutcome",
    "normalize_root",
    "EntryReader",
    "ScandirEntryReader",
    "Severity",
    "classify_error",
    "ErrorPolicy",
    "ContinueOnErrorsPolicy",
    "FailFastPolicy",
    "Role",
    "paint",
    "RenderResult",
    "TreeRenderer",
    "render_tree",
]
