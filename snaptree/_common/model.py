"""Snapshot data model.

A traversal produces a ``DirectoryTree``: a write-once mapping from absolute
directory path to the entries read from that directory, in the order the
entry reader returned them. The renderer only ever reads it.
"""

import os
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Sequence, Tuple

from .exceptions import DuplicateVisitError


class ErrorKind(Enum):
    """Classes of failure the traversal and output stages distinguish."""
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    OTHER_IO = "other_io"
    DUPLICATE_VISIT = "duplicate_visit"
    OUTPUT_WRITE_FAILURE = "output_write_failure"


class TraversalStatus(Enum):
    """Aggregate result of a completed traversal."""
    OK = "ok"
    PARTIAL = "partial"     # At least one directory could not be read


@dataclass(frozen=True)
class DirectoryEntry:
    """One child of a directory, as read by an entry reader.

    Symlinks are reported with ``is_dir=False`` regardless of their target,
    so they are listed but never descended into.
    """

    name: str
    is_dir: bool = False
    is_symlink: bool = False

    @property
    def is_traversable(self) -> bool:
        """True if the walker should schedule this entry as a directory."""
        return self.is_dir and not self.is_symlink


@dataclass(frozen=True)
class FailureRecord:
    """A recoverable failure folded into a partial outcome."""

    path: str
    kind: ErrorKind
    message: str


class DirectoryTree:
    """Mapping of absolute directory path to its recorded entries.

    Each key is written exactly once. Recording the same path twice raises
    ``DuplicateVisitError`` and leaves the first recording untouched.
    """

    def __init__(self):
        self._entries: Dict[str, Tuple[DirectoryEntry, ...]] = {}

    def record(self, path: str, entries: Sequence[DirectoryEntry]) -> None:
        """Store the entries read from ``path``.

        Args:
            path: Normalized absolute directory path
            entries: Entries in reader order

        Raises:
            DuplicateVisitError: if ``path`` was already recorded
        """
        if path in self._entries:
            raise DuplicateVisitError(path)
        self._entries[path] = tuple(entries)

    def entries(self, path: str) -> Tuple[DirectoryEntry, ...]:
        """Entries recorded for ``path``, or an empty tuple if never read."""
        return self._entries.get(path, ())

    def paths(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"DirectoryTree({len(self._entries)} directories)"


@dataclass
class TraversalOutcome:
    """Completed snapshot plus the aggregate status of the walk."""

    tree: DirectoryTree
    failures: List[FailureRecord] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)

    @property
    def status(self) -> TraversalStatus:
        # Duplicate visits are anomalies, not unreadable directories
        return TraversalStatus.PARTIAL if self.failures else TraversalStatus.OK

    @property
    def ok(self) -> bool:
        return self.status is TraversalStatus.OK

    def failure_counts(self) -> Dict[ErrorKind, int]:
        """Count recoverable failures per kind, for reporting."""
        return dict(Counter(record.kind for record in self.failures))


def normalize_root(path: str) -> str:
    """Absolute, normalized form of ``path`` with no trailing separator."""
    return os.path.abspath(os.fspath(path))
