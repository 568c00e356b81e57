"""Single-writer snapshot bookkeeping shared by both walkers.

Workers only read directories and publish ``ReadResult`` objects; exactly
one aggregator feeds them to a ``SnapshotBuilder``, which owns the
``DirectoryTree`` and decides which children to schedule next.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .exceptions import DuplicateVisitError
from .model import DirectoryEntry, DirectoryTree, FailureRecord, TraversalOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadResult:
    """What a worker publishes after reading one directory."""

    path: str
    entries: Tuple[DirectoryEntry, ...] = ()
    failure: Optional[FailureRecord] = None


class OutstandingWork:
    """Counter of scheduled-but-not-yet-processed directories.

    Incremented once per scheduled directory and decremented once that
    directory's result has been recorded and its children scheduled. The
    walk is complete exactly when ``done()`` returns True, which happens once.
    """

    def __init__(self):
        self._count = 0
        self._lock = threading.Lock()

    def add(self, count: int = 1) -> None:
        with self._lock:
            self._count += count

    def done(self) -> bool:
        """Mark one directory processed; True if nothing remains."""
        with self._lock:
            self._count -= 1
            if self._count < 0:
                raise RuntimeError("outstanding work counter went negative")
            return self._count == 0

    @property
    def count(self) -> int:
        with self._lock:
            return self._count


class SnapshotBuilder:
    """Records read results into a DirectoryTree.

    Not thread-safe by itself: only the aggregator may call ``accept``.
    """

    def __init__(self):
        self.tree = DirectoryTree()
        self.failures: List[FailureRecord] = []
        self.duplicates: List[str] = []

    def accept(self, result: ReadResult) -> List[str]:
        """Record one result and return the child directories to schedule.

        A second result for an already-recorded path is discarded, logged
        and contributes no children.

        Args:
            result: Result published by a worker

        Returns:
            Absolute paths of traversable child directories, in entry order
        """
        if result.failure is not None:
            self.failures.append(result.failure)
        try:
            self.tree.record(result.path, result.entries)
        except DuplicateVisitError as error:
            logger.warning("%s", error)
            self.duplicates.append(result.path)
            return []
        return [
            os.path.join(result.path, entry.name)
            for entry in result.entries
            if entry.is_traversable
        ]

    def outcome(self) -> TraversalOutcome:
        return TraversalOutcome(
            tree=self.tree,
            failures=list(self.failures),
            duplicates=list(self.duplicates),
        )
