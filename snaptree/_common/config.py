"""Configuration system for snaptree.

This module defines how callers specify a traversal (worker pool size,
queue capacity, failure handling) and how the finished snapshot is rendered
(ignore list, path style, colors, totals). Both are plain values passed to
the walkers and the renderer; there is no process-wide option state.
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional


DEFAULT_IGNORE = (".git", ".cache")
DEFAULT_QUEUE_SIZE = 128


@dataclass
class WalkConfig:
    """Configuration for the concurrent traversal engine."""

    workers: Optional[int] = None           # None = host parallelism
    queue_size: int = DEFAULT_QUEUE_SIZE    # Capacity of the pending-path queue
    abort_on_error: bool = False            # Any failure aborts the walk

    def resolved_workers(self) -> int:
        """Return the effective worker count (never less than 1).

        Returns:
            ``workers`` if set, otherwise ``os.cpu_count()``
        """
        count = self.workers if self.workers is not None else (os.cpu_count() or 1)
        return max(1, count)

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        if self.workers is not None and self.workers <= 0:
            errors.append("workers must be positive")
        if self.queue_size <= 0:
            errors.append("queue_size must be positive")
        return errors


@dataclass
class RenderOptions:
    """Configuration consumed by the tree renderer."""

    ignore_names: FrozenSet[str] = field(default_factory=frozenset)
    full_path: bool = False          # Absolute path per line vs. indented tree
    directories_only: bool = False   # Suppress file entries entirely
    colorize: bool = True
    show_totals: bool = False        # Append directory/file counts

    def __post_init__(self):
        # Accept any iterable of names but store an immutable set
        self.ignore_names = frozenset(self.ignore_names)

    def is_ignored(self, name: str) -> bool:
        """Check a directory base-name against the ignore list."""
        return name in self.ignore_names

    @staticmethod
    def split_ignore(value: Optional[str]) -> FrozenSet[str]:
        """Split an ``os.pathsep`` separated list of directory names.

        Empty items are dropped, so ``""`` means "ignore nothing".
        """
        if not value:
            return frozenset()
        return frozenset(name for name in value.split(os.pathsep) if name)

    @classmethod
    def from_ignore_string(cls, value: Optional[str], **kwargs) -> 'RenderOptions':
        """Create options from an ``os.pathsep`` separated ignore string."""
        return cls(ignore_names=cls.split_ignore(value), **kwargs)

