"""Test fixtures for snaptree consumers.

These fixtures provide a controlled, in-memory directory source so walkers
and renderers can be exercised without touching the real filesystem, with
failures injected at chosen directories.
"""

import errno
import os
import threading
import time
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional

from .._common.model import DirectoryEntry
from ..adapters.filesystem import EntryReader


class Symlink:
    """Layout marker for a symbolic link entry.

    The target is informational only; walkers never follow links.
    """

    def __init__(self, target: str = ""):
        self.target = target


class InMemoryEntryReader(EntryReader):
    """Entry reader over a nested-dict layout.

    Layout values describe each entry: a dict is a directory (its own
    layout), ``None`` is a regular file, and a ``Symlink`` is a link.

    Example:
        reader = InMemoryEntryReader({
            "dirA": {"file1": None},
            "dirB": {},
            "file2": None,
        })
        outcome = walk_tree(reader.root, reader=reader)
    """

    def __init__(
        self,
        layout: Mapping[str, Any],
        root: str = "/virtual",
        errors: Optional[Dict[str, BaseException]] = None,
        delay: float = 0.0
    ):
        """Initialize the reader.

        Args:
            layout: Nested dict describing the tree below ``root``
            root: Virtual absolute root path
            errors: Relative directory path -> exception raised when read
            delay: Seconds to sleep in every read, to widen race windows
        """
        self.root = os.path.abspath(root)
        self.delay = delay
        self.listings: Dict[str, List[DirectoryEntry]] = {}
        self.errors: Dict[str, BaseException] = {
            self.path(rel): error for rel, error in (errors or {}).items()
        }
        self._calls: Counter = Counter()
        self._lock = threading.Lock()
        self._load(self.root, layout)

    def _load(self, directory: str, layout: Mapping[str, Any]) -> None:
        entries = []
        for name, value in layout.items():
            if isinstance(value, Symlink):
                entries.append(DirectoryEntry(name, is_dir=False, is_symlink=True))
            elif isinstance(value, Mapping):
                entries.append(DirectoryEntry(name, is_dir=True))
                self._load(os.path.join(directory, name), value)
            else:
                entries.append(DirectoryEntry(name))
        self.listings[directory] = entries

    def path(self, relative: str = "") -> str:
        """Absolute virtual path for a ``/``-separated relative path."""
        if not relative:
            return self.root
        return os.path.join(self.root, *relative.split("/"))

    def add_entry(self, relative: str, entry: DirectoryEntry) -> None:
        """Append an extra entry to an existing directory listing."""
        self.listings[self.path(relative)].append(entry)

    def directories(self) -> List[str]:
        """Every directory path the layout defines, root included."""
        return list(self.listings)

    def calls(self, relative: str = "") -> int:
        """How many times the directory at ``relative`` was read."""
        with self._lock:
            return self._calls[self.path(relative)]

    @property
    def total_calls(self) -> int:
        with self._lock:
            return sum(self._calls.values())

    def read_entries(self, path: str) -> List[DirectoryEntry]:
        with self._lock:
            self._calls[path] += 1
        if self.delay:
            time.sleep(self.delay)
        if path in self.errors:
            raise self.errors[path]
        if path not in self.listings:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        return list(self.listings[path])
