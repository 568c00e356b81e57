"""Filesystem entry readers.

An entry reader lists the immediate children of one directory. Walkers call
it concurrently from several workers, so readers keep no mutable state
between calls.

The default reader uses os.scandir, which provides cached type information
via DirEntry objects and avoids a stat call per child.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import List

from .._common.model import DirectoryEntry

logger = logging.getLogger(__name__)


class EntryReader(ABC):
    """Abstract base class for entry readers.

    Readers bridge between the walkers and a concrete source of directory
    listings (the real filesystem, or an in-memory fake in tests).
    """

    @abstractmethod
    def read_entries(self, path: str) -> List[DirectoryEntry]:
        """List the immediate children of ``path``.

        Args:
            path: Absolute directory path

        Returns:
            Entries in listing order

        Raises:
            OSError: if the directory cannot be listed (PermissionError,
                FileNotFoundError, or any other I/O failure)
        """
        pass


class ScandirEntryReader(EntryReader):
    """Entry reader backed by os.scandir.

    Symbolic links are reported with ``is_symlink=True`` and ``is_dir=False``
    whatever they point at, so walkers never follow them.
    """

    def __init__(self, sort_entries: bool = True):
        """Initialize the reader.

        Args:
            sort_entries: Return entries sorted by name (like ``ls``) instead
                of raw directory order, so repeated runs list identically
        """
        self.sort_entries = sort_entries

    def read_entries(self, path: str) -> List[DirectoryEntry]:
        entries = []
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_symlink = entry.is_symlink()
                    is_dir = not is_symlink and entry.is_dir(follow_symlinks=False)
                except OSError as error:
                    # Entry vanished or cannot be stat'ed; list it as a file
                    logger.debug("cannot determine type of %s, listing as file: %s", entry.path, error)
                    is_symlink = False
                    is_dir = False
                entries.append(DirectoryEntry(
                    name=entry.name,
                    is_dir=is_dir,
                    is_symlink=is_symlink,
                ))
        if self.sort_entries:
            entries.sort(key=lambda e: e.name)
        return entries

    def __repr__(self) -> str:
        return f"ScandirEntryReader(sort_entries={self.sort_entries})"
