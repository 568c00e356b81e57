"""Unit tests for the thread-pool walker.

Most tests run against an in-memory reader so failures can be injected at
chosen directories; a few walk a real temporary directory.
"""

import errno
import io
import os
import shutil
import sys
import tempfile
import threading
import unittest
from pathlib import Path

from snaptree import (
    DirectoryEntry,
    ErrorKind,
    TraversalAbortedError,
    TraversalStatus,
    WalkConfig,
)
from snaptree.diagnostics import configure_logging
from snaptree.sync import ThreadedTreeWalker, walk_tree
from snaptree.testing import InMemoryEntryReader, Symlink


SAMPLE_LAYOUT = {
    "dirA": {"file1": None, "inner": {"deep.txt": None}},
    "dirB": {},
    "file2": None,
    "link": Symlink("dirA"),
}


def wide_layout(width=20, depth=3):
    """Every directory has ``width`` subdirectories, ``depth`` levels deep."""
    if depth == 0:
        return {"leaf.txt": None}
    return {f"d{i}": wide_layout(width if depth > 2 else 3, depth - 1) for i in range(width)}


def snaptree_threads():
    return [t for t in threading.enumerate() if t.name.startswith("snaptree-")]


class TestThreadedWalkBasics(unittest.TestCase):
    """Walks that complete without failures."""

    def setUp(self):
        configure_logging(io.StringIO(), verbose=False)

    def test_visits_every_directory_once(self):
        reader = InMemoryEntryReader(SAMPLE_LAYOUT)

        outcome = walk_tree(reader.root, reader=reader, config=WalkConfig(workers=4))

        self.assertEqual(set(outcome.tree), set(reader.directories()))
        self.assertEqual(outcome.status, TraversalStatus.OK)
        self.assertEqual(reader.total_calls, len(reader.directories()))

    def test_entries_keep_reader_order(self):
        reader = InMemoryEntryReader({"z": None, "a": {}, "m": None})

        outcome = walk_tree(reader.root, reader=reader)

        self.assertEqual([e.name for e in outcome.tree.entries(reader.root)], ["z", "a", "m"])

    def test_symlinks_are_not_followed(self):
        reader = InMemoryEntryReader(SAMPLE_LAYOUT)

        outcome = walk_tree(reader.root, reader=reader)

        self.assertNotIn(reader.path("link"), outcome.tree)
        self.assertEqual(reader.calls("link"), 0)

    def test_wide_tree_with_tiny_queue(self):
        """A queue far smaller than the fan-out must not deadlock or drop work."""
        reader = InMemoryEntryReader(wide_layout(), delay=0.0005)

        outcome = walk_tree(reader.root, reader=reader, config=WalkConfig(workers=4, queue_size=1))

        self.assertEqual(set(outcome.tree), set(reader.directories()))
        self.assertEqual(reader.total_calls, len(reader.directories()))

    def test_single_worker(self):
        reader = InMemoryEntryReader(wide_layout(width=5))

        outcome = walk_tree(reader.root, reader=reader, config=WalkConfig(workers=1, queue_size=2))

        self.assertEqual(set(outcome.tree), set(reader.directories()))

    def test_deep_chain(self):
        layout = {}
        node = layout
        for i in range(200):
            node[f"level{i}"] = {}
            node = node[f"level{i}"]
        reader = InMemoryEntryReader(layout)

        outcome = walk_tree(reader.root, reader=reader, config=WalkConfig(workers=3))

        self.assertEqual(len(outcome.tree), 201)

    def test_idempotent(self):
        reader = InMemoryEntryReader(wide_layout(width=6))
        walker = ThreadedTreeWalker(reader=reader, config=WalkConfig(workers=4))

        first = walker.walk(reader.root)
        second = walker.walk(reader.root)

        self.assertEqual(set(first.tree), set(second.tree))
        for path in first.tree:
            self.assertEqual(
                {e.name for e in first.tree.entries(path)},
                {e.name for e in second.tree.entries(path)},
            )

    def test_no_threads_survive(self):
        reader = InMemoryEntryReader(wide_layout(width=5))

        walk_tree(reader.root, reader=reader, config=WalkConfig(workers=8))

        self.assertEqual(snaptree_threads(), [])

    def test_duplicate_visit_discarded(self):
        reader = InMemoryEntryReader(SAMPLE_LAYOUT)
        reader.add_entry("", DirectoryEntry("dirA", is_dir=True))
        stream = io.StringIO()
        configure_logging(stream, verbose=True)

        outcome = walk_tree(reader.root, reader=reader, config=WalkConfig(workers=2))

        self.assertEqual(outcome.duplicates, [reader.path("dirA")])
        self.assertEqual(set(outcome.tree), set(reader.directories()))
        # The discarded read schedules nothing, so the subtree is read once
        self.assertEqual(reader.calls("dirA"), 2)
        self.assertEqual(reader.calls("dirA/inner"), 1)
        self.assertEqual(outcome.status, TraversalStatus.OK)
        self.assertIn(f"duplicated directory: {reader.path('dirA')}", stream.getvalue())


class TestThreadedWalkFailures(unittest.TestCase):
    """Recoverable and fatal failures."""

    def setUp(self):
        configure_logging(io.StringIO(), verbose=False)

    def test_permission_denied_is_partial(self):
        reader = InMemoryEntryReader(
            SAMPLE_LAYOUT,
            errors={"dirA": PermissionError(errno.EACCES, "Permission denied")},
        )

        outcome = walk_tree(reader.root, reader=reader)

        self.assertEqual(outcome.status, TraversalStatus.PARTIAL)
        self.assertIn(reader.path("dirA"), outcome.tree)
        self.assertEqual(outcome.tree.entries(reader.path("dirA")), ())
        self.assertNotIn(reader.path("dirA/inner"), outcome.tree)
        self.assertIn(reader.path("dirB"), outcome.tree)
        self.assertEqual(outcome.failure_counts(), {ErrorKind.PERMISSION_DENIED: 1})
        self.assertEqual(outcome.failures[0].path, reader.path("dirA"))

    def test_vanished_directory_is_partial(self):
        reader = InMemoryEntryReader(
            SAMPLE_LAYOUT,
            errors={"dirB": FileNotFoundError(errno.ENOENT, "No such file or directory")},
        )

        outcome = walk_tree(reader.root, reader=reader)

        self.assertEqual(outcome.failure_counts(), {ErrorKind.NOT_FOUND: 1})
        self.assertEqual(len(outcome.tree), len(reader.directories()))

    def test_reused_walker_reports_each_walk_separately(self):
        reader = InMemoryEntryReader(SAMPLE_LAYOUT, errors={"dirB": PermissionError("denied")})
        walker = ThreadedTreeWalker(reader=reader, config=WalkConfig(workers=2))

        first = walker.walk(reader.root)
        second = walker.walk(reader.root)

        self.assertEqual(first.failure_counts(), {ErrorKind.PERMISSION_DENIED: 1})
        self.assertEqual(second.failure_counts(), {ErrorKind.PERMISSION_DENIED: 1})
        self.assertEqual(len(second.failures), 1)

    def test_recoverable_failure_is_logged(self):
        stream = io.StringIO()
        configure_logging(stream, verbose=True)
        reader = InMemoryEntryReader(SAMPLE_LAYOUT, errors={"dirB": PermissionError("denied")})

        walk_tree(reader.root, reader=reader, verbose=True)

        self.assertIn(f"skipping unreadable directory {reader.path('dirB')}", stream.getvalue())

    def test_missing_root_is_fatal(self):
        reader = InMemoryEntryReader({})

        with self.assertRaises(TraversalAbortedError) as ctx:
            walk_tree(reader.path("missing"), reader=reader)

        self.assertEqual(ctx.exception.kind, ErrorKind.NOT_FOUND)
        self.assertEqual(ctx.exception.path, reader.path("missing"))
        self.assertEqual(snaptree_threads(), [])

    def test_other_io_error_aborts(self):
        reader = InMemoryEntryReader(
            wide_layout(width=6),
            errors={"d2/d1": OSError(errno.EIO, "Input/output error")},
        )

        with self.assertRaises(TraversalAbortedError) as ctx:
            walk_tree(reader.root, reader=reader, config=WalkConfig(workers=4))

        self.assertEqual(ctx.exception.kind, ErrorKind.OTHER_IO)
        self.assertIsInstance(ctx.exception.error, OSError)
        self.assertEqual(snaptree_threads(), [])

    def test_abort_on_error_mode(self):
        reader = InMemoryEntryReader(
            wide_layout(width=6),
            errors={"d0": PermissionError("denied")},
        )

        with self.assertRaises(TraversalAbortedError) as ctx:
            walk_tree(reader.root, reader=reader,
                      config=WalkConfig(workers=2, abort_on_error=True))

        self.assertEqual(ctx.exception.kind, ErrorKind.PERMISSION_DENIED)
        # Queued directories are dropped rather than read
        self.assertLess(reader.total_calls, len(reader.directories()))
        self.assertEqual(snaptree_threads(), [])


class TestThreadedWalkFilesystem(unittest.TestCase):
    """Walk a real temporary directory."""

    def setUp(self):
        configure_logging(io.StringIO(), verbose=False)
        self.test_dir = tempfile.mkdtemp()
        self.test_path = Path(self.test_dir)
        (self.test_path / "dirA").mkdir()
        (self.test_path / "dirA" / "file1").write_text("1")
        (self.test_path / "dirA" / "sub").mkdir()
        (self.test_path / "dirB").mkdir()
        (self.test_path / "file2").write_text("2")

    def tearDown(self):
        for path in (self.test_path / "dirB",):
            if path.exists():
                os.chmod(path, 0o755)
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_walks_real_directory(self):
        outcome = walk_tree(self.test_dir)

        root = os.path.abspath(self.test_dir)
        self.assertEqual(
            set(outcome.tree),
            {
                root,
                os.path.join(root, "dirA"),
                os.path.join(root, "dirA", "sub"),
                os.path.join(root, "dirB"),
            },
        )
        self.assertEqual([e.name for e in outcome.tree.entries(root)], ["dirA", "dirB", "file2"])

    def test_trailing_separator_is_normalized(self):
        outcome = walk_tree(self.test_dir + os.sep)
        self.assertIn(os.path.abspath(self.test_dir), outcome.tree)

    @unittest.skipIf(sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
                     "permission bits not enforced")
    def test_unreadable_directory(self):
        (self.test_path / "dirB" / "hidden").mkdir()
        os.chmod(self.test_path / "dirB", 0)

        outcome = walk_tree(self.test_dir)

        self.assertEqual(outcome.status, TraversalStatus.PARTIAL)
        self.assertEqual(outcome.tree.entries(os.path.join(os.path.abspath(self.test_dir), "dirB")), ())


if __name__ == '__main__':
    unittest.main()
