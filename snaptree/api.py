"""High-level API for snaptree.

This module ties the pieces together for the command line and for
programmatic callers: walk a tree with either engine, render it, write the
result and map what happened onto a process exit status.
"""

import asyncio
import logging
import sys
from typing import Optional, TextIO

from ._common.config import RenderOptions, WalkConfig
from ._common.exceptions import OutputWriteError, TraversalAbortedError
from ._common.model import TraversalOutcome, normalize_root
from .adapters import EntryReader
from .aio import walk_tree_async
from .diagnostics import capture_logging
from .render import TreeRenderer
from .sync import walk_tree

logger = logging.getLogger(__name__)

# Exit statuses
EXIT_OK = 0
EXIT_INITIALIZE = 1     # Bad arguments or configuration
EXIT_PARTIAL = 2        # Some directories could not be read
EXIT_OUTPUT = 3         # Writing the rendered tree failed
EXIT_ABORTED = 4        # Traversal hit a fatal error

ENGINES = ("thread", "async")


def build_snapshot(
    root: str,
    config: Optional[WalkConfig] = None,
    reader: Optional[EntryReader] = None,
    verbose: bool = True,
    engine: str = "thread"
) -> TraversalOutcome:
    """Walk ``root`` with the chosen engine.

    Args:
        root: Directory to snapshot
        config: Walk configuration
        reader: Entry reader override
        verbose: Log recoverable failures
        engine: ``"thread"`` or ``"async"``

    Returns:
        TraversalOutcome

    Raises:
        TraversalAbortedError: on a fatal traversal error
        ValueError: for an unknown engine
    """
    if engine == "thread":
        return walk_tree(root, reader=reader, config=config, verbose=verbose)
    if engine == "async":
        return asyncio.run(walk_tree_async(root, reader=reader, config=config, verbose=verbose))
    raise ValueError(f"Unknown engine: {engine}")


def write_output(out: TextIO, text: str) -> None:
    """Write ``text`` and flush, converting stream failures.

    Raises:
        OutputWriteError: if the stream rejects the write
    """
    try:
        out.write(text)
        out.flush()
    except (OSError, ValueError) as error:
        raise OutputWriteError(f"failed to write output: {error}") from error


def run(
    root: str,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    config: Optional[WalkConfig] = None,
    options: Optional[RenderOptions] = None,
    verbose: bool = True,
    engine: str = "thread",
    reader: Optional[EntryReader] = None
) -> int:
    """Snapshot, render and print a directory tree.

    Args:
        root: Directory to list (relative paths are made absolute)
        out: Stream for the tree (default stdout)
        err: Stream for diagnostics (default stderr)
        config: Walk configuration
        options: Render options
        verbose: Emit diagnostics to ``err``
        engine: ``"thread"`` or ``"async"``
        reader: Entry reader override

    Returns:
        Process exit status (one of the ``EXIT_*`` constants)
    """
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr
    config = config or WalkConfig()
    options = options or RenderOptions()

    problems = config.validate()
    if engine not in ENGINES:
        problems.append(f"unknown engine: {engine}")
    if problems:
        print("; ".join(problems), file=err)
        return EXIT_INITIALIZE

    try:
        root = normalize_root(root)
    except (OSError, ValueError) as error:
        print(error, file=err)
        return EXIT_INITIALIZE

    with capture_logging(err, verbose):
        return _snapshot_and_print(root, out, err, config, options, verbose, engine, reader)


def _snapshot_and_print(
    root: str,
    out: TextIO,
    err: TextIO,
    config: WalkConfig,
    options: RenderOptions,
    verbose: bool,
    engine: str,
    reader: Optional[EntryReader]
) -> int:
    try:
        outcome = build_snapshot(root, config=config, reader=reader, verbose=verbose, engine=engine)
    except TraversalAbortedError as error:
        logger.error("%s", error)
        return EXIT_ABORTED

    result = TreeRenderer(options).render(outcome.tree, root)
    try:
        write_output(out, result.text(options.show_totals))
    except OutputWriteError as error:
        print(error, file=err)
        return EXIT_OUTPUT

    if not outcome.ok:
        counts = ", ".join(f"{kind.value}={n}" for kind, n in outcome.failure_counts().items())
        logger.warning("%d directories could not be read (%s)", len(outcome.failures), counts)
        return EXIT_PARTIAL
    return EXIT_OK
