"""Thread-pool tree walker.

A fixed pool of worker threads pulls directory paths from a bounded FIFO
queue and reads them; one aggregator thread owns the snapshot, records each
result and schedules the children it discovers. The walk ends when the
outstanding-work counter reaches zero or a fatal error is raised, and every
thread is joined before ``walk`` returns.
"""

import contextvars
import logging
import queue
import threading
from typing import List, Optional

from .._common.builder import OutstandingWork, ReadResult, SnapshotBuilder
from .._common.config import WalkConfig
from .._common.model import TraversalOutcome, normalize_root
from ..adapters import EntryReader, ScandirEntryReader
from ..error_policies import ErrorPolicy, abort, policy_for

logger = logging.getLogger(__name__)

# How often blocked threads re-check the shutdown signal
POLL_INTERVAL = 0.05


class ThreadedTreeWalker:
    """Concurrent directory walker backed by OS threads.

    The walker itself holds only configuration; each call to ``walk``
    builds its own queues and threads, so one walker can be reused and
    concurrent walks cannot interfere.
    """

    def __init__(
        self,
        reader: Optional[EntryReader] = None,
        config: Optional[WalkConfig] = None,
        policy: Optional[ErrorPolicy] = None,
        verbose: bool = True
    ):
        """Initialize walker.

        Args:
            reader: Entry reader (defaults to ScandirEntryReader)
            config: Worker count, queue size and abort mode
            policy: Error policy (derived from ``config.abort_on_error`` if None)
            verbose: Log recoverable failures when the policy is derived
        """
        self.reader = reader or ScandirEntryReader()
        self.config = config or WalkConfig()
        self.policy = policy or policy_for(self.config.abort_on_error, verbose)

    def walk(self, root: str) -> TraversalOutcome:
        """Snapshot the subtree rooted at ``root``.

        Args:
            root: Directory to start from (made absolute)

        Returns:
            TraversalOutcome with the completed tree

        Raises:
            TraversalAbortedError: on a fatal error, including any failure
                to read the root itself
        """
        return _ThreadedWalk(self, normalize_root(root)).run()


class _ThreadedWalk:
    """State for a single walk."""

    def __init__(self, walker: ThreadedTreeWalker, root: str):
        self.root = root
        self.reader = walker.reader
        self.policy = walker.policy
        self.workers = walker.config.resolved_workers()
        self.work: "queue.Queue[str]" = queue.Queue(maxsize=walker.config.queue_size)
        self.results: "queue.Queue[ReadResult]" = queue.Queue()
        self.stop = threading.Event()
        self.builder = SnapshotBuilder()
        self.outstanding = OutstandingWork()
        self.error: Optional[BaseException] = None
        self._error_lock = threading.Lock()

    def run(self) -> TraversalOutcome:
        self._schedule(self.root)

        threads: List[threading.Thread] = [
            self._thread(self._worker, f"snaptree-worker-{i}") for i in range(self.workers)
        ]
        threads.append(self._thread(self._aggregate, "snaptree-aggregator"))
        for thread in threads:
            thread.start()

        self.stop.wait()
        for thread in threads:
            thread.join()
        drained = self._drain()
        if drained:
            logger.debug("dropped %d queued directories after shutdown", drained)

        if self.error is not None:
            raise self.error
        return self.builder.outcome()

    def _thread(self, target, name: str) -> threading.Thread:
        # Each thread runs in its own copy of the caller's context so
        # context-scoped settings such as the log capture follow the walk
        context = contextvars.copy_context()
        return threading.Thread(target=context.run, args=(target,), name=name, daemon=True)

    def _fail(self, error: BaseException) -> None:
        """Record the first fatal error and broadcast shutdown."""
        with self._error_lock:
            if self.error is None:
                self.error = error
        self.stop.set()

    def _worker(self) -> None:
        while not self.stop.is_set():
            try:
                path = self.work.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                continue
            if self.stop.is_set():
                break

            try:
                entries = self.reader.read_entries(path)
            except Exception as error:
                try:
                    if path == self.root:
                        raise abort(path, error)
                    failure = self.policy.handle(error, path)
                except Exception as fatal:
                    self._fail(fatal)
                    return
                self.results.put(ReadResult(path=path, failure=failure))
                continue
            self.results.put(ReadResult(path=path, entries=tuple(entries)))

    def _aggregate(self) -> None:
        try:
            while not self.stop.is_set():
                try:
                    result = self.results.get(timeout=POLL_INTERVAL)
                except queue.Empty:
                    continue
                for child in self.builder.accept(result):
                    self._schedule(child)
                if self.outstanding.done():
                    self.stop.set()
        except Exception as error:
            self._fail(error)

    def _schedule(self, path: str) -> None:
        # Count before enqueueing so the parent's decrement can never
        # bring the counter to zero while this child is pending
        self.outstanding.add()
        while not self.stop.is_set():
            try:
                self.work.put(path, timeout=POLL_INTERVAL)
                return
            except queue.Full:
                continue

    def _drain(self) -> int:
        count = 0
        while True:
            try:
                self.work.get_nowait()
            except queue.Empty:
                return count
            count += 1


def walk_tree(
    root: str,
    reader: Optional[EntryReader] = None,
    config: Optional[WalkConfig] = None,
    policy: Optional[ErrorPolicy] = None,
    verbose: bool = True
) -> TraversalOutcome:
    """Snapshot a directory tree with a thread pool.

    Args:
        root: Directory to start from
        reader: Entry reader (defaults to ScandirEntryReader)
        config: Walk configuration
        policy: Error policy
        verbose: Log recoverable failures

    Returns:
        TraversalOutcome

    Example:
        >>> outcome = walk_tree("/srv/data", config=WalkConfig(workers=4))
        >>> len(outcome.tree)
    """
    walker = ThreadedTreeWalker(reader=reader, config=config, policy=policy, verbose=verbose)
    return walker.walk(root)
