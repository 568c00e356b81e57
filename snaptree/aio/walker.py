"""Async tree walker.

Same contract as the thread-pool walker, expressed with asyncio: worker
tasks pull paths from an ``asyncio.Queue`` and run the blocking directory
read in a dedicated thread pool sized to the worker count; one aggregator
task owns the snapshot. All tasks are cancelled and awaited, and the read
pool is shut down, before ``walk`` returns.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .._common.builder import ReadResult, SnapshotBuilder
from .._common.config import WalkConfig
from .._common.model import TraversalOutcome, normalize_root
from ..adapters import EntryReader, ScandirEntryReader
from ..error_policies import ErrorPolicy, abort, policy_for

logger = logging.getLogger(__name__)


class AsyncTreeWalker:
    """Concurrent directory walker for use inside an event loop."""

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

    async def walk(self, root: str) -> TraversalOutcome:
        """Snapshot the subtree rooted at ``root``.

        Args:
            root: Directory to start from (made absolute)

        Returns:
            TraversalOutcome with the completed tree

        Raises:
            TraversalAbortedError: on a fatal error, including any failure
                to read the root itself
        """
        return await _AsyncWalk(self, normalize_root(root)).run()


class _AsyncWalk:
    """State for a single walk. Must be created inside the running loop."""

    def __init__(self, walker: AsyncTreeWalker, root: str):
        self.root = root
        self.reader = walker.reader
        self.policy = walker.policy
        self.workers = walker.config.resolved_workers()
        self.work: asyncio.Queue = asyncio.Queue(maxsize=walker.config.queue_size)
        self.results: asyncio.Queue = asyncio.Queue()
        self.done = asyncio.Event()
        self.builder = SnapshotBuilder()
        # Only the aggregator task touches this after the root is scheduled,
        # and tasks never run in parallel, so a plain int is enough
        self.outstanding = 0
        self.error: Optional[BaseException] = None

    async def run(self) -> TraversalOutcome:
        await self._schedule(self.root)

        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="snaptree-read")
        tasks: List[asyncio.Task] = [
            asyncio.create_task(self._worker(executor), name=f"snaptree-worker-{i}")
            for i in range(self.workers)
        ]
        tasks.append(asyncio.create_task(self._aggregate(), name="snaptree-aggregator"))
        try:
            await self.done.wait()
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            executor.shutdown(wait=True, cancel_futures=True)

        if not self.work.empty():
            logger.debug("dropped %d queued directories after shutdown", self.work.qsize())
        if self.error is not None:
            raise self.error
        return self.builder.outcome()

    def _fail(self, error: BaseException) -> None:
        if self.error is None:
            self.error = error
        self.done.set()

    async def _worker(self, executor: ThreadPoolExecutor) -> None:
        loop = asyncio.get_running_loop()
        while True:
            path = await self.work.get()
            try:
                entries = await loop.run_in_executor(executor, self.reader.read_entries, path)
            except Exception as error:
                try:
                    if path == self.root:
                        raise abort(path, error)
                    failure = self.policy.handle(error, path)
                except Exception as fatal:
                    self._fail(fatal)
                    return
                await self.results.put(ReadResult(path=path, failure=failure))
                continue
            await self.results.put(ReadResult(path=path, entries=tuple(entries)))

    async def _aggregate(self) -> None:
        try:
            while True:
                result = await self.results.get()
                for child in self.builder.accept(result):
                    await self._schedule(child)
                self.outstanding -= 1
                if self.outstanding == 0:
                    self.done.set()
                    return
        except Exception as error:
            self._fail(error)

    async def _schedule(self, path: str) -> None:
        self.outstanding += 1
        await self.work.put(path)


async def walk_tree_async(
    root: str,
    reader: Optional[EntryReader] = None,
    config: Optional[WalkConfig] = None,
    policy: Optional[ErrorPolicy] = None,
    verbose: bool = True
) -> TraversalOutcome:
    """Snapshot a directory tree asynchronously.

    Args:
        root: Directory to start from
        reader: Entry reader (defaults to ScandirEntryReader)
        config: Walk configuration
        policy: Error policy
        verbose: Log recoverable failures

    Returns:
        TraversalOutcome

    Example:
        >>> outcome = await walk_tree_async("/srv/data")
        >>> outcome.status
    """
    walker = AsyncTreeWalker(reader=reader, config=config, policy=policy, verbose=verbose)
    return await walker.walk(root)
