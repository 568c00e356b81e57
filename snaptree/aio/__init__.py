"""Asynchronous implementation of snaptree.

This package contains the asyncio walker for callers that already run an
event loop. Directory reads still block, so they run in a thread pool sized
to the worker count.
"""

from .walker import AsyncTreeWalker, walk_tree_async

__all__ = [
    'AsyncTreeWalker',
    'walk_tree_async',
]
