"""Thread-pool implementation of snaptree.

This package walks a directory tree with a fixed pool of OS threads.
Use it from ordinary synchronous code:

    from snaptree.sync import walk_tree
    outcome = walk_tree("/srv/data")
"""

from .walker import ThreadedTreeWalker, walk_tree

__all__ = [
    'ThreadedTreeWalker',
    'walk_tree',
]
