"""Entry readers bridging concrete directory sources to the walkers."""

from .filesystem import (
    EntryReader,
    ScandirEntryReader,
)

__all__ = [
    'EntryReader',
    'ScandirEntryReader',
]
