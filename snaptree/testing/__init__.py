"""Testing utilities for snaptree consumers."""

from .fixtures import InMemoryEntryReader, Symlink

__all__ = ['InMemoryEntryReader', 'Symlink']
