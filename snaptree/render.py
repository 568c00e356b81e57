"""Tree rendering.

Walks a completed DirectoryTree depth-first in a single thread and turns it
into output lines. Entries are emitted in the order they were recorded;
the renderer never re-sorts and never touches the filesystem.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from rich.color import ColorSystem
from rich.style import Style

from ._common.config import RenderOptions
from ._common.model import DirectoryEntry, DirectoryTree


class Role(Enum):
    """What a painted piece of text represents."""
    DIRECTORY = "directory"
    IGNORED_DIRECTORY = "ignored_directory"
    SYMLINK = "symlink"
    PLAIN = "plain"


ROLE_STYLES: Dict[Role, Style] = {
    Role.DIRECTORY: Style(color="cyan"),
    Role.IGNORED_DIRECTORY: Style(color="red"),
    Role.SYMLINK: Style(color="green"),
    Role.PLAIN: Style.null(),
}


def paint(text: str, role: Role, enabled: bool = True) -> str:
    """Wrap ``text`` in the ANSI codes for ``role``.

    Args:
        text: Text to color
        role: What the text represents
        enabled: When False this is the identity function

    Returns:
        Colored (or unchanged) text
    """
    if not enabled or role is Role.PLAIN:
        return text
    return ROLE_STYLES[role].render(text, color_system=ColorSystem.STANDARD)


def indent_prefix(depth: int) -> str:
    """Branch prefix for an entry ``depth`` levels below the root.

    Each level adds one space; the level closest to the entry draws the
    ``- `` marker. Root children (depth 0) get no prefix.
    """
    if depth <= 0:
        return ""
    return " " * depth + "- "


@dataclass
class RenderResult:
    """Rendered lines plus post-filter totals."""

    lines: List[str] = field(default_factory=list)
    directories: int = 0
    files: int = 0

    def summary_lines(self) -> List[str]:
        return ["", f"directory {self.directories}", f"file {self.files}"]

    def text(self, show_totals: bool = False) -> str:
        """Join the output once, with a trailing newline.

        Args:
            show_totals: Append the directory/file summary

        Returns:
            The complete output text
        """
        lines = list(self.lines)
        if show_totals:
            lines.extend(self.summary_lines())
        return "\n".join(lines) + "\n"


class TreeRenderer:
    """Formats a DirectoryTree according to RenderOptions."""

    def __init__(self, options: Optional[RenderOptions] = None):
        self.options = options or RenderOptions()

    def render(self, tree: DirectoryTree, root: str) -> RenderResult:
        """Render the subtree of ``tree`` below ``root`` in pre-order.

        Args:
            tree: Completed snapshot
            root: Normalized absolute root path (a key of ``tree``)

        Returns:
            RenderResult with lines and counts
        """
        result = RenderResult()
        # Explicit stack of (directory, depth, remaining entries) so very
        # deep trees do not hit the recursion limit
        stack: List[Tuple[str, int, Iterator[DirectoryEntry]]] = [
            (root, 0, iter(tree.entries(root)))
        ]
        while stack:
            directory, depth, entries = stack[-1]
            entry = next(entries, None)
            if entry is None:
                stack.pop()
                continue

            if entry.is_traversable:
                result.directories += 1
                if self.options.is_ignored(entry.name):
                    result.lines.append(self._line(directory, entry, depth, Role.IGNORED_DIRECTORY))
                    continue
                result.lines.append(self._line(directory, entry, depth, Role.DIRECTORY))
                child = os.path.join(directory, entry.name)
                stack.append((child, depth + 1, iter(tree.entries(child))))
                continue

            if self.options.directories_only:
                continue
            role = Role.SYMLINK if entry.is_symlink else Role.PLAIN
            result.lines.append(self._line(directory, entry, depth, role))
            result.files += 1
        return result

    def _line(self, directory: str, entry: DirectoryEntry, depth: int, role: Role) -> str:
        if self.options.full_path:
            text = os.path.join(directory, entry.name)
        else:
            text = indent_prefix(depth) + entry.name
        if entry.is_traversable:
            text += os.sep
        return paint(text, role, self.options.colorize)


def render_tree(tree: DirectoryTree, root: str, options: Optional[RenderOptions] = None) -> RenderResult:
    """Convenience wrapper around TreeRenderer."""
    return TreeRenderer(options).render(tree, root)
