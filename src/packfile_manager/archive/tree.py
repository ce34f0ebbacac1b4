"""Folder tree derived from entry paths.

PackFiles have no folder records; folders only exist as shared path prefixes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(slots=True)
class TreeNode:
    name: str
    path: tuple[str, ...] = ()
    is_folder: bool = True
    children: dict[str, TreeNode] = field(default_factory=dict)

    def sorted_children(self) -> list[TreeNode]:
        """Folders first, then files, each case-insensitively by name."""
        return sorted(self.children.values(), key=lambda n: (not n.is_folder, n.name.lower()))

    def count_files(self) -> int:
        if not self.is_folder:
            return 1
        return sum(child.count_files() for child in self.children.values())


def build_tree(paths: Iterable[tuple[str, ...]], root_name: str = "") -> TreeNode:
    root = TreeNode(name=root_name)
    for path in paths:
        node = root
        for depth, segment in enumerate(path):
            is_leaf = depth == len(path) - 1
            child = node.children.get(segment)
            if child is None:
                child = TreeNode(name=segment, path=path[: depth + 1], is_folder=not is_leaf)
                node.children[segment] = child
            elif not is_leaf:
                child.is_folder = True
            node = child
    return root

