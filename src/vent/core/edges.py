"""Edge path parsing.

Eager-load requests are flat strings such as ``"groups__permissions"``:
``__`` separates a relation from the relation nested under it. Parsing
turns a list of them into a tree that storage clients walk when
attaching related entities.
"""

from __future__ import annotations

from dataclasses import dataclass

EDGE_SEPARATOR = "__"


@dataclass(frozen=True)
class EdgePath:
    """One relation to load, plus the relations to load beneath it."""

    name: str
    children: tuple[EdgePath, ...] = ()

    def child(self, name: str) -> EdgePath | None:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def flatten(self) -> list[str]:
        """Return every path in this subtree as a flat string."""
        result = [self.name]
        for child in self.children:
            for child_path in child.flatten():
                result.append(f"{self.name}{EDGE_SEPARATOR}{child_path}")
        return result

    def __str__(self) -> str:
        return ", ".join(self.flatten())


def parse_edge_paths(paths: list[str]) -> list[EdgePath]:
    """Parse flat edge path strings into a forest of EdgePath nodes.

    Strings sharing a first segment are merged into one node and all of
    their remainders become that node's children. A string without a
    separator yields a leaf. The result keeps first-seen order, but
    callers should treat it as a set of names.

    Example:
        >>> parse_edge_paths(["groups", "groups__permissions", "posts__author"])
        [EdgePath(name='groups', children=(EdgePath(name='permissions', children=()),)),
         EdgePath(name='posts', children=(EdgePath(name='author', children=()),))]
    """
    grouped: dict[str, list[str]] = {}
    for path in paths:
        head, sep, rest = path.partition(EDGE_SEPARATOR)
        remainders = grouped.setdefault(head, [])
        if sep:
            remainders.append(rest)

    return [
        EdgePath(name=name, children=tuple(parse_edge_paths(remainders)))
        for name, remainders in grouped.items()
    ]


def flatten_edge_paths(tree: list[EdgePath]) -> list[str]:
    """Inverse of parse_edge_paths, up to ordering and duplicates."""
    result: list[str] = []
    for node in tree:
        result.extend(node.flatten())
    return result
