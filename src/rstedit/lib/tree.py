"""Depth-first traversal and queries over syntax trees.

``visit`` calls ``on_enter`` before a node's children and ``on_leave`` after
them, in document order, for every node including the root. ``on_enter`` may
return ``SKIP`` to leave the node's children unvisited, for callers about to
replace the subtree.

Callbacks receive the node and its index path (tuple of child indexes from the
root, empty for the root itself).
"""

from collections.abc import Callable, Sequence
from typing import Any

from rstedit.models.node import Node, NodeType, TextNode

IndexPath = tuple[int, ...]
EnterCallback = Callable[[Node, IndexPath], Any]
LeaveCallback = Callable[[Node, IndexPath], Any]
ChildrenGetter = Callable[[Node], Sequence[Node]]


class _Skip:
    def __repr__(self) -> str:
        return "SKIP"


SKIP = _Skip()


def get_children(node: Node) -> Sequence[Node]:
    """Default children accessor."""
    return node.children or []


def visit(
    node: Node,
    on_enter: EnterCallback,
    on_leave: LeaveCallback | None = None,
    get_children: ChildrenGetter = get_children,
) -> None:
    """Walk ``node`` depth-first.

    Children are read after ``on_enter`` returns, so an enter callback may
    replace a node's children before they are walked. ``on_leave`` may
    replace the children of the node it is given; the walk has already
    finished with them.

    Args:
        node: Root of the subtree to walk
        on_enter: Called before descending; return ``SKIP`` to prune
        on_leave: Called after all children were visited
        get_children: Accessor returning a node's children
    """

    def walk(current: Node, path: IndexPath) -> None:
        if on_enter(current, path) is not SKIP:
            for index, child in enumerate(list(get_children(current))):
                walk(child, path + (index,))
        if on_leave is not None:
            on_leave(current, path)

    walk(node, ())


def find(node: Node, predicate: Callable[[Node], bool]) -> Node | None:
    """Return the first node in document order matching ``predicate``."""
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        if predicate(current):
            return current
        stack.extend(reversed(list(get_children(current))))
    return None


def find_all(node: Node, predicate: Callable[[Node], bool]) -> list[Node]:
    """Return every node in document order matching ``predicate``."""
    found: list[Node] = []

    def on_enter(current: Node, _path: IndexPath) -> None:
        if predicate(current):
            found.append(current)

    visit(node, on_enter)
    return found


def get_inner_text(node: Node) -> str:
    """Concatenate the values of all ``text`` descendants of ``node``."""
    return "".join(
        text.value
        for text in find_all(node, lambda n: n.type == NodeType.TEXT)
        if isinstance(text, TextNode)
    )

