"""Queries over directive nodes of a reconciled tree."""

from collections.abc import Iterable

from rstedit.lib.tree import find_all
from rstedit.models.node import DirectiveNode, Node


def find_directives(tree: Node) -> list[DirectiveNode]:
    """Return every directive below ``tree`` (``tree`` itself excluded)."""
    return [
        node
        for node in find_all(tree, lambda n: isinstance(n, DirectiveNode))
        if node is not tree and isinstance(node, DirectiveNode)
    ]


def find_directives_named(
    tree: Node, names: str | Iterable[str]
) -> list[DirectiveNode]:
    """Return the directives below ``tree`` whose name is in ``names``."""
    wanted = {names} if isinstance(names, str) else set(names)
    return [node for node in find_directives(tree) if node.name in wanted]


def count_nested(
    tree: Node, inner: str | Iterable[str], outer: str | Iterable[str]
) -> int:
    """Count ``inner`` directives nested inside ``outer`` directives.

    A directive nested in two matching outer directives is counted twice,
    once per enclosing directive.

    Example:
        ``count_nested(tree, "tabs", "tabs")`` counts tabs-in-tabs.
    """
    inner_names = [inner] if isinstance(inner, str) else list(inner)
    return sum(
        len(find_directives_named(directive, inner_names))
        for directive in find_directives_named(tree, outer)
    )
