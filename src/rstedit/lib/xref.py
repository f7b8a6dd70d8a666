"""Cross-reference classification.

Runs once over a reconciled tree:

- ``interpreted_text`` nodes with a cross-reference role (``ref``, ``doc`` by
  default) get a ``target``: the content of a trailing ``<...>`` if present,
  otherwise the whole inner text.
- ``reference`` nodes get a ``target`` by the same rule.
- ``comment`` nodes whose text is ``_name:`` are replaced by ``LabelNode``.

The pass only adds information and is idempotent.
"""

import re
from collections.abc import Iterable

from rstedit.lib.tree import IndexPath, find_all, get_inner_text, visit
from rstedit.models.node import (
    InterpretedTextNode,
    LabelNode,
    Node,
    NodeType,
    ReferenceNode,
)

XREF_ROLES: tuple[str, ...] = ("ref", "doc")

EXPLICIT_TARGET_PATTERN = re.compile(r"^(?P<title>.*?)\s*<(?P<target>[^<>]*)>\s*$", re.DOTALL)
LABEL_PATTERN = re.compile(r"^_(?P<label>[^\n]+):$")


def resolve_target(inner_text: str) -> str:
    """Return the bracketed target of ``title <target>``, else the whole text.

    Example:
        >>> resolve_target("Install the tools <install>")
        'install'
        >>> resolve_target("install")
        'install'
    """
    match = EXPLICIT_TARGET_PATTERN.match(inner_text)
    if match is not None:
        return match.group("target").strip()
    return inner_text.strip()


def label_name(comment: Node) -> str | None:
    """Return the anchor name if ``comment`` defines one (``.. _name:``)."""
    match = LABEL_PATTERN.match(get_inner_text(comment).strip())
    return match.group("label") if match else None


def classify_cross_references(
    tree: Node, roles: Iterable[str] = XREF_ROLES
) -> Node:
    """Annotate cross-references and labels in ``tree`` in place.

    Args:
        tree: Reconciled document tree
        roles: Roles whose interpreted text is a cross-reference

    Returns:
        The same tree
    """
    xref_roles = frozenset(roles)

    def on_enter(node: Node, _path: IndexPath) -> None:
        for index, child in enumerate(node.children):
            if child.type != NodeType.COMMENT:
                continue
            label = label_name(child)
            if label is not None:
                node.children[index] = LabelNode.from_comment(child, label)

        if isinstance(node, InterpretedTextNode) and node.role in xref_roles:
            node.target = resolve_target(get_inner_text(node))
        elif isinstance(node, ReferenceNode):
            node.target = resolve_target(get_inner_text(node))

    visit(tree, on_enter)
    return tree


def collect_labels(tree: Node) -> list[str]:
    """Return the names of all labels defined in ``tree``, in document order."""
    return [
        node.label
        for node in find_all(tree, lambda n: isinstance(n, LabelNode))
        if isinstance(node, LabelNode)
    ]


def collect_links(tree: Node) -> list[Node]:
    """Return all classified cross-reference and reference nodes in ``tree``."""
    return find_all(
        tree,
        lambda n: isinstance(n, (InterpretedTextNode, ReferenceNode))
        and n.target is not None,
    )
