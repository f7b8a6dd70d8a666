"""Syntax tree node model.

Nodes are plain dataclasses. The ``type`` field holds the node kind using the
vocabulary of the baseline parser; the set is open and kinds not listed in
``NodeType`` pass through untouched. Kinds with extra data get their own
subclass (``TextNode``, ``DirectiveNode``, ...).

Offsets are 0-based indexes into the root document string. Lines and columns
are 1-based.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NodeType(str, Enum):
    """Known node kinds.

    Attributes:
        DOCUMENT: Root of a parsed document
        SECTION: A title plus the blocks under it
        TITLE: Section title, including its adornment lines
        PARAGRAPH: Block of prose
        BULLET_LIST: Bullet list container
        LIST_ITEM: One item of a bullet list
        BLOCK_QUOTE: Indented block
        LITERAL_BLOCK: Indented block following ``::``
        DIRECTIVE: ``.. name:: argument`` block
        COMMENT: Explicit markup block that is not a directive
        LABEL: Comment recognized as an anchor definition
        TEXT: Run of plain text
        UNKNOWN_LINE: Raw line the baseline parser did not interpret
        LITERAL: Inline literal
        STRONG: Strong emphasis
        EMPHASIS: Emphasis
        REFERENCE: Hyperlink reference
        INTERPRETED_TEXT: Role-based inline markup
    """

    DOCUMENT = "document"
    SECTION = "section"
    TITLE = "title"
    PARAGRAPH = "paragraph"
    BULLET_LIST = "bullet_list"
    LIST_ITEM = "list_item"
    BLOCK_QUOTE = "block_quote"
    LITERAL_BLOCK = "literal_block"
    DIRECTIVE = "directive"
    COMMENT = "comment"
    LABEL = "label"
    TEXT = "text"
    UNKNOWN_LINE = "unknown_line"
    LITERAL = "literal"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    REFERENCE = "reference"
    INTERPRETED_TEXT = "interpreted_text"


@dataclass
class Point:
    """A location in a document."""

    offset: int
    line: int
    column: int

    def to_dict(self) -> dict[str, int]:
        return {"offset": self.offset, "line": self.line, "column": self.column}


@dataclass
class Position:
    """Half-open span ``[start.offset, end.offset)`` of a node."""

    start: Point
    end: Point

    def __post_init__(self) -> None:
        if self.start.offset > self.end.offset:
            raise ValueError(
                f"Position start offset {self.start.offset} is after "
                f"end offset {self.end.offset}"
            )

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


@dataclass
class Indent:
    """Indentation stripped from a directive body.

    Attributes:
        width: Body indentation relative to the directive marker
        offset: Absolute column of the body within its document
    """

    width: int
    offset: int


@dataclass
class Node:
    """Generic tree element.

    Attributes:
        type: Node kind (see ``NodeType``; unknown kinds are allowed)
        position: Source span of the node
        children: Child nodes in document order, never ``None``
        indent: Indentation metadata, set on directives with a body
    """

    type: str
    position: Position
    children: list["Node"] = field(default_factory=list)
    indent: Indent | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the subtree to plain dicts, omitting unset optional fields."""
        data: dict[str, Any] = {
            "type": str(self.type.value if isinstance(self.type, Enum) else self.type),
            "position": self.position.to_dict(),
        }
        if self.indent is not None:
            data["indent"] = {"width": self.indent.width, "offset": self.indent.offset}
        data.update(self._extra_fields())
        data["children"] = [child.to_dict() for child in self.children]
        return data

    def _extra_fields(self) -> dict[str, Any]:
        return {}


@dataclass
class TextNode(Node):
    """Leaf node holding literal source text (``text`` or ``unknown_line``)."""

    value: str = ""

    def _extra_fields(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass
class DirectiveNode(Node):
    """Directive with its argument, option lines and content separated.

    Attributes:
        name: Directive name, e.g. ``code-block``
        argument: Text after ``::`` on the marker line, if any
        option_lines: De-indented raw option lines such as ``:language: rust``
    """

    name: str = ""
    argument: str | None = None
    option_lines: list[str] = field(default_factory=list)

    def _extra_fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "argument": self.argument,
            "option_lines": list(self.option_lines),
        }

    @property
    def options(self) -> dict[str, str]:
        """Option lines parsed into a name to value mapping."""
        parsed: dict[str, str] = {}
        for line in self.option_lines:
            stripped = line.strip()
            if not stripped.startswith(":"):
                continue
            name, _, value = stripped[1:].partition(":")
            parsed[name] = value.strip()
        return parsed


@dataclass
class TitleNode(Node):
    """Section title.

    The position covers the overline (if any), the title line and the
    underline. ``text_position`` covers only the title text.

    Attributes:
        adornment: Character used for the underline
        overline: Whether an overline is present
        depth: Section depth, 1 for top-level sections
        text_position: Span of the title text itself
    """

    adornment: str = ""
    overline: bool = False
    depth: int = 1
    text_position: Position | None = None

    def _extra_fields(self) -> dict[str, Any]:
        return {"adornment": self.adornment, "overline": self.overline, "depth": self.depth}


@dataclass
class InterpretedTextNode(Node):
    """Role-based inline markup such as ``:ref:`title <target>```.

    Attributes:
        role: Role name, or ``None`` for default interpreted text
        target: Resolved cross-reference target, set by the classifier
    """

    role: str | None = None
    target: str | None = None

    def _extra_fields(self) -> dict[str, Any]:
        return {"role": self.role, "target": self.target}


@dataclass
class ReferenceNode(Node):
    """Hyperlink reference such as ```title <target>`_``.

    Attributes:
        anonymous: ``True`` for ``__`` references
        target: Resolved target, set by the classifier
    """

    anonymous: bool = False
    target: str | None = None

    def _extra_fields(self) -> dict[str, Any]:
        return {"anonymous": self.anonymous, "target": self.target}


@dataclass
class LabelNode(Node):
    """Anchor definition (``.. _name:``) converted from a comment node."""

    label: str = ""

    def _extra_fields(self) -> dict[str, Any]:
        return {"label": self.label}

    @classmethod
    def from_comment(cls, comment: Node, label: str) -> "LabelNode":
        """Build a label from a comment node, keeping its span and children."""
        return cls(
            type=NodeType.LABEL.value,
            position=comment.position,
            children=comment.children,
            indent=comment.indent,
            label=label,
        )
