"""Directive reconciliation on top of the baseline parser.

The baseline parser reports reliable spans for a directive body as a whole,
but not for the structure inside it. ``DirectiveReconciler`` rebuilds each
directive from the source text:

1. Same-line text children become the directive ``argument``.
2. The body text is cut out of the source, de-indented, and its leading
   option lines (``:name: value``) are moved to ``option_lines``.
3. The remaining content is parsed as a document of its own, recursively, so
   directives nested at any depth are handled the same way.
4. Every position in the nested tree is mapped back onto the enclosing
   document, line by line, so offsets index the root string exactly.

``parse`` runs the whole pipeline: baseline parse, reconciliation, and
cross-reference classification.
"""

import bisect
import re
from dataclasses import dataclass

from rstedit.lib.baseline_parser import BaselineParser, SourceIndex, split_lines
from rstedit.lib.errors import NestingDepthError, StructuralParseError
from rstedit.lib.logging_config import get_logger
from rstedit.lib.tree import IndexPath, visit
from rstedit.lib.xref import classify_cross_references
from rstedit.models.config import ParserConfig
from rstedit.models.node import DirectiveNode, Node, NodeType, Position, TextNode, TitleNode

logger = get_logger(__name__)

# Only lines of this shape before the first blank line count as options.
OPTION_LINE_PATTERN = re.compile(r"^\s*:\S+:")


@dataclass
class _ContentMap:
    """Maps offsets in extracted directive content back to the enclosing text.

    Attributes:
        content_starts: Offset of each content line in the content string
        source_starts: Offset of the same (de-indented) line in the enclosing text
        stripped: Number of indentation characters removed from each line
    """

    content_starts: list[int]
    source_starts: list[int]
    stripped: list[int]

    def start(self, offset: int) -> int:
        line = max(bisect.bisect_right(self.content_starts, offset) - 1, 0)
        return self.source_starts[line] + offset - self.content_starts[line]

    def end(self, offset: int) -> int:
        # An end offset on a line boundary belongs to the previous line, so the
        # next line's indentation is never pulled into a span.
        line = max(bisect.bisect_left(self.content_starts, offset) - 1, 0)
        return self.source_starts[line] + offset - self.content_starts[line]

    def column_shift(self, offset: int) -> int:
        line = max(bisect.bisect_right(self.content_starts, offset) - 1, 0)
        return self.stripped[line]


def _indent_length(line: str, limit: int) -> int:
    count = 0
    while count < limit and count < len(line) and line[count] in " \t":
        count += 1
    return count


class DirectiveReconciler:
    """Expands baseline directive nodes and repairs positions inside them.

    Attributes:
        parser: Baseline parser used for nested content
        config: Parser configuration (nesting limit)

    Example:
        >>> reconciler = DirectiveReconciler()
        >>> tree = reconciler.parse_document(".. note:: Hi\\n\\n   Body\\n")
        >>> tree.children[0].argument
        'Hi'
    """

    def __init__(
        self,
        parser: BaselineParser | None = None,
        config: ParserConfig | None = None,
    ) -> None:
        """Create a reconciler.

        Args:
            parser: Baseline parser, a fresh ``BaselineParser`` by default
            config: Parser configuration, defaults to ``ParserConfig()``
        """
        self.parser = parser or BaselineParser()
        self.config = config or ParserConfig()

    def parse_document(self, text: str, depth: int = 0) -> Node:
        """Parse ``text`` with the baseline parser and reconcile the result."""
        tree = self.parser.parse(text)
        return self.reconcile(text, tree, depth)

    def reconcile(self, text: str, tree: Node, depth: int = 0) -> Node:
        """Reconcile every directive in ``tree`` in place.

        Args:
            text: The document text ``tree`` was parsed from
            tree: Baseline parse tree of ``text``
            depth: Directive nesting depth of ``text`` (0 for the root)

        Returns:
            The same tree, mutated

        Raises:
            StructuralParseError: If the baseline tree breaks an assumption
            NestingDepthError: If directives nest deeper than allowed
        """
        index = SourceIndex(text)

        def on_enter(_node: Node, _path: IndexPath) -> None:
            pass

        def on_leave(node: Node, _path: IndexPath) -> None:
            if node.type != NodeType.DIRECTIVE:
                return
            if not isinstance(node, DirectiveNode):
                raise StructuralParseError(
                    "directive node carries no directive name", position=node.position
                )
            self._reconcile_directive(text, index, node, depth)

        visit(tree, on_enter, on_leave)
        return tree

    def _reconcile_directive(
        self, text: str, index: SourceIndex, node: DirectiveNode, depth: int
    ) -> None:
        children = list(node.children)
        start_line = node.position.start.line

        argument_parts: list[str] = []
        while (
            children
            and children[0].type == NodeType.TEXT
            and children[0].position.start.line == start_line
        ):
            argument = children.pop(0)
            value = argument.value if isinstance(argument, TextNode) else ""
            if value.strip():
                argument_parts.append(value.strip())
        if argument_parts:
            node.argument = " ".join(argument_parts)
        node.option_lines = []

        if not children:
            logger.debug(f"Directive '{node.name}' has no options or content")
            node.children = []
            return

        if node.indent is None:
            raise StructuralParseError(
                "missing indent metadata for directive body",
                directive=node.name,
                position=node.position,
            )

        body_start = children[0].position.start.offset
        body_end = children[-1].position.end.offset
        line_start = index.line_start(body_start)
        if not text[line_start:body_start].strip():
            body_start = line_start

        raw_lines = split_lines(text[body_start:body_end])
        option_section_length = 0
        consumed = 0
        # Options must directly follow the marker line.
        options_allowed = index.point(body_start).line == start_line + 1
        for raw_line in raw_lines if options_allowed else []:
            if not raw_line.strip():
                option_section_length += len(raw_line)
                consumed += 1
                break
            option_line = raw_line[_indent_length(raw_line, node.indent.offset) :]
            if not OPTION_LINE_PATTERN.match(option_line):
                break
            node.option_lines.append(option_line.rstrip("\r\n"))
            option_section_length += len(raw_line)
            consumed += 1

        content_map = _ContentMap(content_starts=[], source_starts=[], stripped=[])
        pieces: list[str] = []
        content_cursor = 0
        source_cursor = body_start + option_section_length
        for raw_line in raw_lines[consumed:]:
            stripped = _indent_length(raw_line, node.indent.offset)
            content_map.content_starts.append(content_cursor)
            content_map.source_starts.append(source_cursor + stripped)
            content_map.stripped.append(stripped)
            pieces.append(raw_line[stripped:])
            content_cursor += len(raw_line) - stripped
            source_cursor += len(raw_line)
        content = "".join(pieces)

        logger.debug(
            f"Directive '{node.name}' at line {start_line}: "
            f"{len(node.option_lines)} option lines, {len(content)} content chars"
        )
        if not content.strip():
            node.children = []
            return

        if depth + 1 > self.config.max_nesting_depth:
            raise NestingDepthError(
                self.config.max_nesting_depth,
                directive=node.name,
                position=node.position,
            )
        try:
            nested = self.parse_document(content, depth + 1)
        except StructuralParseError as e:
            # Each enclosing level maps the position one step closer to the root.
            if isinstance(e.position, Position):
                e.relocate(self._map_position(e.position, index, content_map))
            raise
        for child in nested.children:
            self._rebase(child, index, content_map)
        node.children = nested.children

    def _rebase(self, subtree: Node, index: SourceIndex, content_map: _ContentMap) -> None:
        """Map every position in ``subtree`` from content to enclosing offsets."""

        def on_enter(node: Node, _path: IndexPath) -> None:
            content_start = node.position.start.offset
            node.position = self._map_position(node.position, index, content_map)
            if isinstance(node, TitleNode) and node.text_position is not None:
                node.text_position = self._map_position(
                    node.text_position, index, content_map
                )
            if node.indent is not None:
                node.indent.offset += content_map.column_shift(content_start)

        visit(subtree, on_enter)

    @staticmethod
    def _map_position(
        position: Position, index: SourceIndex, content_map: _ContentMap
    ) -> Position:
        start = content_map.start(position.start.offset)
        end = max(content_map.end(position.end.offset), start)
        return index.position(start, end)


def parse(text: str, config: ParserConfig | None = None) -> Node:
    """Parse a document into a reconciled, cross-reference annotated tree.

    Args:
        text: Raw document text
        config: Parser configuration, defaults to ``ParserConfig()``

    Returns:
        The annotated document tree

    Raises:
        StructuralParseError: If the document cannot be reconciled
    """
    config = config or ParserConfig()
    tree = DirectiveReconciler(config=config).parse_document(text)
    classify_cross_references(tree, roles=config.xref_roles)
    return tree
