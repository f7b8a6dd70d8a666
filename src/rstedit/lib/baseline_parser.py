"""Baseline grammar parser for directive-based structured text.

Produces a generic tree of typed nodes with offsets for block constructs,
inline markup and plain text. Positions are exact for everything the parser
interprets. Directive bodies are *not* interpreted: a directive's children are
the same-line argument text followed by one ``unknown_line`` node per
non-blank body line. ``DirectiveReconciler`` splits those bodies into option
lines and content and re-parses the content as a nested document.

Supported block constructs:
- Sections (title with underline, optional overline)
- Bullet lists (``-``, ``*``, ``+``)
- Block quotes and literal blocks (after a paragraph ending in ``::``)
- Explicit markup: directives and comments
- Paragraphs

Supported inline constructs: inline literals, role-based interpreted text,
hyperlink references, strong, emphasis and default interpreted text.

Lines may end in ``\\n`` or ``\\r\\n``. Indentation is measured in spaces
only: tabs are not expanded, so a tab-indented directive body or block quote
is not attached to its parent. A warning is logged when such a line is seen.
"""

import bisect
import dataclasses
import re
from dataclasses import dataclass

from rstedit.lib.logging_config import get_logger
from rstedit.models.node import (
    DirectiveNode,
    Indent,
    InterpretedTextNode,
    Node,
    NodeType,
    Point,
    Position,
    ReferenceNode,
    TextNode,
    TitleNode,
)

logger = get_logger(__name__)


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n`` only, keeping the line endings.

    Unlike ``str.splitlines`` this never splits on other separators, so the
    lengths of the returned lines always add up to ``len(text)``.
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


class SourceIndex:
    """Offset to line/column conversion for one document string."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.line_starts = [0]
        for match in re.finditer("\n", text):
            self.line_starts.append(match.end())

    def point(self, offset: int) -> Point:
        """Return the 1-based line and column of ``offset``."""
        if offset < 0 or offset > len(self.text):
            raise ValueError(f"Offset {offset} outside text of length {len(self.text)}")
        line = bisect.bisect_right(self.line_starts, offset) - 1
        return Point(
            offset=offset, line=line + 1, column=offset - self.line_starts[line] + 1
        )

    def position(self, start: int, end: int) -> Position:
        return Position(start=self.point(start), end=self.point(end))

    def line_start(self, offset: int) -> int:
        """Return the offset of the first character on ``offset``'s line."""
        return self.line_starts[bisect.bisect_right(self.line_starts, offset) - 1]


@dataclass(frozen=True)
class _Line:
    """One source line.

    Attributes:
        start: Offset of the first character of the line
        end: Offset just past the line ending
        text: Line content without the line ending
        indent: Column of the first non-blank character
    """

    start: int
    end: int
    text: str
    indent: int

    @property
    def blank(self) -> bool:
        return not self.text.strip()

    def content(self, column: int) -> str:
        return self.text[column:]


class BaselineParser:
    """Line-oriented block parser with a regex-driven inline tokenizer.

    Example:
        >>> tree = BaselineParser().parse("Hello *world*\\n")
        >>> tree.children[0].type
        'paragraph'
    """

    DIRECTIVE_PATTERN = re.compile(
        r"^\.\.[ ]+(?P<name>[A-Za-z0-9](?:[\w.+:-]*[\w+])?)::(?:[ ]+(?P<argument>.*?))?[ ]*$"
    )
    EXPLICIT_MARKUP_PATTERN = re.compile(r"^\.\.(?:[ ]+|$)")
    BULLET_PATTERN = re.compile(r"^(?P<bullet>[-*+])(?:(?P<space>[ ]+)(?=\S)|[ ]*$)")
    ADORNMENT_PATTERN = re.compile(r"^(?P<char>[!-/:-@\[-`{-~])(?P=char)+[ ]*$")
    INLINE_PATTERN = re.compile(
        r"(?<![\w`*:])(?:"
        r"(?P<literal>``(?P<literal_body>\S(?:.*?\S)?)``)"
        r"|(?P<role>:(?P<role_name>[A-Za-z0-9][\w.+-]*(?::[\w.+-]+)*):"
        r"`(?P<role_body>[^`]+)`)"
        r"|(?P<reference>`(?P<reference_body>[^`]+)`(?P<reference_suffix>__?))"
        r"|(?P<strong>\*\*(?P<strong_body>[^*\s](?:[^*]*[^*\s])?)\*\*)"
        r"|(?P<emphasis>\*(?P<emphasis_body>[^*\s](?:[^*]*[^*\s])?)\*)"
        r"|(?P<interpreted>`(?P<interpreted_body>[^`]+)`)"
        r")(?![\w`*])",
        re.DOTALL,
    )

    def parse(self, text: str) -> Node:
        """Parse ``text`` into a ``document`` node.

        Args:
            text: Raw document text

        Returns:
            Document node spanning the whole text
        """
        self._text = text
        self._index = SourceIndex(text)
        self._section_styles: list[tuple[str, bool]] = []

        lines = self._split(text)
        blocks = self._parse_blocks(lines, 0, allow_sections=True)
        children = self._build_sections(blocks)
        document = Node(
            type=NodeType.DOCUMENT.value,
            position=self._index.position(0, len(text)),
            children=children,
        )
        logger.debug(f"Baseline parse produced {len(children)} top-level nodes")
        return document

    def _split(self, text: str) -> list[_Line]:
        lines: list[_Line] = []
        offset = 0
        tab_line: int | None = None
        for number, raw in enumerate(split_lines(text), start=1):
            # ``end`` keeps the full line ending so offsets stay exact.
            content = raw[:-1] if raw.endswith("\n") else raw
            content = content.removesuffix("\r")
            stripped = content.lstrip(" ")
            indent = len(content) - len(stripped) if stripped.strip() else len(content)
            if tab_line is None and stripped.startswith("\t") and stripped.strip():
                tab_line = number
            lines.append(_Line(start=offset, end=offset + len(raw), text=content, indent=indent))
            offset += len(raw)
        if tab_line is not None:
            logger.warning(
                f"Tab indentation at line {tab_line} is not supported; "
                "tab-indented lines are parsed as unindented"
            )
        return lines

    # Block level

    def _parse_blocks(
        self, lines: list[_Line], column: int, allow_sections: bool = False
    ) -> list[Node]:
        blocks: list[Node] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            if line.blank:
                i += 1
                continue

            content = line.content(column)
            if line.indent > column:
                i = self._parse_block_quote(lines, i, column, blocks)
            elif self.EXPLICIT_MARKUP_PATTERN.match(content):
                i = self._parse_explicit_markup(lines, i, column, blocks)
            elif self.BULLET_PATTERN.match(content):
                i = self._parse_bullet_list(lines, i, column, blocks)
            elif allow_sections and self._title_at(lines, i, column) is not None:
                i = self._parse_title(lines, i, column, blocks)
            else:
                i = self._parse_paragraph(lines, i, column, blocks)
        return blocks

    def _collect_indented(self, lines: list[_Line], i: int, column: int) -> int:
        """Return the index past the lines that are blank or indented beyond ``column``.

        Trailing blank lines are not included.
        """
        end = i
        last = i
        while end < len(lines) and (lines[end].blank or lines[end].indent > column):
            end += 1
            if not lines[end - 1].blank:
                last = end
        return last

    def _parse_block_quote(
        self, lines: list[_Line], i: int, column: int, blocks: list[Node]
    ) -> int:
        end = self._collect_indented(lines, i, column)
        body = lines[i:end]
        quote_column = min(line.indent for line in body if not line.blank)
        first = body[0]
        blocks.append(
            Node(
                type=NodeType.BLOCK_QUOTE.value,
                position=self._index.position(first.start + first.indent, body[-1].end),
                children=self._parse_blocks(body, quote_column),
            )
        )
        return end

    def _parse_explicit_markup(
        self, lines: list[_Line], i: int, column: int, blocks: list[Node]
    ) -> int:
        line = lines[i]
        end = max(self._collect_indented(lines, i + 1, column), i + 1)
        body = lines[i + 1 : end]
        start = line.start + column
        match = self.DIRECTIVE_PATTERN.match(line.content(column))

        if match is None:
            children: list[Node] = []
            marker = self.EXPLICIT_MARKUP_PATTERN.match(line.content(column))
            first_text_start = start + (marker.end() if marker else 2)
            first_text_end = line.start + len(line.text.rstrip())
            if first_text_end > first_text_start:
                children.append(self._text_node(first_text_start, first_text_end))
            for body_line in body:
                if not body_line.blank:
                    children.append(
                        self._text_node(
                            body_line.start + body_line.indent,
                            body_line.start + len(body_line.text.rstrip()),
                        )
                    )
            blocks.append(
                Node(
                    type=NodeType.COMMENT.value,
                    position=self._index.position(start, lines[end - 1].end),
                    children=children,
                )
            )
            return end

        children = []
        if match.group("argument"):
            argument_start = start + match.start("argument")
            children.append(
                self._text_node(argument_start, argument_start + len(match.group("argument")))
            )
        non_blank = [body_line for body_line in body if not body_line.blank]
        for body_line in non_blank:
            children.append(
                TextNode(
                    type=NodeType.UNKNOWN_LINE.value,
                    position=self._index.position(body_line.start, body_line.end),
                    value=body_line.text,
                )
            )
        indent = None
        if non_blank:
            body_column = min(body_line.indent for body_line in non_blank)
            indent = Indent(width=body_column - column, offset=body_column)

        blocks.append(
            DirectiveNode(
                type=NodeType.DIRECTIVE.value,
                position=self._index.position(start, lines[end - 1].end),
                children=children,
                indent=indent,
                name=match.group("name"),
            )
        )
        return end

    def _parse_bullet_list(
        self, lines: list[_Line], i: int, column: int, blocks: list[Node]
    ) -> int:
        bullet = self.BULLET_PATTERN.match(lines[i].content(column)).group("bullet")  # type: ignore[union-attr]
        items: list[Node] = []
        while i < len(lines):
            line = lines[i]
            match = self.BULLET_PATTERN.match(line.content(column))
            if line.indent != column or match is None or match.group("bullet") != bullet:
                break
            item_column = column + 1 + len(match.group("space") or "")
            end = i + 1
            last = i + 1
            while end < len(lines) and (
                lines[end].blank or lines[end].indent >= item_column
            ):
                end += 1
                if not lines[end - 1].blank:
                    last = end
            item_lines = [dataclasses.replace(line, indent=item_column)] + lines[i + 1 : last]
            items.append(
                Node(
                    type=NodeType.LIST_ITEM.value,
                    position=self._index.position(line.start + column, lines[last - 1].end),
                    children=self._parse_blocks(item_lines, item_column),
                )
            )
            i = last
            while i < len(lines) and lines[i].blank:
                i += 1
        blocks.append(
            Node(
                type=NodeType.BULLET_LIST.value,
                position=Position(
                    start=items[0].position.start, end=items[-1].position.end
                ),
                children=items,
            )
        )
        return i

    def _title_at(
        self, lines: list[_Line], i: int, column: int
    ) -> tuple[int, int, str, bool] | None:
        """Detect a section title starting at line ``i``.

        Returns:
            (title line index, index past the title, adornment char, overline)
            or None if no title starts here
        """

        def adornment(index: int) -> str | None:
            if index >= len(lines) or lines[index].indent != column:
                return None
            match = self.ADORNMENT_PATTERN.match(lines[index].content(column))
            return match.group("char") if match else None

        over = adornment(i)
        if over is not None:
            if (
                i + 2 < len(lines)
                and not lines[i + 1].blank
                and adornment(i + 1) is None
                and adornment(i + 2) == over
            ):
                return i + 1, i + 3, over, True
            return None
        under = adornment(i + 1)
        if under is not None and not lines[i].blank:
            return i, i + 2, under, False
        return None

    def _parse_title(
        self, lines: list[_Line], i: int, column: int, blocks: list[Node]
    ) -> int:
        title_index, end, char, overline = self._title_at(lines, i, column)  # type: ignore[misc]
        style = (char, overline)
        if style not in self._section_styles:
            self._section_styles.append(style)
        title_line = lines[title_index]
        text_start = title_line.start + title_line.indent
        text_end = title_line.start + len(title_line.text.rstrip())
        blocks.append(
            TitleNode(
                type=NodeType.TITLE.value,
                position=self._index.position(lines[i].start + column, lines[end - 1].end),
                children=self._parse_inline(text_start, text_end),
                adornment=char,
                overline=overline,
                depth=self._section_styles.index(style) + 1,
                text_position=self._index.position(text_start, text_end),
            )
        )
        return end

    def _parse_paragraph(
        self, lines: list[_Line], i: int, column: int, blocks: list[Node]
    ) -> int:
        end = i
        while end < len(lines) and not lines[end].blank:
            end += 1
        first, last = lines[i], lines[end - 1]
        start = first.start + first.indent
        blocks.append(
            Node(
                type=NodeType.PARAGRAPH.value,
                position=self._index.position(start, last.end),
                children=self._parse_inline(start, last.end),
            )
        )

        if not last.text.rstrip().endswith("::"):
            return end
        following = end
        while following < len(lines) and lines[following].blank:
            following += 1
        if following >= len(lines) or lines[following].indent <= column:
            return end
        literal_end = self._collect_indented(lines, following, column)
        literal_start = lines[following].start
        blocks.append(
            Node(
                type=NodeType.LITERAL_BLOCK.value,
                position=self._index.position(literal_start, lines[literal_end - 1].end),
                children=[self._text_node(literal_start, lines[literal_end - 1].end)],
            )
        )
        return literal_end

    def _build_sections(self, blocks: list[Node]) -> list[Node]:
        """Nest flat blocks under section nodes according to title depth."""
        roots: list[Node] = []
        stack: list[Node] = []
        for block in blocks:
            if isinstance(block, TitleNode):
                while stack and stack[-1].children[0].depth >= block.depth:  # type: ignore[attr-defined]
                    stack.pop()
                section = Node(
                    type=NodeType.SECTION.value,
                    position=Position(start=block.position.start, end=block.position.end),
                    children=[block],
                )
                (stack[-1].children if stack else roots).append(section)
                stack.append(section)
            else:
                (stack[-1].children if stack else roots).append(block)

        def close(nodes: list[Node]) -> None:
            for node in nodes:
                if node.type == NodeType.SECTION:
                    close(node.children)
                    node.position = Position(
                        start=node.position.start, end=node.children[-1].position.end
                    )

        close(roots)
        return roots

    # Inline level

    def _text_node(self, start: int, end: int) -> TextNode:
        return TextNode(
            type=NodeType.TEXT.value,
            position=self._index.position(start, end),
            value=self._text[start:end],
        )

    def _plain_text(self, start: int, end: int) -> list[Node]:
        """Split ``[start, end)`` into one text node per line, minus indentation."""
        nodes: list[Node] = []
        cursor = start
        while cursor < end:
            newline = self._text.find("\n", cursor, end)
            piece_end = end if newline == -1 else newline + 1
            piece_start = cursor
            if piece_start == 0 or self._text[piece_start - 1] == "\n":
                while piece_start < piece_end and self._text[piece_start] in " \t":
                    piece_start += 1
            if piece_start < piece_end:
                nodes.append(self._text_node(piece_start, piece_end))
            cursor = piece_end
        return nodes

    def _parse_inline(self, start: int, end: int) -> list[Node]:
        nodes: list[Node] = []
        cursor = start
        for match in self.INLINE_PATTERN.finditer(self._text, start, end):
            nodes.extend(self._plain_text(cursor, match.start()))
            nodes.append(self._inline_node(match))
            cursor = match.end()
        nodes.extend(self._plain_text(cursor, end))
        return nodes

    def _inline_node(self, match: re.Match[str]) -> Node:
        position = self._index.position(match.start(), match.end())
        if match.group("literal"):
            body = "literal_body"
            node = Node(type=NodeType.LITERAL.value, position=position)
        elif match.group("role"):
            body = "role_body"
            node = InterpretedTextNode(
                type=NodeType.INTERPRETED_TEXT.value,
                position=position,
                role=match.group("role_name"),
            )
        elif match.group("reference"):
            body = "reference_body"
            node = ReferenceNode(
                type=NodeType.REFERENCE.value,
                position=position,
                anonymous=match.group("reference_suffix") == "__",
            )
        elif match.group("strong"):
            body = "strong_body"
            node = Node(type=NodeType.STRONG.value, position=position)
        elif match.group("emphasis"):
            body = "emphasis_body"
            node = Node(type=NodeType.EMPHASIS.value, position=position)
        else:
            body = "interpreted_body"
            node = InterpretedTextNode(
                type=NodeType.INTERPRETED_TEXT.value, position=position
            )
        node.children = [self._text_node(match.start(body), match.end(body))]
        return node
