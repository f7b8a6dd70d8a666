"""Regex replacement across text nodes that a line break split apart.

A phrase such as ``App Services`` may be wrapped over two lines, so no single
``text`` node contains it. ``SpanMerger`` matches against the merged text of
sibling text nodes and turns a match back into edits on the original string:

1. The match start and end are located in the merged text and mapped to the
   nodes containing them.
2. Up to three spans are computed: the rest of the first node, the source gap
   between the first and last node (line break plus indentation), and the
   head of the last node.
3. The spans must account for exactly the match length once indentation is
   discounted, otherwise ``ArithmeticInvariantError`` is raised.
4. A match overlapping an earlier committed replacement is skipped. Otherwise
   the spans are removed and the replacement is inserted at the first span.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from rstedit.lib.errors import ArithmeticInvariantError
from rstedit.lib.logging_config import get_logger
from rstedit.lib.span_editor import EditKind, SpanEditor
from rstedit.models.node import TextNode

logger = get_logger(__name__)


def merge_text(nodes: Sequence[TextNode]) -> str:
    """Concatenate node values, turning each node's line break into a space.

    Only the first ``\\n`` of a value is replaced, so the merged text has the
    same length as the concatenated values and offsets stay comparable.
    """
    return "".join(node.value.replace("\n", " ", 1) for node in nodes)


def _leading_indentation(gap: str, at_line_start: bool) -> int:
    """Count indentation characters that open a line inside ``gap``."""
    count = 0
    segments = gap.split("\n")
    for index, segment in enumerate(segments):
        if index == 0 and not at_line_start:
            continue
        count += len(segment) - len(segment.lstrip(" \t"))
    return count


@dataclass(frozen=True)
class MergePlan:
    """Source spans to remove for one match.

    Attributes:
        match: Matched text, taken from the merged text
        spans: Non-empty ``(start, end)`` spans in ascending order
    """

    match: str
    spans: tuple[tuple[int, int], ...]

    @property
    def insert_at(self) -> int:
        """Offset where the replacement goes."""
        return self.spans[0][0]

    @property
    def total(self) -> tuple[int, int]:
        """Span from the first removed character to the last one."""
        return self.spans[0][0], self.spans[-1][1]


class SpanMerger:
    """Applies match replacements over merged text nodes to a ``SpanEditor``.

    A merger remembers the ranges it committed; it is meant to be shared by
    every replacement made on one document so later matches cannot overlap
    earlier ones.

    Attributes:
        editor: Editor receiving the edits
        committed: ``(start, end)`` ranges already replaced
    """

    def __init__(self, editor: SpanEditor) -> None:
        self.editor = editor
        self.committed: list[tuple[int, int]] = []

    def plan(
        self, nodes: Sequence[TextNode], match_start: int, match_end: int
    ) -> MergePlan:
        """Compute the source spans covering ``merged[match_start:match_end]``.

        Args:
            nodes: Sibling text nodes in document order
            match_start: Start of the match in ``merge_text(nodes)``
            match_end: End of the match in ``merge_text(nodes)``

        Returns:
            The spans to remove

        Raises:
            ValueError: If the match range is empty or outside the merged text
            ArithmeticInvariantError: If the spans do not account for the match
        """
        merged = merge_text(nodes)
        if not 0 <= match_start < match_end <= len(merged):
            raise ValueError(
                f"Match range [{match_start}, {match_end}) outside merged text "
                f"of length {len(merged)}"
            )
        match = merged[match_start:match_end]
        first_index, start_in_first = self._locate(nodes, match_start, at_end=False)
        last_index, end_in_last = self._locate(nodes, match_end, at_end=True)
        first, last = nodes[first_index], nodes[last_index]
        source = self.editor.original

        positions_hold = all(
            source[node.position.start.offset : node.position.end.offset] == node.value
            for node in nodes[first_index : last_index + 1]
        )

        first_start = first.position.start.offset
        if first_index == last_index:
            spans = [(first_start + start_in_first, first_start + end_in_last)]
            accounted = end_in_last - start_in_first
        else:
            first_end = first.position.end.offset
            last_start = last.position.start.offset
            spans = [(first_start + start_in_first, first_end)]
            gap = source[first_end:last_start] if first_end <= last_start else ""
            if gap:
                spans.append((first_end, last_start))
            spans.append((last_start, last_start + end_in_last))
            at_line_start = first_end > 0 and source[first_end - 1] == "\n"
            accounted = (
                (first_end - spans[0][0])
                + len(gap)
                - _leading_indentation(gap, at_line_start)
                + end_in_last
            )

        if not positions_hold or accounted != len(match):
            raise ArithmeticInvariantError(match, len(match), accounted)
        return MergePlan(match=match, spans=tuple(span for span in spans if span[0] < span[1]))

    def apply(
        self,
        nodes: Sequence[TextNode],
        match_start: int,
        match_end: int,
        replacement: str,
    ) -> bool:
        """Replace a match, unless it overlaps an earlier replacement.

        Either every span of the match is edited or none is.

        Returns:
            True if the replacement was recorded, False if it was skipped

        Raises:
            ArithmeticInvariantError: If the spans do not account for the match
        """
        plan = self.plan(nodes, match_start, match_end)
        total_start, total_end = plan.total
        for start, end in self.committed:
            if total_start < end and start < total_end:
                logger.debug(
                    f"Skipping {plan.match!r} at [{total_start}, {total_end}): "
                    f"overlaps replacement at [{start}, {end})"
                )
                return False

        if not all(self.editor.accepts(start, end) for start, end in plan.spans):
            logger.debug(f"Skipping {plan.match!r}: overlaps an existing edit")
            return False
        if not self.editor.accepts(plan.insert_at, plan.insert_at, EditKind.INSERT):
            logger.debug(f"Skipping {plan.match!r}: insert point is inside an edit")
            return False

        for start, end in plan.spans:
            self.editor.remove(start, end)
        self.editor.insert_at(plan.insert_at, replacement)
        self.committed.append(plan.total)
        return True

    @staticmethod
    def _locate(
        nodes: Sequence[TextNode], offset: int, at_end: bool
    ) -> tuple[int, int]:
        """Return ``(node index, offset within node)`` for a merged offset.

        Starts resolve to the node beginning at a boundary, ends to the node
        finishing there.
        """
        remaining = offset
        for index, node in enumerate(nodes):
            length = len(node.value)
            if remaining < length or (at_end and remaining == length):
                return index, remaining
            remaining -= length
        raise ValueError(f"Offset {offset} outside merged text")
