"""Tests for replacing matches across merged sibling text nodes."""

import re

import pytest

from rstedit.lib.errors import ArithmeticInvariantError
from rstedit.lib.reconciler import parse
from rstedit.lib.span_editor import SpanEditor
from rstedit.lib.span_merger import SpanMerger, merge_text
from rstedit.models.node import NodeType, Point, Position, TextNode


def _paragraph_texts(source: str) -> list[TextNode]:
    """Return the direct text children of the first paragraph in ``source``."""
    tree = parse(source)
    node = tree
    while node.type != NodeType.PARAGRAPH:
        node = node.children[0]
    return [child for child in node.children if isinstance(child, TextNode)]


def _text(value: str, start: int) -> TextNode:
    return TextNode(
        type=NodeType.TEXT.value,
        position=Position(
            start=Point(offset=start, line=1, column=start + 1),
            end=Point(offset=start + len(value), line=1, column=start + len(value) + 1),
        ),
        value=value,
    )


def _replace_all(source: str, pattern: str, replacement: str) -> SpanEditor:
    editor = SpanEditor(source)
    merger = SpanMerger(editor)
    nodes = _paragraph_texts(source)
    for match in re.finditer(pattern, merge_text(nodes)):
        merger.apply(nodes, match.start(), match.end(), replacement)
    return editor


@pytest.mark.unit
class TestMergeText:
    """Tests for merge_text()."""

    def test_newlines_become_spaces(self) -> None:
        """Test that each node's line break is turned into a space."""
        nodes = [_text("Alpha\n", 0), _text("Beta\n", 6)]
        assert merge_text(nodes) == "Alpha Beta "

    def test_length_is_preserved(self) -> None:
        """Test that merged text is as long as the concatenated values."""
        nodes = [_text("a\n", 0), _text("bc", 2)]
        assert len(merge_text(nodes)) == 4


@pytest.mark.unit
class TestApply:
    """Tests for SpanMerger.apply()."""

    def test_match_inside_one_node(self) -> None:
        """Test a replacement that does not cross a line break."""
        editor = _replace_all("Use Alpha here.\n", "Alpha", "Gamma")
        assert editor.serialize() == "Use Gamma here.\n"

    def test_match_across_line_wrap(self) -> None:
        """Test a phrase wrapped over two lines at the same indentation."""
        editor = _replace_all("Use Alpha\nBeta handles it.\n", "Alpha Beta", "Gamma")
        assert editor.serialize() == "Use Gamma handles it.\n"

    def test_match_across_indented_continuation(self) -> None:
        """Test that continuation indentation is removed with the match."""
        source = "- Use Alpha\n  Beta handles it.\n"
        editor = _replace_all(source, "Alpha Beta", "Gamma")
        assert editor.serialize() == "- Use Gamma handles it.\n"

    def test_match_across_three_lines(self) -> None:
        """Test that fully consumed middle lines are removed."""
        source = "- Use Alpha\n  Beta\n  Delta now.\n"
        editor = _replace_all(source, "Alpha Beta Delta", "Omega")
        assert editor.serialize() == "- Use Omega now.\n"

    def test_overlapping_match_skipped(self) -> None:
        """Test that a match overlapping a committed one is not applied."""
        source = "Alpha Beta\n"
        editor = SpanEditor(source)
        merger = SpanMerger(editor)
        nodes = _paragraph_texts(source)
        assert merger.apply(nodes, 0, 10, "Gamma") is True
        assert merger.apply(nodes, 6, 10, "Delta") is False
        assert editor.serialize() == "Gamma\n"
        assert merger.committed == [(0, 10)]

    def test_existing_edit_blocks_whole_match(self) -> None:
        """Test that no span is edited when one of them would collide."""
        source = "- Use Alpha\n  Beta here.\n"
        editor = SpanEditor(source)
        editor.overwrite(source.index("Beta"), source.index("Beta") + 2, "BE")
        merger = SpanMerger(editor)
        nodes = _paragraph_texts(source)
        start = merge_text(nodes).index("Alpha Beta")
        assert merger.apply(nodes, start, start + 10, "Gamma") is False
        assert len(editor.edits) == 1


@pytest.mark.unit
class TestPlan:
    """Tests for span computation and the length invariant."""

    def test_three_spans(self) -> None:
        """Test the spans of a match crossing an indented line break."""
        source = "- Use Alpha\n  Beta here.\n"
        merger = SpanMerger(SpanEditor(source))
        nodes = _paragraph_texts(source)
        plan = merger.plan(nodes, 4, 14)
        assert plan.match == "Alpha Beta"
        assert plan.spans == ((6, 12), (12, 14), (14, 18))
        assert plan.insert_at == 6

    def test_gap_with_markup_breaks_invariant(self) -> None:
        """Test that text hidden between nodes is reported, not swallowed."""
        source = "Alpha *x* Beta"
        nodes = [_text("Alpha ", 0), _text(" Beta", 9)]
        merger = SpanMerger(SpanEditor(source))
        with pytest.raises(ArithmeticInvariantError) as exc_info:
            merger.plan(nodes, 0, 11)
        assert exc_info.value.expected == 11
        assert exc_info.value.actual == 14

    def test_lost_position_breaks_invariant(self) -> None:
        """Test that a node whose offset does not match the source is rejected."""
        source = " Alpha Beta\n"
        nodes = [_text("Alpha Beta\n", 0)]
        merger = SpanMerger(SpanEditor(source))
        with pytest.raises(ArithmeticInvariantError):
            merger.plan(nodes, 0, 5)

    def test_empty_match_rejected(self) -> None:
        """Test that an empty match range is invalid."""
        nodes = [_text("Alpha\n", 0)]
        merger = SpanMerger(SpanEditor("Alpha\n"))
        with pytest.raises(ValueError):
            merger.plan(nodes, 2, 2)
