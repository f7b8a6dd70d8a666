"""Tests for SpanEditor non-destructive editing."""

import pytest

from rstedit.lib.errors import InvalidSpanError, SpanConflictError
from rstedit.lib.span_editor import EditKind, SpanEditor


@pytest.mark.unit
class TestRecording:
    """Tests for overwrite, remove and insert_at."""

    def test_no_edits(self) -> None:
        """Test that an untouched editor serializes to the original."""
        editor = SpanEditor("Hello world")
        assert editor.serialize() == "Hello world"
        assert editor.has_changes() is False

    def test_overwrite(self) -> None:
        """Test replacing a span."""
        editor = SpanEditor("Hello world")
        editor.overwrite(6, 11, "there")
        assert editor.serialize() == "Hello there"
        assert editor.has_changes() is True

    def test_remove(self) -> None:
        """Test deleting a span."""
        editor = SpanEditor("Hello big world")
        editor.remove(6, 10)
        assert str(editor) == "Hello world"

    def test_inserts_at_same_offset_keep_call_order(self) -> None:
        """Test that inserts at one offset are applied in call order."""
        editor = SpanEditor("ac")
        editor.insert_at(1, "b")
        editor.insert_at(1, "B")
        assert editor.serialize() == "abBc"

    def test_insert_before_replacement_at_same_offset(self) -> None:
        """Test that an insert at a replaced span's start stays in front of it."""
        editor = SpanEditor("one two")
        editor.remove(4, 7)
        editor.insert_at(4, "2")
        assert editor.serialize() == "one 2"

    def test_call_order_does_not_matter(self) -> None:
        """Test that edits recorded out of order serialize by offset."""
        forward = SpanEditor("abcdef")
        forward.overwrite(0, 1, "A")
        forward.overwrite(4, 5, "E")
        backward = SpanEditor("abcdef")
        backward.overwrite(4, 5, "E")
        backward.overwrite(0, 1, "A")
        assert forward.serialize() == backward.serialize() == "AbcdEf"

    def test_insert_at_end(self) -> None:
        """Test inserting after the last character."""
        editor = SpanEditor("abc")
        editor.insert_at(3, "!")
        assert editor.serialize() == "abc!"

    def test_serialize_is_repeatable(self) -> None:
        """Test that serializing does not consume the edits."""
        editor = SpanEditor("abc")
        editor.overwrite(1, 2, "B")
        assert editor.serialize() == editor.serialize() == "aBc"
        assert editor.original == "abc"

    def test_edits_are_listed_in_call_order(self) -> None:
        """Test the recorded edit list."""
        editor = SpanEditor("abc")
        editor.remove(2, 3)
        editor.insert_at(0, ">")
        assert [edit.kind for edit in editor.edits] == [EditKind.REMOVE, EditKind.INSERT]


@pytest.mark.unit
class TestConflicts:
    """Tests for overlap rejection."""

    def test_overlapping_overwrite_rejected(self) -> None:
        """Test that the second of two overlapping edits is rejected."""
        editor = SpanEditor("Hello world")
        editor.overwrite(0, 5, "Howdy")
        with pytest.raises(SpanConflictError) as exc_info:
            editor.overwrite(3, 8, "xxx")
        assert exc_info.value.conflicting == (0, 5)
        assert editor.serialize() == "Howdy world"

    def test_adjacent_edits_allowed(self) -> None:
        """Test that touching spans do not overlap."""
        editor = SpanEditor("abcd")
        editor.overwrite(0, 2, "X")
        editor.overwrite(2, 4, "Y")
        assert editor.serialize() == "XY"

    def test_insert_inside_replacement_rejected(self) -> None:
        """Test that an insert strictly inside a replaced span is rejected."""
        editor = SpanEditor("abcdef")
        editor.remove(1, 5)
        with pytest.raises(SpanConflictError):
            editor.insert_at(3, "x")

    def test_replacement_around_insert_rejected(self) -> None:
        """Test that a replacement swallowing an earlier insert is rejected."""
        editor = SpanEditor("abcdef")
        editor.insert_at(3, "x")
        with pytest.raises(SpanConflictError):
            editor.remove(1, 5)

    def test_accepts_predicts_rejection(self) -> None:
        """Test that accepts() predicts rejection without recording."""
        editor = SpanEditor("abcdef")
        editor.remove(1, 3)
        assert editor.accepts(2, 4) is False
        assert editor.accepts(3, 4) is True
        assert editor.accepts(2, 2, EditKind.INSERT) is False
        assert editor.accepts(0, 10) is False
        assert len(editor.edits) == 1

    @pytest.mark.parametrize("start,end", [(-1, 2), (2, 1), (0, 4)])
    def test_invalid_spans(self, start: int, end: int) -> None:
        """Test that spans outside the text are rejected."""
        editor = SpanEditor("abc")
        with pytest.raises(InvalidSpanError):
            editor.overwrite(start, end, "x")


@pytest.mark.unit
class TestSlice:
    """Tests for slice() views of edited text."""

    def test_slice_reflects_edits_inside(self) -> None:
        """Test that edits inside the range are applied."""
        editor = SpanEditor("Use {+api+} now")
        editor.overwrite(4, 11, "Data API")
        assert editor.slice(0, 15) == "Use Data API now"
        assert editor.slice(4, 11) == "Data API"

    def test_slice_without_edits(self) -> None:
        """Test that an untouched range returns the original text."""
        editor = SpanEditor("abcdef")
        editor.overwrite(0, 1, "A")
        assert editor.slice(2, 5) == "cde"

    def test_slice_includes_inserts_at_start_only(self) -> None:
        """Test insert boundary handling."""
        editor = SpanEditor("abcdef")
        editor.insert_at(2, "<")
        editor.insert_at(4, ">")
        assert editor.slice(2, 4) == "<cd"

    def test_slice_straddling_edit_rejected(self) -> None:
        """Test that a range cutting through an edit is rejected."""
        editor = SpanEditor("abcdef")
        editor.overwrite(1, 4, "X")
        with pytest.raises(SpanConflictError):
            editor.slice(2, 6)
