"""Offset-addressed, non-destructive edits over an immutable source string.

``SpanEditor`` records edits against the original text and only materializes
the result when asked. All offsets refer to the original text, no matter how
many edits were recorded before, so independent transformations can compute
their spans from one parse tree. Overlapping edits are rejected instead of
silently clobbering each other.
"""

from dataclasses import dataclass
from enum import Enum

from rstedit.lib.errors import InvalidSpanError, SpanConflictError
from rstedit.lib.logging_config import get_logger

logger = get_logger(__name__)


class EditKind(str, Enum):
    """Kind of a recorded edit."""

    OVERWRITE = "overwrite"
    REMOVE = "remove"
    INSERT = "insert"


@dataclass(frozen=True)
class Edit:
    """One recorded edit.

    Attributes:
        start: Start offset in the original text
        end: End offset in the original text (equals ``start`` for inserts)
        kind: What the edit does
        payload: Text written at ``start``
        sequence: Call order, used to order inserts at the same offset
    """

    start: int
    end: int
    kind: EditKind
    payload: str
    sequence: int

    @property
    def consumes(self) -> bool:
        return self.kind is not EditKind.INSERT


class SpanEditor:
    """Collects span edits over ``original`` and serializes the result.

    Example:
        >>> editor = SpanEditor("Hello world")
        >>> editor.overwrite(6, 11, "there")
        >>> editor.insert_at(0, ">> ")
        >>> editor.serialize()
        '>> Hello there'
    """

    def __init__(self, original: str) -> None:
        self._original = original
        self._edits: list[Edit] = []

    @property
    def original(self) -> str:
        """The unedited source text."""
        return self._original

    @property
    def edits(self) -> tuple[Edit, ...]:
        """Recorded edits in call order."""
        return tuple(self._edits)

    def overwrite(self, start: int, end: int, text: str) -> None:
        """Replace ``original[start:end]`` with ``text``.

        Raises:
            InvalidSpanError: If the span lies outside the original text
            SpanConflictError: If the span overlaps an earlier edit
        """
        self._record(start, end, EditKind.OVERWRITE, text)

    def remove(self, start: int, end: int) -> None:
        """Delete ``original[start:end]``.

        Raises:
            InvalidSpanError: If the span lies outside the original text
            SpanConflictError: If the span overlaps an earlier edit
        """
        self._record(start, end, EditKind.REMOVE, "")

    def insert_at(self, offset: int, text: str) -> None:
        """Insert ``text`` before ``original[offset]`` without consuming anything.

        Inserts at the same offset keep their call order. An insert strictly
        inside a replaced span is rejected because it would be swallowed.

        Raises:
            InvalidSpanError: If the offset lies outside the original text
            SpanConflictError: If the offset lies inside a replaced span
        """
        self._record(offset, offset, EditKind.INSERT, text)

    def accepts(self, start: int, end: int, kind: EditKind = EditKind.REMOVE) -> bool:
        """Return True if an edit of ``kind`` on ``[start, end)`` would be recorded."""
        if not 0 <= start <= end <= len(self._original):
            return False
        return self._conflict(start, end, kind) is None

    def has_changes(self) -> bool:
        """Return True if at least one edit was recorded."""
        return bool(self._edits)

    def slice(self, start: int, end: int) -> str:
        """Return ``original[start:end]`` with the edits inside that range applied.

        Inserts at ``start`` are included, inserts at ``end`` are not.

        Raises:
            InvalidSpanError: If the span lies outside the original text
            SpanConflictError: If an edit straddles a boundary of the span
        """
        self._check_bounds(start, end)
        for edit in self._edits:
            if edit.consumes and edit.start < end and start < edit.end:
                if edit.start < start or edit.end > end:
                    raise SpanConflictError(start, end, (edit.start, edit.end))
        return self._render(start, end, include_end_inserts=False)

    def serialize(self) -> str:
        """Return the original text with every recorded edit applied."""
        return self._render(0, len(self._original), include_end_inserts=True)

    def __str__(self) -> str:
        return self.serialize()

    def _check_bounds(self, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(self._original):
            raise InvalidSpanError(start, end, len(self._original))

    def _conflict(self, start: int, end: int, kind: EditKind) -> Edit | None:
        for edit in self._edits:
            if kind is EditKind.INSERT:
                if edit.consumes and edit.start < start < edit.end:
                    return edit
            elif not edit.consumes:
                if start < edit.start < end:
                    return edit
            elif start == end or edit.start == edit.end:
                # Zero-width replacements only collide with spans enclosing them.
                if edit.start < start < edit.end or start < edit.start < end:
                    return edit
            elif start < edit.end and edit.start < end:
                return edit
        return None

    def _record(self, start: int, end: int, kind: EditKind, payload: str) -> None:
        self._check_bounds(start, end)
        conflict = self._conflict(start, end, kind)
        if conflict is not None:
            logger.debug(
                f"Rejected {kind.value} [{start}, {end}): overlaps "
                f"{conflict.kind.value} [{conflict.start}, {conflict.end})"
            )
            raise SpanConflictError(start, end, (conflict.start, conflict.end))
        self._edits.append(
            Edit(start=start, end=end, kind=kind, payload=payload, sequence=len(self._edits))
        )

    def _render(self, start: int, end: int, include_end_inserts: bool) -> str:
        def in_range(edit: Edit) -> bool:
            if edit.consumes and edit.start < edit.end:
                return start <= edit.start and edit.end <= end
            return start <= edit.start < end or (
                include_end_inserts and edit.start == end
            )

        # Inserts at an offset come before a replacement starting there.
        ordered = sorted(
            (edit for edit in self._edits if in_range(edit)),
            key=lambda edit: (edit.start, edit.consumes, edit.sequence),
        )
        pieces: list[str] = []
        cursor = start
        for edit in ordered:
            pieces.append(self._original[cursor : edit.start])
            pieces.append(edit.payload)
            cursor = edit.end if edit.consumes else edit.start
        pieces.append(self._original[cursor:end])
        return "".join(pieces)
