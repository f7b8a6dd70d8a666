"""Custom exception hierarchy for rstedit parsing and editing operations."""

from typing import Any


class RstEditError(Exception):
    """Base exception for all rstedit errors.

    All rstedit-specific exceptions inherit from this class, enabling
    centralized exception handling in batch runs over many documents.
    """

    pass


class ConfigError(RstEditError):
    """Exception raised for configuration errors.

    This exception is raised when configuration loading or parsing fails.
    It includes field-specific information to help users identify and fix
    configuration issues.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class FileNotFoundError(RstEditError):
    """Exception raised when a configuration file is not found.

    Attributes:
        path: Path to the file that was not found
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str) -> None:
        """Initialize FileNotFoundError with path and message.

        Args:
            path: Path to the file that was not found
            message: Descriptive error message, optionally with suggestions
        """
        self.path = path
        self.message = message
        super().__init__(f"File not found: {path}\n{message}")


class StructuralParseError(RstEditError):
    """Exception raised when a baseline parse tree breaks a reconciler assumption.

    Fatal for the enclosing document. Carries the directive name and its
    position so the offending markup can be located and fixed by hand.

    Attributes:
        message: Human-readable error message
        directive: Name of the directive being reconciled, if any
        position: Position of the offending node, if known
    """

    def __init__(
        self,
        message: str,
        directive: str | None = None,
        position: Any | None = None,
    ) -> None:
        """Initialize StructuralParseError with directive context.

        Args:
            message: Descriptive error message
            directive: Directive name where the error occurred
            position: Position of the offending node
        """
        self.message = message
        self.directive = directive
        self.position = position
        super().__init__(self._format())

    def relocate(self, position: Any) -> None:
        """Replace the reported position, e.g. after mapping it to the root text."""
        self.position = position
        self.args = (self._format(),)

    def _format(self) -> str:
        full_message = self.message
        if self.directive is not None:
            full_message = f"Directive '{self.directive}': {full_message}"
        if self.position is not None:
            full_message = f"{full_message} (at {self.position})"
        return full_message


class NestingDepthError(StructuralParseError):
    """Exception raised when directive nesting exceeds the configured maximum."""

    def __init__(
        self,
        max_depth: int,
        directive: str | None = None,
        position: Any | None = None,
    ) -> None:
        """Create a nesting depth error.

        Args:
            max_depth: The configured maximum nesting depth
            directive: Directive whose content would exceed the limit
            position: Position of that directive
        """
        self.max_depth = max_depth
        super().__init__(
            f"directive nesting exceeds maximum depth of {max_depth}",
            directive=directive,
            position=position,
        )


class SpanError(RstEditError):
    """Base exception for span editor failures."""

    pass


class InvalidSpanError(SpanError):
    """Exception raised when a span lies outside the original text.

    Attributes:
        start: Requested start offset
        end: Requested end offset
        length: Length of the original text
    """

    def __init__(self, start: int, end: int, length: int) -> None:
        """Create an invalid span error.

        Args:
            start: Requested start offset
            end: Requested end offset
            length: Length of the original text
        """
        self.start = start
        self.end = end
        self.length = length
        super().__init__(
            f"Invalid span [{start}, {end}) for text of length {length}"
        )


class SpanConflictError(SpanError):
    """Exception raised when an edit overlaps a previously recorded edit.

    Attributes:
        start: Start offset of the rejected edit
        end: End offset of the rejected edit
        conflicting: (start, end) of the edit already recorded
    """

    def __init__(self, start: int, end: int, conflicting: tuple[int, int]) -> None:
        """Create a span conflict error.

        Args:
            start: Start offset of the rejected edit
            end: End offset of the rejected edit
            conflicting: Span of the edit it collides with
        """
        self.start = start
        self.end = end
        self.conflicting = conflicting
        super().__init__(
            f"Edit [{start}, {end}) overlaps existing edit "
            f"[{conflicting[0]}, {conflicting[1]})"
        )


class ArithmeticInvariantError(RstEditError):
    """Exception raised when merged replacement spans do not add up to a match.

    Indicates the node offsets feeding the span merger are unreliable for this
    particular match. Callers skip the match and continue with the rest.

    Attributes:
        match: The matched text
        expected: Length of the match
        actual: Number of characters the computed spans account for
    """

    def __init__(self, match: str, expected: int, actual: int) -> None:
        """Create an arithmetic invariant error.

        Args:
            match: The matched text
            expected: Length of the match
            actual: Characters accounted for by the computed spans
        """
        self.match = match
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Replacement spans for match {match!r} account for {actual} "
            f"characters, expected {expected}"
        )
