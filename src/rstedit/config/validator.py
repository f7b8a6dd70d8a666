"""Validation utilities for rstedit configuration."""

from pydantic import ValidationError as PydanticValidationError


def flatten_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten Pydantic ValidationError into human-readable messages.

    Args:
        exc: Pydantic ValidationError exception

    Returns:
        List of human-readable error messages, one per field error

    Example:
        >>> from rstedit.models.config import ParserConfig
        >>> try:
        ...     ParserConfig(max_nesting_depth=0)
        ... except PydanticValidationError as e:
        ...     flatten_pydantic_errors(e)[0].startswith("Field 'max_nesting_depth'")
        True
    """
    errors: list[str] = []

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(item) for item in loc) if loc else "unknown"

        msg = error.get("msg", "Unknown error")
        if error.get("type", "") == "value_error":
            formatted = f"Field '{field_path}': {msg} (received: {error.get('input')!r})"
        else:
            formatted = f"Field '{field_path}': {msg}"

        errors.append(formatted)

    return errors if errors else ["Validation failed with unknown error"]
