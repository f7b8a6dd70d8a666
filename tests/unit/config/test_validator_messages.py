"""Tests for flatten_pydantic_errors()."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from rstedit.config.validator import flatten_pydantic_errors
from rstedit.models.config import PhraseRule, RewriteConfig


@pytest.mark.unit
class TestFlattenPydanticErrors:
    """Tests for converting pydantic errors to messages."""

    def test_nested_location(self) -> None:
        """Test that nested field paths are joined with dots."""
        with pytest.raises(PydanticValidationError) as exc_info:
            RewriteConfig(parser={"max_nesting_depth": 0})
        messages = flatten_pydantic_errors(exc_info.value)
        assert messages[0].startswith("Field 'parser.max_nesting_depth'")

    def test_value_error_includes_input(self) -> None:
        """Test that validator errors show the received value."""
        with pytest.raises(PydanticValidationError) as exc_info:
            PhraseRule(search="(", first="a", subsequent="b")
        (message,) = flatten_pydantic_errors(exc_info.value)
        assert "received: '('" in message

    def test_one_message_per_error(self) -> None:
        """Test that every failing field gets its own message."""
        with pytest.raises(PydanticValidationError) as exc_info:
            PhraseRule(search="x")  # type: ignore[call-arg]
        assert len(flatten_pydantic_errors(exc_info.value)) == 2
