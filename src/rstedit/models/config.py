"""Configuration models for parsing and rewriting documents."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParserConfig(BaseModel):
    """Settings for the parse and reconcile pipeline."""

    model_config = ConfigDict(extra="forbid")

    max_nesting_depth: int = Field(
        default=64, ge=1, description="Maximum directive nesting depth"
    )
    xref_roles: list[str] = Field(
        default_factory=lambda: ["ref", "doc"],
        description="Roles whose interpreted text is a cross-reference",
    )


class PhraseRule(BaseModel):
    """A phrase to rewrite, with first-use and subsequent-use replacements.

    Example:
        >>> rule = PhraseRule(
        ...     search="(Atlas )?App Services",
        ...     first="Atlas App Services",
        ...     subsequent="App Services",
        ... )
    """

    model_config = ConfigDict(extra="forbid")

    search: str = Field(..., min_length=1, description="Regular expression to find")
    first: str = Field(..., description="Replacement for the first use")
    subsequent: str = Field(..., description="Replacement for later uses")

    @field_validator("search")
    @classmethod
    def validate_search(cls, v: str) -> str:
        """Ensure the search pattern is a valid regular expression."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"search is not a valid regular expression: {e}") from e
        return v


class TitleStyle(BaseModel):
    """Adornment style for section titles at one depth."""

    model_config = ConfigDict(extra="forbid")

    char: str = Field(..., min_length=1, max_length=1)
    overline: bool = False

    @field_validator("char")
    @classmethod
    def validate_char(cls, v: str) -> str:
        """Ensure the adornment character is printable punctuation."""
        if v.isalnum() or v.isspace():
            raise ValueError("char must be a punctuation character")
        return v


def default_title_styles() -> dict[int, TitleStyle]:
    return {
        1: TitleStyle(char="=", overline=True),
        2: TitleStyle(char="-"),
        3: TitleStyle(char="~"),
    }


class CodeBlockConfig(BaseModel):
    """Settings for replacing code blocks with literal includes."""

    model_config = ConfigDict(extra="forbid")

    directive_names: list[str] = Field(
        default_factory=lambda: ["code-block", "code"],
        description="Directives treated as inline code blocks",
    )
    include_root: str = Field(
        default="/code-examples",
        description="Path prefix of generated literalinclude targets",
    )
    default_language: str = "text"
    extensions: dict[str, str] = Field(
        default_factory=lambda: {"text": ".txt"},
        description="File extension per language, e.g. {'python': '.py'}",
    )


class RewriteConfig(BaseModel):
    """Settings for the rewrite steps applied to a document."""

    model_config = ConfigDict(extra="forbid")

    parser: ParserConfig = Field(default_factory=ParserConfig)
    constants: dict[str, str] = Field(
        default_factory=dict, description="Values for {+name+} placeholders"
    )
    names_of_constants_to_expand: list[str] = Field(default_factory=list)
    phrases: list[PhraseRule] = Field(default_factory=list)
    title_styles: dict[int, TitleStyle] = Field(default_factory=default_title_styles)
    code_blocks: CodeBlockConfig = Field(default_factory=CodeBlockConfig)

    @field_validator("title_styles")
    @classmethod
    def validate_title_styles(cls, v: dict[int, TitleStyle]) -> dict[int, TitleStyle]:
        """Ensure title depths are positive."""
        for depth in v:
            if depth < 1:
                raise ValueError(f"title depth must be >= 1, got {depth}")
        return v

    def constants_to_expand(self) -> dict[str, str]:
        """Return the configured constants selected for expansion.

        Names without a value in ``constants`` are ignored.
        """
        return {
            name: self.constants[name]
            for name in self.names_of_constants_to_expand
            if name in self.constants
        }
