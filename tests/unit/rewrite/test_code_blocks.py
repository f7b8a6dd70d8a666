"""Tests for replacing code blocks with literal includes."""

import pytest

from rstedit.models.config import CodeBlockConfig, ParserConfig
from rstedit.rewrite.code_blocks import (
    ExtractedCodeBlock,
    make_literal_include,
    page_directory,
    remove_code_blocks,
)

PAGE_PATH = "/docs/test/removeCodeBlocks/source/arbitrary-dir-name/file.txt"
INCLUDE_PATH = "/code-examples/arbitrary-dir-name/file/1.sh"


def _block(option_lines: list[str] | None = None) -> ExtractedCodeBlock:
    return ExtractedCodeBlock(
        index=1,
        language="sh",
        include_path=INCLUDE_PATH,
        content="https://github.com/realm/realm-swift.git",
        option_lines=option_lines or [],
    )


@pytest.mark.unit
class TestMakeLiteralInclude:
    """Tests for make_literal_include()."""

    def test_default_indent(self) -> None:
        """Test that options are indented by three spaces without an indent width."""
        assert make_literal_include(_block()) == (
            f".. literalinclude:: {INCLUDE_PATH}\n   :language: sh\n\n"
        )

    def test_indent_width(self) -> None:
        """Test that only the option lines are indented."""
        assert make_literal_include(_block(), indent_width=7) == (
            f".. literalinclude:: {INCLUDE_PATH}\n       :language: sh\n\n"
        )

    def test_option_lines(self) -> None:
        """Test that option lines follow the language option."""
        block = _block([":emphasize-lines: 7", ":copyable: false"])
        assert make_literal_include(block) == (
            f".. literalinclude:: {INCLUDE_PATH}\n"
            "   :language: sh\n"
            "   :emphasize-lines: 7\n"
            "   :copyable: false\n\n"
        )


@pytest.mark.unit
class TestPageDirectory:
    """Tests for page_directory()."""

    @pytest.mark.parametrize(
        "page_path,expected",
        [
            (PAGE_PATH, "arbitrary-dir-name/file"),
            ("/a/source/b/source/c.txt", "c"),
            ("guide/install.txt", "guide/install"),
            ("/guide/install.rst", "guide/install"),
        ],
    )
    def test_relative_to_source(self, page_path: str, expected: str) -> None:
        """Test that the path below the last source directory is used."""
        assert str(page_directory(page_path)) == expected


@pytest.mark.unit
class TestRemoveCodeBlocks:
    """Tests for remove_code_blocks()."""

    def test_block_in_block_quote(self) -> None:
        """Test replacement of an indented code block."""
        source = (
            "Copy and paste the following into the search/input box.\n"
            "\n"
            "       .. code-block:: sh\n"
            "\n"
            "          https://github.com/realm/realm-swift.git\n"
            "\n"
            "    "
        )
        result = remove_code_blocks(source, PAGE_PATH)
        assert result.editor.serialize() == (
            "Copy and paste the following into the search/input box.\n"
            "\n"
            f"       .. literalinclude:: {INCLUDE_PATH}\n"
            "          :language: sh\n"
            "\n"
            "    "
        )
        (block,) = result.blocks
        assert block.include_path == INCLUDE_PATH
        assert block.content == "https://github.com/realm/realm-swift.git"

    def test_missing_language(self) -> None:
        """Test that a block without a language becomes plain text."""
        source = (
            "Copy and paste the following into the search/input box.\n"
            "\n"
            "       .. code-block::\n"
            "\n"
            "          https://github.com/realm/realm-swift.git\n"
            "\n"
        )
        result = remove_code_blocks(source, PAGE_PATH)
        assert result.editor.serialize() == (
            "Copy and paste the following into the search/input box.\n"
            "\n"
            "       .. literalinclude:: /code-examples/arbitrary-dir-name/file/1.txt\n"
            "          :language: text\n"
            "\n"
        )
        assert result.blocks[0].language == "text"

    def test_multiple_blocks(self) -> None:
        """Test that blocks are numbered in document order."""
        source = (
            ".. code-block:: sh\n"
            "\n"
            "   https://github.com/realm/realm-swift.git\n"
            "\n"
            "Then, do some other stuff.\n"
            "\n"
            ".. code-block:: shell\n"
            "\n"
            "   npm install docdoctor\n"
        )
        config = CodeBlockConfig(extensions={"shell": ".sh"})
        result = remove_code_blocks(source, PAGE_PATH, config)
        assert [block.include_path for block in result.blocks] == [
            "/code-examples/arbitrary-dir-name/file/1.sh",
            "/code-examples/arbitrary-dir-name/file/2.sh",
        ]
        assert result.editor.serialize() == (
            f".. literalinclude:: {INCLUDE_PATH}\n"
            "   :language: sh\n"
            "\n"
            "Then, do some other stuff.\n"
            "\n"
            ".. literalinclude:: /code-examples/arbitrary-dir-name/file/2.sh\n"
            "   :language: shell\n"
        )

    def test_options_carried_over(self, code_block_source: str) -> None:
        """Test that code block options move to the literal include."""
        result = remove_code_blocks(code_block_source, "docs/source/guide.txt")
        assert result.editor.serialize() == (
            "Intro paragraph.\n"
            "\n"
            ".. literalinclude:: /code-examples/guide/1.sh\n"
            "   :language: sh\n"
            "   :copyable: false\n"
        )
        assert result.blocks[0].option_lines == [":copyable: false"]
        assert result.blocks[0].content == "echo hello"

    def test_multiline_content(self) -> None:
        """Test that content is de-indented with inner indentation kept."""
        source = (
            ".. code-block:: text\n"
            "\n"
            "   target 'MyRealmProjectTests' do\n"
            "      inherit! :search_paths\n"
            "\n"
            "      pod 'Realm', '~>10'\n"
            "   end\n"
            "\n"
        )
        result = remove_code_blocks(source, PAGE_PATH)
        assert result.blocks[0].content == (
            "target 'MyRealmProjectTests' do\n"
            "   inherit! :search_paths\n"
            "\n"
            "   pod 'Realm', '~>10'\n"
            "end"
        )
        assert result.blocks[0].include_path.endswith("/1.txt")

    def test_unparsable_page(self, nested_directive_source: str) -> None:
        """Test that a page that cannot be parsed is left unedited."""
        result = remove_code_blocks(
            nested_directive_source,
            PAGE_PATH,
            parser_config=ParserConfig(max_nesting_depth=1),
        )
        assert result.blocks == []
        assert not result.editor.has_changes()
