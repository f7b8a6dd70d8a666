"""Replacement of inline code blocks with ``literalinclude`` directives.

Every ``code-block`` (or configured equivalent) directive of a page is cut
out and replaced by a ``literalinclude`` pointing at a file under the include
root. The extracted code is returned to the caller together with its target
path; writing the files is up to the caller.
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath

from rstedit.lib.errors import RstEditError
from rstedit.lib.logging_config import get_logger
from rstedit.lib.reconciler import parse
from rstedit.lib.span_editor import SpanEditor
from rstedit.lib.tree import SKIP, IndexPath, visit
from rstedit.models.config import CodeBlockConfig, ParserConfig
from rstedit.models.node import DirectiveNode, Node

logger = get_logger(__name__)

DEFAULT_OPTION_INDENT = 3


@dataclass
class ExtractedCodeBlock:
    """Code block content lifted out of a page.

    Attributes:
        index: 1-based position of the block within its page
        language: Block language, from the directive argument
        include_path: Target path used by the ``literalinclude``
        content: De-indented code without trailing newlines
        option_lines: Option lines carried over to the ``literalinclude``
    """

    index: int
    language: str
    include_path: str
    content: str
    option_lines: list[str] = field(default_factory=list)


@dataclass
class CodeBlockExtraction:
    """Result of ``remove_code_blocks``.

    Attributes:
        editor: Editor holding the directive replacements
        blocks: Extracted blocks in document order
    """

    editor: SpanEditor
    blocks: list[ExtractedCodeBlock] = field(default_factory=list)


def page_directory(page_path: str) -> PurePosixPath:
    """Return the page path relative to its ``source`` directory, minus suffix.

    Example:
        >>> str(page_directory("/docs/source/sdk/install.txt"))
        'sdk/install'
    """
    path = PurePosixPath(page_path)
    parts = path.parts
    if "source" in parts:
        last = len(parts) - 1 - parts[::-1].index("source")
        parts = parts[last + 1 :]
    else:
        parts = tuple(part for part in parts if part != path.anchor)
    return PurePosixPath(*parts).with_suffix("")


def make_literal_include(block: ExtractedCodeBlock, indent_width: int = 0) -> str:
    """Build a ``literalinclude`` directive for ``block``.

    The marker line carries no indentation; option lines are indented by
    ``indent_width`` spaces, or three when it is zero.
    """
    padding = " " * (indent_width if indent_width > 0 else DEFAULT_OPTION_INDENT)
    lines = [f".. literalinclude:: {block.include_path}", f"{padding}:language: {block.language}"]
    lines.extend(f"{padding}{option.strip()}" for option in block.option_lines)
    return "\n".join(lines) + "\n\n"


def _outermost(tree: Node, names: list[str]) -> list[DirectiveNode]:
    """Return matching directives that are not nested in another match."""
    wanted = set(names)
    found: list[DirectiveNode] = []

    def on_enter(node: Node, _path: IndexPath) -> object:
        if isinstance(node, DirectiveNode) and node.name in wanted and node is not tree:
            found.append(node)
            return SKIP
        return None

    visit(tree, on_enter)
    return found


def _block_content(source: str, directive: DirectiveNode) -> str:
    if not directive.children or directive.indent is None:
        return ""
    start = directive.children[0].position.start.offset
    start = source.rfind("\n", 0, start) + 1
    end = directive.position.end.offset
    lines = []
    for line in source[start:end].split("\n"):
        indentation = len(line) - len(line.lstrip(" "))
        lines.append(line[min(indentation, directive.indent.offset) :])
    return "\n".join(lines).rstrip("\n")


def remove_code_blocks(
    source: str,
    page_path: str,
    config: CodeBlockConfig | None = None,
    parser_config: ParserConfig | None = None,
) -> CodeBlockExtraction:
    """Replace the code blocks of a page with ``literalinclude`` directives.

    A page that cannot be processed is returned unedited with no blocks.

    Args:
        source: Page text
        page_path: Path of the page, used to derive include paths
        config: Code block settings
        parser_config: Parser configuration

    Returns:
        The editor with the replacements and the extracted blocks
    """
    config = config or CodeBlockConfig()
    editor = SpanEditor(source)
    blocks: list[ExtractedCodeBlock] = []
    directory = page_directory(page_path)
    root = config.include_root.rstrip("/")

    try:
        tree = parse(source, parser_config)
        for directive in _outermost(tree, config.directive_names):
            language = (directive.argument or config.default_language).strip()
            extension = config.extensions.get(language, f".{language}")
            block = ExtractedCodeBlock(
                index=len(blocks) + 1,
                language=language,
                include_path=f"{root}/{directory}/{len(blocks) + 1}{extension}",
                content=_block_content(source, directive),
                option_lines=list(directive.option_lines),
            )
            marker_column = directive.position.start.column - 1
            indent_width = (
                directive.indent.offset
                if directive.indent is not None
                else marker_column + DEFAULT_OPTION_INDENT
            )
            replacement = make_literal_include(block, indent_width)
            start = directive.position.start.offset
            end = directive.position.end.offset
            if source[start:end].endswith("\n"):
                replacement = replacement.rstrip("\n") + "\n"
            editor.overwrite(start, end, replacement)
            blocks.append(block)
    except RstEditError as e:
        logger.error(f"Failed to process {page_path}: {e}")
        return CodeBlockExtraction(editor=SpanEditor(source))

    logger.debug(f"Extracted {len(blocks)} code blocks from {page_path}")
    return CodeBlockExtraction(editor=editor, blocks=blocks)
