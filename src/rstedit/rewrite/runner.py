"""Per-document rewrite pipeline.

A document is parsed once and every rewrite step records its edits in the
same ``SpanEditor``. Steps that fail with an ``RstEditError`` abort the whole
document, which is then reported unchanged.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial

from rstedit.lib.errors import RstEditError
from rstedit.lib.logging_config import get_logger
from rstedit.lib.reconciler import parse
from rstedit.lib.span_editor import SpanEditor
from rstedit.models.config import ParserConfig, RewriteConfig
from rstedit.models.node import Node
from rstedit.rewrite.constants import replace_source_constants
from rstedit.rewrite.phrases import PhraseRewriter
from rstedit.rewrite.titles import fix_titles

logger = get_logger(__name__)

RewriteStep = Callable[[SpanEditor, Node], object]


@dataclass
class RewriteResult:
    """Outcome of rewriting one document.

    Attributes:
        text: Rewritten text, or the input text if nothing was applied
        changed: Whether any edit was applied
        error: The error that aborted the document, if any
    """

    text: str
    changed: bool
    error: RstEditError | None = None


def run_rewrites(
    source: str,
    steps: Sequence[RewriteStep],
    config: ParserConfig | None = None,
    path: str | None = None,
) -> RewriteResult:
    """Parse ``source`` and run ``steps`` against one shared editor.

    Args:
        source: Document text
        steps: Callables receiving the editor and the parsed tree
        config: Parser configuration
        path: Document path, used in log messages

    Returns:
        The rewritten text, or the unedited text if any step failed
    """
    label = path or "<unknown>"
    editor = SpanEditor(source)
    try:
        tree = parse(source, config)
        for step in steps:
            step(editor, tree)
        text = editor.serialize()
    except RstEditError as e:
        logger.error(f"Failed to process {label}: {e}. Please edit this file manually.")
        return RewriteResult(text=source, changed=False, error=e)

    if not editor.has_changes():
        logger.info(f"Visited {label} -- no changes made")
        return RewriteResult(text=source, changed=False)
    logger.info(f"Updated {label} ({len(editor.edits)} edits)")
    return RewriteResult(text=text, changed=True)


def rewrite_document(
    source: str, config: RewriteConfig | None = None, path: str | None = None
) -> RewriteResult:
    """Expand constants, rewrite phrases and fix titles in one document.

    Constants are expanded in the text before parsing, so phrases inside
    them are found as well.
    """
    config = config or RewriteConfig()
    expanded = replace_source_constants(source, config.constants_to_expand())

    def rewrite_phrases_step(editor: SpanEditor, tree: Node) -> int:
        return PhraseRewriter(editor, config.phrases, path=path).rewrite(tree)

    steps: list[RewriteStep] = []
    if config.phrases:
        steps.append(rewrite_phrases_step)
    steps.append(partial(fix_titles, styles=config.title_styles))

    result = run_rewrites(expanded, steps, config=config.parser, path=path)
    if result.error is not None:
        return RewriteResult(text=source, changed=False, error=result.error)
    if expanded != source and not result.changed:
        return RewriteResult(text=expanded, changed=True)
    return result
