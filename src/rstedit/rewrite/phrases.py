"""Phrase rewriting with first-use and subsequent-use replacements.

Each rule is a regular expression with two replacements: the first applied
match in a document gets ``first``, every later one gets ``subsequent``. Rules
are tried in order, so more specific phrases must come before the generic ones
they contain. Matches may span hard line breaks inside a paragraph.
"""

import re
from collections.abc import Iterable, Sequence

from rstedit.lib.errors import (
    ArithmeticInvariantError,
    SpanConflictError,
    StructuralParseError,
)
from rstedit.lib.logging_config import get_logger
from rstedit.lib.reconciler import parse
from rstedit.lib.span_editor import SpanEditor
from rstedit.lib.span_merger import SpanMerger, merge_text
from rstedit.lib.tree import SKIP, IndexPath, visit
from rstedit.models.config import ParserConfig, PhraseRule
from rstedit.models.node import DirectiveNode, Node, NodeType, TextNode

logger = get_logger(__name__)

# Directives whose content is code, not prose.
CODE_DIRECTIVES: tuple[str, ...] = ("code-block", "code", "literalinclude", "sourcecode")


class PhraseRewriter:
    """Applies phrase rules to a parsed document through one ``SpanEditor``.

    Attributes:
        editor: Editor receiving the replacements
        rules: Phrase rules in priority order
        usage_counts: Number of applied replacements per rule
    """

    def __init__(
        self,
        editor: SpanEditor,
        rules: Sequence[PhraseRule],
        skip_directives: Iterable[str] = CODE_DIRECTIVES,
        path: str | None = None,
    ) -> None:
        self.editor = editor
        self.rules = list(rules)
        self.skip_directives = frozenset(skip_directives)
        self.path = path or "<unknown>"
        self.usage_counts = [0] * len(self.rules)
        self._patterns = [re.compile(rule.search) for rule in self.rules]
        self._merger = SpanMerger(editor)

    def rewrite(self, tree: Node) -> int:
        """Rewrite every matching phrase below ``tree``.

        Returns:
            Number of replacements recorded
        """

        def on_enter(node: Node, _path: IndexPath) -> object:
            if node.type == NodeType.LITERAL_BLOCK:
                return SKIP
            if isinstance(node, DirectiveNode) and node.name in self.skip_directives:
                return SKIP
            text_nodes = [
                child
                for child in node.children
                if child.type == NodeType.TEXT and isinstance(child, TextNode)
            ]
            if text_nodes:
                self._rewrite_siblings(text_nodes)
            return None

        visit(tree, on_enter)
        return sum(self.usage_counts)

    def _rewrite_siblings(self, text_nodes: list[TextNode]) -> None:
        merged = merge_text(text_nodes)
        for rule_index, (rule, pattern) in enumerate(zip(self.rules, self._patterns)):
            for match in pattern.finditer(merged):
                if match.start() == match.end():
                    continue
                replacement = (
                    rule.first if self.usage_counts[rule_index] == 0 else rule.subsequent
                )
                try:
                    applied = self._merger.apply(
                        text_nodes, match.start(), match.end(), replacement
                    )
                except (ArithmeticInvariantError, SpanConflictError) as e:
                    logger.warning(
                        f"Skipping match in {self.path}: {e}. "
                        "Please edit this occurrence manually."
                    )
                    continue
                if applied:
                    self.usage_counts[rule_index] += 1


def rewrite_phrases(
    source: str,
    rules: Sequence[PhraseRule],
    config: ParserConfig | None = None,
    path: str | None = None,
) -> SpanEditor:
    """Parse ``source`` and rewrite its phrases.

    A document that cannot be parsed is returned unedited.

    Args:
        source: Document text
        rules: Phrase rules in priority order
        config: Parser configuration
        path: Document path, used in log messages

    Returns:
        Editor holding the replacements
    """
    editor = SpanEditor(source)
    try:
        tree = parse(source, config)
    except StructuralParseError as e:
        logger.error(f"Failed to process {path or '<unknown>'}: {e}")
        return editor
    count = PhraseRewriter(editor, rules, path=path).rewrite(tree)
    logger.debug(f"Rewrote {count} phrases in {path or '<unknown>'}")
    return editor
