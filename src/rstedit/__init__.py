"""rstedit - Position-faithful parsing and editing of directive-based markup.

rstedit parses reStructuredText-like documents into a tree whose node
positions index the original string exactly, even inside nested directives,
and edits the original text through non-destructive span edits.

Main features:
- Directive reconciliation (argument, option lines, nested content)
- Cross-reference and label classification
- Span editing with overlap detection
- Phrase, title and code block rewrites driven by YAML configuration
"""

from rstedit.config.loader import ConfigLoader
from rstedit.lib.errors import (
    ArithmeticInvariantError,
    ConfigError,
    RstEditError,
    SpanConflictError,
    StructuralParseError,
)
from rstedit.lib.reconciler import parse
from rstedit.lib.span_editor import SpanEditor
from rstedit.lib.span_merger import SpanMerger

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ArithmeticInvariantError",
    "ConfigError",
    "ConfigLoader",
    "RstEditError",
    "SpanConflictError",
    "SpanEditor",
    "SpanMerger",
    "StructuralParseError",
    "parse",
]
