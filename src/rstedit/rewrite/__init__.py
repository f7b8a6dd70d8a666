"""Document rewrites built on the span editor."""

from rstedit.rewrite.runner import RewriteResult, rewrite_document, run_rewrites

__all__ = [
    "RewriteResult",
    "rewrite_document",
    "run_rewrites",
]
