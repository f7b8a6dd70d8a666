"""Section title adornment normalization.

Resizes title underlines (and overlines) to the current title length and
switches the adornment to the configured style for the title's depth. The
title length is read through the editor, so phrases rewritten earlier in the
same editor are taken into account.
"""

import re
from collections.abc import Mapping

from rstedit.lib.errors import SpanConflictError
from rstedit.lib.logging_config import get_logger
from rstedit.lib.span_editor import SpanEditor
from rstedit.lib.tree import find_all
from rstedit.models.config import TitleStyle, default_title_styles
from rstedit.models.node import Node, TitleNode

logger = get_logger(__name__)

DEFAULT_TITLE_STYLES: dict[int, TitleStyle] = default_title_styles()

ADORNMENT_RUN_PATTERN = re.compile(r"([!-/:-@\[-`{-~])\1*")


def _adornment_run(source: str, start: int) -> tuple[int, int]:
    match = ADORNMENT_RUN_PATTERN.match(source, start)
    if match is None:
        return start, start
    return match.start(), match.end()


def fix_title(
    editor: SpanEditor, title: TitleNode, style: TitleStyle | None = None
) -> bool:
    """Normalize the adornment of one title.

    Args:
        editor: Editor over the document ``title`` was parsed from
        title: Title node with ``text_position`` set
        style: Desired style; ``None`` keeps the current character and overline

    Returns:
        True if an edit was recorded
    """
    if title.text_position is None:
        return False
    source = editor.original
    text_start = title.text_position.start.offset
    text_end = title.text_position.end.offset
    column = title.position.start.column - 1
    title_line_start = source.rfind("\n", 0, text_start) + 1
    underline_line_start = source.find("\n", text_end) + 1
    if underline_line_start == 0:
        return False

    try:
        text = editor.slice(text_start, text_end)
    except SpanConflictError as e:
        logger.warning(f"Cannot measure title at line {title.position.start.line}: {e}")
        return False
    length = (text_start - title_line_start - column) + len(text)

    char = style.char if style is not None else title.adornment
    want_overline = style.overline if style is not None else title.overline
    adornment = char * length
    changed = False

    underline_start, underline_end = _adornment_run(source, underline_line_start + column)
    if source[underline_start:underline_end] != adornment:
        editor.overwrite(underline_start, underline_end, adornment)
        changed = True

    if title.overline:
        overline_start, overline_end = _adornment_run(source, title.position.start.offset)
        if not want_overline:
            editor.remove(title.position.start.offset - column, title_line_start)
            changed = True
        elif source[overline_start:overline_end] != adornment:
            editor.overwrite(overline_start, overline_end, adornment)
            changed = True
    elif want_overline:
        editor.insert_at(title_line_start, " " * column + adornment + "\n")
        changed = True

    if changed:
        logger.debug(
            f"Fixed title at line {title.position.start.line} "
            f"(depth {title.depth}, length {length})"
        )
    return changed


def fix_titles(
    editor: SpanEditor,
    tree: Node,
    styles: Mapping[int, TitleStyle] | None = None,
) -> int:
    """Normalize every title in ``tree``.

    Titles deeper than any configured style keep their character and are only
    resized.

    Returns:
        Number of titles changed
    """
    styles = DEFAULT_TITLE_STYLES if styles is None else styles
    titles = find_all(tree, lambda n: isinstance(n, TitleNode))
    return sum(
        1
        for title in titles
        if isinstance(title, TitleNode) and fix_title(editor, title, styles.get(title.depth))
    )
