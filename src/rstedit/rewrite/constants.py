"""Expansion of ``{+name+}`` source constants."""

import re
from collections.abc import Mapping

from rstedit.lib.logging_config import get_logger
from rstedit.lib.span_editor import SpanEditor

logger = get_logger(__name__)

CONSTANT_PATTERN = re.compile(r"\{\+(?P<name>[^{}+\s]+)\+\}")


def replace_source_constants(text: str, constants: Mapping[str, str]) -> str:
    """Return ``text`` with every known ``{+name+}`` replaced by its value.

    Unknown names are left as they are.

    Example:
        >>> replace_source_constants("Use {+service+}.", {"service": "Atlas"})
        'Use Atlas.'
    """

    def substitute(match: re.Match[str]) -> str:
        return constants.get(match.group("name"), match.group(0))

    return CONSTANT_PATTERN.sub(substitute, text)


def expand_constants(editor: SpanEditor, constants: Mapping[str, str]) -> int:
    """Record an overwrite for every known constant in the editor's source.

    Returns:
        Number of constants expanded
    """
    expanded = 0
    for match in CONSTANT_PATTERN.finditer(editor.original):
        name = match.group("name")
        if name not in constants:
            continue
        editor.overwrite(match.start(), match.end(), constants[name])
        expanded += 1
    if expanded:
        logger.debug(f"Expanded {expanded} source constants")
    return expanded
