"""Pytest configuration and shared fixtures for rstedit tests."""

import os
import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from rstedit.lib.tree import find_all
from rstedit.models.node import Node, NodeType, TextNode


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Create a temporary directory for test file operations.

    Yields:
        Path to temporary directory

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def isolated_env() -> Generator[dict[str, str]]:
    """Provide isolated environment variables for testing.

    Yields:
        Dictionary of original environment variables

    Cleanup:
        Restores original environment after test
    """
    original_env = os.environ.copy()
    yield original_env
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def code_block_source() -> str:
    """Document with a code block carrying an argument, options and content."""
    return (
        "Intro paragraph.\n"
        "\n"
        ".. code-block:: sh\n"
        "   :copyable: false\n"
        "\n"
        "   echo hello\n"
    )


@pytest.fixture
def nested_directive_source() -> str:
    """Three directives nested inside each other, each with an option."""
    return (
        ".. tabs::\n"
        "\n"
        "   .. tab:: Swift\n"
        "      :tabid: swift\n"
        "\n"
        "      .. code-block:: swift\n"
        "         :emphasize-lines: 1\n"
        "\n"
        "         let x = 1\n"
        "         let y = x\n"
    )


@pytest.fixture
def assert_positions_index_source() -> Callable[[Node, str], None]:
    """Return a checker asserting each text node's position slices its value."""

    def check(node: Node, source: str) -> None:
        for text in find_all(node, lambda n: n.type == NodeType.TEXT):
            assert isinstance(text, TextNode)
            start, end = text.position.start.offset, text.position.end.offset
            assert source[start:end] == text.value, (
                f"{text.type} at [{start}, {end}) holds {text.value!r}, "
                f"source has {source[start:end]!r}"
            )

    return check
