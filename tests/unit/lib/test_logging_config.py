"""Tests for logging setup."""

import logging
from collections.abc import Generator

import pytest

from rstedit.lib.logging_config import LOGGER_NAMESPACE, get_logger, setup_logging


@pytest.fixture(autouse=True)
def reset_logger() -> Generator[None]:
    """Restore the rstedit logger after each test."""
    logger = logging.getLogger(LOGGER_NAMESPACE)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.mark.unit
class TestGetLogger:
    """Tests for get_logger()."""

    def test_prefixes_namespace(self) -> None:
        """Test that foreign names are moved under the rstedit namespace."""
        assert get_logger("tools.batch").name == "rstedit.tools.batch"

    def test_keeps_package_names(self) -> None:
        """Test that module names inside the package are unchanged."""
        assert get_logger("rstedit.lib.reconciler").name == "rstedit.lib.reconciler"


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging()."""

    @pytest.mark.parametrize(
        "verbose,quiet,level",
        [
            (False, False, logging.INFO),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_levels(self, verbose: bool, quiet: bool, level: int) -> None:
        """Test the level chosen for each flag combination."""
        setup_logging(verbose=verbose, quiet=quiet)
        assert logging.getLogger(LOGGER_NAMESPACE).level == level

    def test_repeated_setup_keeps_one_handler(self) -> None:
        """Test that reconfiguring replaces the installed handler."""
        logger = logging.getLogger(LOGGER_NAMESPACE)
        before = len(logger.handlers)
        setup_logging()
        setup_logging(verbose=True)
        assert len(logger.handlers) == before + 1
