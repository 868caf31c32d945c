"""Tests for amldeploy logging configuration."""

import logging

import pytest

from amldeploy.lib.logging_config import get_logger, setup_logging


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.mark.parametrize(
        ("verbose", "quiet", "expected"),
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.DEBUG),
        ],
    )
    def test_levels(self, verbose: bool, quiet: bool, expected: int) -> None:
        """Test the level chosen for each flag combination."""
        setup_logging(verbose=verbose, quiet=quiet)

        assert logging.getLogger("amldeploy").level == expected

    def test_repeated_setup_keeps_one_handler(self) -> None:
        """Test that handlers do not stack across calls."""
        setup_logging()
        setup_logging(verbose=True)

        logger = logging.getLogger("amldeploy")
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_module_loggers_are_children(self) -> None:
        """Test that module loggers inherit the package configuration."""
        setup_logging(verbose=True)

        child = get_logger("amldeploy.deploy.lifecycle")

        assert child.getEffectiveLevel() == logging.DEBUG
