"""Tests for centralized logging configuration."""

import logging
from io import StringIO

import pytest

from tubenet.logging import (
    disable_debug_logging,
    enable_debug_logging,
    get_logger,
    level_for_flags,
    reset_logging,
    set_global_log_level,
    setup_root_logger,
)


@pytest.fixture(autouse=True)
def _reset_logging_each_test():
    reset_logging()
    yield
    reset_logging()
    setup_root_logger()


def _capture(logger: logging.Logger) -> StringIO:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    return stream


def test_info_by_default_and_debug_toggle():
    logger = get_logger("tubenet.test")
    stream = _capture(logger)

    logger.info("info-1")
    logger.debug("debug-1")
    assert "info-1" in stream.getvalue()
    assert "debug-1" not in stream.getvalue()

    enable_debug_logging()
    logger.debug("debug-2")
    assert "debug-2" in stream.getvalue()

    disable_debug_logging()
    logger.debug("debug-3")
    assert "debug-3" not in stream.getvalue()


def test_global_level_reaches_existing_and_new_children():
    existing = get_logger("tubenet.routing.arc_service")
    set_global_log_level(logging.WARNING)
    assert existing.getEffectiveLevel() == logging.WARNING
    assert get_logger("tubenet.flows.calculator").getEffectiveLevel() == logging.WARNING


def test_setup_is_idempotent():
    setup_root_logger()
    setup_root_logger()
    assert len(logging.getLogger("tubenet").handlers) == 1


def test_custom_handler_and_format():
    stream = StringIO()
    setup_root_logger(
        level=logging.DEBUG,
        format_string="%(levelname)s|%(message)s",
        handler=logging.StreamHandler(stream),
    )
    get_logger("tubenet.session").debug("hello")
    assert stream.getvalue() == "DEBUG|hello\n"


def test_module_loggers_are_children_of_root():
    from tubenet.validation import validator

    assert validator.LOGGER.name == "tubenet.validation.validator"
    assert validator.LOGGER.level == logging.NOTSET


@pytest.mark.parametrize(
    "verbose, quiet, level",
    [
        (False, False, logging.INFO),
        (True, False, logging.DEBUG),
        (False, True, logging.WARNING),
        (True, True, logging.DEBUG),
    ],
)
def test_level_for_flags(verbose, quiet, level):
    assert level_for_flags(verbose, quiet) == level
