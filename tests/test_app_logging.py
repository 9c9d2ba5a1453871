"""Tests for logging configuration."""

import logging

from meal_engine.app_logging import INTEGRITY_LOGGER, configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("meal_engine")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.propagate is False


def test_integrity_logger_shares_application_handler() -> None:
    logger = logging.getLogger("meal_engine")
    logger.handlers.clear()
    configure_logging(logging.WARNING)

    integrity = logging.getLogger(INTEGRITY_LOGGER)

    assert integrity.parent is logger
    assert integrity.isEnabledFor(logging.CRITICAL)
    assert not integrity.isEnabledFor(logging.INFO)
    logger.setLevel(logging.INFO)
