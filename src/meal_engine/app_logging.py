"""Logging configuration helpers."""

import logging

INTEGRITY_LOGGER = "meal_engine.integrity"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with a single stream handler.

    Integrity violations go to ``meal_engine.integrity`` at CRITICAL, which
    propagates to the same handler and can be routed to alerting separately.
    """
    logger = logging.getLogger("meal_engine")
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
