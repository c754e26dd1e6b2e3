"""Logging configuration helpers."""

import logging


def configure_logging(environment: str | None = None) -> None:
    """Configure the photo_archive logger with a single stream handler.

    Local environments log at DEBUG, everything else at INFO. httpx request
    lines are held at WARNING so image host calls do not flood the output.
    """
    logger = logging.getLogger("photo_archive")
    logger.setLevel(logging.DEBUG if environment == "local" else logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
