"""Project-wide logger."""
import logging


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(processName)s | %(message)s"

logger = logging.getLogger("arithmetic_evaluator")


def configure_logging(level: str = "WARNING") -> None:
    """
    Attach a stderr handler to the project logger and set its level.

    Calling it again only updates the level.

    :param str level: Name of a ``logging`` level
    """
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
