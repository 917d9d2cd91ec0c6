"""Shared logger for the formula_parser package."""
import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL_ENV = "FORMULA_PARSER_LOG_LEVEL"


def get_logger(name: str = "formula_parser") -> logging.Logger:
    """
    Return the package logger, attaching a stream handler on first use.

    The level is read from the ``FORMULA_PARSER_LOG_LEVEL`` environment variable (default ``INFO``).

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)

    # Prevent double handlers when the module is imported again
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.setLevel(os.environ.get(LOG_LEVEL_ENV, "INFO").upper())

    return log


logger: logging.Logger = get_logger()
