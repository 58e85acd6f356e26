import logging
import sys

LOGGER_NAME = "patchcov"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Send patchcov log records to stderr at ``level``.

    Calling it again replaces the handler installed by the previous call
    instead of stacking another one.

    Raises:
        ValueError: ``level`` is not a known logging level name.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)

    for existing in list(logger.handlers):
        if getattr(existing, "_patchcov_handler", False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._patchcov_handler = True
    logger.addHandler(handler)

    logger.propagate = False
    return logger
