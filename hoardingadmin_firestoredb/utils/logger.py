import logging
import sys

from .config import LOG_LEVEL

LOGGER_NAME = "hoardingadmin"


def _build_logger() -> logging.Logger:
    _logger = logging.getLogger(LOGGER_NAME)
    if not _logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(module)s:%(lineno)d | %(message)s"))
        _logger.addHandler(handler)
    _logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    return _logger


logger = _build_logger()
