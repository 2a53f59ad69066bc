"""
Logging configuration for the SentQuote API.
Call setup_logging() once from the application factory.
"""
import logging
import sys

_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(level=None):
    """Attach a single console handler to the ``sentquote`` logger.

    Repeated calls (one per ``create_app`` in tests) only adjust the level.
    """
    logger = logging.getLogger('sentquote')
    logger.setLevel((level or 'INFO').upper())

    if not any(getattr(h, '_sentquote', False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt='%H:%M:%S'))
        handler._sentquote = True
        logger.addHandler(handler)

    return logger
