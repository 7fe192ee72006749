"""
Centralized logging configuration for relay-forwarder.
Initializes loguru and intercepts standard library logging.
"""

import logging
import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """
    Routes standard library log records (minio, urllib3) into loguru.
    See: https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
    """

    def emit(self, record):
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", colorize: bool = True) -> None:
    """
    Configures loguru to handle all logs and output them to stderr.

    Records go to stderr so that scripts can keep stdout for results.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=level.upper(),
        colorize=colorize,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # urllib3 is chatty at DEBUG about connection pooling
    for name in ["urllib3", "urllib3.connectionpool"]:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Logging initialized with Loguru at level {level.upper()}.")
