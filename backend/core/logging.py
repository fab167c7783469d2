import logging
import sys

from backend.core import config


def setup_logging(level: str | None = None) -> None:
    """
    Configures the root logger with a single stdout handler.
    Safe to call more than once; existing root handlers are replaced.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel((level or config.LOG_LEVEL).upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
