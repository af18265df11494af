# storefront/utils/logger.py
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOGGER_NAME = "storefront"


def setup_logger(level="INFO", log_dir=None):
    """
    Configure the package logger once.

    - console output always
    - daily rotating file under ``log_dir`` when given (7 days kept)
    Modules log through ``logging.getLogger(__name__)`` and inherit these handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # create_app() may run many times (tests); keep a single set of handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=path / "storefront.log",
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logger initialized")
    return logger
