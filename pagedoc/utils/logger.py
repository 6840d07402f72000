import logging
from logging.handlers import RotatingFileHandler

from pagedoc.config import Settings

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Logger that writes to the console and, when PAGEDOC_LOG_FILE is set,
    to a rotating file as well.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    settings = Settings.from_env()
    level = getattr(logging, settings.log_level, logging.INFO)
    logger.setLevel(level)

    formatter = logging.Formatter(_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if settings.log_file:
        file_handler = RotatingFileHandler(settings.log_file, maxBytes=10_000_000, backupCount=5)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger
