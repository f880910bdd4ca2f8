import logging
import os
from logging.handlers import RotatingFileHandler

from marketplace.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"


def setup_logging(level: str | None = None, log_file: str | None = None):
    """Configure the root `marketplace` logger once per process."""
    logger = logging.getLogger("marketplace")
    if getattr(logger, "_configured", False):
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    log_file = log_file or settings.log_file
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel((level or settings.log_level).upper())
    logger._configured = True
    logger.info("Logging configured")
    return logger
