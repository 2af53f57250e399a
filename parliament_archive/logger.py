"""Logging setup: console at the requested level, rotating file at DEBUG.

The file keeps per-link crawl detail (visits, archive hits) even when the
console only shows progress.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "parliament_archive"


def setup_logger(log_dir: str = "logs", level: int = logging.INFO) -> logging.Logger:
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        for handler in logger.handlers:
            if not isinstance(handler, RotatingFileHandler):
                handler.setLevel(level)
        return logger

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(fmt)
    logger.addHandler(console)

    # 10MB per file, keep 5
    archive_log = RotatingFileHandler(
        os.path.join(log_dir, "archive.log"),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    archive_log.setLevel(logging.DEBUG)
    archive_log.setFormatter(fmt)
    logger.addHandler(archive_log)

    return logger
