"""File logger setup shared by agent components."""

from __future__ import annotations

import logging
import os


def build_file_logger(name: str, log_dir: str | None, filename: str) -> logging.Logger:
    """Return a logger writing to ``log_dir/filename``, or the named logger if no dir."""
    if not log_dir:
        return logging.getLogger(name)

    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.abspath(os.path.join(log_dir, filename))
    logger = logging.getLogger(f"{name}.{log_path}")
    logger.setLevel(logging.DEBUG)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == log_path:
            return logger

    handler = logging.FileHandler(log_path, encoding="utf-8")
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
