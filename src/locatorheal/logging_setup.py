from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "locatorheal"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_logger(log_dir: Path | None = None, level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if logger.handlers:
        return logger

    logger.propagate = False
    try:
        target_dir = log_dir or (Path.home() / ".locatorheal")
        target_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target_dir / "healer.log", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    except OSError:
        # Fall back to stderr when the log directory is not writable.
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(stream_handler)
    return logger


def get_logger(component: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_NAME}.{component}")
