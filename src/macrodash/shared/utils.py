"""Shared utility functions for macrodash."""

import logging
from pathlib import Path


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str | None = None
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Handlers are attached once per logger name, so repeated calls (one per
    adapter instance) do not duplicate output.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO').
            Defaults to Config.LOG_LEVEL.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        from macrodash.shared.config import Config

        level = Config.LOG_LEVEL

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_path = str(log_file.resolve())
        has_file_handler = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == log_path
            for h in logger.handlers
        )
        if not has_file_handler:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
