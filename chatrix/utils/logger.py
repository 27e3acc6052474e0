"""
Logging utility with loguru.
Provides structured logging with file rotation.
"""

import sys

from loguru import logger

from chatrix.config.settings import settings, resolve_path


def setup_logger(level: str = None, log_to_file: bool = True):
    """
    Configure loguru logger with file and console outputs.

    Args:
        level: Console log level (defaults to settings.log_level)
        log_to_file: Also write a rotating DEBUG log under settings.log_dir
    """
    # Remove default handler
    logger.remove()

    # Console handler with colors
    logger.add(
        sys.stdout,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level or settings.log_level,
    )

    if log_to_file:
        # File handler with rotation
        log_dir = resolve_path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_dir / "chatrix.log",
            rotation="10 MB",
            retention="1 week",
            compression="zip",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
        )

    logger.info("Logger initialized")
    return logger


def mask_secret(value: str) -> str:
    """Mask an API key for logging."""
    if not value:
        return "<unset>"
    if len(value) > 12:
        return value[:8] + "..." + value[-4:]
    return "***"
