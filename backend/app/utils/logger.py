"""
Trading Simulator - Logger Configuration
Centralized logging with loguru
"""
import sys
from pathlib import Path
from loguru import logger

from app.config import settings


LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging() -> None:
    """Install console and rotating file sinks. Safe to call more than once."""
    logger.remove()

    logger.add(
        sys.stdout,
        colorize=True,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
    )

    log_path = Path(settings.LOG_DIR)
    log_path.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_path / "app.log",
        rotation="10 MB",
        retention="30 days",
        compression="gz",
        format=LOG_FORMAT,
        level="DEBUG",
    )

    # Errors only
    logger.add(
        log_path / "error.log",
        rotation="10 MB",
        retention="30 days",
        compression="gz",
        format=LOG_FORMAT,
        level="ERROR",
    )


def get_logger(name: str = __name__):
    """
    Get a logger instance bound to the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logger.bind(name=name)


__all__ = ["logger", "get_logger", "setup_logging"]
