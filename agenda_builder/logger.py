"""Logger configuration for the agenda builder."""
import sys
import typing as t
from pathlib import Path

from loguru import logger


def setup_logger(level: str = "INFO", log_file: t.Optional[str] = None) -> None:
    """Configure loguru with console and optional file output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file. If None, only console logging.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level> {extra}"
        ),
        level=level,
        colorize=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message} {extra}",
            level=level,
            rotation="10 MB",
            retention="7 days",
            encoding="utf-8",
        )

    logger.debug(f"Logger initialized with level={level}")
