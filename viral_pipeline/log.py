"""
Centralised loguru configuration for the pipeline.
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def configure_logger(level: str = "INFO", log_dir: Optional[Union[str, Path]] = None) -> None:
    """
    Replace loguru's default sink with the pipeline's sinks.

    Args:
        level: Minimum level for every sink
        log_dir: Optional directory for a daily rotating log file
    """
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )
    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        logger.add(
            directory / "enhancement_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="7 days",
            level=level,
            encoding="utf-8",
        )
