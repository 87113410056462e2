"""
Loguru sinks for the CLI and the API server.

Everything goes to stderr. With ``RESEARCH_RETRIEVAL_LOG_FILE`` set, records
are also appended to that file, which rotates at 10 MB and keeps the last
five rotations.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Replace loguru's default sink with ours at *log_level*."""
    level = log_level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=_CONSOLE_FORMAT, colorize=True)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            level=level,
            format=_FILE_FORMAT,
            rotation="10 MB",
            retention=5,
            enqueue=True,
        )
