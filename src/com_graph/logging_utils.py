"""Logging configuration for the command-line interface."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(
    *,
    console_level: int = logging.WARNING,
    file_path: str | Path | None = None,
    file_level: int = logging.DEBUG,
    replace_existing: bool = True,
) -> None:
    """Configure the root logger.

    Args:
    ----
        console_level: Level of records written to stderr.
        file_path: Optional log file; parent directories are created.
        file_level: Level of records written to the log file.
        replace_existing: Remove handlers installed before.

    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    if replace_existing:
        root.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handlers = [
        h
        for h in root.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]
    if not console_handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        root.addHandler(console_handler)
        console_handlers = [console_handler]
    for handler in console_handlers:
        handler.setLevel(console_level)
        handler.setFormatter(formatter)

    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="w" if replace_existing else "a", encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def parse_log_level(name: str) -> int:
    """Translate a level name such as ``debug`` into a logging level.

    Raises
    ------
        ValueError: If the name is not a known level.

    """
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level
