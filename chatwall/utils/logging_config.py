"""
Logging setup shared by the runner scripts.

Console gets LOG_CONSOLE_LEVEL (WARNING by default). Files under LOG_DIR
(default <project>/logs), all rotating:
- app.log: everything at INFO and up
- error.log: ERROR and up
- chat.log / pipeline.log / providers.log / overlay.log: one area each,
  selected by logger name
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# file name -> logger name prefixes routed into it
AREA_LOGS = {
    "chat.log": ("chatwall.chat", "websockets"),
    "pipeline.log": ("chatwall.pipeline",),
    "providers.log": ("chatwall.providers", "httpx"),
    "overlay.log": ("chatwall.overlay", "chatwall.app", "uvicorn"),
}

NOISY_LOGGERS = ("httpx", "httpcore", "websockets", "uvicorn.access")


class _PrefixFilter(logging.Filter):
    def __init__(self, prefixes):
        super().__init__()
        self._prefixes = tuple(prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        return (record.name or "").startswith(self._prefixes)


def _level_from_env(key: str, default: int) -> int:
    name = (os.environ.get(key) or "").upper()
    return getattr(logging, name, default) if name else default


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=int(os.environ.get("LOG_MAX_MB", "10")) * 1024 * 1024,
        backupCount=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_dir: Optional[Path] = None) -> Path:
    """
    Replace the root logger's handlers with the console + file set above.

    Returns:
        the log directory in use
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    project_root = Path(__file__).resolve().parents[2]
    log_dir = Path(log_dir or os.environ.get("LOG_DIR") or project_root / "logs")
    log_dir.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(_level_from_env("LOG_CONSOLE_LEVEL", logging.WARNING))
    console.setFormatter(formatter)
    root.addHandler(console)

    root.addHandler(_file_handler(log_dir / "app.log", logging.INFO, formatter))
    root.addHandler(_file_handler(log_dir / "error.log", logging.ERROR, formatter))
    for filename, prefixes in AREA_LOGS.items():
        handler = _file_handler(log_dir / filename, logging.DEBUG, formatter)
        handler.addFilter(_PrefixFilter(prefixes))
        root.addHandler(handler)

    # WARNING keeps third-party warnings in the files, ERROR silences them
    noisy_level = _level_from_env("NOISY_LOG_LEVEL", logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return log_dir
