from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "turtlescout"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
FALLBACK_LOG_FILE = Path(__file__).resolve().parent / "logs" / "turtlescout.log"


def resolve_log_file() -> Path:
    override_dir = os.getenv("TURTLESCOUT_LOG_DIR")
    if override_dir:
        return Path(override_dir) / "turtlescout.log"
    return Path.home() / ".turtlescout" / "logs" / "turtlescout.log"


def _rotating_handler(log_file: Path) -> RotatingFileHandler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_file,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )


def _current_log_file(logger: logging.Logger) -> Path | None:
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler):
            return Path(handler.baseFilename)
    return None


def _share_handlers(handlers, level: int, shared_with: tuple[str, ...]) -> None:
    # Loggers that already have handlers were configured elsewhere; leave them alone.
    for name in shared_with:
        shared = logging.getLogger(name)
        if shared.handlers:
            continue
        shared.setLevel(level)
        for handler in handlers:
            shared.addHandler(handler)
        shared.propagate = False


def configure_rotating_logger(
    logger_name: str = LOGGER_NAME,
    preferred_log_file: Path | None = None,
    fallback_log_file: Path = FALLBACK_LOG_FILE,
    level: int = logging.INFO,
    shared_with: tuple[str, ...] = (),
) -> tuple[logging.Logger, Path]:
    """Attach file and console handlers once; later calls return the configured logger
    and the file it actually writes to.

    Loggers named in shared_with get the same handlers, so one file collects them all.
    """
    if preferred_log_file is None:
        preferred_log_file = resolve_log_file()

    logger = logging.getLogger(logger_name)
    if logger.handlers:
        _share_handlers(logger.handlers, logger.level, shared_with)
        return logger, _current_log_file(logger) or preferred_log_file

    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    effective_log_file = preferred_log_file
    try:
        file_handler = _rotating_handler(effective_log_file)
    except OSError:
        effective_log_file = fallback_log_file
        file_handler = _rotating_handler(effective_log_file)

    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    logger.propagate = False

    _share_handlers((file_handler, console_handler), level, shared_with)

    return logger, effective_log_file
