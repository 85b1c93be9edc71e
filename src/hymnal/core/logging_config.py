"""Logging configuration for hymnal.

Everything under the `hymnal` logger goes to `hymnal.log` in the configured
log directory, so CLI output on the console stays clean. The file is rotated
when a command starts, not while it runs.
"""

import logging
from pathlib import Path
from typing import Union

ROOT_LOGGER_NAME = "hymnal"
LOG_FILE_NAME = "hymnal.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def parse_level(level: Union[str, int]) -> int:
    """Turn a level name ("debug", "WARNING") or number into a logging level.

    Unknown names give INFO so a typo in the config never stops a command.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _rotate_log_if_needed(
    log_file: Path,
    max_bytes: int = MAX_LOG_BYTES,
    backup_count: int = LOG_BACKUPS,
) -> None:
    """Move `log_file` to `<name>.1` once it reaches `max_bytes`.

    Existing backups shift up by one; the one past `backup_count` is deleted.
    """
    if not log_file.exists() or log_file.stat().st_size < max_bytes:
        return

    backups = [log_file.with_name(f"{log_file.name}.{i}") for i in range(1, backup_count + 1)]
    backups[-1].unlink(missing_ok=True)
    for older, newer in zip(reversed(backups[:-1]), reversed(backups[1:])):
        if older.exists():
            older.rename(newer)
    log_file.rename(backups[0])


def setup_logging(log_dir: Path, level: Union[str, int] = "INFO") -> logging.Logger:
    """Send hymnal logs to `log_dir/hymnal.log`.

    Calling it again replaces the previous handler, so each command can
    configure logging from its own config.

    Returns:
        The `hymnal` root logger
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    _rotate_log_if_needed(log_file)

    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(parse_level(level))

    logger.debug("Logging to %s", log_file)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the `hymnal` namespace.

    Module names outside the package ("tests") are prefixed with `hymnal.`.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
