"""Loguru sinks and the stdlib logging bridge"""

import logging
import sys
from pathlib import Path

from loguru import logger

_BRIDGED_LOGGERS = ("galynx", "httpx", "websockets")
_bridge_installed = False


class _LoguruHandler(logging.Handler):
    """Bridge stdlib logging into loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(
            level, record.getMessage()
        )


def install_logging_bridge() -> None:
    """Bridge stdlib logging used by httpx/websockets into loguru once."""
    global _bridge_installed
    if _bridge_installed:
        return

    handler = _LoguruHandler()
    for name in _BRIDGED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.setLevel(logging.DEBUG)
        std_logger.addHandler(handler)
        std_logger.propagate = False

    _bridge_installed = True


def configure_logging(level: str = "INFO", log_dir: Path | None = None) -> None:
    """Replace the default sink with stderr (and optionally a rotating file)

    Args:
        level: Minimum level for all sinks
        log_dir: Directory for galynx_{time}.log files, or None for stderr only
    """
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_dir is not None:
        logger.add(
            str(log_dir / "galynx_{time}.log"),
            rotation="1 day",
            retention="30 days",
            compression="gz",
            level=level,
        )
    install_logging_bridge()
