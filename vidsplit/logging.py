"""Centralized logging configuration for vidsplit"""

import logging
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from .config import LOG_DIR
from .utils import get_timestamp


def configure_logging(log_level: str = "INFO", file_logging: bool = True,
                      log_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Configure the "vidsplit" logger with a rich console handler and,
    optionally, a timestamped log file.

    Returns:
        Path of the log file, or None when file logging is disabled
    """
    logger = logging.getLogger("vidsplit")
    logger.setLevel(logging._nameToLevel.get(log_level.upper(), logging.INFO))

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(show_path=False, rich_tracebacks=True)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(console_handler)

    log_file = None
    if file_logging:
        log_dir = Path(log_dir or LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"vidsplit_{get_timestamp()}.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
        logger.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
