"""Utility functions for the vidsplit pipeline"""

import logging
import shutil
from datetime import datetime
from typing import Iterable

logger = logging.getLogger(__name__)


def get_timestamp() -> str:
    """Get current timestamp in YYYYMMDD_HHMMSS format"""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def format_elapsed(milliseconds: int) -> str:
    """Format an elapsed time for display: 83500 -> "00h 01m 23s"."""
    seconds = int(milliseconds) // 1000
    return f"{seconds // 3600:02d}h {(seconds % 3600) // 60:02d}m {seconds % 60:02d}s"


def check_dependencies(required: Iterable[str] = ("ffmpeg", "ffprobe")) -> bool:
    """Check that required executables are on PATH"""
    ok = True
    for cmd in required:
        if shutil.which(cmd) is None:
            logger.error("Required dependency not found: %s", cmd)
            ok = False
    return ok
