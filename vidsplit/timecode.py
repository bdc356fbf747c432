"""Millisecond <-> HH:MM:SS conversion"""

import re

from .exceptions import ConfigurationError

_TIMECODE_RE = re.compile(r"^(?:(?:(\d+):)?(\d+):)?(\d+(?:\.\d+)?)$")


def ms_to_timecode(milliseconds: int) -> str:
    """Format milliseconds as HH:MM:SS, flooring to whole seconds."""
    seconds = max(0, int(milliseconds)) // 1000
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def ms_to_ffmpeg_time(milliseconds: int) -> str:
    """
    Format milliseconds for ffmpeg's -ss/-t options.

    Whole seconds render as HH:MM:SS; anything else keeps millisecond
    precision (HH:MM:SS.mmm) so sub-second trims do not drift.
    """
    milliseconds = max(0, int(milliseconds))
    base = ms_to_timecode(milliseconds)
    remainder = milliseconds % 1000
    if remainder:
        return f"{base}.{remainder:03d}"
    return base


def ms_to_seconds_arg(milliseconds: int) -> str:
    """Render milliseconds as a seconds value: 30000 -> "30", 2500 -> "2.5"."""
    whole, remainder = divmod(int(milliseconds), 1000)
    if not remainder:
        return str(whole)
    return f"{whole}.{remainder:03d}".rstrip("0")


def parse_timecode(text: str) -> int:
    """
    Parse SS, MM:SS or HH:MM:SS (seconds may be fractional) into milliseconds.

    Raises:
        ConfigurationError: If the text is not a valid time value
    """
    match = _TIMECODE_RE.match(str(text).strip())
    if not match:
        raise ConfigurationError(f"Invalid time value: {text!r}", module="timecode")
    hours, minutes, seconds = match.groups()
    total = int(hours or 0) * 3600 + int(minutes or 0) * 60
    return total * 1000 + round(float(seconds) * 1000)
