"""Source media probing

Builds a VideoAsset from a file on disk using ffprobe (via ffmpeg-python).
Prefers the video stream duration and falls back to the container's.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import ffmpeg

from .exceptions import ProbeError
from .models import VideoAsset

logger = logging.getLogger(__name__)


def _video_stream(info: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return next((s for s in info.get("streams", []) if s.get("codec_type") == "video"), None)


def get_duration_ms(info: Dict[str, Any]) -> int:
    """
    Extract the duration in milliseconds from ffprobe JSON output.

    Raises:
        ProbeError: If the input has no video stream or no usable duration
    """
    stream = _video_stream(info)
    if stream is None:
        raise ProbeError("No video stream found", module="probe")
    for source, value in (("video", stream.get("duration")),
                          ("format", info.get("format", {}).get("duration"))):
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            continue
        if seconds >= 0:
            logger.debug("Using %s duration: %.3fs", source, seconds)
            return round(seconds * 1000)
    raise ProbeError("Could not determine duration", module="probe")


def probe_asset(path: Union[str, Path], ffprobe_binary: str = "ffprobe") -> VideoAsset:
    """
    Probe a video file into a VideoAsset.

    Raises:
        ProbeError: If the file is missing or ffprobe cannot read it
    """
    path = Path(path)
    if not path.is_file():
        raise ProbeError(f"Input {path} does not exist", module="probe")
    try:
        info = ffmpeg.probe(str(path), cmd=ffprobe_binary)
    except ffmpeg.Error as e:
        stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
        raise ProbeError(f"ffprobe failed for {path.name}: {stderr or e}", module="probe") from e
    duration_ms = get_duration_ms(info)
    logger.info("Probed %s: %d ms", path.name, duration_ms)
    return VideoAsset(uri=str(path), filename=path.name, duration_ms=duration_ms)
