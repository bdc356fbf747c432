"""Helper functions for building ffmpeg commands"""

import logging
from pathlib import Path
from typing import List

from .timecode import ms_to_ffmpeg_time, ms_to_seconds_arg

log = logging.getLogger(__name__)


def _input_args(ffmpeg_binary: str, input_uri: str, start_ms: int, duration_ms: int) -> List[str]:
    return [
        ffmpeg_binary, "-hide_banner", "-loglevel", "error", "-y",
        "-ss", ms_to_ffmpeg_time(start_ms),
        "-t", ms_to_ffmpeg_time(duration_ms),
        "-i", str(input_uri),
    ]


def build_stream_copy_command(
    input_uri: str,
    output_pattern: Path,
    start_ms: int,
    duration_ms: int,
    segment_length_ms: int,
    ffmpeg_binary: str = "ffmpeg"
) -> List[str]:
    """Build ffmpeg command that splits with the segment muxer, without re-encoding"""
    cmd = _input_args(ffmpeg_binary, input_uri, start_ms, duration_ms)
    cmd.extend([
        "-c", "copy",
        "-map", "0",
        "-segment_time", ms_to_seconds_arg(segment_length_ms),
        "-f", "segment",
        "-reset_timestamps", "1",
        str(output_pattern)
    ])
    return cmd


def build_reencode_command(
    input_uri: str,
    output_file: Path,
    start_ms: int,
    duration_ms: int,
    segment_length_ms: int,
    filter_graph: str,
    video_codec: str = "libx264",
    crf: int = 23,
    gop_size: int = 60,
    ffmpeg_binary: str = "ffmpeg"
) -> List[str]:
    """Build ffmpeg command that re-encodes one segment with a filter graph"""
    cmd = _input_args(ffmpeg_binary, input_uri, start_ms, duration_ms)
    cmd.extend([
        "-c:v", video_codec,
        "-crf", str(crf),
        "-vf", filter_graph,
        "-g", str(gop_size),
        "-sc_threshold", "0",
        "-force_key_frames", f"expr:gte(t,n_forced*{ms_to_seconds_arg(segment_length_ms)})",
        "-c:a", "copy",
        str(output_file)
    ])
    return cmd
