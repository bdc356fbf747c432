"""Configuration settings for the vidsplit pipeline

This module centralizes configuration including:
- Output and log directory locations
- Re-encode parameters (codec, quality, keyframe interval)
- Scheduling parameters for parallel encoding
- Run completion timing

Defaults can be overridden through environment variables; SplitSettings
bundles them into a validated object that is passed to the pipeline.
"""

import math
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError

# Output directory; the only directory vidsplit writes media into
OUTPUT_DIR = Path(os.environ.get("VIDSPLIT_OUTPUT_DIR", str(Path.home() / "split-videos")))

# LOG_DIR: user definable with default of "$HOME/vidsplit_logs"
LOG_DIR = Path(os.environ.get("VIDSPLIT_LOG_DIR", str(Path.home() / "vidsplit_logs")))

# Encoder binary
FFMPEG_BINARY = os.environ.get("VIDSPLIT_FFMPEG", "ffmpeg")

# Re-encode settings (only used when a rotate/scale filter is active)
VIDEO_CODEC = os.environ.get("VIDSPLIT_VIDEO_CODEC", "libx264")
CRF = int(os.environ.get("VIDSPLIT_CRF", "23"))
GOP_SIZE = int(os.environ.get("VIDSPLIT_GOP", "60"))

# Output container
OUTPUT_EXTENSION = "mp4"
DEFAULT_FILENAME = "videoToSplit"

# Segmenting defaults
DEFAULT_SEGMENT_SECONDS = 30
NUDGE_STEP_MS = 100

# Scheduling
MAX_WORKERS = int(os.environ.get("VIDSPLIT_MAX_WORKERS", "0")) or None  # None = cpu count
MEMORY_THRESHOLD = 90.0  # Pause submissions above this memory usage percentage
MEMORY_WAIT_TIMEOUT = 30.0  # Seconds to hold a submission before submitting anyway
TASK_STAGGER_DELAY = 0.2  # Delay between task submissions in seconds
PROCESS_POLL_INTERVAL = 0.1
TERMINATE_GRACE = 5.0  # Seconds between terminate and kill on cancellation

# Time the completed state stays visible before the run flips to idle
SETTLE_DELAY = float(os.environ.get("VIDSPLIT_SETTLE_DELAY", "1.0"))

# Logging configuration
LOG_LEVEL = os.environ.get("VIDSPLIT_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL


@dataclass
class SplitSettings:
    """Settings consumed by the job builder, orchestrator and stager."""
    output_dir: Path = field(default_factory=lambda: OUTPUT_DIR)
    ffmpeg_binary: str = FFMPEG_BINARY
    video_codec: str = VIDEO_CODEC
    crf: int = CRF
    gop_size: int = GOP_SIZE
    extension: str = OUTPUT_EXTENSION
    max_workers: Optional[int] = MAX_WORKERS
    memory_threshold: float = MEMORY_THRESHOLD
    memory_wait_timeout: float = MEMORY_WAIT_TIMEOUT
    stagger_delay: float = TASK_STAGGER_DELAY
    poll_interval: float = PROCESS_POLL_INTERVAL
    terminate_grace: float = TERMINATE_GRACE
    settle_delay: float = SETTLE_DELAY

    def __post_init__(self) -> None:
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)

    @classmethod
    def from_environment(cls, **overrides) -> "SplitSettings":
        """Create settings from module defaults with keyword overrides."""
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown setting(s): {', '.join(sorted(unknown))}", module="config"
            )
        settings = cls(**{k: v for k, v in overrides.items() if v is not None})
        settings.validate()
        return settings

    def validate(self) -> None:
        """Validate all settings, raising ConfigurationError on the first problem."""
        if not self.ffmpeg_binary:
            raise ConfigurationError("ffmpeg binary must not be empty", module="config")
        if not self.extension or not self.extension.isalnum():
            raise ConfigurationError(
                f"Output extension '{self.extension}' must be alphanumeric", module="config"
            )
        if not 0 <= self.crf <= 51:
            raise ConfigurationError(f"CRF must be between 0 and 51: {self.crf}", module="config")
        if self.gop_size <= 0:
            raise ConfigurationError(f"GOP size must be positive: {self.gop_size}", module="config")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ConfigurationError(
                f"max_workers must be positive: {self.max_workers}", module="config"
            )
        for name in ("memory_wait_timeout", "stagger_delay", "settle_delay", "terminate_grace"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(f"{name} must be non-negative: {value}", module="config")
        if self.poll_interval <= 0:
            raise ConfigurationError(
                f"poll_interval must be positive: {self.poll_interval}", module="config"
            )
        if not 0 < self.memory_threshold <= 100:
            raise ConfigurationError(
                f"memory_threshold must be in (0, 100]: {self.memory_threshold}", module="config"
            )
