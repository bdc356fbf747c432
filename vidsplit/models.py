"""Data model for split requests, plans, jobs and runs.

Descriptors handed to worker threads (plans, jobs, results, state
snapshots) are frozen dataclasses; only TrimRange is mutable, and only
through its bounds-checked setters.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Tuple

from .config import DEFAULT_FILENAME
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class VideoAsset:
    """A selected source video.

    Attributes:
        uri: Path or handle passed to the encoder as input
        filename: Display filename, used to name output segments
        duration_ms: Source duration in milliseconds
    """
    uri: str
    filename: str = DEFAULT_FILENAME
    duration_ms: int = 0

    def __post_init__(self) -> None:
        if not self.uri:
            raise ConfigurationError("Video asset has no uri", module="models")
        if self.duration_ms < 0:
            raise ConfigurationError(
                f"Video duration must be non-negative: {self.duration_ms}", module="models"
            )

    @property
    def stem(self) -> str:
        """Filename without its extension."""
        return Path(self.filename).stem or DEFAULT_FILENAME


class TrimRange:
    """Selected [start_ms, end_ms] window within [0, max_ms].

    The invariant 0 <= start_ms <= end_ms <= max_ms holds after every call.
    """

    def __init__(self, max_ms: int, start_ms: int = 0, end_ms: Optional[int] = None):
        if max_ms < 0:
            raise ConfigurationError(f"max_ms must be non-negative: {max_ms}", module="models")
        self._max_ms = int(max_ms)
        self._start_ms = 0
        self._end_ms = self._max_ms
        self.set_end(self._max_ms if end_ms is None else end_ms)
        self.set_start(start_ms)

    @property
    def start_ms(self) -> int:
        return self._start_ms

    @property
    def end_ms(self) -> int:
        return self._end_ms

    @property
    def max_ms(self) -> int:
        return self._max_ms

    @property
    def selected_ms(self) -> int:
        return max(0, self._end_ms - self._start_ms)

    def _clamp(self, value: int) -> int:
        return min(max(int(value), 0), self._max_ms)

    def set_start(self, start_ms: int) -> bool:
        """Move the start bound; rejected (returns False) if it would pass end."""
        candidate = self._clamp(start_ms)
        if candidate > self._end_ms:
            return False
        self._start_ms = candidate
        return True

    def set_end(self, end_ms: int) -> bool:
        """Move the end bound; values below start clamp to start."""
        self._end_ms = max(self._clamp(end_ms), self._start_ms)
        return True

    def nudge_start(self, delta_ms: int) -> bool:
        candidate = self._start_ms + delta_ms
        if candidate < 0 or candidate > self._end_ms:
            return False
        self._start_ms = candidate
        return True

    def nudge_end(self, delta_ms: int) -> bool:
        candidate = self._end_ms + delta_ms
        if candidate > self._max_ms or candidate < self._start_ms:
            return False
        self._end_ms = candidate
        return True

    def reset(self, max_ms: int) -> None:
        """Select the whole of a new source."""
        if max_ms < 0:
            raise ConfigurationError(f"max_ms must be non-negative: {max_ms}", module="models")
        self._max_ms = int(max_ms)
        self._start_ms = 0
        self._end_ms = self._max_ms

    def __eq__(self, other) -> bool:
        if not isinstance(other, TrimRange):
            return NotImplemented
        return (self._start_ms, self._end_ms, self._max_ms) == (
            other._start_ms, other._end_ms, other._max_ms
        )

    def __repr__(self) -> str:
        return f"TrimRange(start_ms={self._start_ms}, end_ms={self._end_ms}, max_ms={self._max_ms})"

    def copy(self) -> "TrimRange":
        return TrimRange(self._max_ms, self._start_ms, self._end_ms)


class Rotation(Enum):
    NONE = 0
    CW_90 = 90
    HALF = 180
    CCW_90 = -90


class Scale(Enum):
    """Target short-axis size in pixels; NATIVE keeps the source size."""
    NATIVE = 0
    P144 = 144
    P360 = 360
    P720 = 720
    P1080 = 1080

    @property
    def label(self) -> str:
        return "Native" if self is Scale.NATIVE else f"{self.value}p"


@dataclass(frozen=True)
class TransformSpec:
    rotate: Rotation = Rotation.NONE
    scale: Scale = Scale.NATIVE

    def toggled_rotation(self) -> "TransformSpec":
        from .transform import next_rotation
        return TransformSpec(next_rotation(self.rotate), self.scale)

    def stepped_scale(self, direction: str) -> "TransformSpec":
        from .transform import step_scale
        return TransformSpec(self.rotate, step_scale(self.scale, direction))


@dataclass(frozen=True)
class SegmentPlan:
    """Segment layout derived from a trim range and a target segment length."""
    start_ms: int
    selected_ms: int
    segment_length_ms: int
    segment_count: int
    last_segment_length_ms: int

    def durations(self) -> List[int]:
        if self.segment_count == 0:
            return []
        return [self.segment_length_ms] * (self.segment_count - 1) + [self.last_segment_length_ms]

    def offsets(self) -> List[int]:
        return [self.start_ms + self.segment_length_ms * i for i in range(self.segment_count)]


@dataclass(frozen=True)
class EncodeJob:
    """One external encoder invocation.

    Attributes:
        index: Segment index (0 for the single stream-copy job)
        source_offset_ms: Input seek position
        duration_ms: Input duration to read
        filter_graph: Video filter graph, None for stream copy
        output_path: Output file, or the %03d pattern for the segment muxer
        command: Full argument vector including the encoder binary
    """
    index: int
    source_offset_ms: int
    duration_ms: int
    filter_graph: Optional[str]
    output_path: Path
    command: Tuple[str, ...] = ()


class JobStatus(Enum):
    SUCCESS = auto()
    CANCELLED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class EncodeResult:
    index: int
    status: JobStatus
    elapsed_ms: int = 0
    return_code: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status is JobStatus.SUCCESS


class RunPhase(Enum):
    IDLE = auto()
    RUNNING = auto()
    COMPLETED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class RunState:
    """Snapshot of the current split run.

    running stays True through the settle delay after completion, and
    indefinitely after a failure until the errors are acknowledged.
    """
    phase: RunPhase = RunPhase.IDLE
    running: bool = False
    total_elapsed_ms: Optional[int] = None
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RunResult:
    state: RunState
    results: Tuple[EncodeResult, ...] = ()
    listing: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.state.errors
