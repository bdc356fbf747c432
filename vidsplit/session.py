"""Editing session state

One explicit object holds everything the user has selected: the source
asset, trim range, transform and segment length. Setters enforce the
trim invariants; preview collaborators subscribe to seek and boundary
events instead of being driven directly.
"""

import logging
from typing import Callable, Optional

from .config import DEFAULT_SEGMENT_SECONDS, NUDGE_STEP_MS
from .events import EventEmitter, EventType
from .exceptions import ConfigurationError
from .models import TransformSpec, TrimRange, VideoAsset
from .planner import segment_length_from_seconds

logger = logging.getLogger(__name__)

BOUNDS = ("start", "end")


class EditingSession:
    """Selection state for one source video."""

    def __init__(self, emitter: Optional[EventEmitter] = None):
        self.emitter = emitter or EventEmitter()
        self.asset: Optional[VideoAsset] = None
        self.trim = TrimRange(0)
        self.transform = TransformSpec()
        self.segment_length_seconds: float = DEFAULT_SEGMENT_SECONDS
        self.active_bound = "start"

    def load_asset(self, asset: VideoAsset) -> None:
        """Replace the source and select its whole duration."""
        self.asset = asset
        self.trim.reset(asset.duration_ms)
        logger.info("Loaded %s (%d ms)", asset.filename, asset.duration_ms)

    def _seek(self, position_ms: int, play: bool) -> None:
        self.emitter.emit(
            EventType.SEEK_REQUESTED, {"position_ms": position_ms, "play": play}, "session"
        )

    def set_start(self, start_ms: int) -> bool:
        accepted = self.trim.set_start(start_ms)
        if accepted:
            self._seek(self.trim.start_ms, play=True)
        return accepted

    def set_end(self, end_ms: int) -> bool:
        self.trim.set_end(end_ms)
        self._seek(self.trim.end_ms, play=False)
        return True

    def select_bound(self, bound: str) -> None:
        if bound not in BOUNDS:
            raise ConfigurationError(f"Unknown trim bound: {bound!r}", module="session")
        self.active_bound = bound

    def nudge(self, direction: str, step_ms: int = NUDGE_STEP_MS) -> bool:
        """Move the active bound one step "back" or "forward"."""
        if direction not in ("back", "forward"):
            raise ConfigurationError(f"Unknown nudge direction: {direction!r}", module="session")
        delta = -step_ms if direction == "back" else step_ms
        if self.active_bound == "start":
            moved = self.trim.nudge_start(delta)
            position = self.trim.start_ms
        else:
            moved = self.trim.nudge_end(delta)
            position = self.trim.end_ms
        self._seek(position, play=False)
        return moved

    def toggle_rotation(self) -> TransformSpec:
        self.transform = self.transform.toggled_rotation()
        return self.transform

    def step_scale(self, direction: str) -> TransformSpec:
        self.transform = self.transform.stepped_scale(direction)
        return self.transform

    def set_segment_length(self, seconds) -> None:
        """Set the target segment length; rejects non-positive or non-numeric values."""
        segment_length_from_seconds(seconds)
        self.segment_length_seconds = float(seconds)

    def on_boundary_reached(self, callback: Callable[[int], None]) -> None:
        """Call callback(start_ms) whenever preview playback reaches the end bound."""
        self.emitter.on(EventType.BOUNDARY_REACHED, lambda event: callback(event.data["start_ms"]))

    def on_seek(self, callback: Callable[[int, bool], None]) -> None:
        """Call callback(position_ms, play) whenever a setter moves the preview."""
        self.emitter.on(
            EventType.SEEK_REQUESTED,
            lambda event: callback(event.data["position_ms"], event.data["play"])
        )

    def report_position(self, position_ms: int) -> bool:
        """Feed the preview position; loops back to start at the end bound."""
        if position_ms >= self.trim.end_ms:
            self.emitter.emit(
                EventType.BOUNDARY_REACHED, {"start_ms": self.trim.start_ms}, "session"
            )
            return True
        return False
