"""Segment planning

Turns a trim range and a target segment length into a SegmentPlan:
how many segments, where each starts in the source, and how long the
final (possibly shorter) segment is. All arithmetic is integer
milliseconds so per-segment durations always sum to the selection.
"""

import logging
import math
from numbers import Real
from typing import Union

from .exceptions import ConfigurationError
from .models import SegmentPlan, TrimRange

logger = logging.getLogger(__name__)


def segment_length_from_seconds(seconds: Union[int, float, str]) -> int:
    """
    Convert a user-supplied segment length in seconds to milliseconds.

    Raises:
        ConfigurationError: If the value is not a finite number greater than zero
    """
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Segment length is not a number: {seconds!r}", module="planner")
    if isinstance(seconds, bool) or not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"Segment length must be positive: {seconds!r}", module="planner")
    length_ms = round(value * 1000)
    if length_ms <= 0:
        raise ConfigurationError(f"Segment length too small: {seconds!r}", module="planner")
    return length_ms


def plan_segments(trim: TrimRange, segment_length_ms: int) -> SegmentPlan:
    """
    Plan the segments for a trim range.

    Args:
        trim: Selected range of the source
        segment_length_ms: Target length of each segment

    Returns:
        SegmentPlan with segment_count 0 when nothing is selected

    Raises:
        ConfigurationError: If segment_length_ms is not a positive number
    """
    if (isinstance(segment_length_ms, bool) or not isinstance(segment_length_ms, Real)
            or not math.isfinite(segment_length_ms) or segment_length_ms <= 0):
        raise ConfigurationError(
            f"Segment length must be a positive number of milliseconds: {segment_length_ms!r}",
            module="planner"
        )
    segment_length_ms = int(segment_length_ms)
    if segment_length_ms <= 0:
        raise ConfigurationError("Segment length rounds to zero milliseconds", module="planner")

    selected = trim.selected_ms
    if selected == 0:
        count = 0
        last = 0
    else:
        count = -(-selected // segment_length_ms)
        last = selected - segment_length_ms * (count - 1)

    plan = SegmentPlan(
        start_ms=trim.start_ms,
        selected_ms=selected,
        segment_length_ms=segment_length_ms,
        segment_count=count,
        last_segment_length_ms=last,
    )
    logger.debug("Planned %d segment(s) of %d ms over %d ms (last %d ms)",
                 count, segment_length_ms, selected, last)
    return plan
