"""Tests for segment planning."""
import math

import pytest

from vidsplit.exceptions import ConfigurationError
from vidsplit.models import TrimRange
from vidsplit.planner import plan_segments, segment_length_from_seconds


def test_last_segment_holds_the_remainder() -> None:
    """125s at 30s per segment gives four full segments and a 5s tail."""
    plan = plan_segments(TrimRange(125000), 30000)
    assert plan.segment_count == 5
    assert plan.durations() == [30000, 30000, 30000, 30000, 5000]
    assert plan.offsets() == [0, 30000, 60000, 90000, 120000]
    assert plan.last_segment_length_ms == 5000


def test_exact_multiple_has_full_last_segment() -> None:
    plan = plan_segments(TrimRange(90000), 30000)
    assert plan.segment_count == 3
    assert plan.last_segment_length_ms == 30000


def test_offsets_start_at_trim_start() -> None:
    plan = plan_segments(TrimRange(100000, start_ms=12000, end_ms=50000), 10000)
    assert plan.offsets() == [12000, 22000, 32000, 42000]
    assert plan.durations() == [10000, 10000, 10000, 8000]


@pytest.mark.parametrize("selected,length", [
    (1, 1), (999, 1000), (1000, 999), (125000, 30000), (3_600_000, 7000), (59999, 60000),
])
def test_durations_sum_to_selection(selected: int, length: int) -> None:
    plan = plan_segments(TrimRange(selected), length)
    assert sum(plan.durations()) == selected
    assert plan.segment_count == math.ceil(selected / length)
    assert all(0 < d <= length for d in plan.durations())


def test_length_longer_than_selection_gives_one_segment() -> None:
    plan = plan_segments(TrimRange(20000), 30000)
    assert plan.segment_count == 1
    assert plan.durations() == [20000]


def test_empty_selection_gives_no_segments() -> None:
    trim = TrimRange(60000)
    trim.set_start(40000)
    trim.set_end(40000)
    plan = plan_segments(trim, 30000)
    assert plan.segment_count == 0
    assert plan.durations() == []
    assert plan.offsets() == []


@pytest.mark.parametrize("length", [0, -1, float("nan"), float("inf"), "30", True, None])
def test_invalid_segment_length_rejected(length) -> None:
    with pytest.raises(ConfigurationError):
        plan_segments(TrimRange(60000), length)


def test_segment_length_from_seconds() -> None:
    assert segment_length_from_seconds(30) == 30000
    assert segment_length_from_seconds("2.5") == 2500
    assert segment_length_from_seconds(0.001) == 1


@pytest.mark.parametrize("seconds", [0, -5, "abc", "", None, float("nan"), "inf", 0.0001, False])
def test_segment_length_from_seconds_rejects(seconds) -> None:
    with pytest.raises(ConfigurationError):
        segment_length_from_seconds(seconds)
