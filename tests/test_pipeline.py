"""End-to-end tests for SplitController with a fake encoder."""
import threading
from pathlib import Path

import pytest

from conftest import FakeEncoder
from vidsplit.config import SplitSettings
from vidsplit.events import EventType
from vidsplit.exceptions import ConfigurationError, RunInProgressError
from vidsplit.models import (
    EncodeResult, JobStatus, Rotation, RunPhase, Scale, TransformSpec, TrimRange, VideoAsset
)
from vidsplit.orchestrator import EncodeOrchestrator
from vidsplit.pipeline import SplitController
from vidsplit.session import EditingSession

ASSET = VideoAsset(uri="/videos/holiday.mp4", filename="holiday.mp4", duration_ms=125000)
EXPECTED = ["holiday000.mp4", "holiday001.mp4", "holiday002.mp4", "holiday003.mp4", "holiday004.mp4"]


def make_controller(settings: SplitSettings, runner) -> SplitController:
    return SplitController(settings, orchestrator=EncodeOrchestrator(runner=runner, settings=settings))


@pytest.fixture
def encoder() -> FakeEncoder:
    return FakeEncoder()


@pytest.fixture
def controller(settings: SplitSettings, encoder: FakeEncoder):
    with make_controller(settings, encoder) as c:
        yield c


def test_stream_copy_split(controller: SplitController, encoder: FakeEncoder) -> None:
    """No transform: one segment-muxer job producing five files."""
    result = controller.request_split(ASSET, TrimRange(125000), segment_length_seconds=30)
    assert result.ok
    assert result.listing == EXPECTED
    assert controller.listing == EXPECTED
    assert len(encoder.calls) == 1
    assert controller.state.phase is RunPhase.COMPLETED
    assert controller.state.running is False


def test_reencode_split_with_one_failure(settings: SplitSettings, output_dir: Path) -> None:
    """One failing segment is reported while its siblings still land on disk."""
    encoder = FakeEncoder(fail_indices={2})
    with make_controller(settings, encoder) as controller:
        result = controller.request_split(
            ASSET, TrimRange(125000), TransformSpec(Rotation.CW_90, Scale.P720), 30
        )
    assert not result.ok
    assert len(encoder.calls) == 5
    assert {job.filter_graph for job in encoder.calls} == {"transpose=1,scale=720:-1"}
    assert controller.errors == ["segment 2: exit code 1: Conversion failed!"]
    assert controller.state.phase is RunPhase.FAILED
    assert controller.state.running is True
    assert result.listing == [n for n in EXPECTED if n != "holiday002.mp4"]
    assert sorted(p.name for p in output_dir.iterdir()) == result.listing


def test_repeated_runs_give_the_same_listing(controller: SplitController, output_dir: Path) -> None:
    output_dir.mkdir(parents=True)
    (output_dir / "stale999.mp4").write_bytes(b"old")
    first = controller.request_split(ASSET, TrimRange(125000))
    second = controller.request_split(ASSET, TrimRange(125000))
    assert first.listing == second.listing == EXPECTED
    assert not (output_dir / "stale999.mp4").exists()


def test_trimmed_request_is_copied(controller: SplitController) -> None:
    trim = TrimRange(125000, start_ms=10000, end_ms=70000)
    result = controller.request_split(ASSET, trim, segment_length_seconds=20)
    trim.set_start(0)
    assert result.listing == EXPECTED[:3]


def test_retry_reruns_last_request(settings: SplitSettings) -> None:
    encoder = FakeEncoder(fail_indices={0, 3})
    with make_controller(settings, encoder) as controller:
        failed = controller.request_split(ASSET, TrimRange(125000), TransformSpec(scale=Scale.P360))
        assert len(failed.state.errors) == 2
        with pytest.raises(RunInProgressError):
            controller.request_split(ASSET, TrimRange(125000))
        encoder.fail_indices.clear()
        retried = controller.retry()
    assert retried.ok
    assert retried.listing == EXPECTED
    assert len(encoder.calls) == 10


def test_retry_without_request(controller: SplitController) -> None:
    with pytest.raises(ConfigurationError):
        controller.retry()


def test_dismiss_errors_releases_slot(settings: SplitSettings) -> None:
    with make_controller(settings, FakeEncoder(fail_indices={1})) as controller:
        controller.request_split(ASSET, TrimRange(125000), TransformSpec(Rotation.HALF))
        assert controller.dismiss_errors()
        assert controller.errors == []
        assert controller.state.phase is RunPhase.IDLE


@pytest.mark.parametrize("kwargs", [
    dict(asset=None, trim=TrimRange(125000)),
    dict(asset=ASSET, trim=None),
    dict(asset=ASSET, trim=TrimRange(125000), segment_length_seconds=0),
    dict(asset=ASSET, trim=TrimRange(125000), segment_length_seconds="abc"),
    dict(asset=ASSET, trim=TrimRange(125000, start_ms=5000, end_ms=5000)),
])
def test_configuration_errors_leave_outputs_alone(controller: SplitController, encoder: FakeEncoder,
                                                  output_dir: Path, kwargs) -> None:
    output_dir.mkdir(parents=True)
    (output_dir / "previous000.mp4").write_bytes(b"keep")
    with pytest.raises(ConfigurationError):
        controller.request_split(**kwargs)
    assert (output_dir / "previous000.mp4").exists()
    assert encoder.calls == []
    assert controller.state.phase is RunPhase.IDLE


def test_unwritable_output_dir_fails_run(tmp_path: Path, encoder: FakeEncoder) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    settings = SplitSettings(output_dir=blocker, settle_delay=0.0, stagger_delay=0.0,
                             memory_threshold=100.0, memory_wait_timeout=0.0)
    with make_controller(settings, encoder) as controller:
        result = controller.request_split(ASSET, TrimRange(125000))
    assert not result.ok
    assert "output directory" in result.state.errors[0]
    assert encoder.calls == []


def test_async_split_rejects_overlap(settings: SplitSettings) -> None:
    release = threading.Event()
    entered = threading.Event()

    def runner(job, token):
        entered.set()
        release.wait(5)
        return EncodeResult(job.index, JobStatus.SUCCESS, 1)

    with make_controller(settings, runner) as controller:
        future = controller.request_split_async(ASSET, TrimRange(125000))
        assert entered.wait(5)
        with pytest.raises(RunInProgressError):
            controller.request_split(ASSET, TrimRange(125000))
        release.set()
        result = future.result(timeout=5)
    assert result.ok
    assert result.listing == []


def test_share_paths(controller: SplitController, output_dir: Path) -> None:
    assert controller.share_paths() == []
    controller.request_split(ASSET, TrimRange(125000))
    assert controller.share_paths() == [output_dir / name for name in EXPECTED]
    assert controller.share_paths(single=True) == [output_dir / EXPECTED[0]]


def test_output_listed_event(controller: SplitController) -> None:
    listings = []
    controller.emitter.on(EventType.OUTPUT_LISTED, lambda e: listings.append(e.data["listing"]))
    controller.request_split(ASSET, TrimRange(125000))
    assert listings == [EXPECTED]


def test_split_from_session(controller: SplitController) -> None:
    session = EditingSession()
    session.load_asset(ASSET)
    session.set_end(60000)
    session.toggle_rotation()
    session.set_segment_length(15)
    result = controller.request_split_from_session(session)
    assert result.listing == EXPECTED[:4]
