import math
import threading
from pathlib import Path

import pytest

from vidsplit.config import SplitSettings
from vidsplit.models import EncodeResult, JobStatus


def make_settings(output_dir, **overrides):
    """Settings with all waiting turned off."""
    values = dict(
        output_dir=Path(output_dir),
        settle_delay=0.0,
        stagger_delay=0.0,
        memory_threshold=100.0,
        memory_wait_timeout=0.0,
        max_workers=8,
    )
    values.update(overrides)
    return SplitSettings(**values)


class FakeEncoder:
    """
    Stands in for ffmpeg: writes the files a real run would produce.

    Stream-copy jobs write one file per segment_time slice of the job's
    duration using the %03d pattern; re-encode jobs write their single
    output. Indices in fail_indices exit with code 1 and write nothing.
    """

    def __init__(self, fail_indices=(), barrier_parties=None):
        self.fail_indices = set(fail_indices)
        self.calls = []
        self._lock = threading.Lock()
        self._barrier = threading.Barrier(barrier_parties, timeout=5) if barrier_parties else None

    def __call__(self, job, token):
        with self._lock:
            self.calls.append(job)
        if self._barrier is not None:
            self._barrier.wait()
        if job.index in self.fail_indices:
            return EncodeResult(job.index, JobStatus.FAILED, 5, return_code=1,
                                error_message="exit code 1: Conversion failed!")
        if job.filter_graph is None:
            seconds = float(job.command[job.command.index("-segment_time") + 1])
            count = math.ceil(job.duration_ms / (seconds * 1000))
            for i in range(count):
                Path(str(job.output_path) % i).write_bytes(b"\x00" * 16)
        else:
            Path(job.output_path).write_bytes(b"\x00" * 16)
        return EncodeResult(job.index, JobStatus.SUCCESS, 100, return_code=0)


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "split-videos"


@pytest.fixture
def settings(output_dir):
    return make_settings(output_dir)
