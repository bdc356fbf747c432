"""High-level split orchestration

Responsibilities:
  - Validate a split request before anything runs
  - Sequence one run: purge -> create -> encode -> re-list
  - Remember the last request so a failed run can be retried as-is
  - Hand the final listing to share collaborators
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_SEGMENT_SECONDS, SplitSettings
from .encoder import CancelToken
from .events import EventEmitter, EventType
from .exceptions import ConfigurationError, FilesystemError
from .jobs import JobSet, build_jobs
from .models import RunResult, RunState, TransformSpec, TrimRange, VideoAsset
from .orchestrator import EncodeOrchestrator
from .planner import plan_segments, segment_length_from_seconds
from .staging import OutputStager
from .transform import resolve_transform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitRequest:
    """Everything needed to reproduce a split run."""
    asset: VideoAsset
    trim: TrimRange
    transform: TransformSpec
    segment_length_seconds: float


class SplitController:
    """Entry point for split, retry and share requests from the UI layer."""

    def __init__(self, settings: Optional[SplitSettings] = None,
                 stager: Optional[OutputStager] = None,
                 orchestrator: Optional[EncodeOrchestrator] = None,
                 emitter: Optional[EventEmitter] = None):
        self.settings = settings or SplitSettings.from_environment()
        self.emitter = emitter or (orchestrator.emitter if orchestrator else EventEmitter())
        self.stager = stager or OutputStager(self.settings.output_dir, self.settings.extension)
        self.orchestrator = orchestrator or EncodeOrchestrator(
            settings=self.settings, emitter=self.emitter
        )
        self._last_request: Optional[SplitRequest] = None
        self._listing: List[str] = []
        self._background: Optional[ThreadPoolExecutor] = None

    @property
    def state(self) -> RunState:
        return self.orchestrator.state

    @property
    def errors(self) -> List[str]:
        return list(self.state.errors)

    @property
    def listing(self) -> List[str]:
        return list(self._listing)

    def build(self, request: SplitRequest) -> JobSet:
        """
        Validate a request and build its jobs.

        Raises:
            ConfigurationError: Missing asset or trim, invalid segment length,
                                or an empty selection
        """
        if request.asset is None:
            raise ConfigurationError("No video selected", module="pipeline")
        if request.trim is None:
            raise ConfigurationError("No trim range selected", module="pipeline")
        length_ms = segment_length_from_seconds(request.segment_length_seconds)
        plan = plan_segments(request.trim, length_ms)
        if plan.segment_count == 0:
            raise ConfigurationError("Trim range is empty; nothing to split", module="pipeline")
        resolved = resolve_transform(request.transform or TransformSpec())
        return build_jobs(plan, request.asset, resolved, self.stager.output_dir, self.settings)

    def _prepare(self, asset, trim, transform, segment_length_seconds):
        """Build the jobs for a request and reserve the run slot for them."""
        request = SplitRequest(
            asset=asset,
            trim=trim.copy() if trim is not None else None,
            transform=transform or TransformSpec(),
            segment_length_seconds=segment_length_seconds,
        )
        job_set = self.build(request)
        token = self.orchestrator.start()
        self._last_request = request
        return job_set, token

    def _run_reserved(self, job_set: JobSet, token: CancelToken) -> RunResult:
        """Run a job set once the run slot is held."""
        try:
            self.stager.purge()
            self._listing = []
            self.stager.ensure_directory()
        except FilesystemError as e:
            return RunResult(state=self.orchestrator.abort(e.message))

        try:
            results = self.orchestrator.execute(job_set.jobs, token)
        except BaseException:
            token.cancel()
            self.orchestrator.abort("Run interrupted")
            raise

        self._listing = self.stager.list_outputs()
        self.emitter.emit(EventType.OUTPUT_LISTED, {"listing": list(self._listing)}, "pipeline")
        state = self.orchestrator.finish(results)
        return RunResult(state=state, results=tuple(results), listing=list(self._listing))

    def request_split(self, asset: VideoAsset, trim: TrimRange,
                      transform: Optional[TransformSpec] = None,
                      segment_length_seconds=DEFAULT_SEGMENT_SECONDS) -> RunResult:
        """
        Split the selected range of asset into segments.

        Configuration errors are raised before anything is purged or run.
        Encoder failures are reported in the returned RunResult.

        Raises:
            ConfigurationError: If the request is invalid
            RunInProgressError: If another run holds the run slot
        """
        job_set, token = self._prepare(asset, trim, transform, segment_length_seconds)
        return self._run_reserved(job_set, token)

    def request_split_async(self, asset: VideoAsset, trim: TrimRange,
                            transform: Optional[TransformSpec] = None,
                            segment_length_seconds=DEFAULT_SEGMENT_SECONDS) -> "Future[RunResult]":
        """Like request_split, but runs in the background.

        Validation and run-slot reservation still happen synchronously, so
        ConfigurationError and RunInProgressError are raised here.
        """
        job_set, token = self._prepare(asset, trim, transform, segment_length_seconds)
        if self._background is None:
            self._background = ThreadPoolExecutor(max_workers=1, thread_name_prefix="vidsplit-run")
        return self._background.submit(self._run_reserved, job_set, token)

    def request_split_from_session(self, session) -> RunResult:
        return self.request_split(
            session.asset, session.trim, session.transform, session.segment_length_seconds
        )

    def retry(self) -> RunResult:
        """
        Dismiss any pending errors and re-run the last request unchanged.

        Raises:
            ConfigurationError: If no split has been requested yet
        """
        if self._last_request is None:
            raise ConfigurationError("Nothing to retry", module="pipeline")
        self.orchestrator.acknowledge()
        logger.info("Retrying last split request")
        job_set = self.build(self._last_request)
        token = self.orchestrator.start()
        return self._run_reserved(job_set, token)

    def dismiss_errors(self) -> bool:
        return self.orchestrator.acknowledge()

    def cancel(self) -> bool:
        return self.orchestrator.cancel()

    def share_paths(self, single: bool = False) -> List[Path]:
        """Paths to hand to a share sheet: the first output, or all of them."""
        paths = self.stager.output_paths(self._listing)
        return paths[:1] if single else paths

    def close(self) -> None:
        if self._background is not None:
            self._background.shutdown(wait=True)
            self._background = None

    def __enter__(self) -> "SplitController":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
