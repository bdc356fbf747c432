"""Encode orchestration

Responsibilities:
- Enforce at most one split run at a time
- Fan jobs out to a thread pool and join on all of them
- Collect per-job results, then reduce them to elapsed time and errors
- Drive RunState through idle -> running -> completed | failed and
  publish every transition

A failed job never cancels its siblings; failures are collected and
reported as a batch once the whole fan-out has joined. A failed run keeps
the run slot until its errors are acknowledged.
"""

import logging
import threading
import time
from concurrent.futures import ALL_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import replace
from functools import partial
from typing import Callable, Iterable, List, Optional

from .config import SplitSettings
from .encoder import CancelToken, run_encode_job
from .events import EventEmitter, EventType
from .exceptions import RunInProgressError
from .models import EncodeJob, EncodeResult, JobStatus, RunPhase, RunResult, RunState
from .scheduler import SubmissionScheduler

logger = logging.getLogger(__name__)

Runner = Callable[[EncodeJob, CancelToken], EncodeResult]


class EncodeOrchestrator:
    """Runs job sets against the external encoder, one run at a time."""

    def __init__(self, runner: Optional[Runner] = None, settings: Optional[SplitSettings] = None,
                 scheduler: Optional[SubmissionScheduler] = None,
                 emitter: Optional[EventEmitter] = None):
        """
        Args:
            runner: Executes one job; defaults to invoking ffmpeg
            settings: Settle delay and scheduling defaults
            scheduler: Worker sizing and submission pacing
            emitter: Receives STATE_CHANGED and JOB_COMPLETE events; handlers
                     for JOB_COMPLETE are called from worker threads
        """
        self.settings = settings or SplitSettings()
        self.runner = runner or partial(run_encode_job, settings=self.settings)
        self.scheduler = scheduler or SubmissionScheduler.from_settings(self.settings)
        self.emitter = emitter or EventEmitter()
        self._lock = threading.Lock()
        self._state = RunState()
        self._token: Optional[CancelToken] = None

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    def _emit_state(self, state: RunState) -> None:
        self.emitter.emit(EventType.STATE_CHANGED, {"state": state}, "orchestrator")

    def _publish(self, state: RunState) -> RunState:
        with self._lock:
            self._state = state
        self._emit_state(state)
        return state

    def _require_running(self) -> None:
        if self.state.phase is not RunPhase.RUNNING:
            raise RuntimeError(f"No run in progress (phase {self.state.phase.name})")

    def start(self) -> CancelToken:
        """
        Reserve the run slot and reset RunState.

        Returns:
            Cancellation token for the new run

        Raises:
            RunInProgressError: If a run is in flight, settling, or failed
                                and not yet acknowledged
        """
        with self._lock:
            if self._state.running:
                if self._state.phase is RunPhase.FAILED:
                    raise RunInProgressError(
                        "Previous run failed; acknowledge its errors before starting another",
                        module="orchestrator"
                    )
                raise RunInProgressError("A split run is already in progress", module="orchestrator")
            # Slot is claimed before the lock is released
            self._token = CancelToken()
            token = self._token
            state = self._state = RunState(phase=RunPhase.RUNNING, running=True)
        self._emit_state(state)
        return token

    def _run_one(self, job: EncodeJob, token: CancelToken) -> EncodeResult:
        try:
            result = self.runner(job, token)
        except Exception as e:
            logger.exception("Segment %d: runner raised", job.index)
            result = EncodeResult(job.index, JobStatus.FAILED, error_message=str(e))
        self.emitter.emit(EventType.JOB_COMPLETE, {"result": result}, "orchestrator")
        return result

    def execute(self, jobs: Iterable[EncodeJob], token: CancelToken) -> List[EncodeResult]:
        """
        Run all jobs and wait for every one of them to reach a terminal state.

        A single job runs in the calling thread; more than one fans out
        over a thread pool.

        Returns:
            Results ordered by job index
        """
        self._require_running()
        jobs = list(jobs)
        if not jobs:
            return []

        if len(jobs) == 1:
            results = [self._run_one(jobs[0], token)]
        else:
            workers = self.scheduler.worker_count(len(jobs))
            logger.info("Dispatching %d jobs across %d workers", len(jobs), workers)
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="vidsplit-encode") as executor:
                futures = []
                try:
                    for position, job in enumerate(jobs):
                        if not token.cancelled:
                            self.scheduler.before_submit(position, token)
                        futures.append(executor.submit(self._run_one, job, token))
                    wait(futures, return_when=ALL_COMPLETED)
                except BaseException:
                    # Pool shutdown joins the workers; stop their encoders first
                    token.cancel()
                    raise
            results = [future.result() for future in futures]

        return sorted(results, key=lambda r: r.index)

    def finish(self, results: Iterable[EncodeResult]) -> RunState:
        """
        Reduce job results into the terminal RunState.

        total_elapsed_ms is the sum over successful jobs. Any failure moves
        the run to FAILED, which holds the run slot until acknowledge().
        Otherwise the run is COMPLETED and stays running for the settle
        delay before flipping to idle.
        """
        self._require_running()
        results = list(results)
        total_elapsed = sum(r.elapsed_ms for r in results if r.success)
        errors = []
        for result in results:
            if result.status is JobStatus.FAILED:
                errors.append(f"segment {result.index}: {result.error_message or 'encode failed'}")
            elif result.status is JobStatus.CANCELLED:
                logger.warning("Segment %d was cancelled", result.index)

        if errors:
            logger.error("Split finished with %d failed job(s) of %d", len(errors), len(results))
            for message in errors:
                logger.error("  %s", message)
            return self._publish(RunState(
                phase=RunPhase.FAILED, running=True,
                total_elapsed_ms=total_elapsed, errors=tuple(errors)
            ))

        logger.info("Split completed: %d job(s) in %d ms", len(results), total_elapsed)
        completed = self._publish(RunState(
            phase=RunPhase.COMPLETED, running=True, total_elapsed_ms=total_elapsed
        ))
        if self.settings.settle_delay:
            time.sleep(self.settings.settle_delay)
        return self._publish(replace(completed, running=False))

    def abort(self, message: str) -> RunState:
        """Fail the current run without executing (or finishing) its jobs."""
        logger.error("Split aborted: %s", message)
        return self._publish(RunState(phase=RunPhase.FAILED, running=True, errors=(message,)))

    def acknowledge(self) -> bool:
        """Dismiss a failed run's errors and release the run slot."""
        with self._lock:
            if self._state.phase is not RunPhase.FAILED:
                return False
            state = self._state = RunState()
        self._emit_state(state)
        return True

    def cancel(self) -> bool:
        """Request cancellation of the in-flight run."""
        with self._lock:
            token = self._token if self._state.phase is RunPhase.RUNNING else None
        if token is None:
            return False
        logger.warning("Cancelling split run")
        token.cancel()
        return True

    def run(self, jobs: Iterable[EncodeJob]) -> RunResult:
        """Start, execute and finish a run over jobs."""
        token = self.start()
        try:
            results = self.execute(jobs, token)
        except BaseException:
            token.cancel()
            self.abort("Run interrupted")
            raise
        state = self.finish(results)
        return RunResult(state=state, results=tuple(results))
