"""Memory-aware submission pacing for parallel encoding"""

import logging
import time
from typing import Optional

import psutil

log = logging.getLogger(__name__)


class SubmissionScheduler:
    """
    Sizes the worker pool and paces job submission.

    Every job is eventually submitted: high memory usage only delays a
    submission, for at most memory_wait_timeout seconds.
    """

    def __init__(self, max_workers: Optional[int] = None, memory_threshold: float = 90.0,
                 stagger_delay: float = 0.2, memory_wait_timeout: float = 30.0,
                 poll_interval: float = 1.0):
        self.max_workers = max_workers
        self.memory_threshold = memory_threshold
        self.stagger_delay = stagger_delay
        self.memory_wait_timeout = memory_wait_timeout
        self.poll_interval = poll_interval

    @classmethod
    def from_settings(cls, settings) -> "SubmissionScheduler":
        return cls(
            max_workers=settings.max_workers,
            memory_threshold=settings.memory_threshold,
            stagger_delay=settings.stagger_delay,
            memory_wait_timeout=settings.memory_wait_timeout,
        )

    def worker_count(self, job_count: int) -> int:
        """Number of pool threads for job_count jobs."""
        limit = self.max_workers or psutil.cpu_count() or 1
        return max(1, min(job_count, limit))

    def memory_pressure(self) -> bool:
        return psutil.virtual_memory().percent >= self.memory_threshold

    def _pause(self, seconds: float, token=None) -> bool:
        """Sleep for seconds; returns True early if token is cancelled."""
        if token is None:
            time.sleep(seconds)
            return False
        return token.wait(seconds)

    def wait_for_capacity(self, token=None) -> float:
        """
        Block while memory usage is above threshold; returns seconds waited.

        Returns as soon as token (a CancelToken) is cancelled.
        """
        if not self.memory_pressure():
            return 0.0
        log.info("High memory usage (%d%%); pausing submissions...",
                 psutil.virtual_memory().percent)
        waited = 0.0
        while waited < self.memory_wait_timeout:
            if self._pause(self.poll_interval, token):
                log.info("Run cancelled; no longer waiting for memory")
                return waited
            waited += self.poll_interval
            if not self.memory_pressure():
                return waited
        log.warning("Memory still above %.0f%% after %.0fs; submitting anyway",
                    self.memory_threshold, waited)
        return waited

    def before_submit(self, position: int, token=None) -> None:
        """Gate a submission: memory check, then stagger all but the first."""
        self.wait_for_capacity(token)
        if position and self.stagger_delay:
            self._pause(self.stagger_delay, token)
