"""
encoder.py

Runs a single EncodeJob through the external encoder and reduces the
outcome to an EncodeResult: exit status, elapsed time and, on failure,
the tail of the encoder's diagnostic output. Jobs observe a CancelToken
while they wait, and a cancelled job takes its process tree down with it.
"""

import logging
import shlex
import subprocess
import tempfile
import threading
import time
from typing import Optional

import psutil

from .config import SplitSettings
from .exceptions import EncoderCancelled, EncoderFailure
from .models import EncodeJob, EncodeResult, JobStatus

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES = 20


class CancelToken:
    """Cooperative cancellation flag shared by the jobs of one run."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to timeout; returns True as soon as cancellation is requested."""
        return self._event.wait(timeout)


def terminate_process_tree(pid: int, grace: float) -> None:
    """Terminate a process and its children, killing whatever outlives grace seconds."""
    try:
        parent = psutil.Process(pid)
        procs = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        return
    for proc in procs:
        try:
            proc.terminate()
        except psutil.NoSuchProcess:
            logger.debug("Process %d already exited", proc.pid)
    _, alive = psutil.wait_procs(procs, timeout=grace)
    for proc in alive:
        logger.warning("Killing encoder process %d after %.1fs", proc.pid, grace)
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            logger.debug("Process %d already exited", proc.pid)


def _tail(text: str, lines: int = STDERR_TAIL_LINES) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


def execute_command(cmd, token: CancelToken, settings: SplitSettings) -> None:
    """
    Run the encoder command until it exits or the token is cancelled.

    Raises:
        EncoderCancelled: If the token was cancelled before or during the run
        EncoderFailure: If the encoder exits with a non-zero status
        OSError: If the encoder cannot be started
    """
    if token.cancelled:
        raise EncoderCancelled("Cancelled before start", module="encoder")

    logger.debug("Running command: %s", shlex.join(cmd))
    with tempfile.TemporaryFile() as stderr_file:
        process = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=stderr_file)
        try:
            while process.poll() is None:
                if token.wait(settings.poll_interval):
                    terminate_process_tree(process.pid, settings.terminate_grace)
                    process.wait()
                    raise EncoderCancelled("Cancelled while running", module="encoder")
        except BaseException:
            if process.poll() is None:
                logger.warning("Stopping encoder process %d", process.pid)
                terminate_process_tree(process.pid, settings.terminate_grace)
                process.wait()
            raise

        if process.returncode != 0:
            stderr_file.seek(0)
            trace = stderr_file.read().decode("utf-8", errors="replace")
            detail = _tail(trace) or "no diagnostic output"
            raise EncoderFailure(
                f"exit code {process.returncode}: {detail}",
                module="encoder",
                return_code=process.returncode,
                trace=trace
            )


def run_encode_job(job: EncodeJob, token: CancelToken,
                   settings: Optional[SplitSettings] = None) -> EncodeResult:
    """
    Execute one encode job.

    Args:
        job: Job descriptor with its full command
        token: Cancellation token of the current run
        settings: Polling and termination timing

    Returns:
        EncodeResult; failures and cancellations are reported, not raised
    """
    settings = settings or SplitSettings()
    start_time = time.monotonic()

    def elapsed_ms() -> int:
        return int((time.monotonic() - start_time) * 1000)

    try:
        execute_command(list(job.command), token, settings)
    except EncoderCancelled as e:
        logger.warning("Segment %d: encode cancelled (%s)", job.index, e.message)
        return EncodeResult(job.index, JobStatus.CANCELLED, elapsed_ms())
    except EncoderFailure as e:
        logger.error("Segment %d: encode failed, %s", job.index, e.message)
        return EncodeResult(job.index, JobStatus.FAILED, elapsed_ms(),
                            return_code=e.return_code, error_message=e.message)
    except OSError as e:
        logger.error("Segment %d: could not start encoder: %s", job.index, e)
        return EncodeResult(job.index, JobStatus.FAILED, elapsed_ms(),
                            error_message=f"Could not start encoder: {e}")

    duration = elapsed_ms()
    logger.info("Segment %d: encode completed successfully in %d ms", job.index, duration)
    return EncodeResult(job.index, JobStatus.SUCCESS, duration, return_code=0)
