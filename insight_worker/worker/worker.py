import time
from collections.abc import Callable
from dataclasses import dataclass, field

from insight_worker.config.settings import Settings
from insight_worker.logging.logger import Log
from insight_worker.worker.job_runner import JobRunner
from insight_worker.worker.periodic import PeriodicTask
from insight_worker.worker.queue import JobQueue, QueueEntry


@dataclass(frozen=True)
class QueueStatus:
    """Point-in-time view of the worker for diagnostics."""

    queue_length: int
    is_processing: bool
    entries: list[QueueEntry] = field(default_factory=list)


class Worker:
    """Tick loop: dequeue -> dispatch, one record at a time.

    Owns the job queue and the in-flight flag. Producers hand work over with
    ``enqueue``; ``tick`` processes at most one entry and is skipped entirely
    while another tick is still running.
    """

    def __init__(
        self,
        job_runner: JobRunner,
        settings: Settings,
        *,
        queue: JobQueue | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._job_runner = job_runner
        self._settings = settings
        self._queue = queue if queue is not None else JobQueue()
        self._is_processing = False
        self._periodic = PeriodicTask(
            settings.job_poll_interval_seconds, self.tick, sleep=sleep
        )

    @property
    def queue(self) -> JobQueue:
        return self._queue

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    def enqueue(self, record_id: str, analyzer_type: str) -> bool:
        """Queue a record for analysis. Duplicates of a queued entry are ignored."""
        added = self._queue.enqueue(record_id, analyzer_type)
        if added:
            Log.info(
                f"Queued record {record_id} for {analyzer_type} analysis "
                f"(queue length: {len(self._queue)})"
            )
        else:
            Log.debug(f"Record {record_id} already queued for {analyzer_type}")
        return added

    def tick(self) -> bool:
        """Process the next queued entry, if any.

        Returns:
            True when an entry was dispatched, False when the queue was empty
            or a previous tick is still running.
        """
        if self._is_processing:
            Log.debug("Previous tick still running, skipping")
            return False

        self._is_processing = True
        try:
            entry = self._queue.dequeue_next()
            if entry is None:
                return False
            try:
                self._job_runner.run(entry)
            except Exception as exc:
                Log.exception(f"Unexpected error processing record {entry.record_id}: {exc}")
            return True
        finally:
            self._is_processing = False

    def run(self, max_ticks: int | None = None) -> int:
        """Tick on the configured interval until interrupted.

        If max_ticks is set, stop after that many ticks (for testing).
        """
        Log.info(
            f"Worker started, polling queue every {self._settings.job_poll_interval_seconds}s"
        )
        return self._periodic.run(max_ticks)

    def status(self) -> QueueStatus:
        return QueueStatus(
            queue_length=len(self._queue),
            is_processing=self._is_processing,
            entries=self._queue.snapshot(),
        )
