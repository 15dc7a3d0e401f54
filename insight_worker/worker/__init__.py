from insight_worker.worker.job_runner import JobRunner
from insight_worker.worker.periodic import PeriodicTask
from insight_worker.worker.queue import JobQueue, QueueEntry
from insight_worker.worker.recovery import RecoveryScanner
from insight_worker.worker.status_query import RecordStatusView, StatusQuery
from insight_worker.worker.worker import QueueStatus, Worker

__all__ = [
    "JobQueue",
    "JobRunner",
    "PeriodicTask",
    "QueueEntry",
    "QueueStatus",
    "RecoveryScanner",
    "RecordStatusView",
    "StatusQuery",
    "Worker",
]
