from datetime import datetime, timedelta
from typing import Any

from insight_worker.analyzers.models import InsufficientData
from insight_worker.analyzers.registry import AnalyzerRegistry
from insight_worker.clock import Clock, utcnow
from insight_worker.config.settings import Settings
from insight_worker.database.exceptions import RecordNotFoundError, RecordStoreError
from insight_worker.database.models import AnalyzableRecord, RecordStatus
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.logging.logger import Log
from insight_worker.worker.queue import QueueEntry


def is_stale(record: AnalyzableRecord, now: datetime, threshold: timedelta) -> bool:
    """True when an analyzing record's lock is older than ``threshold``."""
    if record.updated_at is None:
        return True
    return now - record.updated_at > threshold


class JobRunner:
    """Process one queue entry, containing every failure to that record."""

    def __init__(
        self,
        registry: AnalyzerRegistry,
        store: BaseRecordStore,
        settings: Settings,
        *,
        now: Clock = utcnow,
    ) -> None:
        self._registry = registry
        self._store = store
        self._stale_threshold = settings.stale_lock_threshold
        self._now = now

    def run(self, entry: QueueEntry) -> None:
        """Reload the record, analyze it and persist the outcome."""
        record_id = entry.record_id
        try:
            record = self._store.find_by_id(record_id)
        except Exception as exc:
            Log.error(f"Failed to load record {record_id}: {exc}")
            return

        if record is None:
            Log.warning(f"Record {record_id} no longer exists, dropping queue entry")
            return
        if record.status == RecordStatus.COMPLETED:
            Log.info(f"Record {record_id} already completed, skipping")
            return
        if record.status == RecordStatus.ANALYZING:
            if not is_stale(record, self._now(), self._stale_threshold):
                Log.info(f"Record {record_id} is already being analyzed, skipping")
                return
            Log.warning(f"Record {record_id} has a stale analyzing lock, reprocessing")

        if not self._persist(record_id, RecordStatus.ANALYZING, error=None):
            return

        Log.info(f"Running {entry.analyzer_type} analysis for record {record_id}")
        try:
            analyzer = self._registry.get(entry.analyzer_type)
            outcome = analyzer.analyze(record)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            Log.error(f"Analysis of record {record_id} failed: {message}")
            self._persist(record_id, RecordStatus.FAILED, result=None, error=message)
            return

        if isinstance(outcome, InsufficientData):
            Log.info(
                f"Record {record_id}: insufficient data "
                f"({outcome.evidence_count} evidence points)"
            )
            result = outcome.to_dict()
        else:
            result = outcome
        if self._persist(record_id, RecordStatus.COMPLETED, result=result, error=None):
            Log.info(f"Record {record_id} completed")

    def _persist(self, record_id: str, status: RecordStatus, **columns: Any) -> bool:
        """Write a status transition. Returns False, after logging, when it fails.

        A record left behind in ``analyzing`` is reclaimed by the next recovery scan.
        """
        try:
            self._store.update(record_id, status=status, updated_at=self._now(), **columns)
        except RecordNotFoundError:
            Log.warning(f"Record {record_id} was deleted during processing")
            return False
        except RecordStoreError as exc:
            Log.error(f"Could not mark record {record_id} as {status.value}: {exc}")
            return False
        return True
