from insight_worker.analyzers.registry import AnalyzerRegistry
from insight_worker.clock import Clock, utcnow
from insight_worker.config.settings import Settings
from insight_worker.database.exceptions import RecordStoreError
from insight_worker.database.models import AnalyzableRecord, RecordStatus
from insight_worker.database.repositories.base import BaseRecordStore
from insight_worker.logging.logger import Log
from insight_worker.worker.job_runner import is_stale
from insight_worker.worker.worker import Worker


class RecoveryScanner:
    """Rebuilds the volatile queue from durable record status at startup.

    Every pending or analyzing record is re-enqueued; analyzing records whose
    lock is older than the stale threshold are first demoted to pending.
    """

    def __init__(
        self,
        store: BaseRecordStore,
        worker: Worker,
        registry: AnalyzerRegistry,
        settings: Settings,
        *,
        now: Clock = utcnow,
    ) -> None:
        self._store = store
        self._worker = worker
        self._registry = registry
        self._stale_threshold = settings.stale_lock_threshold
        self._now = now

    def run(self) -> int:
        """Scan once. Never raises.

        Returns:
            Number of entries added to the queue.
        """
        try:
            records = self._store.find_all_by_status(
                [RecordStatus.PENDING, RecordStatus.ANALYZING]
            )
        except Exception as exc:
            Log.error(f"Recovery scan could not load unfinished records: {exc}")
            return 0

        Log.info(f"Recovery scan found {len(records)} unfinished records")
        enqueued = 0
        for record in records:
            try:
                if self._recover(record):
                    enqueued += 1
            except Exception as exc:
                Log.error(f"Failed to recover record {record.id}: {exc}")
        Log.info(f"Recovery scan re-enqueued {enqueued} records")
        return enqueued

    def _recover(self, record: AnalyzableRecord) -> bool:
        analyzer_type = self._registry.analyzer_type_for(record.kind)
        if analyzer_type is None:
            Log.warning(f"No analyzer handles record {record.id} of kind '{record.kind}'")
            return False

        now = self._now()
        if record.status == RecordStatus.ANALYZING and is_stale(
            record, now, self._stale_threshold
        ):
            try:
                self._store.update(record.id, status=RecordStatus.PENDING, updated_at=now)
                Log.info(f"Demoted stale record {record.id} to pending")
            except RecordStoreError as exc:
                Log.error(f"Could not demote stale record {record.id}: {exc}")

        return self._worker.enqueue(record.id, analyzer_type)
