from dataclasses import dataclass
from datetime import datetime
from typing import Any

from insight_worker.analyzers.models import is_insufficient_payload
from insight_worker.database.models import RecordStatus
from insight_worker.database.repositories.base import BaseRecordStore


@dataclass(frozen=True)
class RecordStatusView:
    """What a client may observe about one record's analysis."""

    record_id: str
    status: RecordStatus
    result: dict[str, Any] | None
    error: str | None
    updated_at: datetime | None
    insufficient_data: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "insufficient_data": self.insufficient_data,
        }


class StatusQuery:
    """Read-only status lookup for the HTTP layer.

    ``insufficient_data`` separates "not enough data yet" from a failed
    analysis, so a client can choose between collecting more input and retrying.
    """

    def __init__(self, store: BaseRecordStore) -> None:
        self._store = store

    def get(self, record_id: str) -> RecordStatusView | None:
        record = self._store.find_by_id(record_id)
        if record is None:
            return None
        return RecordStatusView(
            record_id=record.id,
            status=record.status,
            result=record.result,
            error=record.error,
            updated_at=record.updated_at,
            insufficient_data=(
                record.status == RecordStatus.COMPLETED
                and is_insufficient_payload(record.result)
            ),
        )
