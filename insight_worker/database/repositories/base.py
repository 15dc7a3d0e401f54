from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from insight_worker.database.models import UNSET, AnalyzableRecord, RecordStatus


class BaseRecordStore(ABC):
    """Contract for durable storage of analyzable records."""

    @abstractmethod
    def find_by_id(self, record_id: str) -> AnalyzableRecord | None:
        """Return the record with this ID, or None when it does not exist."""

    @abstractmethod
    def update(
        self,
        record_id: str,
        *,
        status: RecordStatus,
        updated_at: datetime,
        result: dict[str, Any] | None = UNSET,
        error: str | None = UNSET,
    ) -> None:
        """Persist a status transition.

        Columns passed as UNSET are left untouched.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
            StoreWriteError: if the write itself fails.
        """

    @abstractmethod
    def find_all_by_status(
        self, statuses: Iterable[RecordStatus]
    ) -> list[AnalyzableRecord]:
        """Return every record whose status is one of ``statuses``, oldest first."""

    @abstractmethod
    def find_recent_by_owner(
        self,
        owner_id: str,
        *,
        kinds: Iterable[str],
        status: RecordStatus | None = RecordStatus.COMPLETED,
        filters: dict[str, Any] | None = None,
        limit: int = 50,
    ) -> list[AnalyzableRecord]:
        """Return an owner's most recent records, newest first.

        Args:
            owner_id: Owner whose records are gathered.
            kinds: Record kinds to include.
            status: Required status, or None for any status.
            filters: Key/value pairs the record's payload_ref must contain.
            limit: Maximum number of records returned.
        """
