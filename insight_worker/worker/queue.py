from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True)
class QueueEntry:
    """A record waiting to be analyzed by one analyzer type."""

    record_id: str
    analyzer_type: str


class JobQueue:
    """In-memory FIFO of pending work, deduplicated by (record_id, analyzer_type).

    Contents are lost on restart; the record status is the durable source of
    truth and the recovery scan rebuilds the queue from it.
    """

    def __init__(self) -> None:
        self._entries: deque[QueueEntry] = deque()
        self._members: set[QueueEntry] = set()

    def enqueue(self, record_id: str, analyzer_type: str) -> bool:
        """Append an entry. Returns False, without error, if it is already queued."""
        entry = QueueEntry(record_id=record_id, analyzer_type=analyzer_type)
        if entry in self._members:
            return False
        self._entries.append(entry)
        self._members.add(entry)
        return True

    def dequeue_next(self) -> QueueEntry | None:
        """Remove and return the oldest entry, or None when empty."""
        if not self._entries:
            return None
        entry = self._entries.popleft()
        self._members.discard(entry)
        return entry

    def contains(self, record_id: str, analyzer_type: str | None = None) -> bool:
        if analyzer_type is not None:
            return QueueEntry(record_id, analyzer_type) in self._members
        return any(entry.record_id == record_id for entry in self._entries)

    def length(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def snapshot(self) -> list[QueueEntry]:
        """Copy of the queued entries, oldest first."""
        return list(self._entries)
