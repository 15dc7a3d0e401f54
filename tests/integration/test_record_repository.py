from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from insight_worker.database.exceptions import RecordNotFoundError
from insight_worker.database.models import RecordKind, RecordStatus
from insight_worker.database.repositories.record_repository import RecordRepository


@pytest.mark.integration
class TestRecordRepositoryFindById:
    def test_returns_record(self, seed_record: Callable[..., str], owner_id: str) -> None:
        record_id = seed_record(RecordKind.IMAGE, payload_ref={"path": "a.png"})

        record = RecordRepository().find_by_id(record_id)

        assert record is not None
        assert record.owner_id == owner_id
        assert record.kind == RecordKind.IMAGE
        assert record.status == RecordStatus.PENDING
        assert record.payload_ref == {"path": "a.png"}
        assert record.result is None
        assert record.created_at is not None

    def test_returns_none_for_missing(self, db_conn: object) -> None:
        assert RecordRepository().find_by_id("does-not-exist") is None


@pytest.mark.integration
class TestRecordRepositoryUpdate:
    def test_completes_record(self, seed_record: Callable[..., str]) -> None:
        record_id = seed_record(RecordKind.DOCUMENT)
        repo = RecordRepository()
        stamp = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

        repo.update(
            record_id,
            status=RecordStatus.COMPLETED,
            updated_at=stamp,
            result={"summary": "ok"},
            error=None,
        )

        record = repo.find_by_id(record_id)
        assert record is not None
        assert record.status == RecordStatus.COMPLETED
        assert record.result == {"summary": "ok"}
        assert record.error is None
        assert record.updated_at == stamp

    def test_leaves_unset_columns_untouched(self, seed_record: Callable[..., str]) -> None:
        record_id = seed_record(RecordKind.DOCUMENT, status="completed", result={"a": 1})
        repo = RecordRepository()

        repo.update(record_id, status=RecordStatus.PENDING, updated_at=datetime.now(UTC))

        record = repo.find_by_id(record_id)
        assert record is not None
        assert record.status == RecordStatus.PENDING
        assert record.result == {"a": 1}

    def test_missing_record_raises(self, db_conn: object) -> None:
        with pytest.raises(RecordNotFoundError):
            RecordRepository().update(
                "does-not-exist", status=RecordStatus.FAILED, updated_at=datetime.now(UTC)
            )


@pytest.mark.integration
class TestRecordRepositoryQueries:
    def test_find_all_by_status(self, seed_record: Callable[..., str]) -> None:
        pending = seed_record(RecordKind.IMAGE, status="pending")
        analyzing = seed_record(RecordKind.IMAGE, status="analyzing")
        done = seed_record(RecordKind.IMAGE, status="completed")

        ids = {
            r.id for r in RecordRepository().find_all_by_status(
                [RecordStatus.PENDING, RecordStatus.ANALYZING]
            )
        }

        assert {pending, analyzing} <= ids
        assert done not in ids

    def test_find_recent_by_owner_newest_first(
        self, seed_record: Callable[..., str], owner_id: str
    ) -> None:
        now = datetime.now(UTC)
        older = seed_record(
            RecordKind.IMAGE, status="completed", result={}, created_at=now - timedelta(hours=2)
        )
        newer = seed_record(
            RecordKind.IMAGE, status="completed", result={}, created_at=now - timedelta(hours=1)
        )
        seed_record(RecordKind.IMAGE, status="pending")
        seed_record(RecordKind.DOCUMENT, status="completed", result={})

        records = RecordRepository().find_recent_by_owner(
            owner_id, kinds=[RecordKind.IMAGE], limit=10
        )

        assert [r.id for r in records] == [newer, older]

    def test_find_recent_by_owner_any_status_and_limit(
        self, seed_record: Callable[..., str], owner_id: str
    ) -> None:
        seed_record(RecordKind.PROFILE, status="pending")
        seed_record(RecordKind.PROFILE, status="completed", result={})

        records = RecordRepository().find_recent_by_owner(
            owner_id, kinds=[RecordKind.PROFILE], status=None, limit=1
        )

        assert len(records) == 1

    def test_find_recent_by_owner_payload_filter(
        self, seed_record: Callable[..., str], owner_id: str
    ) -> None:
        diary = seed_record(
            RecordKind.DOCUMENT,
            status="completed",
            result={},
            payload_ref={"document_type": "diary", "path": "d.txt"},
        )
        seed_record(
            RecordKind.DOCUMENT,
            status="completed",
            result={},
            payload_ref={"document_type": "note"},
        )

        records = RecordRepository().find_recent_by_owner(
            owner_id, kinds=[RecordKind.DOCUMENT], filters={"document_type": "diary"}
        )

        assert [r.id for r in records] == [diary]
