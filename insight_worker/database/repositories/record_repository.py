from collections.abc import Iterable
from datetime import datetime
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from insight_worker.database.connection import get_connection
from insight_worker.database.exceptions import RecordNotFoundError, StoreWriteError
from insight_worker.database.models import UNSET, AnalyzableRecord, RecordStatus
from insight_worker.database.repositories.base import BaseRecordStore

_COLUMNS = (
    "id, owner_id, kind, payload_ref, status, result, error, created_at, updated_at"
)


class RecordRepository(BaseRecordStore):
    """Database operations for the analysis_records table."""

    def find_by_id(self, record_id: str) -> AnalyzableRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM analysis_records WHERE id = %s",
                    (record_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _to_record(row)

    def update(
        self,
        record_id: str,
        *,
        status: RecordStatus,
        updated_at: datetime,
        result: dict[str, Any] | None = UNSET,
        error: str | None = UNSET,
    ) -> None:
        assignments = [
            sql.SQL("status = {}").format(sql.Placeholder("status")),
            sql.SQL("updated_at = {}").format(sql.Placeholder("updated_at")),
        ]
        params: dict[str, Any] = {
            "status": status.value,
            "updated_at": updated_at,
            "id": record_id,
        }
        if result is not UNSET:
            assignments.append(sql.SQL("result = {}").format(sql.Placeholder("result")))
            params["result"] = Jsonb(result) if result is not None else None
        if error is not UNSET:
            assignments.append(sql.SQL("error = {}").format(sql.Placeholder("error")))
            params["error"] = error

        query = sql.SQL("UPDATE analysis_records SET {} WHERE id = {}").format(
            sql.SQL(", ").join(assignments),
            sql.Placeholder("id"),
        )
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    if cur.rowcount == 0:
                        raise RecordNotFoundError(f"Record {record_id} not found")
                conn.commit()
        except psycopg.Error as exc:
            raise StoreWriteError(
                f"Failed to update record {record_id}: {exc}"
            ) from exc

    def find_all_by_status(
        self, statuses: Iterable[RecordStatus]
    ) -> list[AnalyzableRecord]:
        values = [s.value for s in statuses]
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM analysis_records
                    WHERE status = ANY(%s)
                    ORDER BY created_at
                    """,
                    (values,),
                )
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]

    def find_recent_by_owner(
        self,
        owner_id: str,
        *,
        kinds: Iterable[str],
        status: RecordStatus | None = RecordStatus.COMPLETED,
        filters: dict[str, Any] | None = None,
        limit: int = 50,
    ) -> list[AnalyzableRecord]:
        conditions = [
            sql.SQL("owner_id = %(owner_id)s"),
            sql.SQL("kind = ANY(%(kinds)s)"),
        ]
        params: dict[str, Any] = {
            "owner_id": owner_id,
            "kinds": list(kinds),
            "limit": limit,
        }
        if status is not None:
            conditions.append(sql.SQL("status = %(status)s"))
            params["status"] = status.value
        if filters:
            conditions.append(sql.SQL("payload_ref @> %(filters)s"))
            params["filters"] = Jsonb(filters)

        query = sql.SQL(
            "SELECT {columns} FROM analysis_records WHERE {where} "
            "ORDER BY created_at DESC LIMIT %(limit)s"
        ).format(
            columns=sql.SQL(_COLUMNS),
            where=sql.SQL(" AND ").join(conditions),
        )
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(query, params)
                rows = cur.fetchall()
        return [_to_record(row) for row in rows]


def _to_record(row: dict[str, Any]) -> AnalyzableRecord:
    return AnalyzableRecord(
        id=str(row["id"]),
        owner_id=str(row["owner_id"]),
        kind=row["kind"],
        status=RecordStatus(row["status"]),
        payload_ref=row["payload_ref"] or {},
        result=row["result"],
        error=row["error"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
