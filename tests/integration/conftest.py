import os
import uuid
from collections.abc import Callable, Generator
from datetime import datetime
from pathlib import Path
from typing import Any

import psycopg
import pytest
from psycopg.types.json import Jsonb

from insight_worker.config.settings import Settings
from insight_worker.database.connection import (
    build_conninfo,
    close_pool,
    get_connection,
    init_pool,
)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "insights_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        with psycopg.connect(build_conninfo(test_settings), connect_timeout=3) as conn:
            conn.execute(SCHEMA_PATH.read_text())
        init_pool(test_settings)
    except Exception as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def owner_id(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    """A fresh owner; every record it owns is deleted after the test."""
    owner = f"owner-{uuid.uuid4()}"
    yield owner
    with db_conn.cursor() as cur:
        cur.execute("DELETE FROM analysis_records WHERE owner_id = %s", (owner,))
    db_conn.commit()


@pytest.fixture
def seed_record(
    db_conn: psycopg.Connection[Any], owner_id: str
) -> Callable[..., str]:
    def _seed(
        kind: str,
        *,
        status: str = "pending",
        payload_ref: dict[str, Any] | None = None,
        result: dict[str, Any] | None = None,
        created_at: datetime | None = None,
    ) -> str:
        record_id = str(uuid.uuid4())
        with db_conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO analysis_records
                (id, owner_id, kind, payload_ref, status, result, created_at, updated_at)
                VALUES (%s, %s, %s, %s, %s, %s, COALESCE(%s, now()), COALESCE(%s, now()))
                """,
                (
                    record_id,
                    owner_id,
                    kind,
                    Jsonb(payload_ref or {}),
                    status,
                    Jsonb(result) if result is not None else None,
                    created_at,
                    created_at,
                ),
            )
        db_conn.commit()
        return record_id

    return _seed
