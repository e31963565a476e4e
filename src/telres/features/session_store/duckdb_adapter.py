from __future__ import annotations

import os
from dataclasses import dataclass

import duckdb

from .schema import SESSIONS_TABLE_NAME, create_schema


@dataclass(frozen=True)
class SessionRecord:
    name: str
    session_id: str
    saved_at_s: float
    expires_at_s: float | None


class DuckDBAdapter:
    """
    DuckDB persistence adapter. Owns the connection and schema.
    """

    def __init__(self, path: str, *, clean_slate: bool = False) -> None:
        self.path = path
        self.clean_slate = clean_slate
        self._conn: duckdb.DuckDBPyConnection | None = None

    def open(self) -> None:
        if self._conn is not None:
            return

        if self.clean_slate and os.path.exists(self.path):
            os.remove(self.path)

        # Ensure parent dir exists
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        self._conn = duckdb.connect(self.path)
        create_schema(self._conn)

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise RuntimeError("DuckDBAdapter not opened. Call open() first.")
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def upsert(self, record: SessionRecord) -> None:
        self.conn.execute(
            f"""
            INSERT OR REPLACE INTO {SESSIONS_TABLE_NAME} (
                name, session_id, saved_at_s, expires_at_s
            )
            VALUES (?, ?, ?, ?)
            """,
            [record.name, record.session_id, record.saved_at_s, record.expires_at_s],
        )

    def fetch(self, name: str) -> SessionRecord | None:
        row = self.conn.execute(
            f"""
            SELECT name, session_id, saved_at_s, expires_at_s
            FROM {SESSIONS_TABLE_NAME}
            WHERE name = ?
            """,
            [name],
        ).fetchone()
        if row is None:
            return None
        return SessionRecord(
            name=str(row[0]),
            session_id=str(row[1]),
            saved_at_s=float(row[2]),
            expires_at_s=None if row[3] is None else float(row[3]),
        )

    def remove(self, name: str) -> None:
        self.conn.execute(f"DELETE FROM {SESSIONS_TABLE_NAME} WHERE name = ?", [name])

    def count_records(self) -> int:
        """
        Convenience method for sanity checks/tests.
        """
        res = self.conn.execute(f"SELECT COUNT(*) FROM {SESSIONS_TABLE_NAME}").fetchone()
        return int(res[0]) if res else 0
