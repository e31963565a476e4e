from __future__ import annotations

SESSIONS_TABLE_NAME = "session_records"

SESSIONS_DDL = f"""
CREATE TABLE IF NOT EXISTS {SESSIONS_TABLE_NAME} (
    name TEXT PRIMARY KEY,
    session_id TEXT NOT NULL,

    saved_at_s DOUBLE NOT NULL,
    expires_at_s DOUBLE
);
"""


def create_schema(conn) -> None:
    """
    Create tables. No migrations. Safe to call per open.
    """
    conn.execute(SESSIONS_DDL)
