from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .config import get_settings
from .errors import MissingPrecondition, PersistenceFailure

log = logging.getLogger(__name__)

_connection_cache: dict[str, sqlite3.Connection] = {}

TABLE_COLUMNS: Dict[str, tuple[str, ...]] = {
    "vehicles": ("plate", "brand", "model", "year", "type"),
    "courts": (
        "name",
        "city",
        "district",
        "type",
        "address",
        "phone",
        "email",
        "contact",
        "notes",
    ),
    "jobs": (
        "received_date",
        "scheduled_date",
        "court_id",
        "file_number",
        "vehicle_id",
        "total_amount",
        "base_amount",
        "vat_amount",
        "vat_rate",
        "payment_status",
        "invoice_status",
        "status",
        "status_date",
        "status_note",
        "invoice_number",
        "invoice_date",
        "payment_date",
        "completion_date",
        "notes",
    ),
}


def get_database_path() -> Path:
    settings = get_settings()
    url = settings.db_url
    if url.startswith("sqlite:///"):
        path = url.replace("sqlite:///", "")
        return Path(path)
    raise MissingPrecondition(f"Only sqlite:/// database URLs are supported, got {url!r}")


def get_connection() -> sqlite3.Connection:
    db_path = str(get_database_path())
    if db_path not in _connection_cache:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        # sync API endpoints run in a worker thread
        conn = sqlite3.connect(db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        _connection_cache[db_path] = conn
    return _connection_cache[db_path]


@contextmanager
def session_scope() -> Iterator[sqlite3.Connection]:
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def init_db() -> None:
    conn = get_connection()
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS vehicles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            plate TEXT UNIQUE NOT NULL,
            brand TEXT NOT NULL,
            model TEXT NOT NULL,
            year INTEGER NOT NULL,
            type TEXT NOT NULL,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS courts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            city TEXT NOT NULL,
            district TEXT,
            type TEXT,
            address TEXT,
            phone TEXT,
            email TEXT,
            contact TEXT,
            notes TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS jobs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            received_date TEXT NOT NULL,
            scheduled_date TEXT NOT NULL,
            court_id INTEGER NOT NULL,
            file_number TEXT NOT NULL,
            vehicle_id INTEGER,
            total_amount REAL NOT NULL CHECK (total_amount > 0),
            base_amount REAL NOT NULL,
            vat_amount REAL NOT NULL,
            vat_rate INTEGER DEFAULT 20,
            payment_status TEXT NOT NULL,
            invoice_status TEXT NOT NULL,
            status TEXT NOT NULL,
            status_date TEXT NOT NULL,
            status_note TEXT,
            invoice_number TEXT,
            invoice_date TEXT,
            payment_date TEXT,
            completion_date TEXT,
            notes TEXT,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(court_id) REFERENCES courts(id),
            FOREIGN KEY(vehicle_id) REFERENCES vehicles(id)
        )
        """
    )
    conn.execute(
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_jobs_court_file ON jobs (court_id, file_number)"
    )
    conn.commit()


def _columns(table: str, fields: Mapping[str, Any]) -> List[str]:
    if table not in TABLE_COLUMNS:
        raise ValueError(f"Unknown table: {table}")
    allowed = TABLE_COLUMNS[table]
    unknown = [name for name in fields if name not in allowed and name != "id"]
    if unknown:
        raise ValueError(f"Unknown columns for {table}: {', '.join(sorted(unknown))}")
    return list(fields)


class RecordStore:
    """Insert / query-by-field / update over the sqlite tables.

    Every write is its own transaction, so a batch interrupted half way leaves
    only fully written records behind.
    """

    def insert(self, table: str, record: Mapping[str, Any]) -> int:
        columns = _columns(table, record)
        placeholders = ", ".join("?" for _ in columns)
        query = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        try:
            with session_scope() as conn:
                cursor = conn.execute(query, [record[name] for name in columns])
                return int(cursor.lastrowid)
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"{table} insert failed: {exc}") from exc

    def find_by(self, table: str, **fields: Any) -> List[Dict[str, Any]]:
        columns = _columns(table, fields)
        query = f"SELECT * FROM {table}"
        if columns:
            query += " WHERE " + " AND ".join(f"{name} = ?" for name in columns)
        query += " ORDER BY id"
        with session_scope() as conn:
            rows = conn.execute(query, [fields[name] for name in columns]).fetchall()
        return [dict(row) for row in rows]

    def find_one(self, table: str, **fields: Any) -> Optional[Dict[str, Any]]:
        rows = self.find_by(table, **fields)
        return rows[0] if rows else None

    def all(self, table: str) -> List[Dict[str, Any]]:
        return self.find_by(table)

    def update(self, table: str, record_id: int, changes: Mapping[str, Any]) -> None:
        columns = _columns(table, changes)
        if not columns:
            return
        assignments = ", ".join(f"{name} = ?" for name in columns)
        query = f"UPDATE {table} SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?"
        try:
            with session_scope() as conn:
                cursor = conn.execute(query, [changes[name] for name in columns] + [record_id])
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"{table} update failed: {exc}") from exc
        if cursor.rowcount == 0:
            raise PersistenceFailure(f"{table} record {record_id} not found")

    def count(self, table: str) -> int:
        _columns(table, {})
        with session_scope() as conn:
            return int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])

    def delete_all(self, table: str) -> int:
        _columns(table, {})
        try:
            with session_scope() as conn:
                deleted = int(conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])
                conn.execute(f"DELETE FROM {table}")
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"{table} delete failed: {exc}") from exc
        log.info("Deleted %d rows from %s", deleted, table)
        return deleted


__all__ = ["init_db", "session_scope", "get_connection", "RecordStore", "TABLE_COLUMNS"]
