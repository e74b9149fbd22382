"""
SQLite access helpers shared by the loader and downstream lookups.

Connections are opened in autocommit mode (``isolation_level=None``); the
loader issues BEGIN/COMMIT itself around the reseed so the transaction
boundary is explicit.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .errors import StoreOpenError

logger = logging.getLogger(__name__)


@contextmanager
def open_store(db_path: Union[str, Path]) -> Iterator[sqlite3.Connection]:
    """Open (creating if absent) the database and always close it afterwards."""

    path = str(db_path)
    try:
        conn = sqlite3.connect(path, isolation_level=None)
        # connect() is lazy about the file; touch it so open errors surface here.
        conn.execute("PRAGMA schema_version").fetchone()
    except sqlite3.Error as exc:
        raise StoreOpenError.from_sqlite_error(path, exc) from exc

    conn.row_factory = sqlite3.Row
    logger.debug("Opened SQLite database", extra={"path": path})
    try:
        yield conn
    finally:
        conn.close()
        logger.debug("Closed SQLite database", extra={"path": path})


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Run the block in one write transaction; roll back on any exception."""

    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


########################
# METADATA
########################


def set_metadata(conn: sqlite3.Connection, key: str, value: Any) -> None:
    # metadata.key has no unique constraint, so replace by delete + insert.
    conn.execute("DELETE FROM metadata WHERE key = ?", (key,))
    conn.execute("INSERT INTO metadata (key, value) VALUES (?, ?)", (key, str(value)))


def get_metadata(conn: sqlite3.Connection, key: str) -> Optional[str]:
    row = conn.execute("SELECT value FROM metadata WHERE key = ?", (key,)).fetchone()
    return row[0] if row else None


def read_metadata(conn: sqlite3.Connection) -> Dict[str, str]:
    return {row[0]: row[1] for row in conn.execute("SELECT key, value FROM metadata")}


########################
# LOOKUPS
########################


def count_items(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT count(*) FROM items").fetchone()[0]


def list_categories(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    rows = conn.execute("SELECT id, name FROM categories ORDER BY id")
    return [{"id": row[0], "name": row[1]} for row in rows]


def get_item_by_hash(conn: sqlite3.Connection, info_hash: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT * FROM items WHERE hash = ? COLLATE NOCASE LIMIT 1",
        (info_hash,),
    ).fetchone()
    return _row_to_dict(row) if row else None


def search_items(
    conn: sqlite3.Connection,
    text: str,
    category: Optional[int] = None,
    include_disabled: bool = False,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    """
    Case-insensitive substring search over title, author and description.

    Results are ordered newest release first. Disabled items are hidden unless
    ``include_disabled`` is set.
    """

    pattern = f"%{_escape_like(text)}%"
    clauses = [
        "(title LIKE :pattern ESCAPE '\\' OR author LIKE :pattern ESCAPE '\\' "
        "OR description LIKE :pattern ESCAPE '\\')"
    ]
    params: Dict[str, Any] = {"pattern": pattern, "limit": limit}
    if category is not None:
        clauses.append("category = :category")
        params["category"] = category
    if not include_disabled:
        clauses.append("COALESCE(disabled, 0) = 0")

    sql = (
        "SELECT * FROM items WHERE "
        + " AND ".join(clauses)
        + " ORDER BY release_date DESC, rowid DESC LIMIT :limit"
    )
    return [_row_to_dict(row) for row in conn.execute(sql, params)]


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
    record = dict(zip(row.keys(), row))
    record["disabled"] = bool(record.get("disabled") or 0)
    return record

