from __future__ import annotations

import logging
import sqlite3

from .store import set_metadata

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1"

CATEGORIES_DDL = """
CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL
)
"""

ITEMS_DDL = """
CREATE TABLE IF NOT EXISTS items (
    release_date TEXT NOT NULL,
    hash TEXT NOT NULL,
    topic INTEGER NOT NULL,
    post INTEGER NOT NULL,
    author TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    size INTEGER NOT NULL,
    category INTEGER NOT NULL,
    magnet TEXT DEFAULT NULL,
    disabled INTEGER DEFAULT 0
)
"""

METADATA_DDL = """
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT NOT NULL,
    value TEXT
)
"""


def ensure_schema(conn: sqlite3.Connection) -> None:
    """
    Create the categories, items and metadata tables and stamp the version.

    Categories are rebuilt from the README on every run, so that table is
    dropped first. Items and metadata keep their rows across runs.
    """

    conn.execute("DROP TABLE IF EXISTS categories")
    conn.execute(CATEGORIES_DDL)
    conn.execute(ITEMS_DDL)
    conn.execute(METADATA_DDL)
    set_metadata(conn, "version", SCHEMA_VERSION)
    logger.debug("Schema ensured", extra={"version": SCHEMA_VERSION})
