"""
Build the TNT release database from the CSV dump and the README.

Run order: schema -> categories -> item count check -> (reseed) -> metadata.

The reseed is all-or-nothing: items are deleted and re-inserted inside one
transaction, so a failed run leaves the previous item set in place. Whether a
reseed is needed is decided by comparing row counts only; a dump with the same
number of rows but different content is not picked up without
``force_reseed``.
"""

from __future__ import annotations

import logging
import sqlite3
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, TextIO, Union

from .categories import Category, read_categories
from .magnet import build_magnet_uri
from .records import ItemRecord, parse_items
from .schema import ensure_schema
from .store import count_items, open_store, set_metadata, transaction

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 100
NEWLINE_EVERY = 5000

INSERT_CATEGORY_SQL = "INSERT OR REPLACE INTO categories (id, name) VALUES (?, ?)"
INSERT_ITEM_SQL = (
    "INSERT INTO items (release_date, hash, topic, post, author, title, description, size, category, magnet) "
    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)


@dataclass
class LoadReport:
    categories_loaded: int
    items_parsed: int
    items_before: int
    reseeded: bool
    build_time_ms: Optional[int] = None


def load_categories(conn: sqlite3.Connection, categories: Iterable[Category]) -> int:
    """Upsert categories by id and return how many declarations were written."""

    loaded = 0
    for category in categories:
        conn.execute(INSERT_CATEGORY_SQL, (category.id, category.name))
        loaded += 1
    logger.info("Loaded categories", extra={"count": loaded})
    return loaded


def needs_reseed(items_in_store: int, items_parsed: int) -> bool:
    return items_in_store != items_parsed


def reseed_items(
    conn: sqlite3.Connection,
    records: Sequence[ItemRecord],
    magnet_builder: Callable[[ItemRecord], str] = build_magnet_uri,
    progress_every: int = PROGRESS_EVERY,
    newline_every: int = NEWLINE_EVERY,
    stream: Optional[TextIO] = None,
) -> None:
    """Replace every row of ``items`` with ``records`` in a single transaction."""

    out = stream if stream is not None else sys.stdout
    with transaction(conn):
        conn.execute("DELETE FROM items")
        for index, record in enumerate(records):
            if progress_every and index % progress_every == 0:
                out.write(".")
            if newline_every and index % newline_every == 0:
                out.write("\n")
            conn.execute(INSERT_ITEM_SQL, record.as_row() + (magnet_builder(record),))
    out.write("\n")
    out.flush()


def finalize(conn: sqlite3.Connection, build_time_ms: Optional[int]) -> None:
    if build_time_ms is not None:
        set_metadata(conn, "db_build_time_ms", build_time_ms)
    set_metadata(conn, "clean", 1)


def run_load(
    conn: sqlite3.Connection,
    categories: Iterable[Category],
    records: Sequence[ItemRecord],
    force_reseed: bool = False,
    magnet_builder: Callable[[ItemRecord], str] = build_magnet_uri,
    progress_every: int = PROGRESS_EVERY,
    newline_every: int = NEWLINE_EVERY,
    stream: Optional[TextIO] = None,
) -> LoadReport:
    """
    Load categories, reseed items when the stored count differs from the
    parsed count, then mark the database clean.

    Expects the schema to exist already (see ``ensure_schema``). Exceptions
    propagate unchanged; a failing reseed is rolled back before re-raising and
    the metadata is left untouched.
    """

    categories_loaded = load_categories(conn, categories)

    items_before = count_items(conn)
    report = LoadReport(
        categories_loaded=categories_loaded,
        items_parsed=len(records),
        items_before=items_before,
        reseeded=False,
    )

    if force_reseed or needs_reseed(items_before, len(records)):
        logger.info(
            "Seeding DB",
            extra={"items_in_store": items_before, "items_parsed": len(records), "forced": force_reseed},
        )
        started = time.perf_counter()
        reseed_items(
            conn,
            records,
            magnet_builder=magnet_builder,
            progress_every=progress_every,
            newline_every=newline_every,
            stream=stream,
        )
        report.build_time_ms = int((time.perf_counter() - started) * 1000)
        report.reseeded = True
        logger.info("Seeding completed", extra={"items": len(records), "build_time_ms": report.build_time_ms})
    else:
        logger.info("Seeding not needed", extra={"items": items_before})

    finalize(conn, report.build_time_ms)
    return report


def build_database(
    csv_path: Union[str, Path],
    readme_path: Union[str, Path],
    db_path: Union[str, Path],
    force_reseed: bool = False,
    progress_every: int = PROGRESS_EVERY,
    newline_every: int = NEWLINE_EVERY,
    stream: Optional[TextIO] = None,
) -> LoadReport:
    """Open ``db_path`` and run the full build from the given source files."""

    with open_store(db_path) as conn:
        ensure_schema(conn)
        categories = list(read_categories(readme_path))
        records = list(parse_items(csv_path))
        logger.info(
            "Parsed sources",
            extra={"csv": str(csv_path), "readme": str(readme_path), "items": len(records), "categories": len(categories)},
        )
        return run_load(
            conn,
            categories,
            records,
            force_reseed=force_reseed,
            progress_every=progress_every,
            newline_every=newline_every,
            stream=stream,
        )
