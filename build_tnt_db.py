"""Build the TNT Village release database (SQLite) from the CSV dump and README.

Usage:
    python build_tnt_db.py
    python build_tnt_db.py --csv dump.csv --readme README.txt --db tnt.sqlite
    python build_tnt_db.py --config build.yaml --force-reseed -v
"""

import argparse
import logging
import sqlite3
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from tnt_db.config import load_build_config
from tnt_db.errors import ConfigError, InputMissingError, RecordLayoutError, RecordParseError, StoreOpenError
from tnt_db.loader import LoadReport, build_database
from tnt_db.store import count_items, list_categories, open_store, read_metadata


def configure_logging(verbosity: int) -> None:
    level = logging.DEBUG if verbosity > 0 else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Load the TNT Village release dump and category README into SQLite.",
    )
    parser.add_argument("--csv", type=Path, help="CSV release dump (header row + 9 columns).")
    parser.add_argument("--readme", type=Path, help="README declaring categories as '<id> = <Name>'.")
    parser.add_argument("--db", type=Path, help="SQLite database to create or update.")
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with csv_path / readme_path / db_path / progress settings.",
    )
    parser.add_argument(
        "--force-reseed",
        action="store_true",
        help="Reload all items even when the stored row count already matches the dump.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Log metadata and category counts after the build.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    return parser.parse_args(argv)


def check_inputs(csv_path: Path, readme_path: Path) -> None:
    if not csv_path.is_file():
        raise InputMissingError(f"Invalid path for CSV file: {csv_path}")
    if not readme_path.is_file():
        raise InputMissingError(f"Invalid path for TNT README: {readme_path}")


def log_summary(db_path: Path) -> None:
    with open_store(db_path) as conn:
        metadata = read_metadata(conn)
        logging.info(
            "Database summary: %d items, %d categories, metadata %s",
            count_items(conn),
            len(list_categories(conn)),
            metadata,
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_build_config(
            args.config,
            cli_overrides={"csv_path": args.csv, "readme_path": args.readme, "db_path": args.db},
        )
        check_inputs(config.csv_path, config.readme_path)
    except (ConfigError, InputMissingError) as exc:
        logging.error("%s", exc)
        return 1

    started = time.perf_counter()
    try:
        report: LoadReport = build_database(
            config.csv_path,
            config.readme_path,
            config.db_path,
            force_reseed=args.force_reseed,
            progress_every=config.progress_every,
            newline_every=config.newline_every,
        )
    except StoreOpenError as exc:
        logging.error("%s", exc)
        return 1
    except (RecordParseError, RecordLayoutError) as exc:
        logging.error("Failed to parse %s: %s", config.csv_path, exc)
        return 1
    except ValueError as exc:
        # malformed CSV structure or undecodable text in either source
        logging.error("Failed to read source files: %s", exc)
        return 1
    except sqlite3.Error as exc:
        logging.error("Database build failed, items left unchanged: %s", exc)
        return 1

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logging.info(
        "Build finished in %d ms (reseeded=%s, items=%d, categories=%d)",
        elapsed_ms,
        report.reseeded,
        report.items_parsed,
        report.categories_loaded,
    )
    if report.build_time_ms is not None:
        logging.info("Stopwatch: %d ms", report.build_time_ms)

    if args.summary:
        log_summary(config.db_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
