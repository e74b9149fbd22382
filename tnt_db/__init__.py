"""
Build a searchable SQLite database from the TNT Village release dump.

The CSV dump supplies the items, the accompanying README supplies the category
names, and every item gets a magnet URI derived from its hash, title and
author at load time.
"""

from .categories import Category, extract_categories, read_categories  # noqa: F401
from .config import BuildConfig, load_build_config  # noqa: F401
from .errors import (  # noqa: F401
    ConfigError,
    InputMissingError,
    RecordLayoutError,
    RecordParseError,
    StoreOpenError,
)
from .loader import (  # noqa: F401
    LoadReport,
    build_database,
    load_categories,
    needs_reseed,
    reseed_items,
    run_load,
)
from .magnet import TRACKERS, build_magnet_uri  # noqa: F401
from .records import ITEM_COLUMNS, ItemRecord, parse_items  # noqa: F401
from .schema import SCHEMA_VERSION, ensure_schema  # noqa: F401
from .store import (  # noqa: F401
    count_items,
    get_item_by_hash,
    get_metadata,
    list_categories,
    open_store,
    read_metadata,
    search_items,
    set_metadata,
)

__all__ = [
    "Category",
    "extract_categories",
    "read_categories",
    "BuildConfig",
    "load_build_config",
    "ConfigError",
    "InputMissingError",
    "RecordLayoutError",
    "RecordParseError",
    "StoreOpenError",
    "LoadReport",
    "build_database",
    "load_categories",
    "needs_reseed",
    "reseed_items",
    "run_load",
    "TRACKERS",
    "build_magnet_uri",
    "ITEM_COLUMNS",
    "ItemRecord",
    "parse_items",
    "SCHEMA_VERSION",
    "ensure_schema",
    "count_items",
    "get_item_by_hash",
    "get_metadata",
    "list_categories",
    "open_store",
    "read_metadata",
    "search_items",
    "set_metadata",
]
