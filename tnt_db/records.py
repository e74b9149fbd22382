from __future__ import annotations

import logging
import re
import warnings
from dataclasses import astuple, dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Tuple, Union

import pandas as pd

from .errors import RecordLayoutError, RecordParseError

logger = logging.getLogger(__name__)

# Column order of the release dump. The header row is never trusted.
ITEM_COLUMNS: Tuple[str, ...] = (
    "release_date",
    "hash",
    "topic",
    "post",
    "author",
    "title",
    "description",
    "size",
    "category",
)
NUMERIC_COLUMNS = frozenset({"topic", "post", "size", "category"})

# Inclusive bounds per numeric column: size is 64-bit, the ids are 32-bit.
INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)
NUMERIC_RANGES: Dict[str, Tuple[int, int]] = {
    "topic": INT32_RANGE,
    "post": INT32_RANGE,
    "size": INT64_RANGE,
    "category": INT32_RANGE,
}

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

DEFAULT_CHUNK_SIZE = 5000


@dataclass(frozen=True)
class ItemRecord:
    """One release row from the CSV dump."""

    release_date: str
    hash: str
    topic: int
    post: int
    author: str
    title: str
    description: str
    size: int
    category: int

    def as_row(self) -> Tuple[Any, ...]:
        return astuple(self)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and pd.isna(value))


def _clean_text(value: Any) -> str:
    if _is_missing(value):
        return ""
    return str(value)


def _clean_int(value: Any, *, row_number: int, column: str) -> int:
    # Short rows leave trailing columns missing; those resolve to 0.
    # A field that is present but blank is an error like any other bad number.
    if _is_missing(value):
        return 0
    text = str(value).strip()
    if not INTEGER_PATTERN.fullmatch(text):
        raise RecordParseError(row_number, column, str(value))

    number = int(text)
    low, high = NUMERIC_RANGES[column]
    if not low <= number <= high:
        raise RecordParseError(row_number, column, str(value), reason="is out of range")
    return number


def record_from_values(values: Tuple[Any, ...], row_number: int) -> ItemRecord:
    """Build an ItemRecord from raw column values in ``ITEM_COLUMNS`` order."""

    padded = tuple(values) + (None,) * (len(ITEM_COLUMNS) - len(values))
    fields = {}
    for column, value in zip(ITEM_COLUMNS, padded):
        if column in NUMERIC_COLUMNS:
            fields[column] = _clean_int(value, row_number=row_number, column=column)
        else:
            fields[column] = _clean_text(value)
    return ItemRecord(**fields)


def _next_chunk(chunks: Iterator[pd.DataFrame], first_row: int, chunk_size: int):
    # pandas only warns when a row is wider than ``names`` and drops the extra
    # fields; promote that warning so such rows fail the parse instead.
    with warnings.catch_warnings():
        warnings.simplefilter("error", pd.errors.ParserWarning)
        try:
            return next(chunks, None)
        except pd.errors.ParserWarning as exc:
            raise RecordLayoutError(first_row, first_row + chunk_size - 1, str(exc)) from None


def parse_items(path: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[ItemRecord]:
    """
    Lazily parse the release dump into ItemRecords.

    The first row is skipped as a header. Rows with fewer than nine fields get
    empty-string / zero defaults for the missing trailing columns. A numeric
    column that is blank, is not a plain base-10 integer, or does not fit its
    column width raises RecordParseError. A row with more than nine fields
    raises RecordLayoutError. Callers rely on the parsed count matching the
    file, so bad rows are never skipped.

    The returned generator reads the file in chunks and can only be consumed
    once.
    """

    try:
        # The python engine pads short rows with None, which keeps a missing
        # trailing field distinct from a present empty one ("").
        reader = pd.read_csv(
            path,
            sep=",",
            header=None,
            skiprows=1,
            names=list(ITEM_COLUMNS),
            index_col=False,
            dtype=object,
            keep_default_na=False,
            encoding="utf-8",
            engine="python",
            chunksize=chunk_size,
        )
    except pd.errors.EmptyDataError:
        logger.debug("Release dump is empty", extra={"path": str(path)})
        return

    row_number = 0
    with reader:
        chunks = iter(reader)
        while True:
            chunk = _next_chunk(chunks, row_number + 1, chunk_size)
            if chunk is None:
                break
            for values in chunk.itertuples(index=False, name=None):
                row_number += 1
                yield record_from_values(values, row_number)

    logger.debug("Parsed release dump", extra={"path": str(path), "rows": row_number})
