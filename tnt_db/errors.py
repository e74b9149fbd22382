from __future__ import annotations

import sqlite3
from typing import Optional


class InputMissingError(FileNotFoundError):
    """A required source file (CSV dump or README) does not exist."""


class ConfigError(ValueError):
    """Raised when a build configuration file or value is invalid."""


class RecordParseError(ValueError):
    """A numeric column in the release dump could not be parsed."""

    def __init__(self, line: int, column: str, value: str, reason: str = "is not an integer") -> None:
        self.line = line
        self.column = column
        self.value = value
        super().__init__(f"Line {line}: column '{column}' {reason}: {value!r}")


class RecordLayoutError(ValueError):
    """Rows in the release dump carry more fields than the nine-column layout."""

    def __init__(self, first_line: int, last_line: int, detail: str) -> None:
        self.first_line = first_line
        self.last_line = last_line
        super().__init__(f"Lines {first_line}-{last_line}: a row has more than 9 fields ({detail})")


class StoreOpenError(RuntimeError):
    """The SQLite database could not be opened or created."""

    def __init__(self, path: str, code: Optional[int], name: Optional[str], message: str) -> None:
        self.path = path
        self.code = code
        self.name = name
        self.message = message
        label = f"{code} {name}" if name else str(code)
        super().__init__(f"Error opening DB {path}: ({label}) {message}")

    @classmethod
    def from_sqlite_error(cls, path: str, exc: sqlite3.Error) -> "StoreOpenError":
        # sqlite_errorcode/sqlite_errorname only exist on Python 3.11+.
        return cls(
            path,
            getattr(exc, "sqlite_errorcode", None),
            getattr(exc, "sqlite_errorname", None),
            str(exc),
        )
