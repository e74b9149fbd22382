"""
Category extraction from the free-text README shipped with the release dump.

The README declares categories as ``<id> = <Name>`` anywhere in its body, e.g.
``4 = Film TV e programmi``. Everything that does not match is ignored.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, NamedTuple, Union

CATEGORY_PATTERN = re.compile(r"(\d+)\s+=\s([a-zA-Z ]+)")


class Category(NamedTuple):
    id: int
    name: str


def extract_categories(text: str) -> Iterator[Category]:
    """Yield every ``(id, name)`` declaration found in ``text`` in document order.

    The name is returned exactly as captured, trailing spaces included.
    """

    for match in CATEGORY_PATTERN.finditer(text):
        yield Category(int(match.group(1)), match.group(2))


def read_categories(path: Union[str, Path]) -> Iterator[Category]:
    text = Path(path).read_text(encoding="utf-8")
    return extract_categories(text)
