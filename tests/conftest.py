from pathlib import Path
from typing import List, Sequence

import pytest

HEADER = '"DATA","HASH","TOPIC","POST","AUTORE","TITOLO","DESCRIZIONE","DIMENSIONE","CATEGORIA"'

SAMPLE_ROWS = [
    "2019-08-30T10:00:00,AAAA1111,101,201,alice,Il Trono di Spade,Stagione 1,1073741824,29",
    "2019-08-29T09:00:00,BBBB2222,102,202,bob,Divina Commedia,Audiolibro,5368709120,3",
    "2019-08-28T08:00:00,CCCC3333,103,203,carol,\"Hello, world\",Film TV,2048,4",
]

SAMPLE_README = """TNT Village dump

Categorie:
1 = Film TV e programmi
3 = Audiolibri
4 = Film
29 = Serie TV

Note: 2019 release, nothing else here.
"""


@pytest.fixture(autouse=True)
def _clear_tnt_env(monkeypatch):
    for name in ("TNT_CSV_PATH", "TNT_README_PATH", "TNT_DB_PATH", "TNT_PROGRESS_EVERY", "TNT_NEWLINE_EVERY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def write_dump(tmp_path: Path):
    def _write(rows: Sequence[str], name: str = "dump.csv") -> Path:
        path = tmp_path / name
        lines: List[str] = [HEADER, *rows]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def readme_path(tmp_path: Path) -> Path:
    path = tmp_path / "README.txt"
    path.write_text(SAMPLE_README, encoding="utf-8")
    return path
