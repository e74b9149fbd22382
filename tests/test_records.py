import types

import pytest

from conftest import SAMPLE_ROWS
from tnt_db.errors import RecordLayoutError, RecordParseError
from tnt_db.records import ItemRecord, parse_items


def test_parse_items_skips_header_and_types_columns(write_dump):
    path = write_dump(SAMPLE_ROWS)

    items = list(parse_items(path))

    assert len(items) == 3
    first = items[0]
    assert first == ItemRecord(
        release_date="2019-08-30T10:00:00",
        hash="AAAA1111",
        topic=101,
        post=201,
        author="alice",
        title="Il Trono di Spade",
        description="Stagione 1",
        size=1073741824,
        category=29,
    )
    assert items[1].size == 5368709120
    assert items[2].title == "Hello, world"


def test_parse_items_discards_first_row_even_when_it_looks_like_data(tmp_path):
    path = tmp_path / "no_header.csv"
    path.write_text(
        "2019-01-01,ZZZZ,1,1,x,y,z,1,1\n2019-01-02,YYYY,2,2,a,b,c,2,2\n",
        encoding="utf-8",
    )

    items = list(parse_items(path))

    assert [item.hash for item in items] == ["YYYY"]


def test_parse_items_defaults_missing_trailing_fields(write_dump):
    path = write_dump(["2019-01-01,BBBB,3,4,bob"])

    (item,) = list(parse_items(path))

    assert item.release_date == "2019-01-01"
    assert item.author == "bob"
    assert item.title == ""
    assert item.description == ""
    assert item.size == 0
    assert item.category == 0


def test_parse_items_rejects_blank_numeric_field(write_dump):
    path = write_dump(["2019-01-01,DDDD,,7,dave,t,d,1,1"])

    with pytest.raises(RecordParseError) as excinfo:
        list(parse_items(path))

    assert excinfo.value.line == 1
    assert excinfo.value.column == "topic"
    assert excinfo.value.value == ""


def test_parse_items_missing_and_blank_trailing_fields_differ(write_dump):
    path = write_dump(["2019-01-01,DDDD,1,7,dave,t,d", "2019-01-01,EEEE,1,7,eve,t,d,,"])

    items = parse_items(path)

    assert next(items).size == 0
    with pytest.raises(RecordParseError, match="size"):
        next(items)


def test_parse_items_rejects_rows_with_extra_fields(write_dump):
    path = write_dump([SAMPLE_ROWS[0], "2019-01-01,GGGG,1,1,g,t,d,1,1,surplus"])

    with pytest.raises(RecordLayoutError, match="more than 9 fields") as excinfo:
        list(parse_items(path))

    assert excinfo.value.first_line == 1


def test_parse_items_rejects_digit_separators(write_dump):
    path = write_dump(["2019-01-01,HHHH,1_000,1,h,t,d,1,1"])

    with pytest.raises(RecordParseError) as excinfo:
        list(parse_items(path))

    assert excinfo.value.column == "topic"
    assert excinfo.value.value == "1_000"


def test_parse_items_accepts_signs_and_padding(write_dump):
    (item,) = list(parse_items(write_dump(["2019-01-01,IIII, +12 ,-3,i,t,d,0,7"])))

    assert (item.topic, item.post, item.size, item.category) == (12, -3, 0, 7)


def test_parse_items_rejects_size_beyond_64_bits(write_dump):
    path = write_dump(["2019-01-01,JJJJ,1,1,j,t,d,99999999999999999999,1"])

    with pytest.raises(RecordParseError, match="out of range"):
        list(parse_items(path))


def test_parse_items_id_columns_are_32_bit(write_dump):
    (item,) = list(parse_items(write_dump(["2019-01-01,KKKK,2147483647,1,k,t,d,9223372036854775807,1"])))
    assert item.topic == 2**31 - 1
    assert item.size == 2**63 - 1

    with pytest.raises(RecordParseError, match="column 'topic' is out of range"):
        list(parse_items(write_dump(["2019-01-01,LLLL,2147483648,1,l,t,d,1,1"])))


def test_parse_items_rejects_non_numeric_topic(write_dump):
    path = write_dump([SAMPLE_ROWS[0], "2019-01-01,EEEE,abc,1,eve,t,d,1,1"])

    with pytest.raises(RecordParseError) as excinfo:
        list(parse_items(path))

    assert excinfo.value.line == 2
    assert excinfo.value.column == "topic"
    assert excinfo.value.value == "abc"


def test_parse_items_rejects_fractional_size(write_dump):
    path = write_dump(["2019-01-01,FFFF,1,1,f,t,d,1.5,1"])

    with pytest.raises(RecordParseError, match="size"):
        list(parse_items(path))


def test_parse_items_is_lazy(write_dump):
    path = write_dump([SAMPLE_ROWS[0], "2019-01-01,EEEE,1,1,eve,t,d,1,notanumber"])

    items = parse_items(path)

    assert isinstance(items, types.GeneratorType)
    assert next(items).hash == "AAAA1111"
    with pytest.raises(RecordParseError):
        next(items)


def test_parse_items_small_chunks_yield_every_row(write_dump):
    path = write_dump(SAMPLE_ROWS)

    items = list(parse_items(path, chunk_size=1))

    assert [item.hash for item in items] == ["AAAA1111", "BBBB2222", "CCCC3333"]


def test_parse_items_header_only_file_is_empty(write_dump):
    path = write_dump([])

    assert list(parse_items(path)) == []


def test_as_row_follows_column_order(write_dump):
    (item,) = list(parse_items(write_dump([SAMPLE_ROWS[1]])))

    assert item.as_row() == (
        "2019-08-29T09:00:00",
        "BBBB2222",
        102,
        202,
        "bob",
        "Divina Commedia",
        "Audiolibro",
        5368709120,
        3,
    )
