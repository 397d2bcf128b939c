import pytest
from types import SimpleNamespace
from sqlite_decode.constants import PAGE_TYPE
from sqlite_decode.exception import OutputError
from sqlite_decode.file.database.database import Database
from sqlite_decode.file.database.header import DatabaseHeader
from sqlite_decode.file.database.page import decode_page
from sqlite_decode.file.database.types import RawText
from sqlite_decode.file.database.types import TextEncoding
from sqlite_decode.output import get_column_value_string
from sqlite_decode.output import get_page_breakdown
from sqlite_decode.output import stringify_cell_record
from sqlite_decode.output import stringify_cell_records
from sqlite_decode.output import stringify_database_pages
from sqlite_decode.output import stringify_page
from sqlite_decode.output import stringify_page_information
from sqlite_decode.tests.constants import *
from sqlite_decode.tests.utilities import *

DATABASE_HEADER = DatabaseHeader(build_database_header(page_size=SMALL_PAGE_SIZE, database_size_in_pages=4))

column_value_string_params = [
    (None, "NULL"),
    (0, "0"),
    (-300, "-300"),
    (2.5, "2.5"),
    (RawText(b"text", TextEncoding(1)), "text"),
    (RawText("hi".encode("utf-16-be"), TextEncoding(3)), "00680069"),
    (memoryview(b"\x00\xab"), "00ab"),
    (b"", ""),
]


@pytest.mark.parametrize("value, expected_value", column_value_string_params)
def test_get_column_value_string(value, expected_value):
    assert get_column_value_string(value) == expected_value


def test_stringify_cell_record():
    leaf_page = decode_page(build_b_tree_page(TABLE_LEAF_PAGE_HEX_ID,
                                              [build_table_leaf_cell(7, build_record([None, "a", b"\x01", 3]))]),
                            2, DATABASE_HEADER)
    assert stringify_cell_record(leaf_page.cells[0], leaf_page.page_type) == "#7: (NULL, a, 01, 3)"

    interior_page = decode_page(build_b_tree_page(TABLE_INTERIOR_PAGE_HEX_ID, [build_table_interior_cell(3, 10)],
                                                  right_most_pointer=4), 2, DATABASE_HEADER)
    assert stringify_cell_record(interior_page.cells[0], interior_page.page_type) == "#10 -> Page 3"

    index_cells = [build_index_leaf_cell(build_record(["k", 5])), build_index_leaf_cell(build_record([None, 6]))]
    index_page = decode_page(build_b_tree_page(INDEX_LEAF_PAGE_HEX_ID, index_cells), 2, DATABASE_HEADER)
    assert stringify_cell_records(index_page.cells, index_page.page_type) == ["(k, 5)", "(NULL, 6)"]

    with pytest.raises(ValueError):
        stringify_cell_record(leaf_page.cells[0], PAGE_TYPE.OVERFLOW)


def test_stringify_page():
    payload = build_record([bytes(597)])
    page = build_b_tree_page(TABLE_LEAF_PAGE_HEX_ID,
                             [build_table_leaf_cell(1, payload, local_size=92, overflow_page_number=3)])
    b_tree_page = decode_page(page, 2, DATABASE_HEADER, PageFetcher({3: build_overflow_page(payload[92:])}))

    string = stringify_page(b_tree_page, "\t")
    assert string.startswith("\tB-Tree Table Leaf Page -> 2: at offset 512 with 1 cells")
    assert "\n\t\tOverflow Page -> 3: for cell 0 with 508 bytes of content" in string

    interior_page = decode_page(build_b_tree_page(INDEX_INTERIOR_PAGE_HEX_ID,
                                                  [build_index_interior_cell(3, build_record(["k", 5]))],
                                                  right_most_pointer=4), 2, DATABASE_HEADER)
    assert stringify_page(interior_page) == \
        "B-Tree Index Interior Page -> 2: at offset 512 with 1 cells and right most pointer 4"


def test_get_page_breakdown(db_file):
    db_filepath, param = db_file
    database = Database.from_file(str(db_filepath))

    page_breakdown = get_page_breakdown(database)

    assert set(page_breakdown.keys()) == set(PAGE_TYPE)
    assert 1 in page_breakdown[PAGE_TYPE.B_TREE_TABLE_LEAF]
    assert page_breakdown[PAGE_TYPE.OVERFLOW] == sorted(database.overflow_page_numbers)
    assert page_breakdown[PAGE_TYPE.POINTER_MAP] == database.pointer_map_page_numbers
    assert page_breakdown[PAGE_TYPE.LOCK_BYTE] == []
    assert sum(len(page_numbers) for page_numbers in page_breakdown.values()) == database.database_size_in_pages


def test_stringify_page_information(db_file):
    db_filepath, param = db_file
    database = Database.from_file(str(db_filepath))

    string = stringify_page_information(database, "\t")
    assert string.startswith("\tPage Breakdown:")
    assert "\n\t\tOVERFLOW: {} Page Numbers: ".format(len(database.overflow_page_numbers)) in string
    assert "\n\tPage Structure:\n" in string

    string = stringify_database_pages(database)
    assert string.startswith("{} Pages of {} bytes".format(database.database_size_in_pages, SMALL_PAGE_SIZE))
    if param["auto_vacuum"] == "FULL":
        assert "\tPointer Map Page -> 2" in string


def test_get_page_breakdown_overlap():
    database = SimpleNamespace(pages={}, overflow_page_numbers=[3, 4], freelist_trunk_page_numbers=[4],
                               freelist_leaf_page_numbers=[], pointer_map_page_numbers=[], lock_byte_page_number=None)

    # A page can not be both an overflow page and a freelist page
    with pytest.raises(OutputError):
        get_page_breakdown(database)

    database.freelist_trunk_page_numbers = [5]
    assert get_page_breakdown(database)[PAGE_TYPE.FREELIST_TRUNK] == [5]
