import sqlite3
from struct import pack
import pytest
from sqlite_decode.tests.constants import SMALL_PAGE_SIZE

MAGIC_HEADER_STRING = b"SQLite format 3\000"

TABLE_INTERIOR_PAGE_HEX_ID = 0x05
TABLE_LEAF_PAGE_HEX_ID = 0x0d
INDEX_INTERIOR_PAGE_HEX_ID = 0x02
INDEX_LEAF_PAGE_HEX_ID = 0x0a


def replace_bytes(byte_array, replacement, index):
    return byte_array[:index] + replacement + byte_array[index + len(replacement):]


# Only handles the non-negative values below 2^56 used in the tests
def encode_test_varint(value):
    byte_array = [value & 0x7f]
    value >>= 7
    while value:
        byte_array.insert(0, (value & 0x7f) | 0x80)
        value >>= 7
    return bytes(byte_array)


def build_database_header(page_size=SMALL_PAGE_SIZE, database_size_in_pages=1, reserved_bytes_per_page=0,
                          database_text_encoding=1, first_freelist_trunk_page_number=0, number_of_freelist_pages=0,
                          largest_root_b_tree_page_number=0, incremental_vacuum_mode=0, file_change_counter=1,
                          version_valid_for_number=1, sqlite_version_number=3039000, schema_format_number=4):
    header = MAGIC_HEADER_STRING
    header += pack(">HBBBBBB", 1 if page_size == 65536 else page_size, 1, 1, reserved_bytes_per_page, 64, 32, 32)
    header += pack(">IIIIIIIIIIII", file_change_counter, database_size_in_pages, first_freelist_trunk_page_number,
                   number_of_freelist_pages, 1, schema_format_number, 0, largest_root_b_tree_page_number,
                   database_text_encoding, 0, incremental_vacuum_mode, 0)
    header += 20 * b"\x00"
    header += pack(">II", version_valid_for_number, sqlite_version_number)
    return header


def get_serial_type_and_content(value, text_encoding="utf-8"):
    if value is None:
        return 0, b""
    if isinstance(value, float):
        return 7, pack(">d", value)
    if isinstance(value, int):
        for serial_type, size in ((1, 1), (2, 2), (3, 3), (4, 4), (5, 6), (6, 8)):
            if -(1 << (size * 8 - 1)) <= value < (1 << (size * 8 - 1)):
                return serial_type, (value & ((1 << (size * 8)) - 1)).to_bytes(size, "big")
    if isinstance(value, str):
        content = value.encode(text_encoding)
        return 13 + 2 * len(content), content
    content = bytes(value)
    return 12 + 2 * len(content), content


def build_record(values, text_encoding="utf-8"):
    serial_types = b""
    body = b""
    for value in values:
        serial_type, content = get_serial_type_and_content(value, text_encoding)
        serial_types += encode_test_varint(serial_type)
        body += content
    header_size = len(serial_types) + 1
    return encode_test_varint(header_size) + serial_types + body


def _local_payload(payload, local_size, overflow_page_number):
    if local_size is None or local_size >= len(payload):
        return payload
    return payload[:local_size] + pack(">I", overflow_page_number)


def build_table_leaf_cell(row_id, payload, local_size=None, overflow_page_number=0):
    return encode_test_varint(len(payload)) + encode_test_varint(row_id) + \
        _local_payload(payload, local_size, overflow_page_number)


def build_table_interior_cell(left_child_pointer, row_id):
    return pack(">I", left_child_pointer) + encode_test_varint(row_id)


def build_index_leaf_cell(payload, local_size=None, overflow_page_number=0):
    return encode_test_varint(len(payload)) + _local_payload(payload, local_size, overflow_page_number)


def build_index_interior_cell(left_child_pointer, payload, local_size=None, overflow_page_number=0):
    return pack(">I", left_child_pointer) + build_index_leaf_cell(payload, local_size, overflow_page_number)


def build_b_tree_page(page_hex_type, cells, page_size=SMALL_PAGE_SIZE, page_number=2, right_most_pointer=0,
                      database_header=None):
    header_offset = 100 if page_number == 1 else 0
    interior = page_hex_type in (TABLE_INTERIOR_PAGE_HEX_ID, INDEX_INTERIOR_PAGE_HEX_ID)
    header_length = 12 if interior else 8

    page = bytearray(page_size)
    if page_number == 1:
        page[:100] = database_header if database_header else build_database_header(page_size)

    cell_content_offset = page_size
    cell_pointers = []
    for cell in cells:
        cell_content_offset -= len(cell)
        page[cell_content_offset:cell_content_offset + len(cell)] = cell
        cell_pointers.append(cell_content_offset)

    page[header_offset] = page_hex_type
    page[header_offset + 3:header_offset + 5] = pack(">H", len(cells))
    page[header_offset + 5:header_offset + 7] = pack(">H", cell_content_offset % 65536)
    if interior:
        page[header_offset + 8:header_offset + 12] = pack(">I", right_most_pointer)

    cell_pointer_offset = header_offset + header_length
    for cell_pointer in cell_pointers:
        page[cell_pointer_offset:cell_pointer_offset + 2] = pack(">H", cell_pointer)
        cell_pointer_offset += 2

    return bytes(page)


def build_overflow_page(content, next_overflow_page_number=0, page_size=SMALL_PAGE_SIZE):
    page = pack(">I", next_overflow_page_number) + content
    return page + (page_size - len(page)) * b"\x00"


class PageFetcher(object):

    def __init__(self, pages):
        self.pages = pages
        self.requested_page_numbers = []

    def __call__(self, page_number):
        self.requested_page_numbers.append(page_number)
        if page_number not in self.pages:
            raise ValueError("Invalid page number: {}.".format(page_number))
        return self.pages[page_number]


def create_sqlite_database(db_filepath, statements, page_size=SMALL_PAGE_SIZE, encoding="UTF-8", auto_vacuum="NONE"):
    db = sqlite3.connect(str(db_filepath))
    try:
        cursor = db.cursor()
        cursor.execute("PRAGMA page_size = %s" % page_size)
        cursor.execute("PRAGMA encoding = '%s'" % encoding)
        cursor.execute("PRAGMA auto_vacuum = %s" % auto_vacuum)
        for statement, parameters in statements:
            if parameters and isinstance(parameters[0], (list, tuple)):
                cursor.executemany(statement, parameters)
            else:
                cursor.execute(statement, parameters)
        db.commit()
    finally:
        db.close()
    return db_filepath


# The first column is the rowid alias and is stored as NULL in the record
TEST_ROWS = [
    (1, "alpha", 1, 1.5, b"\x00\x01"),
    (2, "beta", -300, None, b""),
    (3, None, 70000, -2.25, None),
    (4, "=formula", 1 << 40, 3.75, b"\xff"),
    (5, "x" * 700, 0, 0.5, 1500 * b"\xab"),
]

CREATE_TABLE_STATEMENT = "CREATE TABLE testing (id INTEGER PRIMARY KEY, name TEXT, number INTEGER, amount REAL, " \
                         "data BLOB)"
CREATE_INDEX_STATEMENT = "CREATE INDEX testing_name ON testing (name)"
INSERT_STATEMENT = "INSERT INTO testing VALUES (?, ?, ?, ?, ?)"

db_params = [
    {"name": "utf8", "encoding": "UTF-8", "auto_vacuum": "NONE"},
    {"name": "utf16le", "encoding": "UTF-16le", "auto_vacuum": "NONE"},
    {"name": "auto_vacuum", "encoding": "UTF-8", "auto_vacuum": "FULL"},
]


@pytest.fixture(params=db_params, ids=[param["name"] for param in db_params])
def db_file(request, tmp_path):
    db_filepath = tmp_path / (request.param["name"] + ".sqlite")
    statements = [(CREATE_TABLE_STATEMENT, ()),
                  (CREATE_INDEX_STATEMENT, ()),
                  (INSERT_STATEMENT, TEST_ROWS)]
    create_sqlite_database(db_filepath, statements, encoding=request.param["encoding"],
                           auto_vacuum=request.param["auto_vacuum"])
    yield db_filepath, request.param


@pytest.fixture
def freelist_db_file(tmp_path):
    db_filepath = tmp_path / "freelist.sqlite"
    rows = [(row_id, "row {}".format(row_id), row_id, 0.5, 200 * b"\x01") for row_id in range(1, 41)]
    statements = [(CREATE_TABLE_STATEMENT, ()),
                  (INSERT_STATEMENT, rows),
                  ("DELETE FROM testing WHERE id > 5", ())]
    create_sqlite_database(db_filepath, statements)
    yield db_filepath
