from sqlite_decode.constants import PAGE_TYPE
from sqlite_decode.constants import SQLITE_DATABASE_HEADER_LENGTH
from sqlite_decode.file.database.database import Database
from sqlite_decode.file.database.header import DatabaseHeader
from sqlite_decode.file.database.page import decode_page

"""

interface.py

This script acts as a simplified interface for common operations for the sqlite decoding library.

This script holds the following function(s):
create_database(file_identifier, strict_format_checking=True)
decode_database_header(byte_array)
decode_page(page, page_number, database_header, get_page_data=None, maximum_number_of_overflow_pages=None)
get_b_tree_pages(database, page_type=None)
get_table_leaf_rows(database)
get_index_leaf_entries(database)

"""


def create_database(file_identifier, strict_format_checking=True):
    if isinstance(file_identifier, (bytes, bytearray, memoryview)):
        return Database(file_identifier, strict_format_checking)
    return Database.from_file(file_identifier, strict_format_checking)


def decode_database_header(byte_array):
    return DatabaseHeader(byte_array[:SQLITE_DATABASE_HEADER_LENGTH])


def get_b_tree_pages(database, page_type=None):
    return [page for page in database.pages.values() if page_type is None or page.page_type == page_type]


def get_table_leaf_rows(database):

    """

    Returns a tuple of (page number, row id, column values) for every cell on every table leaf page in page order.

    Note:  Rows from every table in the database are returned together including the rows of the sqlite_master table
           on the root page.  Which table a row belongs to is not known without traversing the b-trees.

    """

    return [(page.number, cell.row_id, cell.payload.column_values)
            for page in get_b_tree_pages(database, PAGE_TYPE.B_TREE_TABLE_LEAF)
            for cell in page.cells]


def get_index_leaf_entries(database):
    return [(page.number, cell.payload.row_id, cell.payload.column_values)
            for page in get_b_tree_pages(database, PAGE_TYPE.B_TREE_INDEX_LEAF)
            for cell in page.cells]
