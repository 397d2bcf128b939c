from binascii import hexlify
from logging import getLogger
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import PAGE_TYPE
from sqlite_decode.exception import OutputError
from sqlite_decode.file.database.types import RawText

"""

output.py

This script holds general output functions used for debugging, logging, and general output for the
sqlite decoding library.

This script holds the following function(s):

get_column_value_string(value)
get_page_breakdown(database)
stringify_cell_record(cell, page_type)
stringify_cell_records(cells, page_type)
stringify_database_pages(database, padding="")
stringify_page(page, padding="")
stringify_page_information(database, padding="")
"""


def get_column_value_string(value):

    """

    Returns the string written out for a column value.  Text is decoded in the database text encoding or written as hex
    when the encoding is not supported for decoding, blobs are written as hex and NULL values as "NULL".

    """

    if value is None:
        return "NULL"
    elif isinstance(value, RawText):
        return str(value)
    elif isinstance(value, (memoryview, bytes, bytearray)):
        return hexlify(value).decode()
    else:
        return str(value)


def get_page_breakdown(database):
    page_breakdown = {}
    for page_type in PAGE_TYPE:
        page_breakdown[page_type] = []
    for page_number, page in database.pages.items():
        page_breakdown[page.page_type].append(page_number)
    page_breakdown[PAGE_TYPE.OVERFLOW].extend(sorted(database.overflow_page_numbers))
    page_breakdown[PAGE_TYPE.FREELIST_TRUNK].extend(database.freelist_trunk_page_numbers)
    page_breakdown[PAGE_TYPE.FREELIST_LEAF].extend(sorted(database.freelist_leaf_page_numbers))
    page_breakdown[PAGE_TYPE.POINTER_MAP].extend(database.pointer_map_page_numbers)
    if database.lock_byte_page_number:
        page_breakdown[PAGE_TYPE.LOCK_BYTE].append(database.lock_byte_page_number)

    page_numbers = [page_number for page_array in page_breakdown.values() for page_number in page_array]
    if len(page_numbers) != len(set(page_numbers)):
        log_message = "Page numbers were found under more than one page type in the page breakdown: {}."
        log_message = log_message.format(sorted(page_number for page_number in set(page_numbers)
                                                if page_numbers.count(page_number) > 1))
        getLogger(LOGGER_NAME).error(log_message)
        raise OutputError(log_message)

    return page_breakdown


def stringify_cell_record(cell, page_type):
    if page_type == PAGE_TYPE.B_TREE_TABLE_LEAF:

        column_values = [get_column_value_string(value) for value in cell.payload.column_values]
        content = "(" + ", ".join(column_values) + ")"
        return "#{}: {}".format(cell.row_id, content)

    elif page_type in (PAGE_TYPE.B_TREE_INDEX_LEAF, PAGE_TYPE.B_TREE_INDEX_INTERIOR):

        column_values = [get_column_value_string(value) for value in cell.payload.column_values]
        content = "(" + ", ".join(column_values) + ")"
        return content

    elif page_type == PAGE_TYPE.B_TREE_TABLE_INTERIOR:

        return "#{} -> Page {}".format(cell.row_id, cell.left_child_pointer)

    else:
        log_message = "Invalid page type specified for stringify cell record: {}.  Page type should " \
                      "be one of the b-tree page types."
        log_message = log_message.format(page_type)
        getLogger(LOGGER_NAME).error(log_message)
        raise ValueError(log_message)


def stringify_cell_records(cells, page_type):
    return [stringify_cell_record(cell, page_type) for cell in cells]


def stringify_page(page, padding=""):

    if page.page_type == PAGE_TYPE.B_TREE_TABLE_LEAF:
        string = padding + "B-Tree Table Leaf Page -> {}: at offset {} with {} cells"
        string = string.format(page.number, page.offset, len(page.cells))
    elif page.page_type == PAGE_TYPE.B_TREE_INDEX_LEAF:
        string = padding + "B-Tree Index Leaf Page -> {}: at offset {} with {} cells"
        string = string.format(page.number, page.offset, len(page.cells))
    elif page.page_type == PAGE_TYPE.B_TREE_TABLE_INTERIOR:
        string = padding + "B-Tree Table Interior Page -> {}: at offset {} with {} cells and right most pointer {}"
        string = string.format(page.number, page.offset, len(page.cells), page.right_most_pointer)
    elif page.page_type == PAGE_TYPE.B_TREE_INDEX_INTERIOR:
        string = padding + "B-Tree Index Interior Page -> {}: at offset {} with {} cells and right most pointer {}"
        string = string.format(page.number, page.offset, len(page.cells), page.right_most_pointer)
    else:
        log_message = "The page is not a b-tree page type but instead: {}."
        log_message = log_message.format(page.page_type)
        getLogger(LOGGER_NAME).error(log_message)
        raise ValueError(log_message)

    if page.page_type != PAGE_TYPE.B_TREE_TABLE_INTERIOR:
        for cell in page.cells:
            overflow_padding = padding
            for overflow_page in cell.overflow_pages:
                overflow_padding += "\t"
                overflow_string = "\n" + overflow_padding + "Overflow Page -> {}: for cell {} with {} bytes of content"
                string += overflow_string.format(overflow_page.number, cell.index, overflow_page.content_length)

    return string


def stringify_database_pages(database, padding=""):
    string = padding + "{} Pages of {} bytes".format(database.database_size_in_pages, database.page_size)
    for page in database.pages.values():
        string += "\n" + stringify_page(page, padding + "\t")
    for pointer_map_page_number in database.pointer_map_page_numbers:
        string += "\n" + padding + "\t" + "Pointer Map Page -> {}".format(pointer_map_page_number)
    for freelist_trunk_page_number in database.freelist_trunk_page_numbers:
        string += "\n" + padding + "\t" + "Freelist Trunk Page -> {}".format(freelist_trunk_page_number)
    if database.freelist_leaf_page_numbers:
        string += "\n" + padding + "\t" + "Freelist Leaf Pages -> {}".format(database.freelist_leaf_page_numbers)
    if database.lock_byte_page_number:
        string += "\n" + padding + "\t" + "Lock Byte Page -> {}".format(database.lock_byte_page_number)
    return string


def stringify_page_information(database, padding=""):
    string = padding + "Page Breakdown:"
    for page_type, page_array in get_page_breakdown(database).items():
        page_type_string = "\n" + padding + "\t" + "{}: {} Page Numbers: {}"
        string += page_type_string.format(page_type, len(page_array), page_array)
    string += "\n" + padding + "Page Structure:\n{}".format(stringify_database_pages(database, padding + "\t"))
    return string
