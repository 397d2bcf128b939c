from collections.abc import MutableMapping
from logging import getLogger
from re import compile
from sys import maxunicode

"""

constants.py

This script holds constants defined for reference by the sqlite decoding library.  Additionally, a class has been
added to this script for constant enumerations.

This script holds the following object(s):
Enum(MutableMapping)

"""


LOGGER_NAME = "sqlite_decode"


class Enum(MutableMapping):

    def __init__(self, data):
        if isinstance(data, list):
            self._store = {value: value for value in data}
        elif isinstance(data, dict):
            self._store = data
        else:
            log_message = "Unable to initialize enumeration for: {} with type: {}.".format(data, type(data))
            getLogger(LOGGER_NAME).error(log_message)
            raise ValueError(log_message)

    def __getattr__(self, key):
        try:
            return self._store[key]
        except KeyError:
            raise AttributeError(key)

    def __getitem__(self, key):
        return self._store[key]

    def __setitem__(self, key, value):
        self._store[key] = value

    def __delitem__(self, key):
        del self._store[key]

    def __contains__(self, key):
        return key in self._store

    def __iter__(self):
        return iter(self._store)

    def __len__(self):
        return len(self._store)


UTF_8 = "utf-8"

SQLITE_3_7_0_VERSION_NUMBER = 3007000

TABLE_LEAF_PAGE_HEX_ID = 0x0d
TABLE_INTERIOR_PAGE_HEX_ID = 0x05
INDEX_LEAF_PAGE_HEX_ID = 0x0a
INDEX_INTERIOR_PAGE_HEX_ID = 0x02
B_TREE_PAGE_HEX_IDS = [TABLE_LEAF_PAGE_HEX_ID, TABLE_INTERIOR_PAGE_HEX_ID,
                       INDEX_LEAF_PAGE_HEX_ID, INDEX_INTERIOR_PAGE_HEX_ID]

PAGE_TYPE = Enum(["LOCK_BYTE", "FREELIST_TRUNK", "FREELIST_LEAF", "B_TREE_TABLE_INTERIOR", "B_TREE_TABLE_LEAF",
                  "B_TREE_INDEX_INTERIOR", "B_TREE_INDEX_LEAF", "OVERFLOW", "POINTER_MAP"])

LOCK_BYTE_PAGE_START_OFFSET = 1073741824

SQLITE_DATABASE_HEADER_LENGTH = 100
SQLITE_MASTER_SCHEMA_ROOT_PAGE = 1
MAGIC_HEADER_STRING = b"SQLite format 3\000"
MAXIMUM_PAGE_SIZE_INDICATOR = 1
MINIMUM_PAGE_SIZE_LIMIT = 512
MAXIMUM_PAGE_SIZE = 65536
MAXIMUM_CELL_CONTENT_OFFSET_INDICATOR = 0
MAXIMUM_CELL_CONTENT_OFFSET = 65536
MINIMUM_USABLE_PAGE_SIZE = 480
ROLLBACK_JOURNALING_MODE = 1
WAL_JOURNALING_MODE = 2
HUMAN_READABLE_JOURNALING_MODES = {ROLLBACK_JOURNALING_MODE: "JOURNAL",
                                   WAL_JOURNALING_MODE: "WAL"}
MAXIMUM_EMBEDDED_PAYLOAD_FRACTION = 64
MINIMUM_EMBEDDED_PAYLOAD_FRACTION = 32
LEAF_PAYLOAD_FRACTION = 32
VALID_SCHEMA_FORMATS = [1, 2, 3, 4]
UTF_8_DATABASE_TEXT_ENCODING = 1
UTF_16LE_DATABASE_TEXT_ENCODING = 2
UTF_16BE_DATABASE_TEXT_ENCODING = 3
DATABASE_TEXT_ENCODINGS = [UTF_8_DATABASE_TEXT_ENCODING,
                           UTF_16LE_DATABASE_TEXT_ENCODING,
                           UTF_16BE_DATABASE_TEXT_ENCODING]
HUMAN_READABLE_DATABASE_TEXT_ENCODINGS = {UTF_8_DATABASE_TEXT_ENCODING: "UTF-8",
                                          UTF_16BE_DATABASE_TEXT_ENCODING: "UTF-16be",
                                          UTF_16LE_DATABASE_TEXT_ENCODING: "UTF-16le"}
RESERVED_FOR_EXPANSION_REGEX = "^0{40}$"

FREELIST_NEXT_TRUNK_PAGE_LENGTH = 4
FREELIST_LEAF_PAGE_POINTERS_LENGTH = 4
FREELIST_LEAF_PAGE_NUMBER_LENGTH = 4
FREELIST_HEADER_LENGTH = FREELIST_NEXT_TRUNK_PAGE_LENGTH + FREELIST_LEAF_PAGE_POINTERS_LENGTH  # ptr+num size
LEAF_PAGE_HEADER_LENGTH = 8
INTERIOR_PAGE_HEADER_LENGTH = 12
RIGHT_MOST_POINTER_OFFSET = 8
RIGHT_MOST_POINTER_LENGTH = 4
CELL_POINTER_BYTE_LENGTH = 2
LEFT_CHILD_POINTER_BYTE_LENGTH = 4
FIRST_OVERFLOW_PAGE_NUMBER_LENGTH = 4
OVERFLOW_HEADER_LENGTH = 4  # This is the next overflow page number but we call it a header here
POINTER_MAP_ENTRY_LENGTH = 5

MAXIMUM_VARINT_LENGTH = 9

PAGE_HEADER_MODULE = "sqlite_decode.file.database.header"
CELL_MODULE = "sqlite_decode.file.database.page"

INTERIOR_PAGE_HEADER_CLASS = "InteriorPageHeader"
LEAF_PAGE_HEADER_CLASS = "LeafPageHeader"

INDEX_INTERIOR_CELL_CLASS = "IndexInteriorCell"
INDEX_LEAF_CELL_CLASS = "IndexLeafCell"
TABLE_INTERIOR_CELL_CLASS = "TableInteriorCell"
TABLE_LEAF_CELL_CLASS = "TableLeafCell"

"""

Serial types as stored in the record header.  Codes 0 through 11 map directly to a kind while codes of 12 and greater
are blobs (even) or text (odd) with the content size derived from the code itself.

"""

SERIAL_TYPE = Enum(["NULL", "INT8", "INT16", "INT24", "INT32", "INT48", "INT64", "FLOAT64",
                    "CONSTANT_0", "CONSTANT_1", "RESERVED", "BLOB", "TEXT"])

FIXED_SERIAL_TYPES = {0: (SERIAL_TYPE.NULL, 0),
                      1: (SERIAL_TYPE.INT8, 1),
                      2: (SERIAL_TYPE.INT16, 2),
                      3: (SERIAL_TYPE.INT24, 3),
                      4: (SERIAL_TYPE.INT32, 4),
                      5: (SERIAL_TYPE.INT48, 6),
                      6: (SERIAL_TYPE.INT64, 8),
                      7: (SERIAL_TYPE.FLOAT64, 8),
                      8: (SERIAL_TYPE.CONSTANT_0, 0),
                      9: (SERIAL_TYPE.CONSTANT_1, 0),
                      10: (SERIAL_TYPE.RESERVED, None),
                      11: (SERIAL_TYPE.RESERVED, None)}

MINIMUM_BLOB_SERIAL_TYPE = 12
MINIMUM_TEXT_SERIAL_TYPE = 13

"""

The types of output that are supported by this package.

"""
EXPORT_TYPES = Enum(["TEXT", "CSV", "XLSX"])

"""
Defines the list of common SQLite3 file extensions for initial identification of files to decode for the bulk
processing.
"""
SQLITE_FILE_EXTENSIONS = (".db", ".db3", ".sqlite", ".sqlite3")

"""
Below we instantiate and compile a regular expression to check xml illegal characters:
ILLEGAL_XML_CHARACTER_PATTERN.

"""

_illegal_xml_characters = [(0x00, 0x08), (0x0B, 0x0C), (0x0E, 0x1F), (0x7F, 0x84), (0x86, 0x9F),
                           (0xD800, 0xDFFF), (0xFDD0, 0xFDDF), (0xFFFE, 0xFFFF)]

if maxunicode >= 0x10000:
    _illegal_xml_characters.extend([(0x1FFFE, 0x1FFFF), (0x2FFFE, 0x2FFFF), (0x3FFFE, 0x3FFFF),
                                    (0x4FFFE, 0x4FFFF), (0x5FFFE, 0x5FFFF), (0x6FFFE, 0x6FFFF),
                                    (0x7FFFE, 0x7FFFF), (0x8FFFE, 0x8FFFF), (0x9FFFE, 0x9FFFF),
                                    (0xAFFFE, 0xAFFFF), (0xBFFFE, 0xBFFFF), (0xCFFFE, 0xCFFFF),
                                    (0xDFFFE, 0xDFFFF), (0xEFFFE, 0xEFFFF), (0xFFFFE, 0xFFFFF),
                                    (0x10FFFE, 0x10FFFF)])

_illegal_xml_ranges = ["%s-%s" % (chr(low), chr(high)) for (low, high) in _illegal_xml_characters]
ILLEGAL_XML_CHARACTER_PATTERN = compile(u'[%s]' % u''.join(_illegal_xml_ranges))
