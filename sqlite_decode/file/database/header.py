from binascii import hexlify
from logging import getLogger
from re import compile
from re import sub
from struct import unpack
from warnings import warn
from sqlite_decode.constants import INTERIOR_PAGE_HEADER_LENGTH
from sqlite_decode.constants import LEAF_PAGE_HEADER_LENGTH
from sqlite_decode.constants import LEAF_PAYLOAD_FRACTION
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import MAGIC_HEADER_STRING
from sqlite_decode.constants import MAXIMUM_EMBEDDED_PAYLOAD_FRACTION
from sqlite_decode.constants import MAXIMUM_PAGE_SIZE
from sqlite_decode.constants import MINIMUM_EMBEDDED_PAYLOAD_FRACTION
from sqlite_decode.constants import MINIMUM_PAGE_SIZE_LIMIT
from sqlite_decode.constants import MINIMUM_USABLE_PAGE_SIZE
from sqlite_decode.constants import RESERVED_FOR_EXPANSION_REGEX
from sqlite_decode.constants import RIGHT_MOST_POINTER_LENGTH
from sqlite_decode.constants import RIGHT_MOST_POINTER_OFFSET
from sqlite_decode.constants import ROLLBACK_JOURNALING_MODE
from sqlite_decode.constants import SQLITE_DATABASE_HEADER_LENGTH
from sqlite_decode.constants import VALID_SCHEMA_FORMATS
from sqlite_decode.constants import WAL_JOURNALING_MODE
from sqlite_decode.constants import HUMAN_READABLE_JOURNALING_MODES
from sqlite_decode.exception import BTreePageParsingError
from sqlite_decode.exception import HeaderParsingError
from sqlite_decode.file.database.types import CellOffset
from sqlite_decode.file.database.types import PageSize
from sqlite_decode.file.database.types import TextEncoding
from sqlite_decode.file.header import SQLiteHeader
from sqlite_decode.utilities import get_md5_hash

"""

header.py

This script holds the header objects used for parsing the header of the database file structure from the root page
and the headers of the b-tree pages.

This script holds the following object(s):
DatabaseHeader(SQLiteHeader)
BTreePageHeader(object)
LeafPageHeader(BTreePageHeader)
InteriorPageHeader(BTreePageHeader)

"""


class DatabaseHeader(SQLiteHeader):

    def __init__(self, database_header_byte_array):

        super(DatabaseHeader, self).__init__()

        logger = getLogger(LOGGER_NAME)

        if len(database_header_byte_array) != SQLITE_DATABASE_HEADER_LENGTH:
            log_message = "The database header byte array of size: {} is not the expected size of: {}."
            log_message = log_message.format(len(database_header_byte_array), SQLITE_DATABASE_HEADER_LENGTH)
            logger.error(log_message)
            raise ValueError(log_message)

        self.magic_header_string = bytes(database_header_byte_array[0:16])

        if self.magic_header_string != MAGIC_HEADER_STRING:
            log_message = "The magic header string is invalid: {}.".format(hexlify(self.magic_header_string))
            logger.error(log_message)
            raise HeaderParsingError(log_message)

        self.page_size = PageSize(unpack(b">H", database_header_byte_array[16:18])[0])

        if not self.page_size.is_valid():
            log_message = "The page size: {} is not a power of two between the minimum page size limit: {} and " \
                          "the maximum page size: {}."
            log_message = log_message.format(self.page_size.real_size, MINIMUM_PAGE_SIZE_LIMIT, MAXIMUM_PAGE_SIZE)
            logger.error(log_message)
            raise HeaderParsingError(log_message)

        self.file_format_write_version = database_header_byte_array[18]

        if self.file_format_write_version not in [ROLLBACK_JOURNALING_MODE, WAL_JOURNALING_MODE]:
            log_message = "The file format write version: {} is invalid.".format(self.file_format_write_version)
            logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        self.file_format_read_version = database_header_byte_array[19]

        if self.file_format_read_version not in [ROLLBACK_JOURNALING_MODE, WAL_JOURNALING_MODE]:
            log_message = "The file format read version: {} is invalid.".format(self.file_format_read_version)
            logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        self.reserved_bytes_per_page = database_header_byte_array[20]

        if self.usable_size < MINIMUM_USABLE_PAGE_SIZE:
            log_message = "Reserved bytes per page: {} leaves a usable size of: {} for the page size: {} which is " \
                          "less than the minimum usable size of: {}."
            log_message = log_message.format(self.reserved_bytes_per_page, self.usable_size,
                                             self.page_size.real_size, MINIMUM_USABLE_PAGE_SIZE)
            logger.error(log_message)
            raise HeaderParsingError(log_message)

        """

        The payload fractions are required to be 64, 32 and 32 by the file format.  They are only used as parameters
        to the overflow calculations so a different value is reported but does not stop the header from parsing.

        """

        self.maximum_embedded_payload_fraction = database_header_byte_array[21]

        if self.maximum_embedded_payload_fraction != MAXIMUM_EMBEDDED_PAYLOAD_FRACTION:
            log_message = "Maximum embedded payload fraction: {} is not the expected value of: {}."
            log_message = log_message.format(self.maximum_embedded_payload_fraction, MAXIMUM_EMBEDDED_PAYLOAD_FRACTION)
            logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        self.minimum_embedded_payload_fraction = database_header_byte_array[22]

        if self.minimum_embedded_payload_fraction != MINIMUM_EMBEDDED_PAYLOAD_FRACTION:
            log_message = "Minimum embedded payload fraction: {} is not the expected value of: {}."
            log_message = log_message.format(self.minimum_embedded_payload_fraction, MINIMUM_EMBEDDED_PAYLOAD_FRACTION)
            logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        self.leaf_payload_fraction = database_header_byte_array[23]

        if self.leaf_payload_fraction != LEAF_PAYLOAD_FRACTION:
            log_message = "Leaf payload fraction: {} is not the expected value of: {}."
            log_message = log_message.format(self.leaf_payload_fraction, LEAF_PAYLOAD_FRACTION)
            logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        self.file_change_counter = unpack(b">I", database_header_byte_array[24:28])[0]
        self.database_size_in_pages = unpack(b">I", database_header_byte_array[28:32])[0]
        self.first_freelist_trunk_page_number = unpack(b">I", database_header_byte_array[32:36])[0]
        self.number_of_freelist_pages = unpack(b">I", database_header_byte_array[36:40])[0]
        self.schema_cookie = unpack(b">I", database_header_byte_array[40:44])[0]
        self.schema_format_number = unpack(b">I", database_header_byte_array[44:48])[0]
        self.default_page_cache_size = unpack(b">I", database_header_byte_array[48:52])[0]
        self.largest_root_b_tree_page_number = unpack(b">I", database_header_byte_array[52:56])[0]

        # Raises an UnknownTextEncodingError carrying the value if not 1, 2 or 3
        self.database_text_encoding = TextEncoding(unpack(b">I", database_header_byte_array[56:60])[0])

        if self.schema_format_number not in VALID_SCHEMA_FORMATS:
            log_message = "Schema format number: {} not a valid schema format.".format(self.schema_format_number)
            logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        self.user_version = unpack(b">I", database_header_byte_array[60:64])[0]
        self.incremental_vacuum_mode = unpack(b">I", database_header_byte_array[64:68])[0]

        """

        If the incremental vacuum mode is set than the database header largest root b-tree page number must be set.
        (The inverse of this is not true.)

        """

        if not self.largest_root_b_tree_page_number and self.incremental_vacuum_mode:
            log_message = "The database header largest root b-tree page number was not set when the incremental " \
                          "vacuum mode was: {}."
            log_message = log_message.format(self.incremental_vacuum_mode)
            logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        self.application_id = unpack(b">I", database_header_byte_array[68:72])[0]
        self.reserved_for_expansion = bytes(database_header_byte_array[72:92])

        pattern = compile(RESERVED_FOR_EXPANSION_REGEX)
        reserved_for_expansion_hex = hexlify(self.reserved_for_expansion).decode()
        if not pattern.match(reserved_for_expansion_hex):
            log_message = "Header space reserved for expansion is not zero: {}.".format(reserved_for_expansion_hex)
            logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        self.version_valid_for_number = unpack(b">I", database_header_byte_array[92:96])[0]
        self.sqlite_version_number = unpack(b">I", database_header_byte_array[96:100])[0]

        self.md5_hex_digest = get_md5_hash(database_header_byte_array)

    @property
    def usable_size(self):
        return self.page_size.real_size - self.reserved_bytes_per_page

    def stringify(self, padding=""):
        string = padding + "Magic Header String: {}\n" \
                 + padding + "Page Size: {}\n" \
                 + padding + "File Format Write Version: {}\n" \
                 + padding + "File Format Read Version: {}\n" \
                 + padding + "Reserved Bytes per Page: {}\n" \
                 + padding + "Usable Size: {}\n" \
                 + padding + "Maximum Embedded Payload Fraction: {}\n" \
                 + padding + "Minimum Embedded Payload Fraction: {}\n" \
                 + padding + "Leaf Payload Fraction: {}\n" \
                 + padding + "File Change Counter: {}\n" \
                 + padding + "Database Size in Pages: {}\n" \
                 + padding + "First Freelist Trunk Page Number: {}\n" \
                 + padding + "Number of Freelist Pages: {}\n" \
                 + padding + "Schema Cookie: {}\n" \
                 + padding + "Schema Format Number: {}\n" \
                 + padding + "Default Page Cache Size: {}\n" \
                 + padding + "Largest Root B-Tree Page Number: {}\n" \
                 + padding + "Database Text Encoding: {}\n" \
                 + padding + "User Version: {}\n" \
                 + padding + "Incremental Vacuum Mode: {}\n" \
                 + padding + "Application ID: {}\n" \
                 + padding + "Reserved for Expansion (Hex): {}\n" \
                 + padding + "Version Valid for Number: {}\n" \
                 + padding + "SQLite Version Number: {}\n" \
                 + padding + "MD5 Hex Digest: {}"
        return string.format(self.magic_header_string.decode(errors="replace").rstrip("\x00"),
                             self.page_size.real_size,
                             HUMAN_READABLE_JOURNALING_MODES.get(self.file_format_write_version,
                                                                 self.file_format_write_version),
                             HUMAN_READABLE_JOURNALING_MODES.get(self.file_format_read_version,
                                                                 self.file_format_read_version),
                             self.reserved_bytes_per_page,
                             self.usable_size,
                             self.maximum_embedded_payload_fraction,
                             self.minimum_embedded_payload_fraction,
                             self.leaf_payload_fraction,
                             self.file_change_counter,
                             self.database_size_in_pages,
                             self.first_freelist_trunk_page_number,
                             self.number_of_freelist_pages,
                             self.schema_cookie,
                             self.schema_format_number,
                             self.default_page_cache_size,
                             self.largest_root_b_tree_page_number,
                             self.database_text_encoding,
                             self.user_version,
                             self.incremental_vacuum_mode,
                             self.application_id,
                             hexlify(self.reserved_for_expansion).decode(),
                             self.version_valid_for_number,
                             self.sqlite_version_number,
                             self.md5_hex_digest)


class BTreePageHeader(object):

    def __init__(self, page, offset, header_length):

        self.offset = offset
        self.header_length = header_length

        if len(page) < self.offset + self.header_length:
            log_message = "The page of size: {} is too small to hold a b-tree page header of length: {} at " \
                          "offset: {}."
            log_message = log_message.format(len(page), self.header_length, self.offset)
            getLogger(LOGGER_NAME).error(log_message)
            raise BTreePageParsingError(log_message)

        """

        The root_page_only_md5_hex_digest is only set when the SQLite database header precedes this header (ie. on
        the first page of the database).

        """

        self.contains_sqlite_database_header = self.offset == SQLITE_DATABASE_HEADER_LENGTH
        self.root_page_only_md5_hex_digest = None
        if self.contains_sqlite_database_header:
            self.root_page_only_md5_hex_digest = get_md5_hash(page[SQLITE_DATABASE_HEADER_LENGTH:])

        self.page_type = page[self.offset]

        # A first freeblock offset of zero means there are no freeblocks on the page
        first_freeblock_offset = unpack(b">H", page[self.offset + 1:self.offset + 3])[0]
        self.first_freeblock_offset = first_freeblock_offset if first_freeblock_offset else None

        self.number_of_cells_on_page = unpack(b">H", page[self.offset + 3:self.offset + 5])[0]
        self.cell_content_offset = CellOffset(unpack(b">H", page[self.offset + 5:self.offset + 7])[0])
        self.number_of_fragmented_free_bytes = page[self.offset + 7]

        self.md5_hex_digest = get_md5_hash(page[self.offset:self.offset + self.header_length])

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self.__str__())

    def __str__(self):
        return sub("\t", "", sub("\n", " ", self.stringify()))

    def stringify(self, padding=""):
        string = padding + "Contains SQLite Database Header: {}\n" \
                 + padding + "Root Page Only MD5 Hex Digest: {}\n" \
                 + padding + "Page Type (Hex): {:02x}\n" \
                 + padding + "Offset: {}\n" \
                 + padding + "Length: {}\n" \
                 + padding + "First Freeblock Offset: {}\n" \
                 + padding + "Number of Cells on Page: {}\n" \
                 + padding + "Cell Content Offset: {}\n" \
                 + padding + "Number of Fragmented Free Bytes: {}\n" \
                 + padding + "MD5 Hex Digest: {}"
        return string.format(self.contains_sqlite_database_header,
                             self.root_page_only_md5_hex_digest,
                             self.page_type,
                             self.offset,
                             self.header_length,
                             self.first_freeblock_offset,
                             self.number_of_cells_on_page,
                             self.cell_content_offset.real_offset,
                             self.number_of_fragmented_free_bytes,
                             self.md5_hex_digest)


class LeafPageHeader(BTreePageHeader):

    def __init__(self, page, offset=0):
        super(LeafPageHeader, self).__init__(page, offset, LEAF_PAGE_HEADER_LENGTH)


class InteriorPageHeader(BTreePageHeader):

    def __init__(self, page, offset=0):
        super(InteriorPageHeader, self).__init__(page, offset, INTERIOR_PAGE_HEADER_LENGTH)

        right_most_pointer_start_offset = self.offset + RIGHT_MOST_POINTER_OFFSET
        right_most_pointer_end_offset = right_most_pointer_start_offset + RIGHT_MOST_POINTER_LENGTH
        self.right_most_pointer = unpack(b">I", page[right_most_pointer_start_offset:right_most_pointer_end_offset])[0]

    def stringify(self, padding=""):
        string = "\n" \
                 + padding + "Right Most Pointer: {}"
        string = string.format(self.right_most_pointer)
        return super(InteriorPageHeader, self).stringify(padding) + string
