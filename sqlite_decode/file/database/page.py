from abc import ABCMeta
from logging import getLogger
from re import sub
from struct import unpack
from sqlite_decode.constants import CELL_MODULE
from sqlite_decode.constants import CELL_POINTER_BYTE_LENGTH
from sqlite_decode.constants import FIRST_OVERFLOW_PAGE_NUMBER_LENGTH
from sqlite_decode.constants import INDEX_INTERIOR_CELL_CLASS
from sqlite_decode.constants import INDEX_INTERIOR_PAGE_HEX_ID
from sqlite_decode.constants import INDEX_LEAF_CELL_CLASS
from sqlite_decode.constants import INDEX_LEAF_PAGE_HEX_ID
from sqlite_decode.constants import INTERIOR_PAGE_HEADER_CLASS
from sqlite_decode.constants import LEAF_PAGE_HEADER_CLASS
from sqlite_decode.constants import LEFT_CHILD_POINTER_BYTE_LENGTH
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import PAGE_HEADER_MODULE
from sqlite_decode.constants import PAGE_TYPE
from sqlite_decode.constants import SQLITE_DATABASE_HEADER_LENGTH
from sqlite_decode.constants import SQLITE_MASTER_SCHEMA_ROOT_PAGE
from sqlite_decode.constants import TABLE_INTERIOR_CELL_CLASS
from sqlite_decode.constants import TABLE_INTERIOR_PAGE_HEX_ID
from sqlite_decode.constants import TABLE_LEAF_CELL_CLASS
from sqlite_decode.constants import TABLE_LEAF_PAGE_HEX_ID
from sqlite_decode.exception import BTreePageParsingError
from sqlite_decode.exception import CellParsingError
from sqlite_decode.exception import CellPointerArrayError
from sqlite_decode.exception import OverflowParsingError
from sqlite_decode.exception import UnknownPageTypeError
from sqlite_decode.file.database.overflow import calculate_local_payload_size
from sqlite_decode.file.database.overflow import resolve_overflow
from sqlite_decode.file.database.payload import IndexCellPayload
from sqlite_decode.file.database.payload import TableCellPayload
from sqlite_decode.utilities import decode_varint
from sqlite_decode.utilities import get_class_instance
from sqlite_decode.utilities import get_md5_hash

"""

page.py

This script holds the objects used for parsing the b-tree pages of a database along with the cells stored on them.

A b-tree page is one of four types determined by the page type flag at the start of the page header:
0x02 index interior, 0x05 table interior, 0x0a index leaf and 0x0d table leaf.  The first page of the database holds
the 100 byte database header before its page header.  Anything else is raised as an UnknownPageTypeError.

The cells are kept in the order of the cell pointer array on the page.  This is not the key order of the b-tree.

This script holds the following object(s):
BTreePage(object)
TableInteriorPage(BTreePage)
TableLeafPage(BTreePage)
IndexInteriorPage(BTreePage)
IndexLeafPage(BTreePage)
BTreeCell(object)
TableInteriorCell(BTreeCell)
TableLeafCell(BTreeCell)
IndexInteriorCell(BTreeCell)
IndexLeafCell(BTreeCell)

This script holds the following function(s):
decode_page(page, page_number, database_header, get_page_data=None, maximum_number_of_overflow_pages=None)
get_cell_overflow_page_numbers(b_tree_page)

"""


def decode_page(page, page_number, database_header, get_page_data=None, maximum_number_of_overflow_pages=None):

    """

    Decodes one b-tree page into the page object matching its page type flag.

    :param page: bytes-like  The bytes of the page (exactly the page size).
    :param page_number: int  The page number of the page (starting at 1).
    :param database_header: DatabaseHeader  The header of the database the page belongs to.
    :param get_page_data: function  Takes a page number and returns the bytes of that page.  Only needed when cells on
                                    the page overflow.
    :param maximum_number_of_overflow_pages: int  The longest overflow chain accepted for any cell on the page.

    :return: TableInteriorPage, TableLeafPage, IndexInteriorPage or IndexLeafPage

    :raise: BTreePageParsingError  If the page is not the page size.
    :raise: UnknownPageTypeError  If the page type flag is not one of the four b-tree page types.

    """

    logger = getLogger(LOGGER_NAME)

    page_size = database_header.page_size.real_size

    if len(page) != page_size:
        log_message = "The page: {} has a size of: {} instead of the page size: {}."
        log_message = log_message.format(page_number, len(page), page_size)
        logger.error(log_message)
        raise BTreePageParsingError(log_message)

    header_offset = SQLITE_DATABASE_HEADER_LENGTH if page_number == SQLITE_MASTER_SCHEMA_ROOT_PAGE else 0
    page_hex_type = page[header_offset]

    if page_hex_type == TABLE_INTERIOR_PAGE_HEX_ID:
        return TableInteriorPage(page, page_number, database_header, get_page_data,
                                 maximum_number_of_overflow_pages)
    elif page_hex_type == TABLE_LEAF_PAGE_HEX_ID:
        return TableLeafPage(page, page_number, database_header, get_page_data,
                             maximum_number_of_overflow_pages)
    elif page_hex_type == INDEX_INTERIOR_PAGE_HEX_ID:
        return IndexInteriorPage(page, page_number, database_header, get_page_data,
                                 maximum_number_of_overflow_pages)
    elif page_hex_type == INDEX_LEAF_PAGE_HEX_ID:
        return IndexLeafPage(page, page_number, database_header, get_page_data,
                             maximum_number_of_overflow_pages)
    else:
        log_message = "Page hex type: {:02x} is not a valid b-tree page type for page: {}."
        log_message = log_message.format(page_hex_type, page_number)
        logger.error(log_message)
        raise UnknownPageTypeError(page_number, page_hex_type, log_message)


class BTreePage(object, metaclass=ABCMeta):

    def __init__(self, page, number, database_header, page_type, hex_type, header_class_name, cell_class_name,
                 get_page_data=None, maximum_number_of_overflow_pages=None):

        logger = getLogger(LOGGER_NAME)

        page = memoryview(page)

        self.number = number
        self.page_type = page_type
        self.hex_type = hex_type
        self.size = database_header.page_size.real_size
        self.usable_size = database_header.usable_size
        self.offset = (self.number - 1) * self.size

        header_offset = SQLITE_DATABASE_HEADER_LENGTH if self.number == SQLITE_MASTER_SCHEMA_ROOT_PAGE else 0

        header_class = get_class_instance(header_class_name)
        cell_class = get_class_instance(cell_class_name)

        self.header = header_class(page, header_offset)

        if self.header.page_type != self.hex_type:
            log_message = "The page hex type: {:02x} does not match the expected hex type: {:02x} for {} page: {}."
            log_message = log_message.format(self.header.page_type, self.hex_type, self.page_type, self.number)
            logger.error(log_message)
            raise UnknownPageTypeError(self.number, self.header.page_type, log_message)

        cell_pointer_array_offset = header_offset + self.header.header_length
        cell_pointer_array_length = self.header.number_of_cells_on_page * CELL_POINTER_BYTE_LENGTH
        cell_pointer_array_end_offset = cell_pointer_array_offset + cell_pointer_array_length

        if cell_pointer_array_end_offset > self.usable_size:
            log_message = "The cell pointer array for: {} cells ending at offset: {} runs past the usable size: {} " \
                          "of b-tree page: {}."
            log_message = log_message.format(self.header.number_of_cells_on_page, cell_pointer_array_end_offset,
                                             self.usable_size, self.number)
            logger.error(log_message)
            raise CellPointerArrayError(log_message)

        if self.header.cell_content_offset.real_offset > self.size:
            log_message = "The cell content offset: {} is beyond the page size: {} of b-tree page: {}."
            log_message = log_message.format(self.header.cell_content_offset.real_offset, self.size, self.number)
            logger.error(log_message)
            raise BTreePageParsingError(log_message)

        self.cell_pointers = []
        for cell_index in range(self.header.number_of_cells_on_page):
            cell_pointer_start_offset = cell_pointer_array_offset + cell_index * CELL_POINTER_BYTE_LENGTH
            cell_pointer_end_offset = cell_pointer_start_offset + CELL_POINTER_BYTE_LENGTH
            cell_pointer = unpack(b">H", page[cell_pointer_start_offset:cell_pointer_end_offset])[0]

            if cell_pointer < cell_pointer_array_end_offset or cell_pointer >= self.usable_size:
                log_message = "The cell pointer: {} for cell index: {} is outside of the cell content area between " \
                              "offset: {} and the usable size: {} of b-tree page: {}."
                log_message = log_message.format(cell_pointer, cell_index, cell_pointer_array_end_offset,
                                                 self.usable_size, self.number)
                logger.error(log_message)
                raise CellPointerArrayError(log_message)

            self.cell_pointers.append(cell_pointer)

        self.cells = []
        for cell_index, cell_pointer in enumerate(self.cell_pointers):
            self.cells.append(cell_class(page, self.number, cell_index, cell_pointer, database_header, get_page_data,
                                         maximum_number_of_overflow_pages))

        self.md5_hex_digest = get_md5_hash(page)

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self.__str__())

    def __str__(self):
        return sub("\t", "", sub("\n", " ", self.stringify()))

    def stringify(self, padding=""):
        string = padding + "Number: {}\n" \
                 + padding + "Page Type: {}\n" \
                 + padding + "Hex Type (Hex): {:02x}\n" \
                 + padding + "Offset: {}\n" \
                 + padding + "Size: {}\n" \
                 + padding + "Usable Size: {}\n" \
                 + padding + "MD5 Hex Digest: {}\n" \
                 + padding + "Header:\n{}\n" \
                 + padding + "Cell Pointers: {}\n" \
                 + padding + "Cells Length: {}"
        string = string.format(self.number,
                               self.page_type,
                               self.hex_type,
                               self.offset,
                               self.size,
                               self.usable_size,
                               self.md5_hex_digest,
                               self.header.stringify(padding + "\t"),
                               self.cell_pointers,
                               len(self.cells))
        for cell in self.cells:
            string += "\n" + padding + "Cell:\n{}".format(cell.stringify(padding + "\t"))
        return string


class TableInteriorPage(BTreePage):

    def __init__(self, page, number, database_header, get_page_data=None, maximum_number_of_overflow_pages=None):
        header_class_name = "{}.{}".format(PAGE_HEADER_MODULE, INTERIOR_PAGE_HEADER_CLASS)
        cell_class_name = "{}.{}".format(CELL_MODULE, TABLE_INTERIOR_CELL_CLASS)
        super(TableInteriorPage, self).__init__(page, number, database_header, PAGE_TYPE.B_TREE_TABLE_INTERIOR,
                                                TABLE_INTERIOR_PAGE_HEX_ID, header_class_name, cell_class_name,
                                                get_page_data, maximum_number_of_overflow_pages)

        self.right_most_pointer = self.header.right_most_pointer

        if not self.right_most_pointer:
            log_message = "The right most pointer is not set for b-tree table interior page: {}."
            log_message = log_message.format(self.number)
            getLogger(LOGGER_NAME).error(log_message)
            raise BTreePageParsingError(log_message)


class TableLeafPage(BTreePage):

    def __init__(self, page, number, database_header, get_page_data=None, maximum_number_of_overflow_pages=None):
        header_class_name = "{}.{}".format(PAGE_HEADER_MODULE, LEAF_PAGE_HEADER_CLASS)
        cell_class_name = "{}.{}".format(CELL_MODULE, TABLE_LEAF_CELL_CLASS)
        super(TableLeafPage, self).__init__(page, number, database_header, PAGE_TYPE.B_TREE_TABLE_LEAF,
                                            TABLE_LEAF_PAGE_HEX_ID, header_class_name, cell_class_name,
                                            get_page_data, maximum_number_of_overflow_pages)


class IndexInteriorPage(BTreePage):

    def __init__(self, page, number, database_header, get_page_data=None, maximum_number_of_overflow_pages=None):
        header_class_name = "{}.{}".format(PAGE_HEADER_MODULE, INTERIOR_PAGE_HEADER_CLASS)
        cell_class_name = "{}.{}".format(CELL_MODULE, INDEX_INTERIOR_CELL_CLASS)
        super(IndexInteriorPage, self).__init__(page, number, database_header, PAGE_TYPE.B_TREE_INDEX_INTERIOR,
                                                INDEX_INTERIOR_PAGE_HEX_ID, header_class_name, cell_class_name,
                                                get_page_data, maximum_number_of_overflow_pages)

        self.right_most_pointer = self.header.right_most_pointer

        if not self.right_most_pointer:
            log_message = "The right most pointer is not set for b-tree index interior page: {}."
            log_message = log_message.format(self.number)
            getLogger(LOGGER_NAME).error(log_message)
            raise BTreePageParsingError(log_message)


class IndexLeafPage(BTreePage):

    def __init__(self, page, number, database_header, get_page_data=None, maximum_number_of_overflow_pages=None):
        header_class_name = "{}.{}".format(PAGE_HEADER_MODULE, LEAF_PAGE_HEADER_CLASS)
        cell_class_name = "{}.{}".format(CELL_MODULE, INDEX_LEAF_CELL_CLASS)
        super(IndexLeafPage, self).__init__(page, number, database_header, PAGE_TYPE.B_TREE_INDEX_LEAF,
                                            INDEX_LEAF_PAGE_HEX_ID, header_class_name, cell_class_name,
                                            get_page_data, maximum_number_of_overflow_pages)


class BTreeCell(object, metaclass=ABCMeta):

    def __init__(self, page_number, index, offset, usable_size):

        self.page_number = page_number
        self.index = index
        self.start_offset = offset
        self.end_offset = None
        self.byte_size = None
        self.md5_hex_digest = None

        self._usable_size = usable_size

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self.__str__())

    def __str__(self):
        return sub("\t", "", sub("\n", " ", self.stringify()))

    def stringify(self, padding=""):
        string = padding + "Page Number: {}\n" \
                 + padding + "Index: {}\n" \
                 + padding + "Start Offset: {}\n" \
                 + padding + "End Offset: {}\n" \
                 + padding + "Byte Size: {}\n" \
                 + padding + "MD5 Hex Digest: {}"
        return string.format(self.page_number,
                             self.index,
                             self.start_offset,
                             self.end_offset,
                             self.byte_size,
                             self.md5_hex_digest)

    def _check_bounds(self, end_offset, description):
        if end_offset > self._usable_size:
            log_message = "The {} ending at offset: {} runs past the usable size: {} for b-tree cell index: {} at " \
                          "offset: {} for page: {}."
            log_message = log_message.format(description, end_offset, self._usable_size, self.index,
                                             self.start_offset, self.page_number)
            getLogger(LOGGER_NAME).error(log_message)
            raise CellParsingError(log_message)

    def _parse_payload(self, page, payload_offset, page_type, database_header, get_page_data,
                       maximum_number_of_overflow_pages=None):

        """

        Sets the overflow fields of the cell and returns the complete payload.  When the payload fits on the page the
        returned payload is a memoryview slice of the page.  Otherwise the local bytes and the overflow content are
        joined into a new bytes object.

        """

        if self.payload_byte_size < 0:
            log_message = "The payload byte size: {} is negative for b-tree cell index: {} at offset: {} for page: {}."
            log_message = log_message.format(self.payload_byte_size, self.index, self.start_offset, self.page_number)
            getLogger(LOGGER_NAME).error(log_message)
            raise CellParsingError(log_message)

        self.bytes_on_first_page = calculate_local_payload_size(self.payload_byte_size, self._usable_size, page_type,
                                                                database_header.maximum_embedded_payload_fraction,
                                                                database_header.minimum_embedded_payload_fraction,
                                                                database_header.leaf_payload_fraction)

        self.has_overflow = self.bytes_on_first_page < self.payload_byte_size
        self.overflow_byte_size = self.payload_byte_size - self.bytes_on_first_page
        self.overflow_page_number_offset = None
        self.overflow_page_number = None
        self.overflow_pages = []

        local_payload_end_offset = payload_offset + self.bytes_on_first_page
        self._check_bounds(local_payload_end_offset, "local payload")
        local_payload = page[payload_offset:local_payload_end_offset]

        self.end_offset = local_payload_end_offset

        if not self.has_overflow:
            return local_payload

        self.overflow_page_number_offset = local_payload_end_offset
        overflow_page_number_end_offset = self.overflow_page_number_offset + FIRST_OVERFLOW_PAGE_NUMBER_LENGTH
        self._check_bounds(overflow_page_number_end_offset, "first overflow page number")
        self.overflow_page_number = unpack(b">I", page[self.overflow_page_number_offset:
                                                       overflow_page_number_end_offset])[0]

        self.end_offset = overflow_page_number_end_offset

        if get_page_data is None:
            log_message = "The payload of size: {} overflows to page: {} for b-tree cell index: {} at offset: {} for " \
                          "page: {} but no page fetch function was given to resolve it."
            log_message = log_message.format(self.payload_byte_size, self.overflow_page_number, self.index,
                                             self.start_offset, self.page_number)
            getLogger(LOGGER_NAME).error(log_message)
            raise OverflowParsingError(log_message)

        self.overflow_pages = resolve_overflow(get_page_data, self.overflow_page_number, self.overflow_byte_size,
                                               self._usable_size, maximum_number_of_overflow_pages, self.page_number)

        payload = bytearray(local_payload)
        for overflow_page in self.overflow_pages:
            payload += overflow_page.content

        if len(payload) != self.payload_byte_size:
            log_message = "The reassembled payload size: {} does not equal the payload byte size: {} for b-tree cell " \
                          "index: {} at offset: {} for page: {}."
            log_message = log_message.format(len(payload), self.payload_byte_size, self.index, self.start_offset,
                                             self.page_number)
            getLogger(LOGGER_NAME).error(log_message)
            raise CellParsingError(log_message)

        return bytes(payload)

    @property
    def number_of_overflow_pages(self):
        return len(self.overflow_pages)

    @property
    def overflow_page_numbers(self):
        return [overflow_page.number for overflow_page in self.overflow_pages]

    def _stringify_payload(self, padding=""):
        string = "\n" \
                 + padding + "Payload Byte Size: {}\n" \
                 + padding + "Payload Byte Size VARINT Length: {}\n" \
                 + padding + "Bytes on First Page: {}\n" \
                 + padding + "Has Overflow: {}\n" \
                 + padding + "Overflow Byte Size: {}\n" \
                 + padding + "Overflow Page Number: {}\n" \
                 + padding + "Overflow Page Numbers: {}\n" \
                 + padding + "Payload:\n{}"
        return string.format(self.payload_byte_size,
                             self.payload_byte_size_varint_length,
                             self.bytes_on_first_page,
                             self.has_overflow,
                             self.overflow_byte_size,
                             self.overflow_page_number,
                             self.overflow_page_numbers,
                             self.payload.stringify(padding + "\t"))


class TableInteriorCell(BTreeCell):

    """

    Note: B-Tree table interior cells never contain overflow.  Therefore they have no payload (ie. record).  This is
          the only type of b-tree page that does not have a payload.

    """

    def __init__(self, page, page_number, index, offset, database_header, get_page_data=None,
                 maximum_number_of_overflow_pages=None):

        super(TableInteriorCell, self).__init__(page_number, index, offset, database_header.usable_size)

        left_child_pointer_end_offset = self.start_offset + LEFT_CHILD_POINTER_BYTE_LENGTH
        self._check_bounds(left_child_pointer_end_offset, "left child pointer")
        self.left_child_pointer = unpack(b">I", page[self.start_offset:left_child_pointer_end_offset])[0]
        self.row_id, self.row_id_varint_length = decode_varint(page[:self._usable_size],
                                                               left_child_pointer_end_offset)

        self.byte_size = LEFT_CHILD_POINTER_BYTE_LENGTH + self.row_id_varint_length
        self.end_offset = self.start_offset + self.byte_size

        self.md5_hex_digest = get_md5_hash(page[self.start_offset:self.end_offset])

        if not self.left_child_pointer:
            log_message = "The left child pointer is not set for b-tree table interior cell index: {} " \
                          "at offset: {} for page: {}."
            log_message = log_message.format(self.index, self.start_offset, self.page_number)
            getLogger(LOGGER_NAME).error(log_message)
            raise CellParsingError(log_message)

    def stringify(self, padding=""):
        string = "\n" \
                 + padding + "Left Child Pointer: {}\n" \
                 + padding + "Row ID: {}\n" \
                 + padding + "Row ID VARINT Length: {}"
        string = string.format(self.left_child_pointer,
                               self.row_id,
                               self.row_id_varint_length)
        return super(TableInteriorCell, self).stringify(padding) + string


class TableLeafCell(BTreeCell):

    def __init__(self, page, page_number, index, offset, database_header, get_page_data=None,
                 maximum_number_of_overflow_pages=None):

        super(TableLeafCell, self).__init__(page_number, index, offset, database_header.usable_size)

        usable_page = page[:self._usable_size]

        self.payload_byte_size, self.payload_byte_size_varint_length = decode_varint(usable_page, self.start_offset)
        row_id_offset = self.start_offset + self.payload_byte_size_varint_length
        self.row_id, self.row_id_varint_length = decode_varint(usable_page, row_id_offset)
        self.payload_offset = row_id_offset + self.row_id_varint_length

        payload = self._parse_payload(page, self.payload_offset, PAGE_TYPE.B_TREE_TABLE_LEAF,
                                      database_header, get_page_data, maximum_number_of_overflow_pages)

        self.byte_size = self.end_offset - self.start_offset
        self.md5_hex_digest = get_md5_hash(page[self.start_offset:self.end_offset])

        self.payload = TableCellPayload(payload, database_header.database_text_encoding)

    def stringify(self, padding=""):
        string = "\n" \
                 + padding + "Row ID: {}\n" \
                 + padding + "Row ID VARINT Length: {}"
        string = string.format(self.row_id,
                               self.row_id_varint_length)
        string += self._stringify_payload(padding)
        return super(TableLeafCell, self).stringify(padding) + string


class IndexInteriorCell(BTreeCell):

    def __init__(self, page, page_number, index, offset, database_header, get_page_data=None,
                 maximum_number_of_overflow_pages=None):

        super(IndexInteriorCell, self).__init__(page_number, index, offset, database_header.usable_size)

        left_child_pointer_end_offset = self.start_offset + LEFT_CHILD_POINTER_BYTE_LENGTH
        self._check_bounds(left_child_pointer_end_offset, "left child pointer")
        self.left_child_pointer = unpack(b">I", page[self.start_offset:left_child_pointer_end_offset])[0]

        if not self.left_child_pointer:
            log_message = "The left child pointer is not set for b-tree index interior cell index: {} " \
                          "at offset: {} for page: {}."
            log_message = log_message.format(self.index, self.start_offset, self.page_number)
            getLogger(LOGGER_NAME).error(log_message)
            raise CellParsingError(log_message)

        self.payload_byte_size, self.payload_byte_size_varint_length = \
            decode_varint(page[:self._usable_size], left_child_pointer_end_offset)
        self.payload_offset = left_child_pointer_end_offset + self.payload_byte_size_varint_length

        payload = self._parse_payload(page, self.payload_offset, PAGE_TYPE.B_TREE_INDEX_INTERIOR,
                                      database_header, get_page_data, maximum_number_of_overflow_pages)

        self.byte_size = self.end_offset - self.start_offset
        self.md5_hex_digest = get_md5_hash(page[self.start_offset:self.end_offset])

        self.payload = IndexCellPayload(payload, database_header.database_text_encoding)

    def stringify(self, padding=""):
        string = "\n" \
                 + padding + "Left Child Pointer: {}"
        string = string.format(self.left_child_pointer)
        string += self._stringify_payload(padding)
        return super(IndexInteriorCell, self).stringify(padding) + string


class IndexLeafCell(BTreeCell):

    def __init__(self, page, page_number, index, offset, database_header, get_page_data=None,
                 maximum_number_of_overflow_pages=None):

        super(IndexLeafCell, self).__init__(page_number, index, offset, database_header.usable_size)

        self.payload_byte_size, self.payload_byte_size_varint_length = decode_varint(page[:self._usable_size],
                                                                                     self.start_offset)
        self.payload_offset = self.start_offset + self.payload_byte_size_varint_length

        payload = self._parse_payload(page, self.payload_offset, PAGE_TYPE.B_TREE_INDEX_LEAF,
                                      database_header, get_page_data, maximum_number_of_overflow_pages)

        self.byte_size = self.end_offset - self.start_offset
        self.md5_hex_digest = get_md5_hash(page[self.start_offset:self.end_offset])

        self.payload = IndexCellPayload(payload, database_header.database_text_encoding)

    def stringify(self, padding=""):
        return super(IndexLeafCell, self).stringify(padding) + self._stringify_payload(padding)


def get_cell_overflow_page_numbers(b_tree_page):

    """

    Returns the page numbers of all overflow pages claimed by the cells of the b-tree page in chain order per cell.

    """

    if b_tree_page.page_type == PAGE_TYPE.B_TREE_TABLE_INTERIOR:
        return []
    elif b_tree_page.page_type in (PAGE_TYPE.B_TREE_TABLE_LEAF, PAGE_TYPE.B_TREE_INDEX_INTERIOR,
                                   PAGE_TYPE.B_TREE_INDEX_LEAF):
        overflow_page_numbers = []
        for cell in b_tree_page.cells:
            overflow_page_numbers.extend(cell.overflow_page_numbers)
        return overflow_page_numbers
    else:
        log_message = "The b-tree page is not a b-tree page but has a page type of: {}."
        log_message = log_message.format(b_tree_page.page_type)
        getLogger(LOGGER_NAME).error(log_message)
        raise ValueError(log_message)
