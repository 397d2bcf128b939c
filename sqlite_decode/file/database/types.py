from binascii import hexlify
from logging import getLogger
from sqlite_decode.constants import DATABASE_TEXT_ENCODINGS
from sqlite_decode.constants import FIXED_SERIAL_TYPES
from sqlite_decode.constants import HUMAN_READABLE_DATABASE_TEXT_ENCODINGS
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import MAXIMUM_CELL_CONTENT_OFFSET
from sqlite_decode.constants import MAXIMUM_CELL_CONTENT_OFFSET_INDICATOR
from sqlite_decode.constants import MAXIMUM_PAGE_SIZE
from sqlite_decode.constants import MAXIMUM_PAGE_SIZE_INDICATOR
from sqlite_decode.constants import MINIMUM_BLOB_SERIAL_TYPE
from sqlite_decode.constants import MINIMUM_PAGE_SIZE_LIMIT
from sqlite_decode.constants import MINIMUM_TEXT_SERIAL_TYPE
from sqlite_decode.constants import SERIAL_TYPE
from sqlite_decode.constants import UTF_8
from sqlite_decode.constants import UTF_8_DATABASE_TEXT_ENCODING
from sqlite_decode.exception import ReservedSerialTypeError
from sqlite_decode.exception import UnknownTextEncodingError
from sqlite_decode.exception import UnsupportedTextEncodingError

"""

types.py

This script holds the small value types that the database header, b-tree pages and records are decoded into.

The page size and cell content offset are both stored in two bytes and therefore need a special value to represent
65536.  The page size uses 1 for this while the cell content offset uses 0.

This script holds the following object(s):
PageSize(object)
CellOffset(object)
SerialType(object)
TextEncoding(object)
RawText(object)

"""


class PageSize(object):

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return "PageSize({})".format(self.value)

    def __str__(self):
        return str(self.real_size)

    def __eq__(self, other):
        return isinstance(other, PageSize) and self.value == other.value

    def __hash__(self):
        return hash(self.value)

    @property
    def real_size(self):
        return MAXIMUM_PAGE_SIZE if self.value == MAXIMUM_PAGE_SIZE_INDICATOR else self.value

    def is_valid(self):
        real_size = self.real_size
        return MINIMUM_PAGE_SIZE_LIMIT <= real_size <= MAXIMUM_PAGE_SIZE and real_size & (real_size - 1) == 0

    @staticmethod
    def from_real_size(real_size):
        if real_size <= MAXIMUM_PAGE_SIZE_INDICATOR or real_size > MAXIMUM_PAGE_SIZE:
            log_message = "The page size: {} can not be stored in the two byte page size field."
            log_message = log_message.format(real_size)
            getLogger(LOGGER_NAME).error(log_message)
            raise ValueError(log_message)
        return PageSize(MAXIMUM_PAGE_SIZE_INDICATOR if real_size == MAXIMUM_PAGE_SIZE else real_size)


class CellOffset(object):

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return "CellOffset({})".format(self.value)

    def __str__(self):
        return str(self.real_offset)

    def __eq__(self, other):
        return isinstance(other, CellOffset) and self.value == other.value

    def __hash__(self):
        return hash(self.value)

    @property
    def real_offset(self):
        return MAXIMUM_CELL_CONTENT_OFFSET if self.value == MAXIMUM_CELL_CONTENT_OFFSET_INDICATOR else self.value

    @staticmethod
    def from_real_offset(real_offset):
        if real_offset < 1 or real_offset > MAXIMUM_CELL_CONTENT_OFFSET:
            log_message = "The cell content offset: {} is not between 1 and {}."
            log_message = log_message.format(real_offset, MAXIMUM_CELL_CONTENT_OFFSET)
            getLogger(LOGGER_NAME).error(log_message)
            raise ValueError(log_message)
        return CellOffset(MAXIMUM_CELL_CONTENT_OFFSET_INDICATOR if real_offset == MAXIMUM_CELL_CONTENT_OFFSET
                          else real_offset)


class SerialType(object):

    """

    The classification of a serial type code found in a record header.

    Every non-negative code is classified.  Codes 10 and 11 are reserved and classify as such but asking for their
    size raises a ReservedSerialTypeError since no content length can be derived for them.

    """

    def __init__(self, code):

        if not isinstance(code, int) or code < 0:
            log_message = "The serial type code: {} is not a non-negative integer.".format(code)
            getLogger(LOGGER_NAME).error(log_message)
            raise ValueError(log_message)

        self.code = code

        if code in FIXED_SERIAL_TYPES:
            self.kind, self._size = FIXED_SERIAL_TYPES[code]
        elif code % 2 == 0:
            self.kind = SERIAL_TYPE.BLOB
            self._size = (code - MINIMUM_BLOB_SERIAL_TYPE) // 2
        else:
            self.kind = SERIAL_TYPE.TEXT
            self._size = (code - MINIMUM_TEXT_SERIAL_TYPE) // 2

    def __repr__(self):
        if self.kind in (SERIAL_TYPE.BLOB, SERIAL_TYPE.TEXT):
            return "SerialType({}({}))".format(self.kind, self.code)
        return "SerialType({})".format(self.kind)

    def __str__(self):
        return self.__repr__()

    def __eq__(self, other):
        return isinstance(other, SerialType) and self.kind == other.kind and self.code == other.code

    def __hash__(self):
        return hash((self.kind, self.code))

    @property
    def is_reserved(self):
        return self.kind == SERIAL_TYPE.RESERVED

    @property
    def size(self):
        if self.is_reserved:
            log_message = "The size of the reserved serial type: {} was requested.".format(self.code)
            getLogger(LOGGER_NAME).error(log_message)
            raise ReservedSerialTypeError(self.code, log_message)
        return self._size


class TextEncoding(object):

    def __init__(self, value):

        if value not in DATABASE_TEXT_ENCODINGS:
            log_message = "Database text encoding: {} not a valid encoding.".format(value)
            getLogger(LOGGER_NAME).error(log_message)
            raise UnknownTextEncodingError(value, log_message)

        self.value = value

    def __repr__(self):
        return "TextEncoding({})".format(self.name)

    def __str__(self):
        return self.name

    def __eq__(self, other):
        return isinstance(other, TextEncoding) and self.value == other.value

    def __hash__(self):
        return hash(self.value)

    @property
    def name(self):
        return HUMAN_READABLE_DATABASE_TEXT_ENCODINGS[self.value]

    @property
    def is_supported(self):
        return self.value == UTF_8_DATABASE_TEXT_ENCODING

    def decode(self, byte_array):

        """

        Decodes the byte array into a string.  Invalid UTF-8 sequences are replaced rather than failing.

        Note:  The UTF-16 encodings are valid database text encodings but decoding text under them is not supported
               yet and an UnsupportedTextEncodingError is raised.

        """

        if not self.is_supported:
            log_message = "Decoding text in the database text encoding: {} is not supported.".format(self.name)
            getLogger(LOGGER_NAME).error(log_message)
            raise UnsupportedTextEncodingError(self, log_message)

        return bytes(byte_array).decode(UTF_8, "replace")


class RawText(object):

    def __init__(self, byte_array, text_encoding):
        self.raw = memoryview(byte_array)
        self.text_encoding = text_encoding

    def __repr__(self):
        return "RawText({}, {})".format(bytes(self.raw), self.text_encoding)

    def __str__(self):
        return self.decode() if self.text_encoding.is_supported else hexlify(self.raw).decode()

    def __eq__(self, other):
        if isinstance(other, RawText):
            return self.raw == other.raw and self.text_encoding == other.text_encoding
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.raw == other
        return NotImplemented

    def __hash__(self):
        return hash(bytes(self.raw))

    def __len__(self):
        return len(self.raw)

    def __bytes__(self):
        return bytes(self.raw)

    def decode(self):
        return self.text_encoding.decode(self.raw)
