from abc import ABCMeta
from binascii import hexlify
from logging import getLogger
from re import sub
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import SERIAL_TYPE
from sqlite_decode.exception import InvalidVarIntError
from sqlite_decode.exception import RecordParsingError
from sqlite_decode.file.database.types import RawText
from sqlite_decode.file.database.types import SerialType
from sqlite_decode.utilities import decode_varint
from sqlite_decode.utilities import get_md5_hash
from sqlite_decode.utilities import get_record_content

"""

payload.py

This script holds the objects used for parsing payloads from the cells in SQLite b-tree pages for
index leaf, index interior, and table leaf.  (Table Interior pages do not have payloads in their cells.)

The payload handed to these objects is the complete payload, meaning the bytes local to the cell's page followed by
any overflow content already resolved from the overflow chain.  Blob and text values are memoryview slices over that
payload so no column content is copied.

This script holds the following object(s):
Payload(object)
Record(Payload)
TableCellPayload(Record)
IndexCellPayload(Record)
RecordColumn(object)

"""


class Payload(object, metaclass=ABCMeta):

    def __init__(self):

        self.byte_size = None

        self.header_byte_size = None
        self.header_byte_size_varint_length = None
        self.body_byte_size = None

        self.md5_hex_digest = None

        self.record_columns = []

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self.__str__())

    def __str__(self):
        return sub("\t", "", sub("\n", " ", self.stringify()))

    def stringify(self, padding="", print_record_columns=True):
        string = padding + "Byte Size: {}\n" \
                 + padding + "MD5 Hex Digest: {}\n" \
                 + padding + "Header Byte Size: {}\n" \
                 + padding + "Header Byte Size VARINT Length: {}\n" \
                 + padding + "Body Byte Size: {}\n" \
                 + padding + "Column Types: {}"
        string = string.format(self.byte_size,
                               self.md5_hex_digest,
                               self.header_byte_size,
                               self.header_byte_size_varint_length,
                               self.body_byte_size,
                               self.column_types)
        if print_record_columns:
            for record_column in self.record_columns:
                string += "\n" + padding + "Record Column:\n{}".format(record_column.stringify(padding + "\t"))
        return string

    @property
    def column_types(self):
        return [record_column.serial_type for record_column in self.record_columns]

    @property
    def column_values(self):
        return [record_column.value for record_column in self.record_columns]


class Record(Payload):

    """

    A record is a header of serial types followed by a body of column content:

        header size (varint) | serial type (varint) ... | column content ...

    The header size includes its own varint.  Each serial type in the header consumes exactly its size in bytes from
    the body in header order.  The record must consume the payload exactly.

    """

    def __init__(self, payload, database_text_encoding):

        super(Record, self).__init__()

        logger = getLogger(LOGGER_NAME)

        payload = memoryview(payload)

        self.byte_size = len(payload)
        self.database_text_encoding = database_text_encoding

        try:

            self.header_byte_size, self.header_byte_size_varint_length = decode_varint(payload, 0)

        except InvalidVarIntError:

            log_message = "Failed to retrieve the record header size from a payload of size: {}."
            log_message = log_message.format(self.byte_size)
            logger.error(log_message)
            raise RecordParsingError(log_message)

        if self.header_byte_size < self.header_byte_size_varint_length or self.header_byte_size > self.byte_size:
            log_message = "The record header size: {} is invalid for a payload of size: {} with a header size " \
                          "varint length of: {}."
            log_message = log_message.format(self.header_byte_size, self.byte_size,
                                             self.header_byte_size_varint_length)
            logger.error(log_message)
            raise RecordParsingError(log_message)

        self.md5_hex_digest = get_md5_hash(payload)

        header = payload[:self.header_byte_size]
        body = payload[self.header_byte_size:]
        self.body_byte_size = len(body)

        current_header_offset = self.header_byte_size_varint_length
        current_body_offset = 0
        column_index = 0
        while current_header_offset < self.header_byte_size:

            try:

                serial_type_code, serial_type_varint_length = decode_varint(header, current_header_offset)

            except InvalidVarIntError:

                log_message = "The serial type varint for column index: {} at header offset: {} runs past the " \
                              "record header of size: {}."
                log_message = log_message.format(column_index, current_header_offset, self.header_byte_size)
                logger.error(log_message)
                raise RecordParsingError(log_message)

            if serial_type_code < 0:
                log_message = "Negative serial type: {} found for column index: {} at header offset: {}."
                log_message = log_message.format(serial_type_code, column_index, current_header_offset)
                logger.error(log_message)
                raise RecordParsingError(log_message)

            serial_type = SerialType(serial_type_code)

            # Reserved serial types raise a ReservedSerialTypeError before any content is read
            content_size, value = get_record_content(serial_type.code, body, current_body_offset)

            if serial_type.kind == SERIAL_TYPE.TEXT:
                value = RawText(value, self.database_text_encoding)

            record_column_md5_hash_string = bytes(header[current_header_offset:
                                                         current_header_offset + serial_type_varint_length])
            record_column_md5_hash_string += bytes(body[current_body_offset:current_body_offset + content_size])

            record_column = RecordColumn(column_index, serial_type, serial_type_varint_length,
                                         content_size, value, get_md5_hash(record_column_md5_hash_string))

            self.record_columns.append(record_column)

            current_header_offset += serial_type_varint_length
            current_body_offset += content_size
            column_index += 1

        if current_body_offset != self.body_byte_size:
            log_message = "The record columns consumed: {} bytes of the record body of size: {} leaving: {} bytes " \
                          "unaccounted for (hex): {}."
            log_message = log_message.format(current_body_offset, self.body_byte_size,
                                             self.body_byte_size - current_body_offset,
                                             hexlify(body[current_body_offset:]))
            logger.error(log_message)
            raise RecordParsingError(log_message)


class TableCellPayload(Record):

    """

    The record of a table leaf cell.  The row id is stored in the cell itself and not in the record.

    """

    pass


class IndexCellPayload(Record):

    """

    The record of an index interior or index leaf cell.

    For an index on a rowid table the last column of the record is the row id of the table row the index entry points
    to.  For a "without rowid" table the record holds the primary key columns instead, and the last column need not be
    an integer.  The row id is reported if the last column is an integer and None otherwise.  The row id column is
    still kept in the column types and values.

    """

    def __init__(self, payload, database_text_encoding):
        super(IndexCellPayload, self).__init__(payload, database_text_encoding)
        self.row_id = None
        if self.record_columns:
            last_value = self.record_columns[-1].value
            if isinstance(last_value, int):
                self.row_id = last_value

    def stringify(self, padding="", print_record_columns=True):
        string = padding + "Row ID: {}\n".format(self.row_id)
        return string + super(IndexCellPayload, self).stringify(padding, print_record_columns)


class RecordColumn(object):

    def __init__(self, index, serial_type, serial_type_varint_length, content_size, value, md5_hex_digest):
        self.index = index
        self.serial_type = serial_type
        self.serial_type_varint_length = serial_type_varint_length
        self.content_size = content_size
        self.value = value
        self.md5_hex_digest = md5_hex_digest

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self.__str__())

    def __str__(self):
        return sub("\t", "", sub("\n", " ", self.stringify()))

    def stringify(self, padding=""):
        string = padding + "Index: {}\n" \
                 + padding + "Serial Type: {}\n" \
                 + padding + "Serial Type VARINT Length: {}\n" \
                 + padding + "Content Size: {}\n" \
                 + padding + "Value: {}\n" \
                 + padding + "MD5 Hex Digest: {}"
        value = self.value
        if isinstance(value, memoryview):
            value = hexlify(value).decode()
        return string.format(self.index,
                             self.serial_type,
                             self.serial_type_varint_length,
                             self.content_size,
                             value,
                             self.md5_hex_digest)
