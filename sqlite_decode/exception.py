"""

exception.py

This script holds the custom exceptions used in this library.

This script holds the following object(s):
SqliteError(Exception)
ParsingError(SqliteError)
InvalidVarIntError(ParsingError)
HeaderParsingError(ParsingError)
UnknownTextEncodingError(HeaderParsingError)
PageParsingError(ParsingError)
OverflowParsingError(PageParsingError)
BTreePageParsingError(PageParsingError)
UnknownPageTypeError(BTreePageParsingError)
CellPointerArrayError(BTreePageParsingError)
CellParsingError(BTreePageParsingError)
RecordParsingError(CellParsingError)
ReservedSerialTypeError(RecordParsingError)
DatabaseParsingError(ParsingError)
UnsupportedTextEncodingError(SqliteError)
OutputError(SqliteError)
ExportError(SqliteError)

"""


class SqliteError(Exception):
    pass


class ParsingError(SqliteError):
    pass


class InvalidVarIntError(ParsingError):
    pass


class HeaderParsingError(ParsingError):
    pass


class UnknownTextEncodingError(HeaderParsingError):

    def __init__(self, value, message=None):
        self.value = value
        super(UnknownTextEncodingError, self).__init__(message if message else
                                                       "Unknown database text encoding: {}.".format(value))


class PageParsingError(ParsingError):
    pass


class OverflowParsingError(PageParsingError):
    pass


class BTreePageParsingError(PageParsingError):
    pass


class UnknownPageTypeError(BTreePageParsingError):

    def __init__(self, page_number, page_type, message=None):
        self.page_number = page_number
        self.page_type = page_type
        super(UnknownPageTypeError, self).__init__(message if message else
                                                   "Unknown page type: {} for page: {}.".format(page_type,
                                                                                                page_number))


class CellPointerArrayError(BTreePageParsingError):
    pass


class CellParsingError(BTreePageParsingError):
    pass


class RecordParsingError(CellParsingError):
    pass


class ReservedSerialTypeError(RecordParsingError):

    def __init__(self, serial_type, message=None):
        self.serial_type = serial_type
        super(ReservedSerialTypeError, self).__init__(message if message else
                                                      "Reserved serial type: {}.".format(serial_type))


class DatabaseParsingError(ParsingError):
    pass


class UnsupportedTextEncodingError(SqliteError):

    def __init__(self, text_encoding, message=None):
        self.text_encoding = text_encoding
        super(UnsupportedTextEncodingError, self).__init__(message if message else
                                                           "Unsupported text encoding: {}.".format(text_encoding))


class OutputError(SqliteError):
    pass


class ExportError(SqliteError):
    pass
