from binascii import hexlify
from hashlib import md5
from logging import getLogger
from struct import pack
from struct import unpack
from os import walk, makedirs
from os.path import exists, isdir, join
from sqlite_decode.constants import SQLITE_DATABASE_HEADER_LENGTH, MAGIC_HEADER_STRING, SQLITE_FILE_EXTENSIONS
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import MAXIMUM_VARINT_LENGTH
from sqlite_decode.constants import OVERFLOW_HEADER_LENGTH
from sqlite_decode.exception import InvalidVarIntError
from sqlite_decode.exception import RecordParsingError
from sqlite_decode.exception import ReservedSerialTypeError
from sqlite_decode._version import __version__
from configargparse import ArgParser

"""

utilities.py

This script holds general utility functions for reference by the sqlite decoding library.

This script holds the following function(s):
calculate_expected_overflow(overflow_byte_size, usable_size)
decode_varint(byte_array, offset=0)
encode_varint(value)
get_class_instance(class_name)
get_md5_hash(string)
get_record_content(serial_type, record_body, offset=0)
is_sqlite_file(path)
get_sqlite_files(path)
create_directory(dir_path)
parse_args(args=None)

"""


def calculate_expected_overflow(overflow_byte_size, usable_size):
    if overflow_byte_size <= 0:
        return 0, overflow_byte_size

    overflow_page_content_size = usable_size - OVERFLOW_HEADER_LENGTH
    overflow_pages = -(-overflow_byte_size // overflow_page_content_size)
    last_overflow_page_content_size = overflow_byte_size - (overflow_pages - 1) * overflow_page_content_size

    return overflow_pages, last_overflow_page_content_size


def decode_varint(byte_array, offset=0):
    unsigned_integer_value = 0
    varint_relative_offset = 0

    for x in range(1, MAXIMUM_VARINT_LENGTH + 1):

        if offset + varint_relative_offset >= len(byte_array):
            log_message = "The varint at offset: {} ran past the end of the byte array of length: {} after {} bytes."
            log_message = log_message.format(offset, len(byte_array), varint_relative_offset)
            getLogger(LOGGER_NAME).error(log_message)
            raise InvalidVarIntError(log_message)

        varint_byte = byte_array[offset + varint_relative_offset]
        varint_relative_offset += 1

        if x == MAXIMUM_VARINT_LENGTH:
            unsigned_integer_value <<= 1
            unsigned_integer_value |= varint_byte
        else:
            msb_set = varint_byte & 0x80
            varint_byte &= 0x7f
            unsigned_integer_value |= varint_byte
            if msb_set == 0:
                break
            else:
                unsigned_integer_value <<= 7

    signed_integer_value = unsigned_integer_value
    if signed_integer_value & 0x80000000 << 32:
        signed_integer_value -= 0x10000000000000000

    return signed_integer_value, varint_relative_offset


def encode_varint(value):
    max_allowed = 0x7fffffffffffffff
    min_allowed = (max_allowed + 1) - 0x10000000000000000
    if value > max_allowed or value < min_allowed:
        log_message = "The value: {} is not able to be cast into a 64 bit signed integer for encoding."
        log_message = log_message.format(value)
        getLogger(LOGGER_NAME).error(log_message)
        raise InvalidVarIntError(log_message)

    byte_array = bytearray()

    value += 1 << 64 if value < 0 else 0

    if value & 0xff000000 << 32:

        byte = value & 0xff
        byte_array.insert(0, byte)
        value >>= 8

        for _ in range(MAXIMUM_VARINT_LENGTH - 1):
            byte_array.insert(0, (value & 0x7f) | 0x80)
            value >>= 7

    elif value == 0:

        byte_array.append(0)

    else:

        while value:
            byte_array.insert(0, (value & 0x7f) | 0x80)
            value >>= 7

            if len(byte_array) >= MAXIMUM_VARINT_LENGTH:
                log_message = "The value: {} produced a varint with a byte array of length: {} beyond the 9 bytes " \
                              "allowed for a varint."
                log_message = log_message.format(value, len(byte_array))
                getLogger(LOGGER_NAME).error(log_message)
                raise InvalidVarIntError(log_message)

        byte_array[-1] &= 0x7f

    return byte_array


def get_class_instance(class_name):
    if class_name.find(".") != -1:
        path_array = class_name.split(".")
        module = ".".join(path_array[:-1])
        instance = __import__(module)
        for section in path_array[1:]:
            instance = getattr(instance, section)
        return instance
    else:
        log_message = "Class name: {} did not specify needed modules in order to initialize correctly."
        log_message = log_message.format(class_name)
        getLogger(LOGGER_NAME).error(log_message)
        raise ValueError(log_message)


def get_md5_hash(string):
    md5_hash = md5()
    md5_hash.update(string)
    return md5_hash.hexdigest().upper()


def get_record_content(serial_type, record_body, offset=0):

    """

    Reads the value of a single column out of a record body.

    Blob and text content is returned as a memoryview slice over the record body so that no bytes are copied.  Callers
    that need the text decoded pair it with the database text encoding.

    :param serial_type: int  The serial type code from the record header.
    :param record_body: bytes-like  The record body (or full record) to read from.
    :param offset: int  The offset into the record body where the column content starts.

    :return: tuple(content_size, value)

    :raise: ReservedSerialTypeError  If the serial type is 10 or 11.
    :raise: RecordParsingError  If the column content runs past the end of the record body.
    :raise: ValueError  If the serial type is not a valid serial type.

    """

    # NULL
    if serial_type == 0:
        content_size = 0
        value = None

    # 8-bit twos-complement integer
    elif serial_type == 1:
        content_size = 1
        value = unpack(b">b", _get_content(record_body, offset, content_size))[0]

    # Big-endian 16-bit twos-complement integer
    elif serial_type == 2:
        content_size = 2
        value = unpack(b">h", _get_content(record_body, offset, content_size))[0]

    # Big-endian 24-bit twos-complement integer
    elif serial_type == 3:
        content_size = 3
        value_byte_array = b'\0' + _get_content(record_body, offset, content_size)
        value = unpack(b">I", value_byte_array)[0]
        if value & 0x800000:
            value -= 0x1000000

    # Big-endian 32-bit twos-complement integer
    elif serial_type == 4:
        content_size = 4
        value = unpack(b">i", _get_content(record_body, offset, content_size))[0]

    # Big-endian 48-bit twos-complement integer
    elif serial_type == 5:
        content_size = 6
        value_byte_array = b'\0' + b'\0' + _get_content(record_body, offset, content_size)
        value = unpack(b">Q", value_byte_array)[0]
        if value & 0x800000000000:
            value -= 0x1000000000000

    # Big-endian 64-bit twos-complement integer
    elif serial_type == 6:
        content_size = 8
        value = unpack(b">q", _get_content(record_body, offset, content_size))[0]

    # Big-endian IEEE 754-2008 64-bit floating point number
    elif serial_type == 7:
        content_size = 8
        value = unpack(b">d", _get_content(record_body, offset, content_size))[0]

    # Integer constant 0 (schema format == 4)
    elif serial_type == 8:
        content_size = 0
        value = 0

    # Integer constant 1 (schema format == 4)
    elif serial_type == 9:
        content_size = 0
        value = 1

    # These values are not used/reserved and should not be found in sqlite files
    elif serial_type == 10 or serial_type == 11:
        log_message = "The reserved serial type: {} was found at offset: {} in the record body."
        log_message = log_message.format(serial_type, offset)
        getLogger(LOGGER_NAME).error(log_message)
        raise ReservedSerialTypeError(serial_type, log_message)

    # A BLOB that is (N-12)/2 bytes in length
    elif isinstance(serial_type, int) and serial_type >= 12 and serial_type % 2 == 0:
        content_size = (serial_type - 12) // 2
        value = memoryview(_get_content(record_body, offset, content_size))

    # A string in the database encoding and is (N-13)/2 bytes in length.  The nul terminator is omitted
    elif isinstance(serial_type, int) and serial_type >= 13 and serial_type % 2 == 1:
        content_size = (serial_type - 13) // 2
        value = memoryview(_get_content(record_body, offset, content_size))

    else:
        log_message = "Invalid serial type: {} at offset: {} in record body: {}."
        log_message = log_message.format(serial_type, offset, hexlify(record_body))
        getLogger(LOGGER_NAME).error(log_message)
        raise ValueError(log_message)

    return content_size, value


def _get_content(record_body, offset, content_size):
    if offset + content_size > len(record_body):
        log_message = "The column content of size: {} at offset: {} runs past the end of the record body of size: {}."
        log_message = log_message.format(content_size, offset, len(record_body))
        getLogger(LOGGER_NAME).error(log_message)
        raise RecordParsingError(log_message)
    return record_body[offset:offset + content_size]


def is_sqlite_file(path):
    """
    Checks the first 16 bytes of the file at the given path against the SQLite magic header string.  The remaining
    header fields are validated when the DatabaseHeader is created.

    :param path:  The path to the file to check.

    :return: True if the file starts with the magic header string, False otherwise.

    :raise: IOError if the path does not exist.

    """

    if not exists(path):
        log_message = "The sqlite path: {} does not exist.".format(path)
        getLogger(LOGGER_NAME).error(log_message)
        raise IOError(log_message)

    with open(path, "rb") as sqlite_file_object:
        return sqlite_file_object.read(SQLITE_DATABASE_HEADER_LENGTH)[:len(MAGIC_HEADER_STRING)] == MAGIC_HEADER_STRING


def get_sqlite_files(path):
    """
    Returns the SQLite files found at the given path.  A file path is returned on its own if it is a SQLite file.  A
    directory is walked and every file with a SQLite file extension that is a SQLite file is returned in walk order.

    :param path:  The path to a SQLite file or a directory holding SQLite files.

    :return: list of SQLite file paths

    :raise: IOError if the path does not exist.

    """

    logger = getLogger(LOGGER_NAME)

    if not exists(path):
        log_message = "The sqlite path: {} does not exist.".format(path)
        logger.error(log_message)
        raise IOError(log_message)

    if not isdir(path):
        candidate_paths = [path]
    else:
        candidate_paths = []
        for root, directory_names, file_names in walk(path):
            candidate_paths.extend(join(root, file_name) for file_name in sorted(file_names)
                                   if file_name.endswith(SQLITE_FILE_EXTENSIONS))

    sqlite_files = []
    for candidate_path in candidate_paths:
        if is_sqlite_file(candidate_path):
            sqlite_files.append(candidate_path)
        else:
            logger.info("Skipping: {} since it does not start with the sqlite magic header.".format(candidate_path))

    return sqlite_files


def create_directory(dir_path):
    """
    Makes the directory, and any missing parents, unless it already exists.

    :return: True if the path is a directory afterwards, False otherwise.

    """

    if not exists(dir_path):
        try:
            makedirs(dir_path)
        except OSError as error:
            getLogger(LOGGER_NAME).error("Unable to make the directory: {} due to: {}.".format(dir_path, error))
            return False

    return isdir(dir_path)


# Uses ArgParser from configargparse to evaluate user arguments.
def parse_args(args=None):
    description = "SQLite Decode is a decoder for the SQLite database file format.  It decodes the database header, " \
                  "every b-tree page (table and index, interior and leaf) and the records stored in their cells, " \
                  "following overflow chains where payloads do not fit on their page.  If no options are set other " \
                  "than the file name, the default behaviour will be to print the decoded cells of every b-tree " \
                  "page to the console.  Options may also be given in a configuration file (--config) or through " \
                  "SQLDEC_* environment variables."

    parser = ArgParser(description=description)

    # Define the argument for the configuration file that can optionally be passed
    parser.add_argument('--config', required=False, is_config_file=True, help='The path to the configuration file')

    parser.add_argument("sqlite_path",
                        metavar="SQLITE_PATH",
                        help="The path to the SQLite database file or directory containing multiple files",
                        )

    parser.add_argument("-v", "--version",
                        action="version",
                        version="version {version}".format(version=__version__),
                        help="display the version of SQLite Decode")

    parser.add_argument("-d", "--directory",
                        metavar="OUTPUT_DIRECTORY",
                        env_var="SQLDEC_OUTPUT_DIRECTORY",
                        help="directory to write output to (must be specified for outputs other than console text)")

    parser.add_argument("-p", "--file-prefix",
                        default="",
                        metavar="FILE_PREFIX",
                        env_var="SQLDEC_FILE_PREFIX",
                        help="the file prefix to use on output files, default is the name of the SQLite "
                             "file (the directory for output must be specified)")

    parser.add_argument("-e", "--export",
                        nargs="*",
                        choices=["text", "csv", "xlsx"],
                        default=["text"],
                        metavar="EXPORT_TYPE",
                        env_var="SQLDEC_EXPORT_TYPE",
                        help="the format to export to {text, csv, xlsx} (text written to console if -d "
                             "is not specified)")

    parser.add_argument("--header",
                        action="store_true",
                        default=False,
                        env_var="SQLDEC_HEADER",
                        help="print the database header information")

    parser.add_argument("--pages",
                        action="store_true",
                        default=False,
                        env_var="SQLDEC_PAGES",
                        help="print the page breakdown and the structure of every decoded b-tree page")

    parser.add_argument("-k", "--disable-strict-format-checking",
                        action="store_true",
                        env_var="SQLDEC_DISABLE_STRICT_FORMAT_CHECKING",
                        default=False,
                        help="disable strict format checks for SQLite databases "
                             "(this may result in improperly decoded SQLite files)")

    parser.add_argument("-l", "--log-level",
                        default="off",
                        choices=["critical", "error", "warning", "info", "debug", "off"],
                        metavar="LOG_LEVEL",
                        env_var="SQLDEC_LOG_LEVEL",
                        help="level to log messages at {critical, error, warning, info, debug, off}")

    parser.add_argument("-i", "--log-file",
                        default=None,
                        metavar="LOG_FILE",
                        env_var="SQLDEC_LOG_FILE",
                        help="log file to write too, default is to write to console, ignored if log level set to off "
                             "(appends if file already exists)")

    parser.add_argument("--warnings",
                        action="store_true",
                        default=False,
                        env_var="SQLDEC_WARNINGS",
                        help="enable runtime warnings")

    return parser.parse_args(args)
