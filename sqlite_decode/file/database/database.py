from logging import getLogger
from re import sub
from warnings import warn
from sqlite_decode.constants import B_TREE_PAGE_HEX_IDS
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import SQLITE_3_7_0_VERSION_NUMBER
from sqlite_decode.constants import SQLITE_DATABASE_HEADER_LENGTH
from sqlite_decode.constants import SQLITE_MASTER_SCHEMA_ROOT_PAGE
from sqlite_decode.exception import DatabaseParsingError
from sqlite_decode.exception import ParsingError
from sqlite_decode.exception import UnknownPageTypeError
from sqlite_decode.file.database.header import DatabaseHeader
from sqlite_decode.file.database.page import decode_page
from sqlite_decode.file.database.page import get_cell_overflow_page_numbers
from sqlite_decode.file.database.utilities import get_freelist_page_numbers
from sqlite_decode.file.database.utilities import get_lock_byte_page_number
from sqlite_decode.file.database.utilities import get_pointer_map_page_numbers

"""

database.py

This script holds the objects used for parsing the database file.

The database is parsed from a byte buffer holding the whole file.  Blob and text values of the records in the pages are
views into this buffer (or into the reassembled payload for payloads with overflow), so a database must not outlive
the buffer it was parsed from.  Use bytes() or RawText.decode() on values that need to be kept.

This script holds the following object(s):
Database(object)

"""


class Database(object):

    def __init__(self, buffer, strict_format_checking=True):

        """

        Constructor.  This constructor initializes this object.

        :param buffer: bytes-like  The bytes of the database file (bytes, bytearray, memoryview or mmap).
        :param strict_format_checking: boolean  Specifies if the application should exit if structural validations fail.

        :raise: DatabaseParsingError  If the buffer does not hold a whole number of pages, the page count is
                                      inconsistent with the database header or the freelist is invalid.
        :raise: ParsingError  If the database header or any of the pages fail to parse.

        """

        self._logger = getLogger(LOGGER_NAME)

        self._buffer = memoryview(buffer)
        self.strict_format_checking = strict_format_checking

        if len(self._buffer) < SQLITE_DATABASE_HEADER_LENGTH:
            log_message = "The buffer of size: {} is too small to hold the database header of size: {}."
            log_message = log_message.format(len(self._buffer), SQLITE_DATABASE_HEADER_LENGTH)
            self._logger.error(log_message)
            raise DatabaseParsingError(log_message)

        self.database_header = DatabaseHeader(self._buffer[:SQLITE_DATABASE_HEADER_LENGTH])

        if len(self._buffer) % self.page_size != 0:
            log_message = "The buffer size: {} is not a multiple of the page size: {}."
            log_message = log_message.format(len(self._buffer), self.page_size)
            self._logger.error(log_message)
            raise DatabaseParsingError(log_message)

        calculated_size_in_pages = len(self._buffer) // self.page_size

        """

        Make sure the database size in pages is not 0.  If this occurs, the file has to have been written by a
        version prior to 3.7.0 and the number of pages is calculated from the buffer size.

        If the database size in pages is set but the version valid for number does not equal the file change counter,
        the file was last modified by a version prior to 3.7.0 which did not know to update the database size in pages.
        The number of pages is calculated from the buffer size in this case as well.

        """

        # The database header size in pages is not set
        if self.database_header.database_size_in_pages == 0:

            log_message = "Database header specifies a database size in pages of 0 for sqlite version: {}."
            log_message = log_message.format(self.database_header.sqlite_version_number)
            self._logger.info(log_message)

            if self.strict_format_checking and \
                    self.database_header.sqlite_version_number >= SQLITE_3_7_0_VERSION_NUMBER:
                log_message = "The database header database size in pages is 0 when the sqlite version: {} is " \
                              "greater or equal than 3.7.0 and should be set."
                log_message = log_message.format(self.database_header.sqlite_version_number)
                self._logger.error(log_message)
                raise DatabaseParsingError(log_message)

            self.database_size_in_pages = calculated_size_in_pages

        # The database header size in pages is set and the version valid for number does not equal the change counter
        elif self.database_header.version_valid_for_number != self.database_header.file_change_counter:

            self.database_size_in_pages = calculated_size_in_pages

            log_message = "Database header specifies a database size in pages of {} but version valid for " \
                          "number: {} does not equal the file change counter: {} for sqlite version: {}.  Setting " \
                          "the database size in pages to the calculated size in pages of: {}."
            log_message = log_message.format(self.database_header.database_size_in_pages,
                                             self.database_header.version_valid_for_number,
                                             self.database_header.file_change_counter,
                                             self.database_header.sqlite_version_number,
                                             self.database_size_in_pages)
            self._logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        # The database header size in pages is set and the version valid for number does equals the change counter
        elif self.database_header.database_size_in_pages != calculated_size_in_pages:

            log_message = "Database header specifies a database size in pages of {} but the calculated size in " \
                          "pages is {} for sqlite version: {}."
            log_message = log_message.format(self.database_header.database_size_in_pages, calculated_size_in_pages,
                                             self.database_header.sqlite_version_number)

            if self.strict_format_checking:
                self._logger.error(log_message)
                raise DatabaseParsingError(log_message)

            self.database_size_in_pages = min(self.database_header.database_size_in_pages, calculated_size_in_pages)

            log_message += "  Using the smaller size in pages of: {}.".format(self.database_size_in_pages)
            self._logger.warning(log_message)
            warn(log_message, RuntimeWarning)

        else:

            self.database_size_in_pages = self.database_header.database_size_in_pages

        """

        Work out the pages that are known not to be b-tree pages before parsing the b-tree pages.

        Note:  If there are no freelist pages or pointer map pages, the page number lists will be empty.

        """

        self.freelist_trunk_page_numbers, self.freelist_leaf_page_numbers = \
            get_freelist_page_numbers(self.get_page_data, self.database_header.first_freelist_trunk_page_number,
                                      self.database_header.number_of_freelist_pages, self.database_size_in_pages,
                                      self.database_header.usable_size)

        self.lock_byte_page_number = get_lock_byte_page_number(self.page_size, self.database_size_in_pages)

        self.pointer_map_page_numbers = []
        if self.database_header.largest_root_b_tree_page_number:
            self.pointer_map_page_numbers = get_pointer_map_page_numbers(self.database_size_in_pages,
                                                                         self.database_header.usable_size,
                                                                         self.lock_byte_page_number)

        non_b_tree_page_numbers = set(self.freelist_trunk_page_numbers)
        non_b_tree_page_numbers.update(self.freelist_leaf_page_numbers)
        non_b_tree_page_numbers.update(self.pointer_map_page_numbers)
        if self.lock_byte_page_number:
            non_b_tree_page_numbers.add(self.lock_byte_page_number)

        """

        Parse the remaining pages in page number order.  Overflow pages are not known until the cells that point to
        them are parsed, so a page that does not have a b-tree page type (or fails to parse as a b-tree page) is held
        back until all other pages are parsed.  It must then be claimed by an overflow chain.

        """

        self.pages = {}
        deferred_page_numbers = {}

        for page_number in range(1, self.database_size_in_pages + 1):

            if page_number in non_b_tree_page_numbers:
                continue

            header_offset = SQLITE_DATABASE_HEADER_LENGTH if page_number == SQLITE_MASTER_SCHEMA_ROOT_PAGE else 0
            page_hex_type = self.get_page_data(page_number, header_offset, 1)[0]

            if page_hex_type not in B_TREE_PAGE_HEX_IDS:
                deferred_page_numbers[page_number] = None
                continue

            try:

                self.pages[page_number] = decode_page(self.get_page_data(page_number), page_number,
                                                      self.database_header, self.get_page_data,
                                                      self.database_size_in_pages)

            except ParsingError as error:

                if page_number == SQLITE_MASTER_SCHEMA_ROOT_PAGE:
                    raise

                deferred_page_numbers[page_number] = error

        self.overflow_page_numbers = []
        for b_tree_page in self.pages.values():
            self.overflow_page_numbers.extend(get_cell_overflow_page_numbers(b_tree_page))

        overflow_page_numbers = set(self.overflow_page_numbers)

        if len(overflow_page_numbers) != len(self.overflow_page_numbers):
            log_message = "Overflow pages were found to be claimed by more than one overflow chain: {}."
            log_message = log_message.format(sorted(page_number for page_number in overflow_page_numbers
                                                    if self.overflow_page_numbers.count(page_number) > 1))
            self._logger.error(log_message)
            raise DatabaseParsingError(log_message)

        for page_number in overflow_page_numbers:

            if page_number in non_b_tree_page_numbers:
                log_message = "The overflow page: {} is also a freelist, pointer map or lock byte page."
                log_message = log_message.format(page_number)
                self._logger.error(log_message)
                raise DatabaseParsingError(log_message)

            # An overflow page can start with bytes that look like a b-tree page type
            if page_number in self.pages:
                self._logger.debug("Page: {} parsed as a b-tree page was found to be an overflow page."
                                   .format(page_number))
                del self.pages[page_number]

        for page_number, error in deferred_page_numbers.items():

            if page_number in overflow_page_numbers:
                continue

            if error:
                raise error

            header_offset = SQLITE_DATABASE_HEADER_LENGTH if page_number == SQLITE_MASTER_SCHEMA_ROOT_PAGE else 0
            page_hex_type = self.get_page_data(page_number, header_offset, 1)[0]

            log_message = "Page hex type: {:02x} is not a valid b-tree page type for page: {} which is not claimed " \
                          "by any overflow chain, freelist or pointer map."
            log_message = log_message.format(page_hex_type, page_number)
            self._logger.error(log_message)
            raise UnknownPageTypeError(page_number, page_hex_type, log_message)

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self.__str__())

    def __str__(self):
        return sub("\t", "", sub("\n", " ", self.stringify()))

    @staticmethod
    def from_file(file_identifier, strict_format_checking=True):

        """

        Reads the whole file into memory and parses it.

        :param file_identifier: str  The full file path to the file to be opened or the file object.
        :param strict_format_checking: boolean  Specifies if the application should exit if structural validations fail.

        :return: Database

        """

        if isinstance(file_identifier, str):
            with open(file_identifier, "rb") as database_file:
                buffer = database_file.read()
        else:
            buffer = file_identifier.read()

        return Database(buffer, strict_format_checking)

    @property
    def page_size(self):
        return self.database_header.page_size.real_size

    @property
    def database_text_encoding(self):
        return self.database_header.database_text_encoding

    def get_page_data(self, page_number, offset=0, number_of_bytes=None):

        # Set the number of bytes to the rest of the page if it was not set
        number_of_bytes = self.page_size - offset if not number_of_bytes else number_of_bytes

        if offset >= self.page_size:
            log_message = "Requested offset: {} is >= the page size: {} for page: {}."
            log_message = log_message.format(offset, self.page_size, page_number)
            self._logger.error(log_message)
            raise ValueError(log_message)

        if offset + number_of_bytes > self.page_size:
            log_message = "Requested length of data: {} at offset {} to {} is greater than the page " \
                          "size: {} for page: {}."
            log_message = log_message.format(number_of_bytes, offset, number_of_bytes + offset,
                                             self.page_size, page_number)
            self._logger.error(log_message)
            raise ValueError(log_message)

        page_offset = self.get_page_offset(page_number)

        return self._buffer[page_offset + offset:page_offset + offset + number_of_bytes]

    def get_page_offset(self, page_number):

        if page_number < 1 or page_number > self.database_size_in_pages:
            log_message = "Invalid page number: {} with database size in pages: {}."
            log_message = log_message.format(page_number, self.database_size_in_pages)
            self._logger.error(log_message)
            raise ValueError(log_message)

        return (page_number - 1) * self.page_size

    def stringify(self, padding="", print_pages=False):
        string = padding + "Page Size: {}\n" \
                 + padding + "Database Size in Pages: {}\n" \
                 + padding + "Database Text Encoding: {}\n" \
                 + padding + "Strict Format Checking: {}\n" \
                 + padding + "B-Tree Page Numbers: {}\n" \
                 + padding + "Overflow Page Numbers: {}\n" \
                 + padding + "Freelist Trunk Page Numbers: {}\n" \
                 + padding + "Freelist Leaf Page Numbers: {}\n" \
                 + padding + "Pointer Map Page Numbers: {}\n" \
                 + padding + "Lock Byte Page Number: {}\n" \
                 + padding + "Database Header:\n{}"
        string = string.format(self.page_size,
                               self.database_size_in_pages,
                               self.database_text_encoding,
                               self.strict_format_checking,
                               list(self.pages.keys()),
                               self.overflow_page_numbers,
                               self.freelist_trunk_page_numbers,
                               self.freelist_leaf_page_numbers,
                               self.pointer_map_page_numbers,
                               self.lock_byte_page_number,
                               self.database_header.stringify(padding + "\t"))
        if print_pages:
            for page in self.pages.values():
                string += "\n" + padding + "Page:\n{}".format(page.stringify(padding + "\t"))
        return string
