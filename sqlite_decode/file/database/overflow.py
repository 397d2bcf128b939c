from binascii import hexlify
from logging import getLogger
from re import sub
from struct import unpack
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import LEAF_PAYLOAD_FRACTION
from sqlite_decode.constants import MAXIMUM_EMBEDDED_PAYLOAD_FRACTION
from sqlite_decode.constants import MINIMUM_EMBEDDED_PAYLOAD_FRACTION
from sqlite_decode.constants import OVERFLOW_HEADER_LENGTH
from sqlite_decode.constants import PAGE_TYPE
from sqlite_decode.exception import OverflowParsingError
from sqlite_decode.utilities import calculate_expected_overflow
from sqlite_decode.utilities import get_md5_hash

"""

overflow.py

This script holds the calculations deciding how much of a cell payload is stored on the b-tree page itself and the
objects used to follow the chain of overflow pages holding the rest of it.

Pages are never read here directly.  The caller supplies a function taking a page number and returning the bytes of
that page.

This script holds the following object(s):
OverflowPage(object)

This script holds the following function(s):
calculate_local_payload_size(payload_byte_size, usable_size, page_type, maximum_embedded_payload_fraction=64,
                             minimum_embedded_payload_fraction=32, leaf_payload_fraction=32)
get_maximum_local_payload_size(usable_size, page_type, maximum_embedded_payload_fraction=64)
get_minimum_local_payload_size(usable_size, page_type, minimum_embedded_payload_fraction=32,
                               leaf_payload_fraction=32)
resolve_overflow(get_page_data, first_overflow_page_number, overflow_byte_size, usable_size,
                 maximum_number_of_overflow_pages=None, parent_cell_page_number=None)

"""


def get_maximum_local_payload_size(usable_size, page_type,
                                   maximum_embedded_payload_fraction=MAXIMUM_EMBEDDED_PAYLOAD_FRACTION):
    if page_type == PAGE_TYPE.B_TREE_TABLE_LEAF:
        return usable_size - 35
    elif page_type in (PAGE_TYPE.B_TREE_INDEX_INTERIOR, PAGE_TYPE.B_TREE_INDEX_LEAF):
        return ((usable_size - 12) * maximum_embedded_payload_fraction // 255) - 23
    else:
        log_message = "Page type: {} does not store payloads in its cells.".format(page_type)
        getLogger(LOGGER_NAME).error(log_message)
        raise ValueError(log_message)


def get_minimum_local_payload_size(usable_size, page_type,
                                   minimum_embedded_payload_fraction=MINIMUM_EMBEDDED_PAYLOAD_FRACTION,
                                   leaf_payload_fraction=LEAF_PAYLOAD_FRACTION):
    if page_type == PAGE_TYPE.B_TREE_TABLE_LEAF:
        return ((usable_size - 12) * leaf_payload_fraction // 255) - 23
    elif page_type in (PAGE_TYPE.B_TREE_INDEX_INTERIOR, PAGE_TYPE.B_TREE_INDEX_LEAF):
        return ((usable_size - 12) * minimum_embedded_payload_fraction // 255) - 23
    else:
        log_message = "Page type: {} does not store payloads in its cells.".format(page_type)
        getLogger(LOGGER_NAME).error(log_message)
        raise ValueError(log_message)


def calculate_local_payload_size(payload_byte_size, usable_size, page_type,
                                 maximum_embedded_payload_fraction=MAXIMUM_EMBEDDED_PAYLOAD_FRACTION,
                                 minimum_embedded_payload_fraction=MINIMUM_EMBEDDED_PAYLOAD_FRACTION,
                                 leaf_payload_fraction=LEAF_PAYLOAD_FRACTION):

    """

    Returns the number of payload bytes stored on the b-tree page for a cell with the given payload size.  When this
    is less than the payload byte size, the rest of the payload is in overflow pages and the first overflow page
    number follows the local bytes in the cell.

    Note:  The SQLite documentation (as of version 3.9.2) states the bytes stored on the page are the smaller of
           m + ((p - m) % (u - 4)) and x.  After reviewing the SQLite c code, the bytes stored on the page are
           actually m + ((p - m) % (u - 4)) unless that is greater than x, in which case it is m itself.

           Let b be the bytes on the b-tree page:
           u = usable size (page size - reserved bytes per page)
           p = payload byte size
           x = maximum local payload size
               table leaf:    u - 35
               index pages:   (((u - 12) * maximum embedded payload fraction) / 255) - 23
           m = minimum local payload size
               table leaf:    (((u - 12) * leaf payload fraction) / 255) - 23
               index pages:   (((u - 12) * minimum embedded payload fraction) / 255) - 23
           if p <= x
                b = p
           else
                b = m + ((p - m) % (u - 4))
                if b > x
                    b = m

           All divisions are integer divisions.  Once overflow occurs, b will always be greater than or equal to m.

    :param payload_byte_size: int  The payload size declared in the cell.
    :param usable_size: int  The usable size of a page.
    :param page_type: str  The PAGE_TYPE of the page the cell is on (table interior cells have no payload).
    :param maximum_embedded_payload_fraction: int  The maximum embedded payload fraction from the database header.
    :param minimum_embedded_payload_fraction: int  The minimum embedded payload fraction from the database header.
    :param leaf_payload_fraction: int  The leaf payload fraction from the database header.

    :return: int  The number of bytes of the payload stored on the b-tree page.

    :raise: ValueError  If the page type does not have payloads or the payload byte size is negative.

    """

    if payload_byte_size < 0:
        log_message = "The payload byte size: {} is negative.".format(payload_byte_size)
        getLogger(LOGGER_NAME).error(log_message)
        raise ValueError(log_message)

    maximum_local_payload_size = get_maximum_local_payload_size(usable_size, page_type,
                                                                maximum_embedded_payload_fraction)

    if payload_byte_size <= maximum_local_payload_size:
        return payload_byte_size

    minimum_local_payload_size = get_minimum_local_payload_size(usable_size, page_type,
                                                                minimum_embedded_payload_fraction,
                                                                leaf_payload_fraction)

    bytes_on_first_page = minimum_local_payload_size + \
        ((payload_byte_size - minimum_local_payload_size) % (usable_size - OVERFLOW_HEADER_LENGTH))

    if bytes_on_first_page > maximum_local_payload_size:
        bytes_on_first_page = minimum_local_payload_size

    return bytes_on_first_page


class OverflowPage(object):

    def __init__(self, page, number, index, payload_remaining, usable_size,
                 parent_cell_page_number=None, parent_overflow_page_number=None):

        logger = getLogger(LOGGER_NAME)

        self.page_type = PAGE_TYPE.OVERFLOW
        self.number = number
        self.index = index
        self.parent_cell_page_number = parent_cell_page_number
        self.parent_overflow_page_number = parent_overflow_page_number

        if payload_remaining <= 0:
            log_message = "No payload remaining when overflow page: {} was initialized at index: {} in the chain for " \
                          "the cell on page: {}."
            log_message = log_message.format(self.number, self.index, self.parent_cell_page_number)
            logger.error(log_message)
            raise OverflowParsingError(log_message)

        if len(page) < usable_size:
            log_message = "The overflow page: {} of size: {} is smaller than the usable size: {}."
            log_message = log_message.format(self.number, len(page), usable_size)
            logger.error(log_message)
            raise OverflowParsingError(log_message)

        self.next_overflow_page_number = unpack(b">I", page[:OVERFLOW_HEADER_LENGTH])[0]

        maximum_content_length = usable_size - OVERFLOW_HEADER_LENGTH
        self.content_length = min(payload_remaining, maximum_content_length)
        self.content = page[OVERFLOW_HEADER_LENGTH:OVERFLOW_HEADER_LENGTH + self.content_length]

        self.md5_hex_digest = get_md5_hash(page)

        if payload_remaining <= maximum_content_length and self.next_overflow_page_number:

            # This was found to be the last overflow page in the chain.  Make sure there are no other overflow pages.
            log_message = "Additional overflow page number: {} found on overflow page: {} at index: {} for the cell " \
                          "on page: {} when no more overflow pages were expected."
            log_message = log_message.format(self.next_overflow_page_number, self.number, self.index,
                                             self.parent_cell_page_number)
            logger.error(log_message)
            raise OverflowParsingError(log_message)

    def __repr__(self):
        return "<{}: {}>".format(self.__class__.__name__, self.__str__())

    def __str__(self):
        return sub("\t", "", sub("\n", " ", self.stringify()))

    def stringify(self, padding=""):
        string = padding + "Number: {}\n" \
                 + padding + "Page Type: {}\n" \
                 + padding + "Parent Cell Page Number: {}\n" \
                 + padding + "Parent Overflow Page Number: {}\n" \
                 + padding + "Index: {}\n" \
                 + padding + "Next Overflow Page Number: {}\n" \
                 + padding + "Content Length: {}\n" \
                 + padding + "MD5 Hex Digest: {}\n" \
                 + padding + "Content (Hex): {}"
        return string.format(self.number,
                             self.page_type,
                             self.parent_cell_page_number,
                             self.parent_overflow_page_number,
                             self.index,
                             self.next_overflow_page_number,
                             self.content_length,
                             self.md5_hex_digest,
                             hexlify(self.content).decode())


def resolve_overflow(get_page_data, first_overflow_page_number, overflow_byte_size, usable_size,
                     maximum_number_of_overflow_pages=None, parent_cell_page_number=None):

    """

    Follows the overflow chain starting at the first overflow page number and returns the overflow pages in chain
    order.  The overflow content is the concatenation of the content of the returned pages.

    The overflow pages are returned as a list instead of being nested in each other so that long chains do not run
    into recursion depth problems.

    :param get_page_data: function  Takes a page number and returns the bytes of the page.
    :param first_overflow_page_number: int  The overflow page number stored in the cell.
    :param overflow_byte_size: int  The number of payload bytes not stored on the b-tree page.
    :param usable_size: int  The usable size of a page.
    :param maximum_number_of_overflow_pages: int  The longest chain accepted (defaults to the number of pages expected
                                                  for the overflow byte size).
    :param parent_cell_page_number: int  The page number of the cell the chain belongs to (for reporting).

    :return: list  The OverflowPage objects in chain order.

    :raise: OverflowParsingError  If the chain ends early, continues after the payload is complete, loops back on
                                  itself or is longer than the maximum number of overflow pages.

    """

    logger = getLogger(LOGGER_NAME)

    expected_number_of_overflow_pages, _ = calculate_expected_overflow(overflow_byte_size, usable_size)

    if maximum_number_of_overflow_pages is None:
        maximum_number_of_overflow_pages = expected_number_of_overflow_pages

    elif expected_number_of_overflow_pages > maximum_number_of_overflow_pages:
        log_message = "The overflow byte size: {} for the cell on page: {} needs {} overflow pages which exceeds the " \
                      "maximum number of overflow pages: {}."
        log_message = log_message.format(overflow_byte_size, parent_cell_page_number,
                                         expected_number_of_overflow_pages, maximum_number_of_overflow_pages)
        logger.error(log_message)
        raise OverflowParsingError(log_message)

    if not first_overflow_page_number:
        log_message = "The first overflow page number was not set for the cell on page: {} with an overflow byte " \
                      "size of: {}."
        log_message = log_message.format(parent_cell_page_number, overflow_byte_size)
        logger.error(log_message)
        raise OverflowParsingError(log_message)

    overflow_pages = []
    observed_overflow_page_numbers = set()
    payload_remaining = overflow_byte_size
    overflow_page_number = first_overflow_page_number
    parent_overflow_page_number = None

    while overflow_page_number:

        if overflow_page_number in observed_overflow_page_numbers:
            log_message = "The overflow chain for the cell on page: {} loops back to overflow page: {} after {} pages."
            log_message = log_message.format(parent_cell_page_number, overflow_page_number, len(overflow_pages))
            logger.error(log_message)
            raise OverflowParsingError(log_message)

        if len(overflow_pages) >= maximum_number_of_overflow_pages:
            log_message = "The overflow chain for the cell on page: {} exceeds the maximum number of overflow " \
                          "pages: {} at overflow page: {}."
            log_message = log_message.format(parent_cell_page_number, maximum_number_of_overflow_pages,
                                             overflow_page_number)
            logger.error(log_message)
            raise OverflowParsingError(log_message)

        try:

            page = get_page_data(overflow_page_number)

        except ValueError as error:

            log_message = "Failed to retrieve overflow page: {} for the cell on page: {}: {}"
            log_message = log_message.format(overflow_page_number, parent_cell_page_number, error)
            logger.error(log_message)
            raise OverflowParsingError(log_message)

        overflow_page = OverflowPage(page, overflow_page_number, len(overflow_pages), payload_remaining, usable_size,
                                     parent_cell_page_number, parent_overflow_page_number)

        overflow_pages.append(overflow_page)
        observed_overflow_page_numbers.add(overflow_page_number)

        payload_remaining -= overflow_page.content_length
        parent_overflow_page_number = overflow_page_number
        overflow_page_number = overflow_page.next_overflow_page_number

    if payload_remaining > 0:
        log_message = "The overflow chain for the cell on page: {} ended after {} pages with {} of {} overflow bytes " \
                      "still remaining."
        log_message = log_message.format(parent_cell_page_number, len(overflow_pages), payload_remaining,
                                         overflow_byte_size)
        logger.error(log_message)
        raise OverflowParsingError(log_message)

    return overflow_pages
