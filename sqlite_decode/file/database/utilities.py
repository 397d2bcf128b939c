from logging import getLogger
from struct import unpack
from sqlite_decode.constants import FREELIST_HEADER_LENGTH
from sqlite_decode.constants import FREELIST_LEAF_PAGE_NUMBER_LENGTH
from sqlite_decode.constants import LOCK_BYTE_PAGE_START_OFFSET
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import POINTER_MAP_ENTRY_LENGTH
from sqlite_decode.exception import DatabaseParsingError

"""

utilities.py

This script holds utility functions for working out which pages of a database are not b-tree pages from the database
header and the freelist trunk pages rather than more general utility methods.

This script holds the following function(s):
get_freelist_page_numbers(get_page_data, first_freelist_trunk_page_number, number_of_freelist_pages,
                          database_size_in_pages, usable_size)
get_lock_byte_page_number(page_size, database_size_in_pages)
get_maximum_pointer_map_entries_per_page(usable_size)
get_pointer_map_page_numbers(database_size_in_pages, usable_size, lock_byte_page_number=None)

"""


def get_freelist_page_numbers(get_page_data, first_freelist_trunk_page_number, number_of_freelist_pages,
                              database_size_in_pages, usable_size):

    """

    Follows the freelist trunk pages starting at the first freelist trunk page number and returns the trunk and leaf
    page numbers found.

    Each freelist trunk page starts with the next freelist trunk page number (0 if this is the last trunk page) and
    the number of leaf page numbers on the trunk page, each 4 bytes, followed by the leaf page numbers themselves.

    :param get_page_data: function  Takes a page number and returns the bytes of the page.
    :param first_freelist_trunk_page_number: int  The first freelist trunk page number from the database header.
    :param number_of_freelist_pages: int  The number of freelist pages from the database header.
    :param database_size_in_pages: int  The number of pages in the database.
    :param usable_size: int  The usable size of a page.

    :return: tuple(list, list)  The freelist trunk page numbers and the freelist leaf page numbers in the order found.

    :raise: DatabaseParsingError  If a page number is out of range or repeated, a trunk page claims more leaf pages
                                  than fit on it or the total does not match the number of freelist pages.

    """

    logger = getLogger(LOGGER_NAME)

    maximum_leaf_page_numbers = (usable_size - FREELIST_HEADER_LENGTH) // FREELIST_LEAF_PAGE_NUMBER_LENGTH

    freelist_trunk_page_numbers = []
    freelist_leaf_page_numbers = []
    observed_page_numbers = set()

    freelist_trunk_page_number = first_freelist_trunk_page_number
    while freelist_trunk_page_number:

        if freelist_trunk_page_number in observed_page_numbers or \
                not 1 < freelist_trunk_page_number <= database_size_in_pages:
            log_message = "Invalid freelist trunk page number: {} found after {} trunk pages in a database of {} pages."
            log_message = log_message.format(freelist_trunk_page_number, len(freelist_trunk_page_numbers),
                                             database_size_in_pages)
            logger.error(log_message)
            raise DatabaseParsingError(log_message)

        page = get_page_data(freelist_trunk_page_number)
        next_freelist_trunk_page_number, number_of_leaf_page_numbers = unpack(b">II", page[:FREELIST_HEADER_LENGTH])

        if number_of_leaf_page_numbers > maximum_leaf_page_numbers:
            log_message = "The freelist trunk page: {} claims {} leaf pages when at most {} fit on the page."
            log_message = log_message.format(freelist_trunk_page_number, number_of_leaf_page_numbers,
                                             maximum_leaf_page_numbers)
            logger.error(log_message)
            raise DatabaseParsingError(log_message)

        freelist_trunk_page_numbers.append(freelist_trunk_page_number)
        observed_page_numbers.add(freelist_trunk_page_number)

        for leaf_index in range(number_of_leaf_page_numbers):
            leaf_start_offset = FREELIST_HEADER_LENGTH + leaf_index * FREELIST_LEAF_PAGE_NUMBER_LENGTH
            leaf_end_offset = leaf_start_offset + FREELIST_LEAF_PAGE_NUMBER_LENGTH
            freelist_leaf_page_number = unpack(b">I", page[leaf_start_offset:leaf_end_offset])[0]

            if freelist_leaf_page_number in observed_page_numbers or \
                    not 1 < freelist_leaf_page_number <= database_size_in_pages:
                log_message = "Invalid freelist leaf page number: {} found at index: {} on freelist trunk page: {} " \
                              "in a database of {} pages."
                log_message = log_message.format(freelist_leaf_page_number, leaf_index, freelist_trunk_page_number,
                                                 database_size_in_pages)
                logger.error(log_message)
                raise DatabaseParsingError(log_message)

            freelist_leaf_page_numbers.append(freelist_leaf_page_number)
            observed_page_numbers.add(freelist_leaf_page_number)

        freelist_trunk_page_number = next_freelist_trunk_page_number

    if len(observed_page_numbers) != number_of_freelist_pages:
        log_message = "The number of freelist pages found: {} ({} trunk and {} leaf) does not equal the number of " \
                      "freelist pages: {} in the database header."
        log_message = log_message.format(len(observed_page_numbers), len(freelist_trunk_page_numbers),
                                         len(freelist_leaf_page_numbers), number_of_freelist_pages)
        logger.error(log_message)
        raise DatabaseParsingError(log_message)

    return freelist_trunk_page_numbers, freelist_leaf_page_numbers


def get_lock_byte_page_number(page_size, database_size_in_pages):

    """

    The lock byte page is the page holding the bytes at offset 1073741824 (1 GB) through 1073742335 of the file.  It is
    only present when the database is large enough to reach that offset.

    """

    lock_byte_page_number = LOCK_BYTE_PAGE_START_OFFSET // page_size + 1
    return lock_byte_page_number if lock_byte_page_number <= database_size_in_pages else None


def get_maximum_pointer_map_entries_per_page(usable_size):
    return usable_size // POINTER_MAP_ENTRY_LENGTH


def get_pointer_map_page_numbers(database_size_in_pages, usable_size, lock_byte_page_number=None):

    """

    Returns the page numbers of the pointer map pages in a database of the given size.

    The first pointer map page is page 2 and each pointer map page is followed by the pages it has entries for.  If a
    pointer map page would fall on the lock byte page it moves to the page after.

    Note:  When calling this function, the caller should have already determined if pointer map pages exist in the file
           they are parsing or not.  This can be done by checking the largest root b-tree page number exists in the
           database header.  If it does not exist, then pointer map pages are not enabled.

    """

    pages_per_pointer_map_page = get_maximum_pointer_map_entries_per_page(usable_size) + 1

    pointer_map_page_numbers = []
    pointer_map_page_number = 2
    while pointer_map_page_number <= database_size_in_pages:
        page_number = pointer_map_page_number
        if page_number == lock_byte_page_number:
            page_number += 1
        if page_number <= database_size_in_pages:
            pointer_map_page_numbers.append(page_number)
        pointer_map_page_number += pages_per_pointer_map_page

    return pointer_map_page_numbers
