from logging import getLogger
from os import rename
from os.path import exists
from os.path import sep
from uuid import uuid4
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import PAGE_TYPE
from sqlite_decode.exception import ExportError
from sqlite_decode.output import stringify_cell_record

"""

text_export.py

This script holds the objects used for exporting the decoded cells of the b-tree pages of a database to text files or
the console.

This script holds the following object(s):
PageConsoleExporter(object)
PageTextExporter(object)

"""


class PageConsoleExporter(object):

    @staticmethod
    def write_page(page):

        """

        Prints the cells of the b-tree page.  Table leaf cells are written with their row ids, index cells with their
        key columns and table interior cells with their row id and left child page.

        :param page: BTreePage  The decoded b-tree page.

        :raise: ExportError  If the page is not a b-tree page.

        """

        if page.page_type not in (PAGE_TYPE.B_TREE_TABLE_LEAF, PAGE_TYPE.B_TREE_TABLE_INTERIOR,
                                  PAGE_TYPE.B_TREE_INDEX_LEAF, PAGE_TYPE.B_TREE_INDEX_INTERIOR):
            log_message = "Invalid page type: {} found for text export on page: {}."
            log_message = log_message.format(page.page_type, page.number)
            getLogger(LOGGER_NAME).warning(log_message)
            raise ExportError(log_message)

        page_header = "Page: {} of type: {} at offset: {} with {} cells."
        print(page_header.format(page.number, page.page_type, page.offset, len(page.cells)))

        PageConsoleExporter._write_cells(page.page_type, page.cells)

    @staticmethod
    def _write_cells(page_type, cells):
        base_string = "Page Number: {} Cell Index: {} Offset: {}"
        for cell in cells:
            preface = base_string.format(cell.page_number, cell.index, cell.start_offset)
            row_values = stringify_cell_record(cell, page_type)
            print(preface + " " + row_values + ".")


class PageTextExporter(object):

    def __init__(self, export_directory, file_name):

        """

        Constructor.

        Note:  If the file is detected as already existing, a uuid will be appended to the file name of the old file
               and a new file by the name specified will be created.

        :param export_directory: str  The directory to write the text file to.
        :param file_name: str  The name of the text file.

        """

        self._text_file_name = export_directory + sep + file_name
        self._file_handle = None

    def __enter__(self):

        # Check if the file exists and if it does rename it
        if exists(self._text_file_name):

            # Generate a uuid to append to the file name
            new_file_name_for_existing_file = self._text_file_name + "-" + str(uuid4())

            # Rename the existing file
            rename(self._text_file_name, new_file_name_for_existing_file)

            log_message = "File: {} already existing when creating the file for page text exporting.  The " \
                          "file was renamed to: {} and new data will be written to the file name specified."
            log_message = log_message.format(self._text_file_name, new_file_name_for_existing_file)
            getLogger(LOGGER_NAME).debug(log_message)

        self._file_handle = open(self._text_file_name, "w", encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._file_handle.close()

    @property
    def file_name(self):
        return self._text_file_name

    def write_header(self, database_header):
        self._file_handle.write("Database Header:\n{}\n".format(database_header.stringify("\t")))

    def write_page(self, page):

        if page.page_type not in (PAGE_TYPE.B_TREE_TABLE_LEAF, PAGE_TYPE.B_TREE_TABLE_INTERIOR,
                                  PAGE_TYPE.B_TREE_INDEX_LEAF, PAGE_TYPE.B_TREE_INDEX_INTERIOR):
            log_message = "Invalid page type: {} found for text export on page: {} while writing to text file " \
                          "name: {}."
            log_message = log_message.format(page.page_type, page.number, self._text_file_name)
            getLogger(LOGGER_NAME).warning(log_message)
            raise ExportError(log_message)

        page_header = "Page: {} of type: {} at offset: {} with {} cells.\n"
        self._file_handle.write(page_header.format(page.number, page.page_type, page.offset, len(page.cells)))

        base_string = "Page Number: {} Cell Index: {} Offset: {}"
        for cell in page.cells:
            preface = base_string.format(cell.page_number, cell.index, cell.start_offset)
            row_values = stringify_cell_record(cell, page.page_type)
            self._file_handle.write(preface + " " + row_values + ".\n")
