from logging import getLogger
from openpyxl import Workbook
from os import rename
from os.path import exists
from os.path import sep
from uuid import uuid4
from sqlite_decode.constants import ILLEGAL_XML_CHARACTER_PATTERN
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import PAGE_TYPE
from sqlite_decode.exception import ExportError
from sqlite_decode.output import get_column_value_string

"""

xlsx_export.py

This script holds the objects used for exporting the decoded cells of the b-tree pages of a database to xlsx files.

This script holds the following object(s):
PageXlsxExporter(object)

"""


class PageXlsxExporter(object):

    def __init__(self, export_directory, file_name):
        self._workbook = Workbook(write_only=True)
        self._xlsx_file_name = export_directory + sep + file_name
        self._sheets = {}

    def __enter__(self):

        # Check if the file exists and if it does rename it
        if exists(self._xlsx_file_name):

            # Generate a uuid to append to the file name
            new_file_name_for_existing_file = self._xlsx_file_name + "-" + str(uuid4())

            # Rename the existing file
            rename(self._xlsx_file_name, new_file_name_for_existing_file)

            log_message = "File: {} already existing when creating the file for page xlsx exporting.  The " \
                          "file was renamed to: {} and new data will be written to the file name specified."
            log_message = log_message.format(self._xlsx_file_name, new_file_name_for_existing_file)
            getLogger(LOGGER_NAME).debug(log_message)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._workbook.save(self._xlsx_file_name)
        log_message = "Saving file {} after xlsx export."
        log_message = log_message.format(self._xlsx_file_name)
        getLogger(LOGGER_NAME).debug(log_message)

    @property
    def file_name(self):
        return self._xlsx_file_name

    def write_page(self, page):

        """

        Writes the cells of the b-tree page to the sheet for its page type.  The sheet is created with its column
        headers the first time a page of that type is written.

        :param page: BTreePage  The decoded b-tree page.

        :raise: ExportError  If the page is not a b-tree page.

        """

        if page.page_type not in (PAGE_TYPE.B_TREE_TABLE_LEAF, PAGE_TYPE.B_TREE_TABLE_INTERIOR,
                                  PAGE_TYPE.B_TREE_INDEX_LEAF, PAGE_TYPE.B_TREE_INDEX_INTERIOR):
            log_message = "Invalid page type: {} found for xlsx export on page: {} while writing to xlsx file " \
                          "name: {}."
            log_message = log_message.format(page.page_type, page.number, self._xlsx_file_name)
            getLogger(LOGGER_NAME).warning(log_message)
            raise ExportError(log_message)

        sheet_name = page.page_type
        sheet = self._sheets[sheet_name] if sheet_name in self._sheets else None

        if not sheet:
            sheet = self._workbook.create_sheet(sheet_name)
            self._sheets[sheet_name] = sheet

            column_headers = ["Page Number", "Cell Index", "Offset"]
            if page.page_type == PAGE_TYPE.B_TREE_TABLE_LEAF:
                column_headers.extend(["Overflow Pages", "Row ID"])
            elif page.page_type == PAGE_TYPE.B_TREE_TABLE_INTERIOR:
                column_headers.extend(["Left Child Pointer", "Row ID"])
            elif page.page_type == PAGE_TYPE.B_TREE_INDEX_INTERIOR:
                column_headers.extend(["Overflow Pages", "Left Child Pointer"])
            else:
                column_headers.append("Overflow Pages")
            sheet.append(column_headers)

        PageXlsxExporter._write_cells(sheet, page.page_type, page.cells)

    @staticmethod
    def _write_cells(sheet, page_type, cells):

        """

        This function will write the list of cells sent in to the sheet specified.

        Note:  Text and blob values are written as strings the same way as the text output.  Any xml illegal characters
               left in the string are replaced with a space since they can not be written to the xlsx.  Due to the way
               openpyxl determines data types of particular cells in the write-only mode, a string starting with "="
               is written as a formula.  These strings are prefaced with a space.

        Note:  If the value is None, we leave it as None.

        """

        for cell in cells:

            row = [cell.page_number, cell.index, cell.start_offset]

            if page_type == PAGE_TYPE.B_TREE_TABLE_INTERIOR:
                row.extend([cell.left_child_pointer, cell.row_id])
                sheet.append(row)
                continue

            row.append(cell.number_of_overflow_pages)
            if page_type == PAGE_TYPE.B_TREE_TABLE_LEAF:
                row.append(cell.row_id)
            elif page_type == PAGE_TYPE.B_TREE_INDEX_INTERIOR:
                row.append(cell.left_child_pointer)

            for value in cell.payload.column_values:
                if value is not None and not isinstance(value, (int, float)):
                    value = ILLEGAL_XML_CHARACTER_PATTERN.sub(" ", get_column_value_string(value))
                    if value.startswith("="):
                        value = ' ' + value
                row.append(value)

            sheet.append(row)
