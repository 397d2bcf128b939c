from csv import QUOTE_ALL
from csv import writer
from logging import DEBUG
from logging import getLogger
from os.path import basename
from os.path import normpath
from os.path import sep
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.constants import PAGE_TYPE
from sqlite_decode.exception import ExportError
from sqlite_decode.output import get_column_value_string

"""

csv_export.py

This script holds the objects used for exporting the decoded cells of the b-tree pages of a database to csv files.

This script holds the following object(s):
PageCsvExporter(object)

"""


class PageCsvExporter(object):

    @staticmethod
    def write_database(csv_file_name, export_directory, database):

        """

        Writes the cells of the b-tree pages of the database to one csv file per b-tree page type.  The csv files are
        named after the csv file name with the page type appended.  Page types without any pages are not written.

        Note:  Column values are written as strings the same way as the text output.  Text is decoded in the database
               text encoding (or written as hex if the encoding is not supported for decoding) and blobs are written
               as hex.  NULL values are written as empty fields.

        :param csv_file_name: str  The base name of the csv files.
        :param export_directory: str  The directory to write the csv files to.
        :param database: Database  The decoded database.

        :return: list  The paths of the csv files written.

        """

        logger = getLogger(LOGGER_NAME)

        csv_file_names = []

        for page_type in [PAGE_TYPE.B_TREE_TABLE_LEAF, PAGE_TYPE.B_TREE_TABLE_INTERIOR,
                          PAGE_TYPE.B_TREE_INDEX_LEAF, PAGE_TYPE.B_TREE_INDEX_INTERIOR]:

            pages = [page for page in database.pages.values() if page.page_type == page_type]

            if not pages:
                continue

            fixed_file_name = basename(normpath(csv_file_name))
            page_type_csv_file_name = export_directory + sep + fixed_file_name + "-" + page_type.lower() + ".csv"

            logger.info("Writing CSV file: {}.".format(page_type_csv_file_name))

            with open(page_type_csv_file_name, "w", newline="", encoding="utf-8") as csv_file_handle:

                csv_writer = writer(csv_file_handle, delimiter=',', quotechar="\"", quoting=QUOTE_ALL)

                if page_type == PAGE_TYPE.B_TREE_TABLE_LEAF:
                    PageCsvExporter._write_b_tree_table_leaf_records(csv_writer, pages)
                elif page_type == PAGE_TYPE.B_TREE_TABLE_INTERIOR:
                    PageCsvExporter._write_b_tree_table_interior_records(csv_writer, pages)
                elif page_type in (PAGE_TYPE.B_TREE_INDEX_LEAF, PAGE_TYPE.B_TREE_INDEX_INTERIOR):
                    PageCsvExporter._write_b_tree_index_records(csv_writer, pages)
                else:
                    log_message = "Invalid page type: {} found for csv export to csv file name: {}."
                    log_message = log_message.format(page_type, page_type_csv_file_name)
                    logger.warning(log_message)
                    raise ExportError(log_message)

            csv_file_names.append(page_type_csv_file_name)

        return csv_file_names

    @staticmethod
    def _get_column_values(cell):
        return [None if value is None else get_column_value_string(value) for value in cell.payload.column_values]

    @staticmethod
    def _write_b_tree_table_leaf_records(csv_writer, pages):

        logger = getLogger(LOGGER_NAME)

        csv_writer.writerow(["Page Number", "Cell Index", "Offset", "Overflow Pages", "Row ID"])

        for page in pages:
            for cell in page.cells:
                row = [cell.page_number, cell.index, cell.start_offset, cell.number_of_overflow_pages, cell.row_id]
                row.extend(PageCsvExporter._get_column_values(cell))
                csv_writer.writerow(row)

                if logger.isEnabledFor(DEBUG):
                    log_message = "Page: {} cell index: {} at offset: {} with row id: {}: ({})"
                    log_message = log_message.format(cell.page_number, cell.index, cell.start_offset, cell.row_id,
                                                     ", ".join(get_column_value_string(value)
                                                               for value in cell.payload.column_values))
                    logger.debug(log_message)

    @staticmethod
    def _write_b_tree_table_interior_records(csv_writer, pages):

        csv_writer.writerow(["Page Number", "Cell Index", "Offset", "Left Child Pointer", "Row ID"])

        for page in pages:
            for cell in page.cells:
                csv_writer.writerow([cell.page_number, cell.index, cell.start_offset, cell.left_child_pointer,
                                     cell.row_id])

    @staticmethod
    def _write_b_tree_index_records(csv_writer, pages):

        """

        Note:  Index interior cells are written with their left child pointer while index leaf cells leave the column
               empty.  The row id is the last column of the index record for indexes on rowid tables and is written
               with the rest of the record columns.

        """

        csv_writer.writerow(["Page Number", "Cell Index", "Offset", "Overflow Pages", "Left Child Pointer"])

        for page in pages:
            for cell in page.cells:
                left_child_pointer = cell.left_child_pointer if page.page_type == PAGE_TYPE.B_TREE_INDEX_INTERIOR \
                    else None
                row = [cell.page_number, cell.index, cell.start_offset, cell.number_of_overflow_pages,
                       left_child_pointer]
                row.extend(PageCsvExporter._get_column_values(cell))
                csv_writer.writerow(row)
