import uuid
import warnings
import sys
from logging import CRITICAL, ERROR, WARNING, INFO, DEBUG, basicConfig, getLogger
from os.path import basename, abspath, join, exists, getsize, normpath, sep
from time import time
from sqlite_decode.constants import EXPORT_TYPES
from sqlite_decode.constants import LOGGER_NAME
from sqlite_decode.exception import SqliteError
from sqlite_decode.export.csv_export import PageCsvExporter
from sqlite_decode.export.text_export import PageConsoleExporter
from sqlite_decode.export.text_export import PageTextExporter
from sqlite_decode.export.xlsx_export import PageXlsxExporter
from sqlite_decode.file.database.database import Database
from sqlite_decode.output import stringify_page_information
from sqlite_decode.utilities import get_sqlite_files, create_directory, parse_args

"""

entrypoint.py

This script will act as the command line script to run this library as a stand-alone application.

This script holds the following function(s):
main(arguments, sqlite_file_path, export_sub_paths=False)
print_text(output_directory, file_prefix, database, logger)
print_csv(output_directory, file_prefix, database, logger)
print_xlsx(output_directory, file_prefix, database, logger)
cli()

"""


def main(arguments, sqlite_file_path, export_sub_paths=False):
    """
    The primary entrypoint for the SQLite Decode utility.

    :param arguments: the object of key => value arguments that have been provided as the runtime configuration in which
        the SQLite Decode tool should run.
    :param sqlite_file_path: the string path to the SQLite file being processed.
    :param export_sub_paths: the boolean determination of whether to generate subdirectories for the output for each
        SQLite file being processed.

    :return: the list of paths of the files written by the exports.
    """

    # set program output type to UTF-8
    if 'pytest' not in sys.modules:
        sys.stdout.reconfigure(encoding='utf-8', errors='namereplace')

    # Handle the logging and warning settings
    if not arguments.log_level:
        raise SqliteError("Error in setting up logging: no log level determined.")

    # Get the logging level
    logger = getLogger(LOGGER_NAME)
    logging_level_arg = arguments.log_level
    if logging_level_arg != "off":
        if logging_level_arg == "critical":
            logging_level = CRITICAL
        elif logging_level_arg == "error":
            logging_level = ERROR
        elif logging_level_arg == "warning":
            logging_level = WARNING
        elif logging_level_arg == "info":
            logging_level = INFO
        elif logging_level_arg == "debug":
            logging_level = DEBUG
        else:
            raise SqliteError("Invalid option for logging: {}.".format(logging_level_arg))
    else:
        logging_level = None

    # Setup logging
    basicConfig(level=logging_level,
                format='%(levelname)s %(asctime)s [%(pathname)s] %(funcName)s at line %(lineno)d: %(message)s',
                datefmt='%d %b %Y %H:%M:%S',
                filename=arguments.log_file if arguments.log_file else None)

    logger.debug(f"Setup logging using the log level: {logging_level}.")
    logger.info(f"Using options: {arguments}")

    if arguments.warnings:

        # Turn warnings on if it was specified
        warnings.filterwarnings("always")

        logger.info("Warnings have been turned on.")

    else:

        # Ignore warnings by default
        warnings.filterwarnings("ignore")

    # If there is an export format specified that is not "text", then an output directory is required
    if arguments.export and (len(arguments.export) > 1 or (len(arguments.export) == 1 and
            arguments.export[0].upper() != EXPORT_TYPES.TEXT)) and not arguments.directory:
        raise SqliteError("The directory needs to be specified (--directory) if an export type other than text "
                          "is specified (--export).")
    if arguments.file_prefix and not arguments.directory:
        raise SqliteError("The directory needs to be specified (--directory) if a file prefix is "
                          "specified (--file-prefix).")

    # Setup the export type
    export_types = [EXPORT_TYPES.TEXT]
    if arguments.export:
        export_types = list(map(str.upper, arguments.export))

    # Setup the strict format checking
    strict_format_checking = not arguments.disable_strict_format_checking

    # The file prefix is taken from the name of the SQLite file unless the file_prefix argument is set
    file_prefix = arguments.file_prefix if arguments.file_prefix else basename(normpath(sqlite_file_path))

    # Setup the directory if specified
    output_directory = None
    if arguments.directory:
        if not exists(arguments.directory):
            if not create_directory(arguments.directory):
                raise IOError("Unable to create the new output directory: {}".format(arguments.directory))
        output_directory = arguments.directory
        # Determine if there are sub-paths being configured for exports
        if export_sub_paths:
            # Generate unique subpath and create the directory
            subpath = file_prefix.replace(".", "-") + "-" + str(uuid.uuid4().hex)
            if create_directory(join(output_directory, subpath)):
                output_directory = join(output_directory, subpath)
            else:
                raise IOError("Unable to create the new sub-directory: {}".format(join(output_directory, subpath)))

    logger.debug(f"Determined export type to be {export_types} with file prefix: {file_prefix} and output "
                 f"directory: {output_directory}")

    # Obtain the SQLite file
    if not exists(sqlite_file_path):
        raise SqliteError(f"Unable to find SQLite file: {sqlite_file_path}.")

    if getsize(sqlite_file_path) == 0:
        logger.error("File: {} has no content. Nothing to decode.".format(sqlite_file_path))
        return []

    # Print a message decoding is starting and log the start time for reporting at the end on amount of time to run
    logger.info(f"\nDecoding: {sqlite_file_path}...")
    start_time = time()

    database = Database.from_file(sqlite_file_path, strict_format_checking=strict_format_checking)

    printable_header = database.database_header.stringify(padding="\t")
    logger.debug(f"\nDatabase header information:\n{printable_header}")
    logger.debug("Continuing to decode...")
    # Check if the header info was asked for
    if arguments.header:
        print(f"\nDatabase header information:\n{printable_header}")
        print("Continuing to decode...")

    printable_pages = stringify_page_information(database, "\t")
    logger.debug(f"\nDatabase page information:\n{printable_pages}")
    # Check if the page info was asked for
    if arguments.pages:
        print(f"\nDatabase page information:\n{printable_pages}")
        print("Continuing to decode...")

    exported = False
    export_paths = []

    # Export to text
    if EXPORT_TYPES.TEXT in export_types:
        exported = True
        export_paths += print_text(output_directory, file_prefix, database, logger)

    # Export to CSV
    if EXPORT_TYPES.CSV in export_types:
        exported = True
        export_paths += print_csv(output_directory, file_prefix, database, logger)

    # Export to XLSX
    if EXPORT_TYPES.XLSX in export_types:
        exported = True
        export_paths.append(print_xlsx(output_directory, file_prefix, database, logger))

    # The export type was not found (this should not occur due to the checking of argparse)
    if not exported:
        raise SqliteError(f"Invalid option for export type: {(', '.join(export_types))}.")

    logger.info(f"Finished in {round(time() - start_time, 2)} seconds.")

    return export_paths


def print_text(output_directory, file_prefix, database, logger):
    """
    Prints the decoded b-tree pages to the output directory or stdout console as configured, and returns the path of
    any file(s) that are generated as a result of the export
    """
    export_paths = []

    if output_directory:

        text_file_name = file_prefix + ".txt"

        print(f"\nExporting pages as text to {output_directory}{sep}{text_file_name}...")
        logger.debug(f"Exporting pages as text to {output_directory}{sep}{text_file_name}.")

        with PageTextExporter(output_directory, text_file_name) as page_text_exporter:
            page_text_exporter.write_header(database.database_header)
            for page in database.pages.values():
                page_text_exporter.write_page(page)

        logger.debug('Adding exported file to export_paths {}'.format(page_text_exporter.file_name))
        export_paths.append(page_text_exporter.file_name)

    else:

        # Print all of the b-tree pages to the console
        logger.debug("Printing pages as text to the console.")

        for page in database.pages.values():
            PageConsoleExporter.write_page(page)

    return export_paths


def print_csv(output_directory, file_prefix, database, logger):
    """
    Writes one csv file per b-tree page type to the output directory and returns their paths
    """
    print(f"\nExporting pages as CSV to {output_directory}...")
    logger.debug(f"Exporting pages as CSV to {output_directory}.")

    return PageCsvExporter.write_database(file_prefix, output_directory, database)


def print_xlsx(output_directory, file_prefix, database, logger):
    """
    Writes the b-tree pages to a single xlsx workbook in the output directory and returns its path
    """
    xlsx_file_name = file_prefix + ".xlsx"

    print(f"\nExporting pages as XLSX to {output_directory}{sep}{xlsx_file_name}...")
    logger.debug(f"Exporting pages as XLSX to {output_directory}{sep}{xlsx_file_name}.")

    with PageXlsxExporter(output_directory, xlsx_file_name) as page_xlsx_exporter:
        for page in database.pages.values():
            page_xlsx_exporter.write_page(page)

    return page_xlsx_exporter.file_name


def cli():
    # Determine if a directory has been passed instead of a file, in which case, find all
    args = parse_args()
    if args.sqlite_path is not None:
        sqlite_files = get_sqlite_files(abspath(args.sqlite_path))
        # Ensure there is at least one SQLite file
        if len(sqlite_files) > 0:
            for sqlite_file in sqlite_files:
                # Call the main function
                main(args, sqlite_file, len(sqlite_files) > 1)
        else:
            raise SqliteError("No valid SQLite files were found in the provided path")
    else:
        raise SqliteError("No SQLite file or directory was passed")


if __name__ == "__main__":
    cli()
