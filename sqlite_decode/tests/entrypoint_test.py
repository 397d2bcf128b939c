import pytest
from csv import reader
from openpyxl import load_workbook
from os import listdir
from os.path import basename
from os.path import dirname
from os.path import exists
from os.path import join
from sqlite_decode.entrypoint import main
from sqlite_decode.exception import DatabaseParsingError
from sqlite_decode.exception import SqliteError
from sqlite_decode.tests.constants import *
from sqlite_decode.tests.utilities import *
from sqlite_decode.utilities import parse_args

DB_FILE_NAME = "entrypoint.sqlite"


@pytest.fixture
def entrypoint_db_file(tmp_path):
    db_filepath = tmp_path / DB_FILE_NAME
    statements = [(CREATE_TABLE_STATEMENT, ()),
                  (CREATE_INDEX_STATEMENT, ()),
                  (INSERT_STATEMENT, TEST_ROWS)]
    create_sqlite_database(db_filepath, statements)
    yield str(db_filepath)


def test_main_console_output(entrypoint_db_file, capsys):
    export_paths = main(parse_args([entrypoint_db_file]), entrypoint_db_file)

    assert export_paths == []

    output = capsys.readouterr().out
    assert "Page: 1 of type: B_TREE_TABLE_LEAF at offset: 0 with 2 cells." in output
    assert "#2: (NULL, beta, -300, NULL, )." in output
    assert "Database header information:" not in output


def test_main_header_and_pages(entrypoint_db_file, capsys):
    main(parse_args([entrypoint_db_file, "--header", "--pages"]), entrypoint_db_file)

    output = capsys.readouterr().out
    assert "\nDatabase header information:\n\tMagic Header String" in output
    assert "\nDatabase page information:\n\tPage Breakdown:" in output


def test_main_exports(entrypoint_db_file, tmp_path):
    output_directory = str(tmp_path / "output")
    arguments = parse_args([entrypoint_db_file, "-d", output_directory, "-e", "text", "csv", "xlsx"])

    export_paths = main(arguments, entrypoint_db_file)

    assert export_paths[0] == join(output_directory, DB_FILE_NAME + ".txt")
    assert export_paths[-1] == join(output_directory, DB_FILE_NAME + ".xlsx")
    assert join(output_directory, DB_FILE_NAME + "-b_tree_table_leaf.csv") in export_paths
    assert join(output_directory, DB_FILE_NAME + "-b_tree_index_leaf.csv") in export_paths
    assert all(exists(export_path) for export_path in export_paths)

    with open(export_paths[0], encoding="utf-8") as text_file:
        text = text_file.read()
    assert text.startswith("Database Header:\n")
    assert "Page Number: 1 Cell Index: 0 Offset: " in text

    with open(join(output_directory, DB_FILE_NAME + "-b_tree_table_leaf.csv"), newline="", encoding="utf-8") \
            as csv_file:
        rows = list(reader(csv_file))
    assert rows[0] == ["Page Number", "Cell Index", "Offset", "Overflow Pages", "Row ID"]
    testing_rows = dict((row[4], row) for row in rows[1:] if row[0] != "1")
    assert testing_rows["2"][5:] == ["", "beta", "-300", "", ""]
    assert testing_rows["5"][3] != "0"

    workbook = load_workbook(export_paths[-1], read_only=True)
    assert "B_TREE_TABLE_LEAF" in workbook.sheetnames
    assert "B_TREE_INDEX_LEAF" in workbook.sheetnames
    values = [value for row in workbook["B_TREE_TABLE_LEAF"].iter_rows(values_only=True) for value in row]
    assert " =formula" in values
    assert "beta" in values
    workbook.close()


def test_main_file_prefix(entrypoint_db_file, tmp_path):
    output_directory = str(tmp_path)
    arguments = parse_args([entrypoint_db_file, "-d", output_directory, "-p", "decoded"])

    assert main(arguments, entrypoint_db_file) == [join(output_directory, "decoded.txt")]

    # The existing output file is renamed rather than overwritten
    assert main(arguments, entrypoint_db_file) == [join(output_directory, "decoded.txt")]
    assert len([file_name for file_name in listdir(output_directory) if file_name.startswith("decoded.txt")]) == 2


def test_main_export_sub_paths(entrypoint_db_file, tmp_path):
    output_directory = str(tmp_path / "output")

    export_paths = main(parse_args([entrypoint_db_file, "-d", output_directory]), entrypoint_db_file, True)

    assert dirname(dirname(export_paths[0])) == output_directory
    assert basename(dirname(export_paths[0])).startswith("entrypoint-sqlite-")


def test_main_strict_format_checking(entrypoint_db_file):
    with open(entrypoint_db_file, "ab") as db_file_object:
        db_file_object.write(SMALL_PAGE_SIZE * b"\x00")

    with pytest.raises(DatabaseParsingError):
        main(parse_args([entrypoint_db_file]), entrypoint_db_file)

    main(parse_args([entrypoint_db_file, "-k"]), entrypoint_db_file)


main_error_params = [
    ("export_without_directory", ["-e", "csv"]),
    ("file_prefix_without_directory", ["-p", "prefix"]),
]


@pytest.mark.parametrize("name, arguments", main_error_params, ids=[param[0] for param in main_error_params])
def test_main_argument_errors(name, arguments, entrypoint_db_file):
    with pytest.raises(SqliteError):
        main(parse_args([entrypoint_db_file] + arguments), entrypoint_db_file)


def test_main_missing_and_empty_files(tmp_path):
    missing_file = str(tmp_path / "missing.sqlite")
    with pytest.raises(SqliteError):
        main(parse_args([missing_file]), missing_file)

    empty_file = tmp_path / "empty.sqlite"
    empty_file.write_bytes(b"")
    assert main(parse_args([str(empty_file)]), str(empty_file)) == []
