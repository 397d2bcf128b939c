import pytest
from sqlite_decode.constants import SERIAL_TYPE
from sqlite_decode.exception import RecordParsingError
from sqlite_decode.exception import ReservedSerialTypeError
from sqlite_decode.file.database.payload import IndexCellPayload
from sqlite_decode.file.database.payload import Record
from sqlite_decode.file.database.payload import TableCellPayload
from sqlite_decode.file.database.types import RawText
from sqlite_decode.file.database.types import TextEncoding
from sqlite_decode.tests.constants import *
from sqlite_decode.tests.utilities import build_record
from sqlite_decode.tests.utilities import encode_test_varint
from sqlite_decode.utilities import get_md5_hash

UTF_8 = TextEncoding(1)
UTF_16LE = TextEncoding(2)

test_values = [None, 1, -300, 70000, 1 << 40, -(1 << 60), 2.5, "text", b"\x00\x01\x02"]

test_record_params = [
    (build_record(test_values), SUCCESS),
    (build_record([]), SUCCESS),
    (b"", RECORD_ERROR),
    (b"\x85", RECORD_ERROR),
    (b"\x05\x01", RECORD_ERROR),
    (b"\x00", RECORD_ERROR),
    (build_record([1, "text"]) + b"\x00", RECORD_ERROR),
    (build_record([1, "text"])[:-1], RECORD_ERROR),
    (b"\x02\x0a", RESERVED_ERROR),
    (b"\x02\x0b\x00", RESERVED_ERROR),
    (b"\x02\x81", RECORD_ERROR),
]


@pytest.mark.parametrize("payload, expected_value", test_record_params)
def test_record_init(payload, expected_value):
    if expected_value == RESERVED_ERROR:
        with pytest.raises(ReservedSerialTypeError):
            _ = Record(payload, UTF_8)

    elif expected_value == RECORD_ERROR:
        with pytest.raises(RecordParsingError):
            _ = Record(payload, UTF_8)

    else:
        record = Record(payload, UTF_8)

        assert record.byte_size == len(payload)
        assert record.header_byte_size == payload[0]
        assert record.header_byte_size_varint_length == 1
        assert record.body_byte_size == len(payload) - payload[0]
        assert record.md5_hex_digest == get_md5_hash(payload)
        assert len(record.record_columns) == len(record.column_types) == len(record.column_values)
        assert sum(record_column.content_size for record_column in record.record_columns) == record.body_byte_size


def test_record_values():
    record = Record(build_record(test_values), UTF_8)

    assert [serial_type.kind for serial_type in record.column_types] == [
        SERIAL_TYPE.NULL, SERIAL_TYPE.INT8, SERIAL_TYPE.INT16, SERIAL_TYPE.INT24, SERIAL_TYPE.INT48,
        SERIAL_TYPE.INT64, SERIAL_TYPE.FLOAT64, SERIAL_TYPE.TEXT, SERIAL_TYPE.BLOB]

    values = record.column_values
    assert values[:7] == [None, 1, -300, 70000, 1 << 40, -(1 << 60), 2.5]

    assert isinstance(values[7], RawText)
    assert values[7].decode() == "text"
    assert values[7].text_encoding == UTF_8

    assert isinstance(values[8], memoryview)
    assert bytes(values[8]) == b"\x00\x01\x02"

    assert [record_column.index for record_column in record.record_columns] == list(range(len(test_values)))


def test_record_constant_serial_types():
    record = Record(b"\x04\x08\x09\x00", UTF_8)
    assert record.column_values == [0, 1, None]
    assert record.body_byte_size == 0


def test_record_multi_byte_header():
    values = list(range(100, 240))
    serial_types = len(values) * encode_test_varint(1)
    header = encode_test_varint(len(serial_types) + 2) + serial_types
    payload = header + bytes(values)

    record = Record(payload, UTF_8)
    assert record.header_byte_size_varint_length == 2
    assert record.header_byte_size == len(values) + 2
    assert record.column_values == [value - 256 if value > 127 else value for value in values]


def test_record_column_md5():
    payload = build_record([7, "ab"])
    record = Record(payload, UTF_8)

    # Serial type varint from the header followed by the content from the body
    assert record.record_columns[0].md5_hex_digest == get_md5_hash(b"\x01" + b"\x07")
    assert record.record_columns[1].md5_hex_digest == get_md5_hash(b"\x11" + b"ab")


def test_record_text_encoding():
    payload = build_record(["hi"], "utf-16-le")
    record = Record(payload, UTF_16LE)
    assert record.column_types[0].code == 13 + 2 * 4
    assert bytes(record.column_values[0]) == b"h\x00i\x00"
    assert str(record.column_values[0]) == "68006900"


def test_table_cell_payload():
    payload = TableCellPayload(memoryview(build_record(["table", "t", "t", 2, "CREATE TABLE t (a)"])), UTF_8)
    assert [str(value) if isinstance(value, RawText) else value for value in payload.column_values] == \
        ["table", "t", "t", 2, "CREATE TABLE t (a)"]


def test_index_cell_payload():
    payload = IndexCellPayload(build_record(["key", 42]), UTF_8)
    assert payload.row_id == 42
    assert len(payload.column_values) == 2
    assert "Row ID: 42" in payload.stringify()

    # A "without rowid" index record may end in a non-integer column
    payload = IndexCellPayload(build_record([1, "key"]), UTF_8)
    assert payload.row_id is None

    payload = IndexCellPayload(build_record([]), UTF_8)
    assert payload.row_id is None


def test_record_stringify():
    record = Record(build_record([1, b"\xab"]), UTF_8)
    string = record.stringify("\t")
    assert "\tByte Size: {}".format(record.byte_size) in string
    assert "Value: ab" in string
    assert "\n" not in str(record)
    assert "\t" not in str(record)
