import pytest
from sqlite_decode.constants import SERIAL_TYPE
from sqlite_decode.exception import ReservedSerialTypeError
from sqlite_decode.exception import UnknownTextEncodingError
from sqlite_decode.exception import UnsupportedTextEncodingError
from sqlite_decode.file.database.types import CellOffset
from sqlite_decode.file.database.types import PageSize
from sqlite_decode.file.database.types import RawText
from sqlite_decode.file.database.types import SerialType
from sqlite_decode.file.database.types import TextEncoding


page_size_params = [
    (1, 65536, True),
    (512, 512, True),
    (4096, 4096, True),
    (32768, 32768, True),
    (0, 0, False),
    (256, 256, False),
    (1000, 1000, False),
    (65535, 65535, False),
]


@pytest.mark.parametrize("value, real_size, valid", page_size_params)
def test_page_size(value, real_size, valid):
    page_size = PageSize(value)
    assert page_size.real_size == real_size
    assert page_size.is_valid() == valid


def test_page_size_from_real_size():
    assert PageSize.from_real_size(65536).value == 1
    assert PageSize.from_real_size(4096) == PageSize(4096)

    # Stored as given and left to is_valid
    assert PageSize.from_real_size(3000) == PageSize(3000)
    assert not PageSize.from_real_size(3000).is_valid()

    with pytest.raises(ValueError):
        PageSize.from_real_size(1)
    with pytest.raises(ValueError):
        PageSize.from_real_size(131072)


def test_cell_offset():
    assert CellOffset(0).real_offset == 65536
    assert CellOffset(1).real_offset == 1
    assert CellOffset(4000).real_offset == 4000
    assert CellOffset.from_real_offset(65536).value == 0
    assert CellOffset.from_real_offset(100) == CellOffset(100)
    with pytest.raises(ValueError):
        CellOffset.from_real_offset(0)
    with pytest.raises(ValueError):
        CellOffset.from_real_offset(65537)


serial_type_params = [
    (0, SERIAL_TYPE.NULL, 0),
    (1, SERIAL_TYPE.INT8, 1),
    (2, SERIAL_TYPE.INT16, 2),
    (3, SERIAL_TYPE.INT24, 3),
    (4, SERIAL_TYPE.INT32, 4),
    (5, SERIAL_TYPE.INT48, 6),
    (6, SERIAL_TYPE.INT64, 8),
    (7, SERIAL_TYPE.FLOAT64, 8),
    (8, SERIAL_TYPE.CONSTANT_0, 0),
    (9, SERIAL_TYPE.CONSTANT_1, 0),
    (12, SERIAL_TYPE.BLOB, 0),
    (13, SERIAL_TYPE.TEXT, 0),
    (14, SERIAL_TYPE.BLOB, 1),
    (25, SERIAL_TYPE.TEXT, 6),
    (1000, SERIAL_TYPE.BLOB, 494),
]


@pytest.mark.parametrize("code, kind, size", serial_type_params)
def test_serial_type(code, kind, size):
    serial_type = SerialType(code)
    assert serial_type.code == code
    assert serial_type.kind == kind
    assert serial_type.size == size
    assert not serial_type.is_reserved


@pytest.mark.parametrize("code", [10, 11])
def test_serial_type_reserved(code):
    serial_type = SerialType(code)
    assert serial_type.kind == SERIAL_TYPE.RESERVED
    assert serial_type.is_reserved
    with pytest.raises(ReservedSerialTypeError) as error:
        _ = serial_type.size
    assert error.value.serial_type == code


def test_serial_type_invalid():
    with pytest.raises(ValueError):
        SerialType(-1)


def test_text_encoding():
    assert TextEncoding(1).name == "UTF-8"
    assert TextEncoding(1).is_supported
    assert TextEncoding(2).name == "UTF-16le"
    assert not TextEncoding(2).is_supported
    assert TextEncoding(3).name == "UTF-16be"
    assert TextEncoding(1) == TextEncoding(1)
    assert TextEncoding(2) != TextEncoding(3)

    with pytest.raises(UnknownTextEncodingError) as error:
        TextEncoding(0)
    assert error.value.value == 0

    with pytest.raises(UnknownTextEncodingError):
        TextEncoding(4)


def test_text_encoding_decode():
    assert TextEncoding(1).decode(b"hello") == "hello"
    assert TextEncoding(1).decode(memoryview("café".encode("utf-8"))) == "café"

    # Invalid utf-8 sequences are replaced
    assert TextEncoding(1).decode(b"a\xffb") == "a\ufffdb"

    with pytest.raises(UnsupportedTextEncodingError):
        TextEncoding(2).decode("hello".encode("utf-16-le"))


def test_raw_text():
    raw_text = RawText(b"hello", TextEncoding(1))
    assert raw_text.decode() == "hello"
    assert str(raw_text) == "hello"
    assert bytes(raw_text) == b"hello"
    assert len(raw_text) == 5
    assert raw_text == b"hello"
    assert raw_text == RawText(bytearray(b"hello"), TextEncoding(1))
    assert raw_text != RawText(b"hello", TextEncoding(3))

    utf_16_text = RawText("hi".encode("utf-16-le"), TextEncoding(2))
    assert bytes(utf_16_text) == b"h\x00i\x00"
    assert str(utf_16_text) == "68006900"
    with pytest.raises(UnsupportedTextEncodingError):
        utf_16_text.decode()


@pytest.mark.parametrize("value", [0, 1, 512, 65535])
def test_cell_offset_inverse(value):
    assert CellOffset.from_real_offset(CellOffset(value).real_offset).value == value


@pytest.mark.parametrize("value", [1, 512, 32768, 65535])
def test_page_size_inverse(value):
    assert PageSize.from_real_size(PageSize(value).real_size).value == value
