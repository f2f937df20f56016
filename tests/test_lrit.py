import struct

import pytest

from goestools.lrit import (
    CCSDS_TO_UNIX_DAYS_OFFSET,
    AncillaryTextHeader,
    AnnotationHeader,
    DCSFileNameHeader,
    HeaderError,
    ImageDataFunctionHeader,
    ImageNavigationHeader,
    ImageStructureHeader,
    NOAALRITHeader,
    PrimaryHeader,
    RiceCompressionHeader,
    SegmentIdentificationHeader,
    TimeStampHeader,
    get_header,
    get_header_map,
    has_header,
    read_header,
)


def primary(total, data_length=8000, file_type=0):
    return struct.pack(">BHBIQ", 0, 16, file_type, total, data_length)


def text_header(code, text):
    raw = text.encode("latin-1")
    return struct.pack(">BH", code, 3 + len(raw)) + raw


def image_structure(columns=100, lines=50):
    return struct.pack(">BHBHHB", 1, 9, 8, columns, lines, 0)


def timestamp(days, millis):
    return struct.pack(">BHBHI", 5, 10, 0x40, days, millis)


def build(*headers):
    body = b"".join(headers)
    return primary(16 + len(body)) + body


def test_header_map_positions():
    ims = image_structure()
    ann = text_header(4, "hello")
    buf = build(ims, ann)
    assert get_header_map(buf) == {0: 0, 1: 16, 4: 16 + len(ims)}


def test_header_map_sorted_by_code():
    buf = build(text_header(4, "note"), image_structure())
    header_map = get_header_map(buf)
    assert list(header_map) == sorted(header_map)
    assert header_map[4] == 16


def test_header_map_zero_length_aborts():
    buf = build(struct.pack(">BH", 1, 0) + b"\0" * 6)
    assert get_header_map(buf) == {}


def test_header_map_rejects_bad_primary_type():
    buf = bytearray(build())
    buf[0] = 1
    with pytest.raises(HeaderError):
        get_header_map(bytes(buf))


def test_header_map_rejects_bad_primary_length():
    buf = struct.pack(">BHBIQ", 0, 15, 0, 16, 0)
    with pytest.raises(HeaderError):
        get_header_map(buf)


def test_header_map_truncated_buffer():
    with pytest.raises(HeaderError):
        get_header_map(b"\0\0\x10")


def test_primary_header_fields():
    buf = build(image_structure())
    header = get_header(buf, get_header_map(buf), PrimaryHeader)
    assert header == PrimaryHeader(0, 16, 0, 25, 8000)


def test_image_structure_round_trip():
    buf = build(image_structure(columns=1234, lines=567))
    header = get_header(buf, get_header_map(buf), ImageStructureHeader)
    assert (header.bits_per_pixel, header.columns, header.lines) == (8, 1234, 567)
    assert header.compression == 0


def test_has_header_and_missing_header():
    buf = build(image_structure())
    header_map = get_header_map(buf)
    assert has_header(header_map, ImageStructureHeader)
    assert not has_header(header_map, AnnotationHeader)
    with pytest.raises(HeaderError):
        get_header(buf, header_map, AnnotationHeader)


@pytest.mark.parametrize(
    "header_class, field",
    [
        (AnnotationHeader, "text"),
        (AncillaryTextHeader, "text"),
        (DCSFileNameHeader, "file_name"),
    ],
)
def test_text_headers(header_class, field):
    raw = text_header(header_class.CODE, "Time of frame start = 2017-12-21")
    header = read_header(raw, header_class, 0)
    assert getattr(header, field) == "Time of frame start = 2017-12-21"
    assert header.header_length == len(raw)


def test_image_data_function_bytes():
    raw = text_header(3, "0:=1.0\n1:=2.0\n")
    header = read_header(raw, ImageDataFunctionHeader, 0)
    assert header.data == b"0:=1.0\n1:=2.0\n"


def test_text_header_truncated():
    raw = struct.pack(">BH", 4, 20) + b"short"
    with pytest.raises(HeaderError):
        read_header(raw, AnnotationHeader, 0)


def navigation(name, offsets=(1, 2, 3, 4)):
    return struct.pack(">BH32sIIII", 2, 51, name.encode(), *offsets)


def test_image_navigation_fields_and_longitude():
    header = read_header(navigation("GEOS(-137.0)"), ImageNavigationHeader, 0)
    assert header.projection_name == "GEOS(-137.0)"
    assert (header.column_scaling, header.line_scaling) == (1, 2)
    assert (header.column_offset, header.line_offset) == (3, 4)
    assert header.longitude() == -137.0


def test_longitude_without_parentheses():
    header = read_header(navigation("GEOS"), ImageNavigationHeader, 0)
    assert header.longitude() == 0.0


def test_longitude_invalid_number():
    header = read_header(navigation("GEOS(abc)"), ImageNavigationHeader, 0)
    with pytest.raises(ValueError):
        header.longitude()


def test_timestamp_epoch():
    header = read_header(timestamp(CCSDS_TO_UNIX_DAYS_OFFSET, 0), TimeStampHeader, 0)
    assert header.unix() == (0, 0)
    assert header.time_long() == "1970-01-01 00:00:00"
    assert header.time_short() == "19700101-000000"


def test_timestamp_millis_split():
    header = read_header(timestamp(CCSDS_TO_UNIX_DAYS_OFFSET, 1500), TimeStampHeader, 0)
    assert header.unix() == (1, 500_000_000)


def test_timestamp_day_advances_by_one_day():
    a = read_header(timestamp(CCSDS_TO_UNIX_DAYS_OFFSET + 10, 0), TimeStampHeader, 0)
    b = read_header(timestamp(CCSDS_TO_UNIX_DAYS_OFFSET + 11, 0), TimeStampHeader, 0)
    assert b.unix().seconds - a.unix().seconds == 24 * 60 * 60


def test_timestamp_zero_is_zero():
    header = read_header(timestamp(0, 0), TimeStampHeader, 0)
    assert header.unix() == (0, 0)


def test_timestamp_before_epoch_raises():
    header = read_header(timestamp(CCSDS_TO_UNIX_DAYS_OFFSET - 1, 5), TimeStampHeader, 0)
    with pytest.raises(HeaderError):
        header.unix()


def test_segment_identification_round_trip():
    values = (7, 3, 0, 464, 6, 2712, 2712)
    raw = struct.pack(">BH7H", 128, 17, *values)
    header = read_header(raw, SegmentIdentificationHeader, 0)
    assert (
        header.image_identifier,
        header.segment_number,
        header.segment_start_column,
        header.segment_start_line,
        header.max_segment,
        header.max_column,
        header.max_line,
    ) == values


@pytest.mark.parametrize("signature, expected", [(b"NOAA", "NOAA"), (b"AB\0\0", "AB")])
def test_noaa_lrit_header(signature, expected):
    raw = struct.pack(">BH4sHHHB", 129, 14, signature, 16, 1, 2, 1)
    header = read_header(raw, NOAALRITHeader, 0)
    assert header.agency_signature == expected
    assert (header.product_id, header.product_sub_id, header.parameter) == (16, 1, 2)
    assert header.noaa_specific_compression == 1


def test_rice_compression_header():
    raw = struct.pack(">BHHBB", 131, 7, 49, 16, 1)
    header = read_header(raw, RiceCompressionHeader, 0)
    assert header == RiceCompressionHeader(131, 7, 49, 16, 1)


def test_fixed_header_truncated():
    with pytest.raises(HeaderError):
        read_header(b"\x83\x00\x07\x00", RiceCompressionHeader, 0)


def test_get_header_through_map_with_offset():
    seg = struct.pack(">BH7H", 128, 17, 1, 2, 3, 4, 5, 6, 7)
    buf = build(image_structure(), seg)
    header = get_header(buf, get_header_map(buf), SegmentIdentificationHeader)
    assert header.segment_number == 2
    assert header.max_line == 7