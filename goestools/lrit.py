"""LRIT header structures and the parsing of header buffers."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import ClassVar, NamedTuple

# CCSDS day counts start on 1958-01-01, Unix time on 1970-01-01.
CCSDS_TO_UNIX_DAYS_OFFSET = 4383

_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class HeaderError(ValueError):
    """Malformed, truncated or missing LRIT header data."""


class UnixTime(NamedTuple):
    seconds: int
    nanoseconds: int


def _unpack(fmt: str, buf: bytes, pos: int) -> tuple:
    try:
        return struct.unpack_from(fmt, buf, pos)
    except struct.error as exc:
        raise HeaderError(f"truncated header at offset {pos}") from exc


def _payload(buf: bytes, pos: int) -> tuple[int, int, bytes]:
    header_type, header_length = _unpack(">BH", buf, pos)
    size = header_length - 3
    if size < 0:
        raise HeaderError(f"invalid header length {header_length} at offset {pos}")
    data = bytes(buf[pos + 3:pos + 3 + size])
    if len(data) != size:
        raise HeaderError(f"truncated header at offset {pos}")
    return header_type, header_length, data


def _cstring(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


def _to_float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


class _FixedHeader:
    _FORMAT: ClassVar[str]

    @classmethod
    def _parse(cls, buf: bytes, pos: int):
        return cls(*_unpack(cls._FORMAT, buf, pos))


class _TextHeader:
    @classmethod
    def _parse(cls, buf: bytes, pos: int):
        header_type, header_length, data = _payload(buf, pos)
        return cls(header_type, header_length, data.decode("latin-1"))


@dataclass(frozen=True)
class PrimaryHeader(_FixedHeader):
    CODE: ClassVar[int] = 0
    _FORMAT: ClassVar[str] = ">BHBIQ"

    header_type: int
    header_length: int
    file_type: int
    total_header_length: int
    data_length: int


@dataclass(frozen=True)
class ImageStructureHeader(_FixedHeader):
    CODE: ClassVar[int] = 1
    _FORMAT: ClassVar[str] = ">BHBHHB"

    header_type: int
    header_length: int
    bits_per_pixel: int
    columns: int
    lines: int
    compression: int


@dataclass(frozen=True)
class ImageNavigationHeader:
    CODE: ClassVar[int] = 2

    header_type: int
    header_length: int
    projection_name: str
    column_scaling: int
    line_scaling: int
    column_offset: int
    line_offset: int

    @classmethod
    def _parse(cls, buf: bytes, pos: int) -> ImageNavigationHeader:
        fields = _unpack(">BH32sIIII", buf, pos)
        return cls(fields[0], fields[1], _cstring(fields[2]), *fields[3:])

    def longitude(self) -> float:
        """Longitude given in parentheses in the projection name, or 0.0."""
        name = self.projection_name
        left = name.find("(")
        right = name.find(")")
        if left == -1 or right == -1:
            return 0.0
        match = _FLOAT_PREFIX.match(name[left + 1:right])
        if match is None:
            raise ValueError(f"no longitude in projection name {name!r}")
        return _to_float32(float(match.group()))


@dataclass(frozen=True)
class ImageDataFunctionHeader:
    CODE: ClassVar[int] = 3

    header_type: int
    header_length: int
    data: bytes

    @classmethod
    def _parse(cls, buf: bytes, pos: int) -> ImageDataFunctionHeader:
        return cls(*_payload(buf, pos))


@dataclass(frozen=True)
class AnnotationHeader(_TextHeader):
    CODE: ClassVar[int] = 4

    header_type: int
    header_length: int
    text: str


@dataclass(frozen=True)
class TimeStampHeader:
    CODE: ClassVar[int] = 5

    header_type: int
    header_length: int
    ccsds: bytes

    @classmethod
    def _parse(cls, buf: bytes, pos: int) -> TimeStampHeader:
        return cls(*_unpack(">BH7s", buf, pos))

    def unix(self) -> UnixTime:
        """Convert the CCSDS day/millisecond time to Unix time."""
        days, millis = struct.unpack(">HI", self.ccsds[1:7])
        if days == 0 and millis == 0:
            return UnixTime(0, 0)
        if days < CCSDS_TO_UNIX_DAYS_OFFSET:
            raise HeaderError(f"CCSDS day {days} precedes the Unix epoch")
        seconds = (days - CCSDS_TO_UNIX_DAYS_OFFSET) * 24 * 60 * 60 + millis // 1000
        return UnixTime(seconds, (millis % 1000) * 1000 * 1000)

    def _utc(self) -> datetime:
        return datetime.fromtimestamp(self.unix().seconds, timezone.utc)

    def time_short(self) -> str:
        """Time as YYYYMMDD-HHMMSS in UTC."""
        return self._utc().strftime("%Y%m%d-%H%M%S")

    def time_long(self) -> str:
        """Time as YYYY-MM-DD HH:MM:SS in UTC."""
        return self._utc().strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class AncillaryTextHeader(_TextHeader):
    CODE: ClassVar[int] = 6

    header_type: int
    header_length: int
    text: str


@dataclass(frozen=True)
class KeyHeader(_FixedHeader):
    CODE: ClassVar[int] = 7
    _FORMAT: ClassVar[str] = ">BH"

    header_type: int
    header_length: int


@dataclass(frozen=True)
class SegmentIdentificationHeader(_FixedHeader):
    CODE: ClassVar[int] = 128
    _FORMAT: ClassVar[str] = ">BH7H"

    header_type: int
    header_length: int
    image_identifier: int
    segment_number: int
    segment_start_column: int
    segment_start_line: int
    max_segment: int
    max_column: int
    max_line: int


@dataclass(frozen=True)
class NOAALRITHeader:
    CODE: ClassVar[int] = 129

    header_type: int
    header_length: int
    agency_signature: str
    product_id: int
    product_sub_id: int
    parameter: int
    noaa_specific_compression: int

    @classmethod
    def _parse(cls, buf: bytes, pos: int) -> NOAALRITHeader:
        fields = _unpack(">BH4sHHHB", buf, pos)
        return cls(fields[0], fields[1], _cstring(fields[2]), *fields[3:])


@dataclass(frozen=True)
class HeaderStructureRecordHeader(_TextHeader):
    CODE: ClassVar[int] = 130

    header_type: int
    header_length: int
    header_structure: str


@dataclass(frozen=True)
class RiceCompressionHeader(_FixedHeader):
    CODE: ClassVar[int] = 131
    _FORMAT: ClassVar[str] = ">BHHBB"

    header_type: int
    header_length: int
    flags: int
    pixels_per_block: int
    scan_lines_per_packet: int


@dataclass(frozen=True)
class DCSFileNameHeader(_TextHeader):
    CODE: ClassVar[int] = 132

    header_type: int
    header_length: int
    file_name: str


def get_header_map(buf: bytes) -> dict[int, int]:
    """Map each header type in ``buf`` to its byte offset, ordered by type.

    An empty map is returned when a header of length zero is found.
    """
    header_type, header_length, _, total_header_length = _unpack(">BHBI", buf, 0)
    if header_type != 0:
        raise HeaderError(f"expected primary header type 0, got {header_type}")
    if header_length != 16:
        raise HeaderError(f"expected primary header length 16, got {header_length}")

    found: dict[int, int] = {}
    pos = 0
    while pos < total_header_length:
        header_type, header_length = _unpack(">BH", buf, pos)
        if header_length == 0:
            return {}
        found[header_type] = pos
        pos += header_length
    return dict(sorted(found.items()))


def has_header(header_map: dict[int, int], header_class: type) -> bool:
    """Whether the map holds a header of the given class."""
    return header_class.CODE in header_map


def read_header(buf: bytes, header_class: type, pos: int):
    """Parse a header of the given class at byte offset ``pos``."""
    return header_class._parse(buf, pos)


def get_header(buf: bytes, header_map: dict[int, int], header_class: type):
    """Parse the header of the given class found through ``header_map``."""
    try:
        pos = header_map[header_class.CODE]
    except KeyError:
        raise HeaderError(f"no {header_class.__name__} present") from None
    return read_header(buf, header_class, pos)