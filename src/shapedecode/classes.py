from __future__ import annotations

import logging
from datetime import date
from struct import Struct, unpack
from typing import Any, Iterable, NamedTuple, SupportsIndex, overload

from . import constants
from .constants import (
    DBF_FIELD_DESCRIPTOR_SIZE,
    DBF_HEADER_SIZE,
    NODATA,
    RECORD_HEADER_SIZE,
    SHAPETYPE_LOOKUP,
    SHP_FILE_CODE,
    SHP_HEADER_SIZE,
    SHP_HEADER_WORDS,
)
from .exceptions import ShortReadError, TruncatedHeader
from .helpers import ByteCursor, unpack_2_int32_be
from .shapes import Shape
from .types import BBox, FieldTypeT, RecordValue, ZBox

logger = logging.getLogger(__name__)


class ShapefileHeader(NamedTuple):
    """The 100 byte header at the start of a .shp file."""

    fileCode: int
    fileLength: int  # in 16-bit words, including the header itself
    version: int
    shapeType: int
    bbox: BBox
    zbox: ZBox
    mbox: tuple[float | None, float | None]

    @classmethod
    def from_byte_stream(cls, cursor: ByteCursor) -> ShapefileHeader:
        try:
            data = cursor.read_exact(SHP_HEADER_SIZE)
        except ShortReadError as e:
            raise TruncatedHeader(
                f"Shapefile header needs {SHP_HEADER_SIZE} bytes, only {e.got} available"
            ) from e
        # The file code and file length are big endian, the rest little endian
        fileCode, *__unused, fileLength = unpack(">7i", data[:28])
        version, shapeType, *bounds = unpack("<2i8d", data[28:])
        if constants.VERBOSE:
            if fileCode != SHP_FILE_CODE:
                logger.warning(
                    "Unexpected shapefile file code %s (expected %s)",
                    fileCode,
                    SHP_FILE_CODE,
                )
            if fileLength < SHP_HEADER_WORDS:
                logger.warning(
                    "Shapefile header declares a file length of %s words, "
                    "shorter than the header itself",
                    fileLength,
                )
        # Measure values less than -10e38 are nodata values in the shapefile format
        mmin, mmax = (m if m > NODATA else None for m in bounds[6:8])
        return cls(
            fileCode=fileCode,
            fileLength=fileLength,
            version=version,
            shapeType=shapeType,
            bbox=(bounds[0], bounds[1], bounds[2], bounds[3]),
            zbox=(bounds[4], bounds[5]),
            mbox=(mmin, mmax),
        )

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP.get(self.shapeType, "UNKNOWN")


class RecordHeader(NamedTuple):
    """The 8 byte big endian header in front of each shape record."""

    recNum: int  # 1-based, informational only
    contentLength: int  # in 16-bit words, excluding this header

    @classmethod
    def from_byte_stream(cls, cursor: ByteCursor) -> RecordHeader:
        recNum, contentLength = unpack_2_int32_be(cursor.read_exact(RECORD_HEADER_SIZE))
        return cls(recNum, contentLength)


class ShapefileRecord(NamedTuple):
    header: RecordHeader
    shape: Shape


class DBFHeader(NamedTuple):
    """The fixed 32 byte part of a .dbf header."""

    version: int
    lastUpdate: date | None
    numRecords: int
    headerLength: int
    recordLength: int

    @classmethod
    def from_byte_stream(cls, cursor: ByteCursor) -> DBFHeader:
        try:
            data = cursor.read_exact(DBF_HEADER_SIZE)
        except ShortReadError as e:
            raise TruncatedHeader(
                f"dbf header needs {DBF_HEADER_SIZE} bytes, only {e.got} available"
            ) from e
        version, yy, mm, dd, numRecords, headerLength, recordLength = unpack(
            "<B3BLHH20x", data
        )
        try:
            # year is stored as years since 1900
            lastUpdate: date | None = date(1900 + yy, mm, dd)
        except ValueError:
            lastUpdate = None
        return cls(version, lastUpdate, numRecords, headerLength, recordLength)


_FIELD_DESCRIPTOR = Struct("<11sc4xBB14x")


class Field(NamedTuple):
    name: str
    field_type: FieldTypeT
    size: int
    decimal: int

    @classmethod
    def from_bytes(
        cls, data: bytes, encoding: str = "utf-8", encodingErrors: str = "strict"
    ) -> Field:
        """Decodes a 32 byte field descriptor."""
        if len(data) != DBF_FIELD_DESCRIPTOR_SIZE:
            raise TruncatedHeader(
                f"dbf field descriptor needs {DBF_FIELD_DESCRIPTOR_SIZE} bytes, got {len(data)}"
            )
        encoded_name, encoded_type_char, size, decimal = _FIELD_DESCRIPTOR.unpack(data)
        # names are NUL terminated, or fill all 11 bytes
        encoded_name = encoded_name.split(b"\x00", 1)[0]
        name = encoded_name.decode(encoding, encodingErrors).strip()
        field_type = encoded_type_char.decode("ascii", "replace")
        return cls(name, field_type, size, decimal)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f'Field(name="{self.name}", field_type="{self.field_type}", size={self.size}, decimal={self.decimal})'


class InvalidNumber(str):
    """Placeholder value for a floating point cell that could not be
    parsed. Such cells are common in legacy data, so rather than failing
    the whole record the value is the text of the parse error. The
    trimmed cell text is kept as 'raw'.

    >>> v = InvalidNumber("could not convert string to float: 'abc'", raw="abc")
    >>> isinstance(v, str), v.raw
    (True, 'abc')
    """

    raw: str

    def __new__(cls, message: str, raw: str = "") -> InvalidNumber:
        self = super().__new__(cls, message)
        self.raw = raw
        return self


class Record(list[RecordValue]):
    """
    The decoded values of one dbf row, in field order. Being a list,
    values can be read by position, and they can also be read by field
    name, either as a key or as an attribute.

    >>> # Normally the DBFReader creates the records
    >>> r = Record({'ID': 0}, [7])
    >>> r[0], r['ID'], r.ID
    (7, 7, 7)
    """

    def __init__(
        self,
        field_positions: dict[str, int],
        values: Iterable[RecordValue],
        oid: int | None = None,
    ):
        """
        :param field_positions: Maps each field name to its position in values
        :param values: The decoded values of the row
        :param oid: The row's position in the dbf file (optional)
        """
        list.__init__(self, values)
        self.__field_positions = field_positions
        self.__oid = -1 if oid is None else oid

    def __getattr__(self, item: str) -> RecordValue:
        """
        Only reached for names that are not normal attributes,
        so r.ID looks up the field ID while r.count stays list.count.
        :raises: AttributeError, if item is not a field of the dbf file
        """
        if item.startswith("_"):
            # copy and pickle probe for private attributes before __init__ ran
            raise AttributeError(item)
        positions = self.__field_positions
        if item not in positions:
            raise AttributeError(f"{item} is not a field name")
        return list.__getitem__(self, positions[item])

    @overload
    def __getitem__(self, i: SupportsIndex) -> RecordValue: ...
    @overload
    def __getitem__(self, s: slice) -> list[RecordValue]: ...
    @overload
    def __getitem__(self, s: str) -> RecordValue: ...
    def __getitem__(
        self, item: SupportsIndex | slice | str
    ) -> RecordValue | list[RecordValue]:
        """
        Positions and slices behave as for a list, a str is a field name.
        """
        if not isinstance(item, str):
            return list.__getitem__(self, item)
        if item not in self.__field_positions:
            raise KeyError(f'"{item}" is not a field name')
        return list.__getitem__(self, self.__field_positions[item])

    @property
    def oid(self) -> int:
        """Position of the row in the dbf file, deleted rows included"""
        return self.__oid

    def as_dict(self) -> dict[str, RecordValue]:
        """
        The record as a dict of field name to value
        """
        return {name: list.__getitem__(self, i) for name, i in self.__field_positions.items()}

    def __repr__(self) -> str:
        return f"Record #{self.__oid}: {list(self)}"

    def __dir__(self) -> list[str]:
        """
        Lists the field names too, for tab completion.
        """
        return list(dir(type(self))) + list(self.__field_positions)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Record) and self.__field_positions != other.__field_positions:
            return False
        return list.__eq__(self, other)

    __hash__ = None  # type: ignore[assignment]


class ShapeRecord:
    """A shape along with its attributes, paired by position."""

    def __init__(self, shape: Shape | None = None, record: Record | None = None):
        self.shape = shape
        self.record = record

    def __repr__(self) -> str:
        return f"ShapeRecord(shape={self.shape!r}, record={self.record!r})"
