from __future__ import annotations

import logging
import re
from collections.abc import Iterator

from . import constants
from .classes import DBFHeader, Field, InvalidNumber, Record
from .constants import (
    DBF_DELETED_RECORD,
    DBF_FIELD_DESCRIPTOR_SIZE,
    DBF_HEADER_SIZE,
    DBF_HEADER_TERMINATOR,
)
from .exceptions import (
    InvalidLogicalValue,
    InvalidNumericValue,
    MissingTerminator,
    ShapefileException,
    ShortReadError,
    TruncatedHeader,
    TruncatedRecord,
    UnsupportedFieldType,
)
from .helpers import ByteCursor
from .types import FieldType, ReadableBinStream, RecordValue

logger = logging.getLogger(__name__)

_TEXT_TYPES = frozenset([FieldType.C, FieldType.X])
_NUMERIC_TYPES = frozenset([FieldType.N, FieldType.I])
_FLOAT_TYPES = frozenset([FieldType.F, FieldType.O])

_TRUE_VALUES = frozenset("1TtYy")
_FALSE_VALUES = frozenset("0FfNn")

# signed ASCII digits only, unlike int()
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class DBFReader:
    """Reads the records of a dBASE (.dbf) attribute file, one at a
    time, from an open binary stream. Xbase-related code borrows heavily
    from ActiveState Python Cookbook Recipe 362715 by Raymond Hettinger.

    The header and field descriptors are read when the reader is created.
    Records are then decoded on demand, in file order, by iterating over
    the reader. A deleted record is returned as None. The stream is only
    read forwards and is never closed by the reader.

    An error while decoding a record is final, and is raised again by
    every later call to next().
    """

    def __init__(
        self,
        dbf: ReadableBinStream,
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
    ):
        self.dbf = ByteCursor(dbf)
        self.encoding = encoding
        self.encodingErrors = encodingErrors
        self.fields: list[Field] = []
        self.fieldLookup: dict[str, int] = {}
        self._recordsRead = 0
        self._error: Exception | None = None
        self.__dbfHeader()

    def __dbfHeader(self) -> None:
        """Reads the dbf header and field descriptors."""
        self.header = DBFHeader.from_byte_stream(self.dbf)

        numFields = (self.header.headerLength - DBF_HEADER_SIZE) // DBF_FIELD_DESCRIPTOR_SIZE
        for __field in range(numFields):
            try:
                data = self.dbf.read_exact(DBF_FIELD_DESCRIPTOR_SIZE)
            except ShortReadError as e:
                raise TruncatedHeader(
                    f"dbf field descriptor {len(self.fields)} of {numFields} "
                    f"ends at byte offset {self.dbf.offset}"
                ) from e
            self.fields.append(Field.from_bytes(data, self.encoding, self.encodingErrors))

        terminator = self.dbf.read(1)
        if not terminator:
            raise MissingTerminator(
                f"dbf header lacks its terminator byte at byte offset {self.dbf.offset}"
            )
        if terminator != DBF_HEADER_TERMINATOR and constants.VERBOSE:
            logger.warning(
                "dbf header terminator is %r, expected %r (likely corrupt?)",
                terminator,
                DBF_HEADER_TERMINATOR,
            )

        # repeated field names are not deduplicated, the last one wins
        self.fieldLookup = {field.name: i for i, field in enumerate(self.fields)}

        fieldsLength = 1 + sum(field.size for field in self.fields)
        if fieldsLength > self.header.recordLength:
            raise ShapefileException(
                f"dbf fields need {fieldsLength} bytes per record but the header "
                f"declares a record length of {self.header.recordLength}"
            )
        if fieldsLength < self.header.recordLength and constants.VERBOSE:
            logger.warning(
                "dbf record length %s is longer than its fields (%s bytes), "
                "the extra bytes of each record are ignored",
                self.header.recordLength,
                fieldsLength,
            )

    @property
    def numRecords(self) -> int:
        return self.header.numRecords

    def __len__(self) -> int:
        """Returns the number of records declared in the dbf header,
        deleted records included."""
        return self.header.numRecords

    def __iter__(self) -> DBFReader:
        return self

    def __next__(self) -> Record | None:
        if self._error is not None:
            raise self._error
        if self._recordsRead >= self.header.numRecords:
            raise StopIteration
        try:
            return self.__record()
        except (ShapefileException, OSError) as e:
            self._error = e
            raise

    def iterRecords(self, skip_deleted: bool = False) -> Iterator[Record | None]:
        """Returns a generator of the remaining records.
        Deleted records are yielded as None, unless skip_deleted is True.
        """
        for record in self:
            if record is None and skip_deleted:
                continue
            yield record

    def __record(self) -> Record | None:
        """Reads and decodes the next record row."""
        oid = self._recordsRead
        offset = self.dbf.offset
        try:
            data = self.dbf.read_exact(self.header.recordLength)
        except ShortReadError as e:
            raise TruncatedRecord(offset, oid=oid, detail=str(e)) from e
        self._recordsRead += 1

        if data[:1] == DBF_DELETED_RECORD:
            return None

        values: list[RecordValue] = []
        pos = 1  # after the deletion flag
        for field in self.fields:
            values.append(self._decode_value(field, data[pos : pos + field.size], oid))
            pos += field.size

        return Record(self.fieldLookup, values, oid)

    def _decode_value(self, field: Field, value: bytes, oid: int) -> RecordValue:
        """Coerces the raw bytes of one cell according to its field type."""
        typ = field.field_type

        if typ in _TEXT_TYPES:
            text = value.decode(self.encoding, self.encodingErrors)
            return text.strip().rstrip("\x00")  # remove null-padding at end of strings

        if typ in _NUMERIC_TYPES or typ in _FLOAT_TYPES:
            # number stored as a string, right justified, and padded with blanks
            text = value.split(b"\x00")[0].decode("ascii", "replace").strip()
            if typ in _NUMERIC_TYPES and not field.decimal:
                if not _INTEGER_RE.fullmatch(text):
                    raise InvalidNumericValue(
                        f"Record {oid} field {field.name!r}: {text!r} is not an integer"
                    )
                return int(text)
            try:
                return float(text)
            except ValueError as e:
                # Deliberately lenient: legacy files often hold junk in
                # floating point cells, so keep the record with the error
                # text standing in for the value.
                return InvalidNumber(str(e), raw=text)

        if typ == FieldType.L:
            text = value.decode("ascii", "replace")
            if len(text) == 1 and text in _TRUE_VALUES:
                return True
            if len(text) == 1 and text in _FALSE_VALUES:
                return False
            raise InvalidLogicalValue(
                f"Record {oid} field {field.name!r}: unsupported logical value {text!r}"
            )

        raise UnsupportedFieldType(
            f"Field {field.name!r} has unsupported type {typ!r}"
        )
