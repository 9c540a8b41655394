from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from types import TracebackType

from . import constants
from .classes import (
    Field,
    Record,
    RecordHeader,
    ShapefileHeader,
    ShapefileRecord,
    ShapeRecord,
)
from .constants import RECORD_HEADER_WORDS, SHP_HEADER_WORDS
from .dbf import DBFReader
from .exceptions import ShapefileException, ShortReadError, TruncatedRecord
from .helpers import ByteCursor
from .shapes import Shape, read_shape
from .types import ReadableBinStream

logger = logging.getLogger(__name__)


class ShapefileReader:
    """Reads the shape records of a .shp file one at a time.

    The 100 byte header is read when the reader is created. Each call to
    next() then reads one record header and its content, and returns
    them as a ShapefileRecord. Reading stops once the file length declared
    in the header has been used up. The stream is only read forwards and
    is never closed by the reader.

    Any error while reading a record is final: the same exception is
    raised again by every later call to next().
    """

    def __init__(self, shp: ReadableBinStream):
        self.shp = ByteCursor(shp)
        self.header = ShapefileHeader.from_byte_stream(self.shp)
        # 16-bit words left to read, according to the header
        self._words_remaining = self.header.fileLength - SHP_HEADER_WORDS
        self._recordsRead = 0
        self._error: Exception | None = None

    @property
    def shapeType(self) -> int:
        return self.header.shapeType

    @property
    def shapeTypeName(self) -> str:
        return self.header.shapeTypeName

    def __str__(self) -> str:
        return (
            f"shapefile Reader\n    shape type '{self.shapeTypeName}', "
            f"{self._recordsRead} records read"
        )

    def __iter__(self) -> ShapefileReader:
        return self

    def __next__(self) -> ShapefileRecord:
        if self._error is not None:
            raise self._error
        if self._words_remaining <= 0:
            raise StopIteration
        try:
            return self.__shapeRecord()
        except (ShapefileException, OSError) as e:
            # the stream position is unknown after a failure
            self._error = e
            raise

    def __shapeRecord(self) -> ShapefileRecord:
        """Reads the record header and geometry of the next shape."""
        oid = self._recordsRead
        offset = self.shp.offset
        try:
            header = RecordHeader.from_byte_stream(self.shp)
        except ShortReadError as e:
            raise TruncatedRecord(
                offset,
                oid=oid,
                detail=f"{self._words_remaining} words still expected: {e}",
            ) from e
        if header.contentLength < 0:
            raise TruncatedRecord(
                offset,
                oid=oid,
                detail=f"negative content length: {header.contentLength}",
            )

        self._words_remaining -= header.contentLength + RECORD_HEADER_WORDS

        # Convert from num of 16 bit words, to 8 bit bytes
        recLength_bytes = 2 * header.contentLength
        content_offset = self.shp.offset

        # Read entire record into memory so the shape decoder
        # never reads past the end of the record
        try:
            content = self.shp.read_exact(recLength_bytes)
        except ShortReadError as e:
            raise TruncatedRecord(self.shp.offset, oid=oid, detail=str(e)) from e

        shape = read_shape(
            io.BytesIO(content), recLength_bytes, oid=oid, base_offset=content_offset
        )
        self._recordsRead += 1

        if self._words_remaining < 0 and constants.VERBOSE:
            logger.warning(
                "Shape record %s ends %s words beyond the file length declared "
                "in the shapefile header",
                oid,
                -self._words_remaining,
            )

        return ShapefileRecord(header, shape)

    def iterShapes(self) -> Iterator[Shape]:
        """Returns a generator of the remaining shapes, without
        their record headers."""
        for shapeRecord in self:
            yield shapeRecord.shape


class Reader:
    """Reads the geometry of a .shp stream and the attributes of
    a .dbf stream together. Either may be left out, in which case
    the methods that need it raise ShapefileException.

    Shapes and records are paired by position only.
    """

    def __init__(
        self,
        shp: ReadableBinStream | None = None,
        dbf: ReadableBinStream | None = None,
        encoding: str = "utf-8",
        encodingErrors: str = "strict",
    ):
        self.shp: ShapefileReader | None = None
        self.dbf: DBFReader | None = None
        self.encoding = encoding
        self.encodingErrors = encodingErrors
        if shp is not None:
            self.shp = ShapefileReader(shp)
        if dbf is not None:
            self.dbf = DBFReader(dbf, encoding=encoding, encodingErrors=encodingErrors)
        if self.shp is None and self.dbf is None:
            raise ShapefileException(
                "Reader requires at least one of a shp or dbf file-like object."
            )

    def __str__(self) -> str:
        info = ["shapefile Reader"]
        if self.shp is not None:
            info.append(f"    shape type '{self.shapeTypeName}'")
        if self.dbf is not None:
            info.append(f"    {len(self)} records ({len(self.fields)} fields)")
        return "\n".join(info)

    def __enter__(self) -> Reader:
        return self

    def __exit__(
        self,
        exc_type: BaseException | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        # The caller owns the streams, nothing to close
        return None

    def __len__(self) -> int:
        """The record count from the dbf header, deleted records included."""
        return self.__requireDbf().numRecords

    def __iter__(self) -> Iterator[ShapeRecord]:
        yield from self.iterShapeRecords()

    def __requireShp(self) -> ShapefileReader:
        if self.shp is None:
            raise ShapefileException("This Reader was not given a shp file-like object.")
        return self.shp

    def __requireDbf(self) -> DBFReader:
        if self.dbf is None:
            raise ShapefileException("This Reader was not given a dbf file-like object.")
        return self.dbf

    @property
    def shapeType(self) -> int:
        return self.__requireShp().shapeType

    @property
    def shapeTypeName(self) -> str:
        return self.__requireShp().shapeTypeName

    @property
    def fields(self) -> list[Field]:
        return self.__requireDbf().fields

    def iterShapes(self) -> Iterator[Shape]:
        """Lazily yields the remaining shapes of the shp file."""
        return self.__requireShp().iterShapes()

    def iterRecords(self, skip_deleted: bool = False) -> Iterator[Record | None]:
        """Lazily yields the remaining records of the dbf file.
        Deleted records are yielded as None, unless skip_deleted is True.
        """
        return self.__requireDbf().iterRecords(skip_deleted=skip_deleted)

    def iterShapeRecords(self) -> Iterator[ShapeRecord]:
        """Lazily yields each shape together with the record at the
        same position. Stops at the end of the shorter file.
        """
        for shape, record in zip(self.iterShapes(), self.iterRecords()):
            yield ShapeRecord(shape=shape, record=record)
