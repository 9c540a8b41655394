"""
This module tests reading .shp streams, and the combined Reader.
"""

# std lib imports
import io
from struct import pack

# third party imports
import pytest

# our imports
import shapedecode
from shapedecode import (
    Reader,
    RecordHeader,
    ShapefileException,
    ShapefileReader,
    TruncatedHeader,
    TruncatedRecord,
    UnknownShapeType,
)


def shp_header(fileLength, shapeType=shapedecode.POINT, fileCode=9994, mbox=(0.0, 0.0)):
    return pack(">7i", fileCode, 0, 0, 0, 0, 0, fileLength) + pack(
        "<2i8d", 1000, shapeType, 1.0, 2.0, 3.0, 4.0, 5.0, 6.0, *mbox
    )


def shp_record(recNum, content):
    return pack(">2i", recNum, len(content) // 2) + content


def shp_bytes(contents, shapeType=shapedecode.POINT, extra_words=0):
    """Builds a .shp file whose header declares its exact length,
    plus extra_words."""
    records = b"".join(shp_record(i + 1, c) for i, c in enumerate(contents))
    fileLength = (100 + len(records)) // 2 + extra_words
    return shp_header(fileLength, shapeType) + records


def point_content(x, y):
    return pack("<i2d", shapedecode.POINT, x, y)


def dbf_bytes(names):
    fields = pack("<11sc4xBB14x", b"NAME", b"C", 5, 0)
    header = pack("<B3BLHH20x", 3, 124, 1, 1, len(names), 32 + 32 + 1, 6)
    rows = b"".join(b" " + name.encode().ljust(5) for name in names)
    return header + fields + b"\r" + rows


def test_minimal_point_file(caplog):
    """
    Assert that a header declaring a file length of 60 words,
    followed by a single point record of 10 words, yields
    that point and then ends.
    """
    data = (
        shp_header(60)
        + pack(">2i", 1, 10)
        + pack("<i2d", shapedecode.POINT, 10.0, 20.0)
    )
    reader = ShapefileReader(io.BytesIO(data))
    shapeRecord = next(reader)
    assert shapeRecord.header == RecordHeader(recNum=1, contentLength=10)
    assert isinstance(shapeRecord.shape, shapedecode.Point)
    assert shapeRecord.shape.points == [(10.0, 20.0)]
    assert shapeRecord.shape.oid == 0
    with pytest.raises(StopIteration):
        next(reader)
    # the record overruns the declared file length
    assert "beyond the file length" in caplog.text


def test_header():
    reader = ShapefileReader(io.BytesIO(shp_header(50, shapedecode.POLYGONZ)))
    header = reader.header
    assert header.fileCode == 9994
    assert header.fileLength == 50
    assert header.version == 1000
    assert header.shapeType == shapedecode.POLYGONZ
    assert reader.shapeTypeName == "POLYGONZ"
    assert header.bbox == (1.0, 2.0, 3.0, 4.0)
    assert header.zbox == (5.0, 6.0)
    assert header.mbox == (0.0, 0.0)


def test_header_nodata_mbox():
    data = shp_header(50, mbox=(-1e39, 12.0))
    reader = ShapefileReader(io.BytesIO(data))
    assert reader.header.mbox == (None, 12.0)


def test_header_unexpected_file_code(caplog):
    data = shp_header(50, fileCode=1234)
    reader = ShapefileReader(io.BytesIO(data))
    assert reader.header.fileCode == 1234
    assert "file code" in caplog.text
    assert list(reader) == []


def test_truncated_header():
    with pytest.raises(TruncatedHeader):
        ShapefileReader(io.BytesIO(shp_header(50)[:99]))


def test_header_only_file():
    reader = ShapefileReader(io.BytesIO(shp_header(50)))
    assert list(reader) == []


def test_short_file_length(caplog):
    reader = ShapefileReader(io.BytesIO(shp_header(20) + shp_record(1, point_content(1, 2))))
    assert list(reader) == []
    assert "shorter than the header" in caplog.text


def test_exact_word_budget(caplog):
    contents = [point_content(1.0, 2.0), point_content(3.0, 4.0), pack("<i", 0)]
    reader = ShapefileReader(io.BytesIO(shp_bytes(contents)))
    shapeRecords = list(reader)
    assert [r.header.recNum for r in shapeRecords] == [1, 2, 3]
    assert [r.shape.oid for r in shapeRecords] == [0, 1, 2]
    assert shapeRecords[1].shape.points == [(3.0, 4.0)]
    assert isinstance(shapeRecords[2].shape, shapedecode.NullShape)
    # content length + record header, in 16-bit words
    assert sum(r.header.contentLength + 4 for r in shapeRecords) + 50 == reader.header.fileLength
    assert "beyond the file length" not in caplog.text


def test_stream_ends_before_file_length():
    """
    Assert that a file shorter than its declared length
    raises a truncation error rather than ending quietly.
    """
    contents = [point_content(1.0, 2.0), point_content(3.0, 4.0)]
    reader = ShapefileReader(io.BytesIO(shp_bytes(contents, extra_words=14)))
    next(reader)
    next(reader)
    with pytest.raises(TruncatedRecord) as excinfo:
        next(reader)
    assert excinfo.value.offset == 100 + 2 * 28
    assert excinfo.value.oid == 2


def test_errors_are_final():
    contents = [point_content(1.0, 2.0)]
    reader = ShapefileReader(io.BytesIO(shp_bytes(contents, extra_words=14)))
    next(reader)
    with pytest.raises(TruncatedRecord) as first:
        next(reader)
    with pytest.raises(TruncatedRecord) as second:
        next(reader)
    assert second.value is first.value


def test_truncated_record_content():
    data = shp_header(64) + pack(">2i", 1, 10) + point_content(1.0, 2.0)[:12]
    reader = ShapefileReader(io.BytesIO(data))
    with pytest.raises(TruncatedRecord) as excinfo:
        next(reader)
    assert excinfo.value.offset == 100 + 8 + 12
    assert excinfo.value.oid == 0


class FailingStream(io.BytesIO):
    """A stream whose reads fail with OSError once its
    position reaches fail_at."""

    def __init__(self, data, fail_at):
        super().__init__(data)
        self.fail_at = fail_at

    def read(self, size=-1):
        if self.tell() >= self.fail_at:
            raise OSError("device not ready")
        return super().read(size)


def test_stream_errors_are_final():
    """
    Assert that an OSError raised partway through a record
    is raised again by later calls, instead of reading on
    from the middle of the record.
    """
    contents = [point_content(float(i), 0.0) for i in range(3)]
    # fail when reading the content of the second record
    stream = FailingStream(shp_bytes(contents), fail_at=100 + 28 + 8)
    reader = ShapefileReader(stream)
    assert next(reader).shape.points == [(0.0, 0.0)]
    with pytest.raises(OSError) as first:
        next(reader)
    with pytest.raises(OSError) as second:
        next(reader)
    assert second.value is first.value


def test_negative_content_length():
    data = shp_bytes([point_content(1.0, 2.0)])
    data = data[:100] + pack(">2i", 1, -10) + data[108:]
    reader = ShapefileReader(io.BytesIO(data))
    with pytest.raises(TruncatedRecord) as excinfo:
        next(reader)
    assert excinfo.value.offset == 100
    assert excinfo.value.oid == 0


def test_unknown_shape_type():
    data = shp_bytes([pack("<i2d", 42, 0.0, 0.0)])
    reader = ShapefileReader(io.BytesIO(data))
    with pytest.raises(UnknownShapeType) as excinfo:
        next(reader)
    assert excinfo.value.code == 42
    assert excinfo.value.offset == 108
    with pytest.raises(UnknownShapeType):
        next(reader)


def test_iter_shapes():
    contents = [point_content(1.0, 2.0), point_content(3.0, 4.0)]
    reader = ShapefileReader(io.BytesIO(shp_bytes(contents)))
    shapes = list(reader.iterShapes())
    assert [shape.points for shape in shapes] == [[(1.0, 2.0)], [(3.0, 4.0)]]
    # single pass
    assert list(reader.iterShapes()) == []


def test_polygon_record_round_trip():
    stored = [(0.0, 0.0), (0.0, 10.0), (10.0, 10.0), (10.0, 0.0), (0.0, 0.0)]
    content = pack("<i4d2i", shapedecode.POLYGON, 0.0, 0.0, 10.0, 10.0, 1, 5)
    content += pack("<i", 0)
    content += pack("<10d", *[c for p in stored for c in p])
    reader = ShapefileReader(io.BytesIO(shp_bytes([content], shapedecode.POLYGON)))
    shape = next(reader).shape
    assert list(shape.parts) == [0]
    assert len(shape.points) == 5
    assert shape.wkt == "POLYGON ((0 0, 10 0, 10 10, 0 10, 0 0))"


def test_stream_is_not_closed():
    stream = io.BytesIO(shp_bytes([point_content(1.0, 2.0)]))
    list(ShapefileReader(stream))
    assert not stream.closed


def test_reader_shape_records():
    shp = io.BytesIO(shp_bytes([point_content(1.0, 2.0), point_content(3.0, 4.0)]))
    dbf = io.BytesIO(dbf_bytes(["Alpha", "Beta"]))
    reader = Reader(shp=shp, dbf=dbf)
    assert len(reader) == 2
    assert reader.shapeType == shapedecode.POINT
    assert [field.name for field in reader.fields] == ["NAME"]
    shapeRecords = list(reader)
    assert len(shapeRecords) == 2
    assert shapeRecords[1].shape.points == [(3.0, 4.0)]
    assert shapeRecords[1].record.NAME == "Beta"
    assert shapeRecords[0].record.oid == 0


def test_reader_shp_only():
    shp = io.BytesIO(shp_bytes([point_content(1.0, 2.0)]))
    reader = Reader(shp=shp)
    assert len(list(reader.iterShapes())) == 1
    with pytest.raises(ShapefileException):
        reader.iterRecords()
    with pytest.raises(ShapefileException):
        len(reader)


def test_reader_dbf_only():
    reader = Reader(dbf=io.BytesIO(dbf_bytes(["Alpha"])))
    assert [record.NAME for record in reader.iterRecords()] == ["Alpha"]
    with pytest.raises(ShapefileException):
        reader.iterShapes()


def test_reader_requires_a_stream():
    with pytest.raises(ShapefileException):
        Reader()


def test_reader_str():
    shp = io.BytesIO(shp_bytes([point_content(1.0, 2.0)]))
    dbf = io.BytesIO(dbf_bytes(["Alpha"]))
    with Reader(shp=shp, dbf=dbf) as reader:
        assert str(reader) == (
            "shapefile Reader\n    shape type 'POINT'\n    1 records (1 fields)"
        )
