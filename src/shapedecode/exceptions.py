from __future__ import annotations


class ShapefileException(Exception):
    """An exception to handle shapefile specific problems."""


class ShortReadError(ShapefileException):
    """Fewer bytes were available than a fixed size read required.
    Translated by the readers into TruncatedHeader or TruncatedRecord."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Expected {expected} bytes, got {got}")


class TruncatedHeader(ShapefileException):
    pass


class TruncatedRecord(ShapefileException):
    def __init__(
        self,
        offset: int,
        shapeType: int | None = None,
        oid: int | None = None,
        detail: str = "",
    ):
        self.offset = offset
        self.shapeType = shapeType
        self.oid = oid
        msg = f"Record truncated at byte offset {offset}"
        if shapeType is not None:
            msg += f" (shape type {shapeType})"
        if oid is not None:
            msg += f" (record {oid})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class UnknownShapeType(ShapefileException):
    def __init__(self, code: int, offset: int | None = None):
        self.code = code
        self.offset = offset
        msg = f"Unknown shape type: {code}"
        if offset is not None:
            msg += f" at byte offset {offset}"
        super().__init__(msg)


class InvalidPartIndices(ShapefileException):
    pass


class UnsupportedFieldType(ShapefileException):
    pass


class InvalidLogicalValue(ShapefileException):
    pass


class InvalidNumericValue(ShapefileException):
    pass


class MissingTerminator(ShapefileException):
    pass


class WKT_Error(Exception):
    pass
