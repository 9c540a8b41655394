from __future__ import annotations

from collections.abc import Sequence
from struct import unpack
from typing import Any, TypedDict, cast

from .constants import (
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NODATA,
    NULL,
    POINT,
    POINTM,
    POINTZ,
    POLYGON,
    POLYGONM,
    POLYGONZ,
    POLYLINE,
    POLYLINEM,
    POLYLINEZ,
    SHAPETYPE_LOOKUP,
    SHAPETYPENUM_LOOKUP,
)
from .exceptions import (
    InvalidPartIndices,
    ShortReadError,
    TruncatedRecord,
    UnknownShapeType,
)
from .helpers import _Array, part_ranges, read_exact
from .types import (
    BBox,
    MBox,
    Point2D,
    PointsT,
    ReadableBinStream,
    ReadSeekableBinStream,
    ZBox,
)
from .wkt import WKTSerializableShape


def _reverse_rings(parts: Sequence[int], values: Sequence[Any]) -> list[Any]:
    """Returns values with each ring's run of values in reverse order.
    Polygon rings are stored on disk in the opposite order to that
    expected by OGC simple features."""
    reversed_values: list[Any] = []
    for start, end in part_ranges(parts, len(values)):
        reversed_values.extend(reversed(values[start:end]))
    return reversed_values


def _m_or_none(m: float) -> float | None:
    # Measure values less than -10e38 are nodata values in the shapefile format
    return m if m > NODATA else None


def _flatten_lines(lines: Sequence[PointsT], close: bool = False) -> tuple[PointsT, list[int]]:
    """Joins a list of point lists into one flat point list, and
    the index of the first point of each line within it. With
    close=True any ring whose last point differs from its first
    is closed by repeating the first point.
    """
    points: PointsT = []
    parts: list[int] = []
    for line in lines:
        parts.append(len(points))
        points.extend(line)
        if close and line and line[0] != line[-1]:
            points.append(line[0])
    return points, parts


class CanHaveBboxKwargs(TypedDict, total=False):
    oid: int | None
    points: PointsT
    parts: Sequence[int]
    partTypes: Sequence[int]
    bbox: BBox
    m: Sequence[float | None]
    z: Sequence[float]
    mbox: MBox | None
    zbox: ZBox


class Shape(WKTSerializableShape):
    def __init__(
        self,
        shapeType: int | None = None,
        points: PointsT | None = None,
        parts: Sequence[int] | None = None,
        lines: list[PointsT] | None = None,
        partTypes: Sequence[int] | None = None,
        oid: int | None = None,
        *,
        m: Sequence[float | None] | None = None,
        z: Sequence[float] | None = None,
        bbox: BBox | None = None,
        mbox: MBox | None = None,
        zbox: ZBox | None = None,
    ):
        """Stores the geometry of one of the shape types of the
        Shapefile format. Every shape type except the "Null" type
        contains points. If a shape holds several runs of points
        (the rings of a polygon, the lines of a polyline) those runs
        are called parts, and are designated by the index of their
        first point in the flat points list. Elevations (z) and
        measures (m) are held in lists parallel to points. Missing
        measures are None. For MultiPatch geometry, partTypes holds
        the raw patch type of each part.
        Lines allows the points and parts to be given together, as
        a list of point lists.

        When shapeType is left out it is looked up from the class
        name, so that Polygon(...) is a POLYGON.
        """
        if shapeType is None:
            shapeType = SHAPETYPENUM_LOOKUP.get(type(self).__name__.upper(), NULL)
        self.shapeType: int = shapeType
        self.__oid = -1 if oid is None else oid

        if partTypes is not None:
            self.partTypes = partTypes

        if lines is not None:
            points, parts = _flatten_lines(lines, close=shapeType in Polygon_shapeTypes)
        self.points: PointsT = points or []
        if parts:
            self.parts: Sequence[int] = parts
        elif self.points and shapeType in _CanHaveParts_shapeTypes:
            # one part holding every point
            self.parts = [0]
        else:
            self.parts = []

        if bbox is None and self.points and shapeType in _CanHaveBBox_shapeTypes:
            bbox = self._bbox_from_points()
        if bbox is not None:
            self.bbox: BBox = bbox

        if m is None and shapeType in _HasM_shapeTypes | PointM_shapeTypes:
            m = [None] * len(self.points)
        if m is not None:
            self.m: Sequence[float | None] = m
            self.mbox: MBox | None = mbox if mbox is not None else self._mbox_from_ms()

        if z is None and shapeType in _HasZ_shapeTypes | PointZ_shapeTypes:
            # Missing z values default to 0.0
            z = [0.0] * len(self.points)
        if z is not None:
            self.z: Sequence[float] = z
            self.zbox: ZBox | None = zbox if zbox is not None else self._zbox_from_zs()

    def _bbox_from_points(self) -> BBox:
        xs = [x for x, __y in self.points]
        ys = [y for __x, y in self.points]
        return min(xs), min(ys), max(xs), max(ys)

    def _mbox_from_ms(self) -> MBox | None:
        ms = [m for m in self.m if m is not None]
        return (min(ms), max(ms)) if ms else None

    def _zbox_from_zs(self) -> ZBox | None:
        return (min(self.z), max(self.z)) if self.z else None

    @property
    def oid(self) -> int:
        """Position of the shape in its file, counting from 0,
        or -1 for a shape that was not read from a file."""
        return self.__oid

    @property
    def shapeTypeName(self) -> str:
        return SHAPETYPE_LOOKUP[self.shapeType]

    @property
    def lines(self) -> list[PointsT]:
        """The points of each part, as a list of point lists."""
        if not self.parts:
            return [list(self.points)] if self.points else []
        return [
            list(self.points[start:end])
            for start, end in part_ranges(self.parts, len(self.points))
        ]

    def __repr__(self) -> str:
        name = type(self).__name__
        if name == "Shape":
            name = f"Shape ({self.shapeTypeName})"
        return f"{name} #{self.__oid}"


# Every from_byte_stream takes the same arguments, used or not
class NullShape(Shape):
    def __init__(
        self,
        oid: int | None = None,
    ):
        Shape.__init__(self, shapeType=NULL, oid=oid)

    @staticmethod
    def from_byte_stream(
        shapeType: int,
        b_io: ReadSeekableBinStream,
        next_shape: int,
        oid: int | None = None,
    ) -> NullShape:
        return NullShape(oid=oid)


_CanHaveBBox_shapeTypes = frozenset(
    [
        POLYLINE,
        POLYLINEM,
        POLYLINEZ,
        MULTIPOINT,
        MULTIPOINTM,
        MULTIPOINTZ,
        POLYGON,
        POLYGONM,
        POLYGONZ,
        MULTIPATCH,
    ]
)


class _CanHaveBBox(Shape):
    """Base of every shape type that stores a bounding box and a
    point count: the multipoints, polylines, polygons and multipatches.
    Their records share one layout, so one from_byte_stream decodes
    them all, skipping the blocks a given type does not have.
    """

    @staticmethod
    def _read_bbox_from_byte_stream(b_io: ReadableBinStream) -> BBox:
        return cast(BBox, unpack("<4d", read_exact(b_io, 32)))

    @staticmethod
    def _read_npoints_from_byte_stream(b_io: ReadableBinStream) -> int:
        (nPoints,) = unpack("<i", read_exact(b_io, 4))
        if nPoints < 0:
            raise InvalidPartIndices(f"Negative number of points: {nPoints}")
        return cast(int, nPoints)

    @staticmethod
    def _read_points_from_byte_stream(
        b_io: ReadableBinStream, nPoints: int
    ) -> list[Point2D]:
        xys = unpack(f"<{2 * nPoints}d", read_exact(b_io, 16 * nPoints))
        return list(zip(xys[0::2], xys[1::2]))

    @classmethod
    def from_byte_stream(
        cls,
        shapeType: int,
        b_io: ReadSeekableBinStream,
        next_shape: int,
        oid: int | None = None,
    ) -> Shape:
        # Record layout: box, [numParts], numPoints, [parts], [partTypes],
        # points, [z range, z values], [m range, m values]
        has_parts = shapeType in _CanHaveParts_shapeTypes
        kwargs: CanHaveBboxKwargs = {
            "oid": oid,
            "bbox": cls._read_bbox_from_byte_stream(b_io),
        }
        nParts = _CanHaveParts._read_nparts_from_byte_stream(b_io) if has_parts else 0
        nPoints = cls._read_npoints_from_byte_stream(b_io)

        parts: Sequence[int] = []
        if has_parts:
            parts = _CanHaveParts._read_parts_from_byte_stream(b_io, nParts)
            _CanHaveParts._check_parts(parts, nPoints)
            kwargs["parts"] = parts
        if shapeType == MULTIPATCH:
            kwargs["partTypes"] = MultiPatch._read_part_types_from_byte_stream(
                b_io, nParts
            )

        if not nPoints:
            return SHAPE_CLASS_FROM_SHAPETYPE[shapeType](**kwargs)

        points = cls._read_points_from_byte_stream(b_io, nPoints)
        zs: Sequence[float] | None = None
        ms: list[float | None] | None = None
        if shapeType in _HasZ_shapeTypes:
            kwargs["zbox"], zs = _HasZ._read_zs_from_byte_stream(b_io, nPoints)
        if shapeType in _HasM_shapeTypes:
            # the M block may be left out of the Z types
            kwargs["mbox"], ms = _HasM._read_ms_from_byte_stream(
                b_io, nPoints, next_shape, optional=shapeType in _HasZ_shapeTypes
            )

        if shapeType in Polygon_shapeTypes:
            points = _reverse_rings(parts, points)
            if zs is not None:
                zs = _Array[float]("d", _reverse_rings(parts, zs))
            if ms is not None:
                ms = _reverse_rings(parts, ms)

        kwargs["points"] = points
        if zs is not None:
            kwargs["z"] = zs
        if ms is not None:
            kwargs["m"] = ms
        return SHAPE_CLASS_FROM_SHAPETYPE[shapeType](**kwargs)


_CanHaveParts_shapeTypes = frozenset(
    [
        POLYLINE,
        POLYLINEM,
        POLYLINEZ,
        POLYGON,
        POLYGONM,
        POLYGONZ,
        MULTIPATCH,
    ]
)


class _CanHaveParts(_CanHaveBBox):
    def __init__(self, *args: PointsT, lines: list[PointsT] | None = None, **kwargs: Any):
        """Each positional argument is the point list of one part,
        e.g. Polyline(line1, line2)."""
        if args and lines:
            raise ValueError("Give the parts as positional args or as lines, not both.")
        Shape.__init__(self, lines=list(args) if args else lines, **kwargs)

    @staticmethod
    def _read_nparts_from_byte_stream(b_io: ReadableBinStream) -> int:
        (nParts,) = unpack("<i", read_exact(b_io, 4))
        if nParts < 0:
            raise InvalidPartIndices(f"Negative number of parts: {nParts}")
        return cast(int, nParts)

    @staticmethod
    def _read_parts_from_byte_stream(
        b_io: ReadableBinStream, nParts: int
    ) -> _Array[int]:
        return _Array[int]("i", unpack(f"<{nParts}i", read_exact(b_io, nParts * 4)))

    @staticmethod
    def _check_parts(parts: Sequence[int], nPoints: int) -> None:
        """Part indexes must start at 0, strictly increase and stay
        within the record's points."""
        if not parts:
            if nPoints:
                raise InvalidPartIndices(f"{nPoints} points but no parts")
            return
        if parts[0] != 0:
            raise InvalidPartIndices(f"First part must start at 0. Got: {parts[0]}")
        for previous, start in zip(parts, parts[1:]):
            if start <= previous:
                raise InvalidPartIndices(
                    f"Part indexes must be strictly increasing. Got: {list(parts)}"
                )
        # every part, the last one included, needs at least one point
        if parts[-1] >= max(nPoints, 1):
            raise InvalidPartIndices(
                f"Part index {parts[-1]} is beyond the number of points: {nPoints}"
            )


Point_shapeTypes = frozenset([POINT, POINTM, POINTZ])


class Point(Shape):
    # No bounding box or point count, just the coordinates
    def __init__(
        self,
        x: float,
        y: float,
        oid: int | None = None,
    ):
        Shape.__init__(self, points=[(x, y)], oid=oid)

    @property
    def x(self) -> float:
        return self.points[0][0]

    @property
    def y(self) -> float:
        return self.points[0][1]

    @classmethod
    def from_byte_stream(
        cls,
        shapeType: int,
        b_io: ReadSeekableBinStream,
        next_shape: int,
        oid: int | None = None,
    ) -> Shape:
        """Reads X, Y, then Z for a PointZ, then M for a PointM or PointZ."""
        x, y = unpack("<2d", read_exact(b_io, 16))
        if shapeType == POINT:
            return Point(x, y, oid=oid)

        z = None
        if shapeType == POINTZ:
            (z,) = PointZ._read_single_point_zs_from_byte_stream(b_io)
        # some writers leave the M value out of a PointZ
        (m,) = PointM._read_single_point_ms_from_byte_stream(
            b_io, next_shape, optional=z is not None
        )
        if z is None:
            return PointM(x, y, m=m, oid=oid)
        return PointZ(x, y, z=z, m=m, oid=oid)


Polyline_shapeTypes = frozenset([POLYLINE, POLYLINEM, POLYLINEZ])


class Polyline(_CanHaveParts):
    pass


Polygon_shapeTypes = frozenset([POLYGON, POLYGONM, POLYGONZ])


class Polygon(_CanHaveParts):
    @property
    def rings(self) -> list[PointsT]:
        """The points of each ring, in OGC order."""
        return self.lines


MultiPoint_shapeTypes = frozenset([MULTIPOINT, MULTIPOINTM, MULTIPOINTZ])


class MultiPoint(_CanHaveBBox):
    def __init__(
        self,
        *args: Point2D,
        points: PointsT | None = None,
        **kwargs: Any,
    ):
        """Each positional argument is one point, e.g. MultiPoint((1, 1), (2, 2))."""
        if args and points:
            raise ValueError("Give the points as positional args or as points, not both.")
        Shape.__init__(self, points=list(args) if args else points, **kwargs)


# Not a PointM or a PointZ
_HasM_shapeTypes = frozenset(
    [
        POLYLINEM,
        POLYLINEZ,
        POLYGONM,
        POLYGONZ,
        MULTIPOINTM,
        MULTIPOINTZ,
        MULTIPATCH,
    ]
)


class _HasM(_CanHaveBBox):
    m: Sequence[float | None]

    @staticmethod
    def _read_ms_from_byte_stream(
        b_io: ReadSeekableBinStream,
        nPoints: int,
        next_shape: int,
        optional: bool = False,
    ) -> tuple[MBox | None, list[float | None]]:
        """Reads the M range and one M value per point. An optional
        block counts as absent only when the record has no bytes left."""
        if optional and b_io.tell() >= next_shape:
            return None, [None] * nPoints
        mmin, mmax, *values = unpack(f"<{2 + nPoints}d", read_exact(b_io, 16 + 8 * nPoints))
        return (mmin, mmax), [_m_or_none(m) for m in values]


# Not a PointZ
_HasZ_shapeTypes = frozenset(
    [
        POLYLINEZ,
        POLYGONZ,
        MULTIPOINTZ,
        MULTIPATCH,
    ]
)


class _HasZ(_CanHaveBBox):
    z: Sequence[float]

    @staticmethod
    def _read_zs_from_byte_stream(
        b_io: ReadableBinStream, nPoints: int
    ) -> tuple[ZBox, Sequence[float]]:
        zmin, zmax, *values = unpack(f"<{2 + nPoints}d", read_exact(b_io, 16 + 8 * nPoints))
        return (zmin, zmax), _Array[float]("d", values)


MultiPatch_shapeTypes = frozenset([MULTIPATCH])


class MultiPatch(_HasM, _HasZ, _CanHaveParts):
    """Decoded but not interpreted: the parts, points and raw part
    types are exposed for the caller to build triangle strips, fans
    and rings from."""

    @staticmethod
    def _read_part_types_from_byte_stream(
        b_io: ReadableBinStream, nParts: int
    ) -> Sequence[int]:
        return _Array[int]("i", unpack(f"<{nParts}i", read_exact(b_io, nParts * 4)))


PointM_shapeTypes = frozenset([POINTM, POINTZ])


class PointM(Point):
    def __init__(
        self,
        x: float,
        y: float,
        m: float | None = None,
        oid: int | None = None,
    ):
        Shape.__init__(self, points=[(x, y)], m=(m,), oid=oid)

    @property
    def mvalue(self) -> float | None:
        return self.m[0]

    @staticmethod
    def _read_single_point_ms_from_byte_stream(
        b_io: ReadSeekableBinStream, next_shape: int, optional: bool = False
    ) -> tuple[float | None]:
        if optional and b_io.tell() >= next_shape:
            return (None,)
        (m,) = unpack("<d", read_exact(b_io, 8))
        return (_m_or_none(m),)


PolylineM_shapeTypes = frozenset([POLYLINEM, POLYLINEZ])


class PolylineM(Polyline, _HasM):
    pass


PolygonM_shapeTypes = frozenset([POLYGONM, POLYGONZ])


class PolygonM(Polygon, _HasM):
    pass


MultiPointM_shapeTypes = frozenset([MULTIPOINTM, MULTIPOINTZ])


class MultiPointM(MultiPoint, _HasM):
    pass


PointZ_shapeTypes = frozenset([POINTZ])


class PointZ(PointM):
    def __init__(
        self,
        x: float,
        y: float,
        z: float = 0.0,
        m: float | None = None,
        oid: int | None = None,
    ):
        Shape.__init__(self, points=[(x, y)], z=(z,), m=(m,), oid=oid)

    @property
    def zvalue(self) -> float:
        return self.z[0]

    @staticmethod
    def _read_single_point_zs_from_byte_stream(b_io: ReadableBinStream) -> tuple[float]:
        return cast(tuple[float], unpack("<d", read_exact(b_io, 8)))


PolylineZ_shapeTypes = frozenset([POLYLINEZ])


class PolylineZ(PolylineM, _HasZ):
    pass


PolygonZ_shapeTypes = frozenset([POLYGONZ])


class PolygonZ(PolygonM, _HasZ):
    pass


MultiPointZ_shapeTypes = frozenset([MULTIPOINTZ])


class MultiPointZ(MultiPointM, _HasZ):
    pass


SHAPE_CLASS_FROM_SHAPETYPE: dict[int, type[NullShape | Point | _CanHaveBBox]] = {
    NULL: NullShape,
    POINT: Point,
    POLYLINE: Polyline,
    POLYGON: Polygon,
    MULTIPOINT: MultiPoint,
    POINTZ: PointZ,
    POLYLINEZ: PolylineZ,
    POLYGONZ: PolygonZ,
    MULTIPOINTZ: MultiPointZ,
    POINTM: PointM,
    POLYLINEM: PolylineM,
    POLYGONM: PolygonM,
    MULTIPOINTM: MultiPointM,
    MULTIPATCH: MultiPatch,
}


def read_shape(
    b_io: ReadSeekableBinStream,
    next_shape: int,
    oid: int | None = None,
    base_offset: int = 0,
) -> Shape:
    """Decodes the content of one shape record: a little endian
    shape type code followed by the layout of that shape type.
    'next_shape' is the length of the record content in bytes, and
    'base_offset' the position of the content in the .shp stream,
    used to report where a truncated record ended.
    """
    shapeType: int | None = None
    try:
        (shapeType,) = unpack("<i", read_exact(b_io, 4))
        try:
            ShapeClass = SHAPE_CLASS_FROM_SHAPETYPE[shapeType]
        except KeyError:
            raise UnknownShapeType(shapeType, offset=base_offset) from None
        return ShapeClass.from_byte_stream(shapeType, b_io, next_shape, oid=oid)
    except ShortReadError as e:
        raise TruncatedRecord(
            base_offset + b_io.tell(), shapeType=shapeType, oid=oid, detail=str(e)
        ) from e
