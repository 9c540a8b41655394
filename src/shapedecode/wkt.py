from __future__ import annotations

import logging
from collections.abc import Sequence

from . import constants
from .constants import (
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
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
)
from .exceptions import WKT_Error
from .geometric_calculations import organize_polygon_rings
from .helpers import part_ranges
from .types import Coord, Coords, PointsT

logger = logging.getLogger(__name__)

_Z_SHAPETYPES = frozenset([POINTZ, MULTIPOINTZ, POLYLINEZ, POLYGONZ, MULTIPATCH])
_M_SHAPETYPES = frozenset([POINTM, MULTIPOINTM, POLYLINEM, POLYGONM])


def format_number(value: float | None) -> str:
    """Formats a coordinate for WKT. Integral values lose their
    decimal part, missing measures become NaN.

    >>> format_number(10.0)
    '10'
    >>> format_number(-0.25)
    '-0.25'
    >>> format_number(None)
    'NaN'
    """
    if value is None:
        return "NaN"
    value = float(value)
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _wkt_name(kind: str, tag: str) -> str:
    return f"{kind} {tag}" if tag else kind


def _format_coord(coord: Coord) -> str:
    return " ".join(format_number(v) for v in coord)


def _format_coords(coords: Sequence[Coord]) -> str:
    return "(" + ", ".join(_format_coord(c) for c in coords) + ")"


def _format_rings(rings: Sequence[Coords]) -> str:
    return "(" + ", ".join(_format_coords(ring) for ring in rings) + ")"


class WKTSerializableShape:
    shapeType: int
    points: PointsT
    parts: Sequence[int]
    z: Sequence[float]
    m: Sequence[float | None]

    oid: int

    def _wkt_dimensions(self) -> tuple[bool, bool]:
        """Whether z and m values are rendered."""
        if self.shapeType in _Z_SHAPETYPES:
            # Z shapes have optional measures
            has_m = any(m is not None for m in getattr(self, "m", ()))
            return True, has_m
        return False, self.shapeType in _M_SHAPETYPES

    def _wkt_coords(self, has_z: bool, has_m: bool) -> Coords:
        coords: Coords = []
        for i, (x, y) in enumerate(self.points):
            coord: tuple[float | None, ...] = (x, y)
            if has_z:
                coord += (self.z[i],)
            if has_m:
                coord += (self.m[i],)
            coords.append(coord)  # type: ignore[arg-type]
        return coords

    @property
    def wkt(self) -> str:
        """The shape as Well-Known Text. Polygon rings are grouped into
        polygons by their orientation."""
        if self.shapeType == NULL:
            return "GEOMETRYCOLLECTION EMPTY"

        if self.shapeType == MULTIPATCH:
            raise WKT_Error(
                f'Shape type "{SHAPETYPE_LOOKUP[self.shapeType]}" cannot be represented as WKT.'
            )

        has_z, has_m = self._wkt_dimensions()
        tag = ("Z" if has_z else "") + ("M" if has_m else "")
        coords = self._wkt_coords(has_z, has_m)

        if self.shapeType in {POINT, POINTM, POINTZ}:
            name = _wkt_name("POINT", tag)
            if not coords:
                return f"{name} EMPTY"
            return f"{name} ({_format_coord(coords[0])})"

        if self.shapeType in {MULTIPOINT, MULTIPOINTM, MULTIPOINTZ}:
            name = _wkt_name("MULTIPOINT", tag)
            if not coords:
                return f"{name} EMPTY"
            return f"{name} (" + ", ".join(f"({_format_coord(c)})" for c in coords) + ")"

        parts = [coords[start:end] for start, end in part_ranges(self.parts, len(coords))]

        if self.shapeType in {POLYLINE, POLYLINEM, POLYLINEZ}:
            if len(parts) <= 1:
                name = _wkt_name("LINESTRING", tag)
                if not coords:
                    return f"{name} EMPTY"
                return f"{name} {_format_coords(coords)}"
            name = _wkt_name("MULTILINESTRING", tag)
            return f"{name} {_format_rings(parts)}"

        if self.shapeType in {POLYGON, POLYGONM, POLYGONZ}:
            name = _wkt_name("POLYGON", tag)
            if not parts:
                return f"{name} EMPTY"

            errors: dict[str, int] = {}
            polys = organize_polygon_rings(parts, errors)
            if constants.VERBOSE and errors:
                logger.warning(
                    "Possible issue encountered when converting Shape #%s to WKT: %s",
                    self.oid,
                    ", ".join(f"{k}={v}" for k, v in errors.items()),
                )

            if len(polys) == 1:
                return f"{name} {_format_rings(polys[0])}"
            return (
                _wkt_name("MULTIPOLYGON", tag)
                + " ("
                + ", ".join(_format_rings(poly) for poly in polys)
                + ")"
            )

        raise WKT_Error(f"Unknown shape type: {self.shapeType}")
