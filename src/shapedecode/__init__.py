"""
shapedecode
Provides streaming read support for the geometry (.shp) and attribute
(.dbf) files of ESRI Shapefiles.
Compatible with Python versions >=3.9
"""

from __future__ import annotations

import logging

from .__version__ import __version__
from .classes import (
    DBFHeader,
    Field,
    InvalidNumber,
    Record,
    RecordHeader,
    ShapefileHeader,
    ShapefileRecord,
    ShapeRecord,
)
from .constants import (
    MULTIPATCH,
    MULTIPOINT,
    MULTIPOINTM,
    MULTIPOINTZ,
    NODATA,
    NULL,
    PARTTYPE_LOOKUP,
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
from .dbf import DBFReader
from .exceptions import (
    InvalidLogicalValue,
    InvalidNumericValue,
    InvalidPartIndices,
    MissingTerminator,
    ShapefileException,
    TruncatedHeader,
    TruncatedRecord,
    UnknownShapeType,
    UnsupportedFieldType,
    WKT_Error,
)
from .geometric_calculations import is_cw, organize_polygon_rings, signed_area
from .helpers import _Array
from .reader import Reader, ShapefileReader
from .shapes import (
    SHAPE_CLASS_FROM_SHAPETYPE,
    MultiPatch,
    MultiPoint,
    MultiPointM,
    MultiPointZ,
    NullShape,
    Point,
    PointM,
    PointZ,
    Polygon,
    PolygonM,
    PolygonZ,
    Polyline,
    PolylineM,
    PolylineZ,
    Shape,
    read_shape,
)
from .types import (
    BBox,
    Coord,
    Coords,
    FieldType,
    FieldTypeT,
    MBox,
    Point2D,
    Point3D,
    PointMT,
    PointsT,
    PointZT,
    ReadableBinStream,
    ReadSeekableBinStream,
    RecordValue,
    ZBox,
)

__all__ = [
    "__version__",
    "NULL",
    "POINT",
    "POLYLINE",
    "POLYGON",
    "MULTIPOINT",
    "POINTZ",
    "POLYLINEZ",
    "POLYGONZ",
    "MULTIPOINTZ",
    "POINTM",
    "POLYLINEM",
    "POLYGONM",
    "MULTIPOINTM",
    "MULTIPATCH",
    "SHAPETYPE_LOOKUP",
    "SHAPETYPENUM_LOOKUP",
    "PARTTYPE_LOOKUP",
    "NODATA",
    "Reader",
    "ShapefileReader",
    "DBFReader",
    "_Array",
    "Shape",
    "NullShape",
    "Point",
    "Polyline",
    "Polygon",
    "MultiPoint",
    "MultiPointM",
    "MultiPointZ",
    "PolygonM",
    "PolygonZ",
    "PolylineM",
    "PolylineZ",
    "MultiPatch",
    "PointM",
    "PointZ",
    "SHAPE_CLASS_FROM_SHAPETYPE",
    "read_shape",
    "Point2D",
    "Point3D",
    "PointMT",
    "PointZT",
    "Coord",
    "Coords",
    "PointsT",
    "BBox",
    "MBox",
    "ZBox",
    "ReadableBinStream",
    "ReadSeekableBinStream",
    "FieldTypeT",
    "FieldType",
    "RecordValue",
    "ShapefileException",
    "TruncatedHeader",
    "TruncatedRecord",
    "UnknownShapeType",
    "InvalidPartIndices",
    "UnsupportedFieldType",
    "InvalidLogicalValue",
    "InvalidNumericValue",
    "MissingTerminator",
    "WKT_Error",
    "ShapefileHeader",
    "RecordHeader",
    "ShapefileRecord",
    "DBFHeader",
    "Field",
    "InvalidNumber",
    "Record",
    "ShapeRecord",
    "signed_area",
    "is_cw",
    "organize_polygon_rings",
]

logger = logging.getLogger(__name__)
