from __future__ import annotations

# Module settings
VERBOSE = True

# Constants for shape types
NULL = 0
POINT = 1
POLYLINE = 3
POLYGON = 5
MULTIPOINT = 8
POINTZ = 11
POLYLINEZ = 13
POLYGONZ = 15
MULTIPOINTZ = 18
POINTM = 21
POLYLINEM = 23
POLYGONM = 25
MULTIPOINTM = 28
MULTIPATCH = 31

SHAPETYPE_LOOKUP = {
    NULL: "NULL",
    POINT: "POINT",
    POLYLINE: "POLYLINE",
    POLYGON: "POLYGON",
    MULTIPOINT: "MULTIPOINT",
    POINTZ: "POINTZ",
    POLYLINEZ: "POLYLINEZ",
    POLYGONZ: "POLYGONZ",
    MULTIPOINTZ: "MULTIPOINTZ",
    POINTM: "POINTM",
    POLYLINEM: "POLYLINEM",
    POLYGONM: "POLYGONM",
    MULTIPOINTM: "MULTIPOINTM",
    MULTIPATCH: "MULTIPATCH",
}

SHAPETYPENUM_LOOKUP = {name: code for code, name in SHAPETYPE_LOOKUP.items()}

# MultiPatch part types, exposed raw on MultiPatch.partTypes
TRIANGLE_STRIP = 0
TRIANGLE_FAN = 1
OUTER_RING = 2
INNER_RING = 3
FIRST_RING = 4
RING = 5

PARTTYPE_LOOKUP = {
    TRIANGLE_STRIP: "TRIANGLE_STRIP",
    TRIANGLE_FAN: "TRIANGLE_FAN",
    OUTER_RING: "OUTER_RING",
    INNER_RING: "INNER_RING",
    FIRST_RING: "FIRST_RING",
    RING: "RING",
}

NODATA = -10e38  # ESRI shapefile nodata marker, only used for m-values.

# .shp layout
SHP_FILE_CODE = 9994
SHP_HEADER_SIZE = 100  # bytes
SHP_HEADER_WORDS = SHP_HEADER_SIZE // 2
RECORD_HEADER_SIZE = 8  # bytes
RECORD_HEADER_WORDS = RECORD_HEADER_SIZE // 2

# .dbf layout
DBF_HEADER_SIZE = 32
DBF_FIELD_DESCRIPTOR_SIZE = 32
DBF_HEADER_TERMINATOR = b"\r"
DBF_DELETED_RECORD = b"*"
