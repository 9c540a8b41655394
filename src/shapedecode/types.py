from __future__ import annotations

from typing import Final, Literal, Optional, Protocol, Union

## Custom type variables

Point2D = tuple[float, float]
Point3D = tuple[float, float, float]
PointMT = tuple[float, float, Optional[float]]
PointZT = tuple[float, float, float, Optional[float]]

# A coordinate as rendered, with any z and m values appended
Coord = Union[Point2D, Point3D, PointMT, PointZT]
Coords = list[Coord]

PointsT = list[Point2D]

BBox = tuple[float, float, float, float]
MBox = tuple[float, float]
ZBox = tuple[float, float]


class ReadableBinStream(Protocol):
    def read(self, size: int = -1) -> bytes: ...


class ReadSeekableBinStream(Protocol):
    def seek(self, offset: int, whence: int = 0) -> int: ...
    def tell(self) -> int: ...
    def read(self, size: int = -1) -> bytes: ...


FieldTypeT = Literal[
    "C", "N", "L", "D", "M", "F", "B", "G", "P", "Y", "T", "I", "V", "X", "@", "O", "+"
]


# https://www.clicketyclick.dk/databases/xbase/format/dbf.html#DBF_STRUCT
class FieldType:
    """A bare bones 'enum', as the enum library noticeably slows performance."""

    C: Final = "C"  # "Character"  # (str)
    N: Final = "N"  # "Numeric"  # (int, or float when decimal > 0)
    L: Final = "L"  # "Logical"  # (bool)
    D: Final = "D"  # "Date"
    M: Final = "M"  # "Memo"
    F: Final = "F"  # "Floating point"  # (float)
    B: Final = "B"  # "Binary"
    G: Final = "G"  # "General"
    P: Final = "P"  # "Picture"
    Y: Final = "Y"  # "Currency"
    T: Final = "T"  # "DateTime"
    I: Final = "I"  # "Integer"  # (int, or float when decimal > 0)
    V: Final = "V"  # "VariField"
    X: Final = "X"  # "VarChar"  # (str)
    AT: Final = "@"  # "Timestamp"
    O: Final = "O"  # "Double"  # (float)
    PLUS: Final = "+"  # "Autoincrement"
    __members__: set[FieldTypeT] = {
        "C",
        "N",
        "L",
        "D",
        "M",
        "F",
        "B",
        "G",
        "P",
        "Y",
        "T",
        "I",
        "V",
        "X",
        "@",
        "O",
        "+",
    }


# A possible decoded value in a dbf record, i.e. from C, X, N, I, F, O or L fields
RecordValue = Union[bool, int, float, str]
