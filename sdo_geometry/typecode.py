from __future__ import annotations
from dataclasses import dataclass

from .constants import KIND_NAMES
from .errors import InvalidTypeCode, UnsupportedMeasure

_VALID_DIMENSIONS = (2, 3, 4)


@dataclass(frozen=True)
class TypeCode:
    """SDO_GTYPE split into its digits: D (dimension), L (measure position), TT (kind)."""
    dimension: int
    measure_position: int
    kind: int

    @property
    def kind_name(self) -> str:
        return KIND_NAMES[self.kind]

    @property
    def code(self) -> int:
        return self.dimension * 1000 + self.measure_position * 100 + self.kind

    def require_plain(self) -> "TypeCode":
        """Reject anything carrying a measure ordinate; returns self for chaining."""
        if self.measure_position != 0:
            raise UnsupportedMeasure(
                f"SDO_GTYPE {self.code} stores a measure at ordinate {self.measure_position}"
            )
        if self.dimension == 4:
            raise UnsupportedMeasure(
                f"SDO_GTYPE {self.code} is four-dimensional; only 2D and 3D geometries are supported"
            )
        return self


def decode_type_code(code) -> TypeCode:
    if code is None:
        raise InvalidTypeCode("SDO_GTYPE is null")
    try:
        code = int(code)
    except (TypeError, ValueError) as e:
        raise InvalidTypeCode(f"SDO_GTYPE {code!r} is not an integer") from e
    if code < 0:
        raise InvalidTypeCode(f"SDO_GTYPE {code} is negative")

    dimension = code // 1000
    measure_position = (code // 100) % 10
    kind = code % 100

    if dimension not in _VALID_DIMENSIONS:
        raise InvalidTypeCode(f"SDO_GTYPE {code} has unsupported dimension {dimension}")
    if kind not in KIND_NAMES:
        raise InvalidTypeCode(f"SDO_GTYPE {code} has unknown geometry kind {kind:02d}")
    return TypeCode(dimension, measure_position, kind)


def encode_type_code(kind: int, dimension: int) -> int:
    if kind not in KIND_NAMES:
        raise InvalidTypeCode(f"Unknown geometry kind {kind}")
    if dimension not in (2, 3):
        raise InvalidTypeCode(f"Cannot encode a {dimension}-dimensional geometry")
    return dimension * 1000 + kind
