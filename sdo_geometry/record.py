"""
The five-field SDO_GEOMETRY record as the codec sees it, and the accessor that
reads it out of whatever shape the driver hands over.
"""
from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional
import math

import numpy as np

from .errors import MalformedRecord

_FIELDS = ("gtype", "srid", "point", "elem_info", "ordinates")
_DB_FIELDS = ("SDO_GTYPE", "SDO_SRID", "SDO_POINT", "SDO_ELEM_INFO", "SDO_ORDINATES")


class SDOPoint(NamedTuple):
    """SDO_POINT_TYPE. A missing z is None, never a numeric stand-in."""
    x: Optional[float]
    y: Optional[float]
    z: Optional[float] = None

    def as_array(self) -> np.ndarray:
        return np.array(
            [np.nan if v is None else float(v) for v in (self.x, self.y, self.z)],
            dtype=np.float64,
        )


@dataclass
class SDORecord:
    """
    SDO_GEOMETRY attributes in storage order.

    `None` means the attribute is absent (SQL NULL), which the storage format
    distinguishes from an empty array.
    """
    gtype: Optional[int]
    srid: Optional[int] = None
    point: Optional[SDOPoint] = None
    elem_info: Optional[List[int]] = None
    ordinates: Optional[List[Optional[float]]] = None

    @property
    def is_empty(self) -> bool:
        return self.point is None and not self.elem_info

    def as_tuple(self) -> tuple:
        return (self.gtype, self.srid, self.point, self.elem_info, self.ordinates)

    # ------------------------- construction ------------------------- #
    @classmethod
    def from_value(cls, value: Any) -> Optional["SDORecord"]:
        """
        Accept an SDORecord, a mapping, a 5-item sequence, or a driver object
        exposing SDO_GTYPE .. SDO_ORDINATES attributes. None stays None.
        """
        if value is None:
            return None
        if isinstance(value, SDORecord):
            return value
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        if hasattr(value, "SDO_GTYPE"):
            return cls(*(_read_field(name, getattr(value, db_name, None))
                         for name, db_name in zip(_FIELDS, _DB_FIELDS)))
        if isinstance(value, (list, tuple)) and len(value) == 5:
            return cls(*(_read_field(name, v) for name, v in zip(_FIELDS, value)))
        raise TypeError(f"Cannot read an SDO_GEOMETRY record from {type(value).__name__}")

    @classmethod
    def from_dict(cls, data: Mapping) -> "SDORecord":
        values = []
        for name, db_name in zip(_FIELDS, _DB_FIELDS):
            raw = data.get(name, data.get(db_name))
            values.append(_read_field(name, raw))
        return cls(*values)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form; NaN ordinates are written as null."""
        point = None
        if self.point is not None:
            point = [_json_number(v) for v in self.point]
        ordinates = None
        if self.ordinates is not None:
            ordinates = [_json_number(v) for v in self.ordinates]
        return {
            "gtype": self.gtype,
            "srid": self.srid,
            "point": point,
            "elem_info": None if self.elem_info is None else list(self.elem_info),
            "ordinates": ordinates,
        }


# ------------------------- field accessors ------------------------- #

def _read_field(name: str, raw: Any) -> Any:
    if name in ("gtype", "srid"):
        return _as_int(raw)
    if name == "point":
        return _as_point(raw)
    if name == "elem_info":
        seq = _as_list(raw)
        return None if seq is None else [None if v is None else int(v) for v in seq]
    seq = _as_list(raw)
    return None if seq is None else [None if v is None else float(v) for v in seq]


def _as_int(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    return int(raw)


def _as_float(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    return float(raw)


def _as_list(raw: Any) -> Optional[list]:
    if raw is None:
        return None
    if hasattr(raw, "aslist"):
        return raw.aslist()
    if isinstance(raw, np.ndarray):
        return raw.tolist()
    return list(raw)


def _as_point(raw: Any) -> Optional[SDOPoint]:
    if raw is None:
        return None
    if isinstance(raw, SDOPoint):
        return raw
    if isinstance(raw, Mapping):
        return SDOPoint(*(_as_float(raw.get(k, raw.get(k.upper()))) for k in ("x", "y", "z")))
    if hasattr(raw, "X"):
        return SDOPoint(_as_float(raw.X), _as_float(raw.Y), _as_float(getattr(raw, "Z", None)))
    values = _as_list(raw)
    if len(values) not in (2, 3):
        raise MalformedRecord(f"SDO_POINT needs 2 or 3 values, got {len(values)}")
    return SDOPoint(*(_as_float(v) for v in values))


def _json_number(v: Optional[float]) -> Optional[float]:
    if v is None or (isinstance(v, float) and math.isnan(v)):
        return None
    return v
