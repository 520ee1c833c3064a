from __future__ import annotations
from typing import Iterable, List, Optional
import math

import numpy as np

from .errors import OrdinateRangeError


def as_ordinate_array(values: Optional[Iterable]) -> np.ndarray:
    """
    Present an SDO_ORDINATE_ARRAY as a flat float64 array.

    Null cells become NaN (the object model's "no value"); an absent array
    becomes a zero-length one.
    """
    if values is None:
        return np.empty(0, dtype=np.float64)
    if isinstance(values, np.ndarray) and values.dtype.kind == "f":
        return values.astype(np.float64, copy=False).ravel()
    return np.array(
        [np.nan if v is None else float(v) for v in values],
        dtype=np.float64,
    )


def coordinate_count(start: int, end: int, dimension: int) -> int:
    """
    Number of coordinates stored between the 1-based `start` offset and the
    1-based, exclusive `end` offset.
    """
    span = end - start
    if span < 0:
        raise OrdinateRangeError(f"Element at offset {start} ends before it starts (next offset {end})")
    if span % dimension:
        raise OrdinateRangeError(
            f"Element at offset {start} spans {span} ordinates, not a multiple of dimension {dimension}"
        )
    return span // dimension


def slice_coordinates(ordinates: np.ndarray, start: int, dimension: int, count: int) -> np.ndarray:
    """
    Read `count` coordinates of `dimension` ordinates each, starting at the
    1-based `start` offset. Returns an (count, dimension) view.
    """
    if start < 1:
        raise OrdinateRangeError(f"Offset {start} is before the start of the ordinate array")
    if count < 0:
        raise OrdinateRangeError(f"Negative coordinate count {count} at offset {start}")
    begin = start - 1
    stop = begin + count * dimension
    if stop > ordinates.size:
        raise OrdinateRangeError(
            f"Offset {start} with {count} coordinates needs {stop} ordinates, array has {ordinates.size}"
        )
    return ordinates[begin:stop].reshape(count, dimension)


def flatten_coordinates(coords: np.ndarray, out: List[float]) -> int:
    """Append (n, dimension) coordinates to `out` in x, y[, z] order; returns ordinates written."""
    flat = np.asarray(coords, dtype=np.float64).ravel()
    out.extend(flat.tolist())
    return int(flat.size)


def ordinate_or_none(value: float) -> Optional[float]:
    """NaN is the object model's missing ordinate; the record stores it as null."""
    if value is None or math.isnan(value):
        return None
    return float(value)
