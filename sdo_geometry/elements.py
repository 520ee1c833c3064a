from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple
import logging

import numpy as np

from .constants import (
    POINT,
    LINE,
    POLYGON,
    KNOWN_ETYPES,
    ETYPE_CUSTOM,
    ETYPE_POINT,
    ETYPE_LINE,
    ETYPE_COMPOUND,
    COMPOUND_ETYPES,
    EXTERIOR_RING_ETYPES,
    INTERIOR_RING_ETYPES,
    UNQUALIFIED_RING_ETYPES,
    INTERP_STRAIGHT,
    INTERP_ARC,
    INTERP_RECTANGLE,
    INTERP_CIRCLE,
)
from .errors import MalformedElementTable, OrdinateRangeError, UnsupportedCurve
from .ordinates import coordinate_count, slice_coordinates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ElementEntry:
    """One (offset, etype, interpretation) triplet of SDO_ELEM_INFO."""
    offset: int
    etype: int
    interpretation: int


@dataclass
class ElementGroup:
    """
    A logical part described by one or more element entries.

    `kind` is POINT, LINE or POLYGON. `parts` holds (n, dimension) coordinate
    arrays: the points of a point element, the vertices of a line, or the shell
    followed by the holes of a polygon.
    """
    kind: int
    parts: List[np.ndarray]
    entries: List[ElementEntry] = field(default_factory=list)


def parse_element_table(elem_info: Optional[Iterable]) -> List[ElementEntry]:
    """Split a flat SDO_ELEM_INFO array into triplets. Null cells read as 0."""
    if elem_info is None:
        return []
    values = [0 if v is None else int(v) for v in elem_info]
    if len(values) % 3:
        raise MalformedElementTable(
            f"Element table has {len(values)} values, not a multiple of 3"
        )
    return [
        ElementEntry(values[i], values[i + 1], values[i + 2])
        for i in range(0, len(values), 3)
    ]


def normalize_offsets(
    entries: Sequence[ElementEntry], dimension: int, n_ordinates: int
) -> List[ElementEntry]:
    """
    Offsets index the ordinate array, so every offset sits on a coordinate
    boundary: (offset - 1) % dimension == 0. Some writers store the 1-based
    coordinate index instead. A table that cannot be ordinate-addressed but
    fits the array once rescaled is read as coordinate-addressed.
    """
    if dimension < 2 or all((e.offset - 1) % dimension == 0 for e in entries):
        return list(entries)
    rescaled = [
        ElementEntry((e.offset - 1) * dimension + 1, e.etype, e.interpretation)
        for e in entries
    ]
    if any(e.offset < 1 or e.offset > n_ordinates for e in rescaled):
        return list(entries)
    logger.debug(
        "Element table offsets %s are not aligned to dimension %d; reading them as coordinate indexes",
        [e.offset for e in entries], dimension,
    )
    return rescaled


def rectangle_ring(corners: np.ndarray, exterior: bool = True) -> np.ndarray:
    """
    Expand the two stored corners of an optimized rectangle into a closed
    5-point ring. Exterior rings wind CCW, interior rings CW. In 3D the stored
    corners keep their z; the two synthesized corners get z=0.
    """
    lo = np.minimum(corners[0, :2], corners[1, :2])
    hi = np.maximum(corners[0, :2], corners[1, :2])
    minx, miny = lo
    maxx, maxy = hi
    dimension = corners.shape[1]
    if dimension == 2:
        ring = np.array([
            [minx, miny],
            [maxx, miny],
            [maxx, maxy],
            [minx, maxy],
            [minx, miny],
        ], dtype=np.float64)
    else:
        # z follows its corner when the corners are stored max-first
        swap = tuple(corners[0, :2]) > tuple(corners[1, :2])
        z_lo, z_hi = (corners[1, 2], corners[0, 2]) if swap else (corners[0, 2], corners[1, 2])
        ring = np.array([
            [minx, miny, z_lo],
            [maxx, miny, 0.0],
            [maxx, maxy, z_hi],
            [minx, maxy, 0.0],
            [minx, miny, z_lo],
        ], dtype=np.float64)
    return ring if exterior else ring[::-1].copy()


# ------------------------- table walking ------------------------- #

def _iter_top_level(
    entries: Sequence[ElementEntry], n_ordinates: int
) -> Iterator[Tuple[ElementEntry, List[ElementEntry], int]]:
    """
    Yield (head, sub_entries, end_offset) per top-level element. Compound
    elements swallow the `interpretation` sub-elements that follow them. The
    end offset is exclusive and 1-based: the next top-level offset, or one past
    the last ordinate.
    """
    i = 0
    while i < len(entries):
        head = entries[i]
        if head.etype not in KNOWN_ETYPES:
            raise MalformedElementTable(f"Unknown element type {head.etype} at entry {i}")
        if head.etype == ETYPE_CUSTOM:
            raise MalformedElementTable(f"Custom element (type 0) at entry {i} cannot be decoded")
        width = 1
        if head.etype in COMPOUND_ETYPES:
            if head.interpretation < 1:
                raise MalformedElementTable(
                    f"Compound element at entry {i} declares {head.interpretation} sub-elements"
                )
            width += head.interpretation
            if i + width > len(entries):
                raise MalformedElementTable(
                    f"Compound element at entry {i} declares {head.interpretation} sub-elements, "
                    f"only {len(entries) - i - 1} follow"
                )
        nxt = i + width
        end = entries[nxt].offset if nxt < len(entries) else n_ordinates + 1
        yield head, list(entries[i + 1:nxt]), end
        i = nxt


def _check_compound_pieces(head: ElementEntry, subs: List[ElementEntry], end: int) -> None:
    for sub in subs:
        if sub.etype != ETYPE_LINE:
            raise MalformedElementTable(
                f"Compound element at offset {head.offset} has a sub-element of type {sub.etype}"
            )
        if sub.interpretation == INTERP_ARC:
            raise UnsupportedCurve(f"Circular arc in compound element at offset {sub.offset}")
        if sub.interpretation != INTERP_STRAIGHT:
            raise MalformedElementTable(
                f"Compound sub-element at offset {sub.offset} has interpretation {sub.interpretation}"
            )
        if not head.offset <= sub.offset < end:
            raise OrdinateRangeError(
                f"Compound sub-element offset {sub.offset} falls outside its parent [{head.offset}, {end})"
            )


def _read_line(head, subs, end, ordinates, dimension) -> np.ndarray:
    if head.etype == ETYPE_COMPOUND:
        _check_compound_pieces(head, subs, end)
    elif head.interpretation == INTERP_ARC:
        raise UnsupportedCurve(f"Circular arc line at offset {head.offset}")
    elif head.interpretation != INTERP_STRAIGHT:
        raise MalformedElementTable(
            f"Line at offset {head.offset} has interpretation {head.interpretation}"
        )
    count = coordinate_count(head.offset, end, dimension)
    if count < 2:
        raise MalformedElementTable(f"Line at offset {head.offset} has {count} coordinate(s)")
    return slice_coordinates(ordinates, head.offset, dimension, count)


def _read_ring(head, subs, end, ordinates, dimension, exterior: bool) -> np.ndarray:
    if head.etype in COMPOUND_ETYPES:
        _check_compound_pieces(head, subs, end)
    elif head.interpretation == INTERP_RECTANGLE:
        corners = slice_coordinates(ordinates, head.offset, dimension, 2)
        return rectangle_ring(corners, exterior=exterior)
    elif head.interpretation in (INTERP_ARC, INTERP_CIRCLE):
        raise UnsupportedCurve(
            f"Ring at offset {head.offset} uses curved interpretation {head.interpretation}"
        )
    elif head.interpretation != INTERP_STRAIGHT:
        raise MalformedElementTable(
            f"Ring at offset {head.offset} has interpretation {head.interpretation}"
        )
    count = coordinate_count(head.offset, end, dimension)
    if count < 4:
        raise MalformedElementTable(f"Ring at offset {head.offset} has {count} coordinate(s)")
    return slice_coordinates(ordinates, head.offset, dimension, count)


def _read_points(head, end, ordinates, dimension) -> np.ndarray:
    n = head.interpretation
    if n < 1:
        raise MalformedElementTable(
            f"Point element at offset {head.offset} has interpretation {n}"
        )
    stored = coordinate_count(head.offset, end, dimension)
    if stored == n:
        return slice_coordinates(ordinates, head.offset, dimension, n)
    if stored == 1:
        # cluster of coincident points stored once
        return np.repeat(slice_coordinates(ordinates, head.offset, dimension, 1), n, axis=0)
    if stored > n:
        raise OrdinateRangeError(
            f"Point element at offset {head.offset} declares {n} point(s) but spans {stored}"
        )
    raise OrdinateRangeError(
        f"Point element at offset {head.offset} declares {n} point(s), only {stored} stored"
    )


def iter_element_groups(
    entries: Sequence[ElementEntry], ordinates: np.ndarray, dimension: int
) -> Iterator[ElementGroup]:
    """
    Walk the element table in order and yield one ElementGroup per logical part.

    An exterior ring opens a polygon; the interior rings after it are its holes
    until the next exterior ring or a non-ring element. The table never says
    what container the parts belong to; that comes from the type code.
    """
    polygon: Optional[ElementGroup] = None

    for head, subs, end in _iter_top_level(entries, ordinates.size):
        etype = head.etype
        starts_polygon = etype in EXTERIOR_RING_ETYPES or (
            etype in UNQUALIFIED_RING_ETYPES and polygon is None
        )

        if starts_polygon:
            if polygon is not None:
                yield polygon
            shell = _read_ring(head, subs, end, ordinates, dimension, exterior=True)
            polygon = ElementGroup(POLYGON, [shell], [head, *subs])
            continue

        if etype in INTERIOR_RING_ETYPES or etype in UNQUALIFIED_RING_ETYPES:
            if polygon is None:
                raise MalformedElementTable(
                    f"Interior ring at offset {head.offset} has no preceding exterior ring"
                )
            polygon.parts.append(_read_ring(head, subs, end, ordinates, dimension, exterior=False))
            polygon.entries.extend([head, *subs])
            continue

        if polygon is not None:
            yield polygon
            polygon = None

        if etype == ETYPE_POINT:
            yield ElementGroup(POINT, [_read_points(head, end, ordinates, dimension)], [head])
        else:
            yield ElementGroup(LINE, [_read_line(head, subs, end, ordinates, dimension)], [head, *subs])

    if polygon is not None:
        yield polygon
