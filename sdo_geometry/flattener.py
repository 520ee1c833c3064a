from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging

import numpy as np
import shapely
from shapely.geometry import Point, Polygon
from shapely.geometry.base import BaseGeometry, BaseMultipartGeometry
from shapely.geometry.polygon import orient

from .constants import (
    UNKNOWN,
    KIND_BY_GEOM_TYPE,
    ETYPE_POINT,
    ETYPE_LINE,
    ETYPE_POLYGON_EXTERIOR,
    ETYPE_POLYGON_INTERIOR,
    INTERP_STRAIGHT,
    INTERP_RECTANGLE,
)
from .errors import NonRectangularPolygonForRectangleEncoding, UnsupportedGeometryType
from .ordinates import flatten_coordinates, ordinate_or_none
from .typecode import encode_type_code

logger = logging.getLogger(__name__)


@dataclass
class FlatGeometry:
    """Encoded parts before they are wrapped into a record; absent fields are None."""
    gtype: int
    point: Optional[Tuple[Optional[float], Optional[float], Optional[float]]] = None
    elem_info: Optional[List[int]] = field(default_factory=list)
    ordinates: Optional[List[float]] = field(default_factory=list)


def geometry_dimension(geom: BaseGeometry) -> int:
    return 3 if geom.has_z else 2


def geometry_kind(geom: BaseGeometry) -> int:
    try:
        return KIND_BY_GEOM_TYPE[geom.geom_type]
    except KeyError:
        raise UnsupportedGeometryType(f"Cannot encode geometry type {geom.geom_type}") from None


def _coords(geom: BaseGeometry, dimension: int) -> np.ndarray:
    return shapely.get_coordinates(geom, include_z=dimension == 3)


def is_rectangle(poly: Polygon) -> bool:
    """
    True for a hole-free polygon whose shell is exactly an axis-aligned
    rectangle with non-zero width and height: 5 closed vertices, each on a
    corner of the envelope, every edge parallel to one axis. In 3D every z
    must be 0, the only height the two-corner form can carry.
    """
    if poly.is_empty or len(poly.interiors):
        return False
    minx, miny, maxx, maxy = poly.bounds
    if not (maxx > minx and maxy > miny):
        return False
    ring = np.asarray(poly.exterior.coords)
    if ring.shape[0] != 5:
        return False
    if ring.shape[1] == 3 and np.any(ring[:, 2] != 0):
        return False
    xs, ys = ring[:, 0], ring[:, 1]
    if not (np.all((xs == minx) | (xs == maxx)) and np.all((ys == miny) | (ys == maxy))):
        return False
    dx = xs[1:] != xs[:-1]
    dy = ys[1:] != ys[:-1]
    return bool(np.all(dx ^ dy))


class GeometryFlattener:
    """
    Walks a shapely geometry and emits the SDO element table and ordinate
    array. A lone Point goes to the SDO_POINT fast path; a lone axis-aligned
    rectangle goes to the two-corner (1, 1003, 3) form, which some spatial
    operators require.
    """

    def __init__(self, orient_rings: bool = False):
        self.orient_rings = orient_rings

    def flatten(self, geom: Optional[BaseGeometry]) -> FlatGeometry:
        if geom is None:
            return FlatGeometry(gtype=encode_type_code(UNKNOWN, 2))

        kind = geometry_kind(geom)
        dimension = geometry_dimension(geom)
        gtype = encode_type_code(kind, dimension)

        if geom.is_empty:
            logger.debug("Encoding empty %s as an empty record", geom.geom_type)
            return FlatGeometry(gtype=gtype)

        if isinstance(geom, Point):
            logger.debug("Point optimization for %s", geom.wkt)
            z = ordinate_or_none(geom.z) if dimension == 3 else None
            return FlatGeometry(gtype=gtype, point=(geom.x, geom.y, z), elem_info=None, ordinates=None)

        if isinstance(geom, Polygon) and is_rectangle(geom):
            logger.debug("Rectangle optimization for polygon with bounds %s", geom.bounds)
            elem_info, ordinates = self.rectangle(geom, dimension)
            return FlatGeometry(gtype=gtype, elem_info=elem_info, ordinates=ordinates)

        elem_info: List[int] = []
        ordinates: List[float] = []
        self._append(geom, dimension, elem_info, ordinates)
        logger.debug(
            "Flattened %s into %d element(s), %d ordinate(s)",
            geom.geom_type, len(elem_info) // 3, len(ordinates),
        )
        return FlatGeometry(gtype=gtype, elem_info=elem_info, ordinates=ordinates)

    @staticmethod
    def rectangle(poly: Polygon, dimension: int) -> Tuple[List[int], List[float]]:
        if not is_rectangle(poly):
            raise NonRectangularPolygonForRectangleEncoding(
                f"Polygon with bounds {poly.bounds} is not an axis-aligned rectangle"
            )
        minx, miny, maxx, maxy = poly.bounds
        if dimension == 2:
            ordinates = [minx, miny, maxx, maxy]
        else:
            ordinates = [minx, miny, 0.0, maxx, maxy, 0.0]
        return [1, ETYPE_POLYGON_EXTERIOR, INTERP_RECTANGLE], ordinates

    # ------------------------------------------------------------------
    def _append(self, geom: BaseGeometry, dimension: int, elem_info: List[int], ordinates: List[float]) -> None:
        if geom.is_empty:
            return
        geom_type = geom.geom_type

        if geom_type == "Point":
            elem_info.extend([len(ordinates) + 1, ETYPE_POINT, 1])
            flatten_coordinates(_coords(geom, dimension), ordinates)
        elif geom_type == "MultiPoint":
            coords = _coords(geom, dimension)
            elem_info.extend([len(ordinates) + 1, ETYPE_POINT, len(coords)])
            flatten_coordinates(coords, ordinates)
        elif geom_type in ("LineString", "LinearRing"):
            elem_info.extend([len(ordinates) + 1, ETYPE_LINE, INTERP_STRAIGHT])
            flatten_coordinates(_coords(geom, dimension), ordinates)
        elif geom_type == "Polygon":
            poly = orient(geom, sign=1.0) if self.orient_rings else geom
            elem_info.extend([len(ordinates) + 1, ETYPE_POLYGON_EXTERIOR, INTERP_STRAIGHT])
            flatten_coordinates(_coords(poly.exterior, dimension), ordinates)
            for hole in poly.interiors:
                elem_info.extend([len(ordinates) + 1, ETYPE_POLYGON_INTERIOR, INTERP_STRAIGHT])
                flatten_coordinates(_coords(hole, dimension), ordinates)
        elif isinstance(geom, BaseMultipartGeometry):
            for part in geom.geoms:
                self._append(part, dimension, elem_info, ordinates)
        else:
            raise UnsupportedGeometryType(f"Cannot encode geometry type {geom_type}")
