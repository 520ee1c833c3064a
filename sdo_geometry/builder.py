from __future__ import annotations
from enum import Enum
from typing import Iterator, List, Optional
import logging

import numpy as np
import shapely
from shapely.geometry import (
    Point,
    LineString,
    Polygon,
    MultiPoint,
    MultiLineString,
    MultiPolygon,
    GeometryCollection,
)
from shapely.geometry.base import BaseGeometry

from .constants import (
    UNKNOWN,
    POINT,
    LINE,
    POLYGON,
    COLLECTION,
    MULTIPOINT,
    MULTILINE,
    MULTIPOLYGON,
    SOLID,
    MULTISOLID,
    KIND_NAMES,
    EMPTY_WKT_BY_KIND,
)
from .elements import ElementEntry, ElementGroup, iter_element_groups, normalize_offsets
from .errors import ElementCountMismatch, MalformedElementTable, SDOGeometryError
from .typecode import TypeCode

logger = logging.getLogger(__name__)

_SINGLE_PART_KINDS = (POINT, LINE, POLYGON)
_POLYGONAL_MULTI_KINDS = (MULTIPOLYGON, SOLID, MULTISOLID)


class BuilderState(Enum):
    AWAITING_KIND = "awaiting_kind"
    BUILDING_SINGLE_PART = "building_single_part"
    BUILDING_POLYGON = "building_polygon"
    BUILDING_MULTI_PART = "building_multi_part"
    DONE = "done"
    FAILED = "failed"


def empty_geometry(kind: int, dimension: int) -> BaseGeometry:
    """Canonical empty geometry for a kind, e.g. POLYGON EMPTY / POLYGON Z EMPTY."""
    name = EMPTY_WKT_BY_KIND[kind]
    if dimension == 3:
        return shapely.from_wkt(f"{name} Z EMPTY")
    return shapely.from_wkt(f"{name} EMPTY")


def _group_geometry(group: ElementGroup) -> BaseGeometry:
    """Concrete geometry for one group when it stands on its own (collections)."""
    if group.kind == POINT:
        coords = group.parts[0]
        return Point(coords[0]) if len(coords) == 1 else MultiPoint(coords)
    if group.kind == LINE:
        return LineString(group.parts[0])
    return Polygon(group.parts[0], group.parts[1:])


class GeometryBuilder:
    """
    Turns a decoded type code plus the walked element table into one shapely
    geometry. One builder per decode call; `state` ends in DONE or FAILED.
    """

    def __init__(self):
        self.state = BuilderState.AWAITING_KIND
        self.failure: Optional[SDOGeometryError] = None

    def build(
        self,
        type_code: TypeCode,
        point: Optional[np.ndarray],
        entries: List[ElementEntry],
        ordinates: np.ndarray,
    ) -> BaseGeometry:
        try:
            geom = self._build(type_code, point, entries, ordinates)
        except SDOGeometryError as e:
            self.state = BuilderState.FAILED
            self.failure = e
            raise
        self.state = BuilderState.DONE
        return geom

    # ------------------------------------------------------------------
    def _build(self, type_code, point, entries, ordinates) -> BaseGeometry:
        dimension = type_code.dimension
        kind = type_code.kind

        if point is not None:
            logger.debug("SDO_POINT present; element table not read")
            return Point(point[:dimension])

        if not entries:
            logger.debug("No elements; empty %s", KIND_NAMES[kind])
            return empty_geometry(kind, dimension)

        entries = normalize_offsets(entries, dimension, ordinates.size)
        groups = iter_element_groups(entries, ordinates, dimension)

        if kind in _SINGLE_PART_KINDS:
            return self._build_single(kind, groups)
        if kind == UNKNOWN:
            found = list(groups)
            if len(found) == 1:
                return _group_geometry(found[0])
            return GeometryCollection([_group_geometry(g) for g in found])
        self.state = BuilderState.BUILDING_MULTI_PART
        if kind == COLLECTION:
            return GeometryCollection([_group_geometry(g) for g in groups])
        if kind == MULTIPOINT:
            points = [self._expect(g, POINT, kind) for g in groups]
            return MultiPoint(np.vstack([p.parts[0] for p in points]))
        if kind == MULTILINE:
            lines = [self._expect(g, LINE, kind) for g in groups]
            return MultiLineString([g.parts[0] for g in lines])
        if kind in _POLYGONAL_MULTI_KINDS:
            polygons = [self._expect(g, POLYGON, kind) for g in groups]
            return MultiPolygon([Polygon(g.parts[0], g.parts[1:]) for g in polygons])
        raise MalformedElementTable(f"No element layout for kind {KIND_NAMES[kind]}")

    def _build_single(self, kind: int, groups: Iterator[ElementGroup]) -> BaseGeometry:
        self.state = BuilderState.BUILDING_POLYGON if kind == POLYGON else BuilderState.BUILDING_SINGLE_PART
        group = next(groups, None)
        if group is None:
            raise ElementCountMismatch(f"{KIND_NAMES[kind]} has no elements")
        self._expect(group, kind, kind)
        extra = next(groups, None)
        if extra is not None:
            raise ElementCountMismatch(
                f"{KIND_NAMES[kind]} expects one element, table describes more "
                f"(next at offset {extra.entries[0].offset})"
            )
        if kind == POINT:
            coords = group.parts[0]
            if len(coords) != 1:
                raise ElementCountMismatch(f"POINT element holds {len(coords)} points")
            return Point(coords[0])
        if kind == LINE:
            return LineString(group.parts[0])
        return Polygon(group.parts[0], group.parts[1:])

    @staticmethod
    def _expect(group: ElementGroup, part_kind: int, kind: int) -> ElementGroup:
        if group.kind != part_kind:
            raise MalformedElementTable(
                f"{KIND_NAMES[kind]} cannot hold a {KIND_NAMES[group.kind]} element "
                f"(offset {group.entries[0].offset})"
            )
        return group
