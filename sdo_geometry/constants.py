from __future__ import annotations

DATATYPE = "MDSYS.SDO_GEOMETRY"
POINT_DATATYPE = "MDSYS.SDO_POINT_TYPE"
ELEM_INFO_DATATYPE = "MDSYS.SDO_ELEM_INFO_ARRAY"
ORDINATE_DATATYPE = "MDSYS.SDO_ORDINATE_ARRAY"

SRID_NULL = 0

# ------------------------- geometry kinds (last two digits of SDO_GTYPE) ------------------------- #
UNKNOWN = 0
POINT = 1
LINE = 2
POLYGON = 3
COLLECTION = 4
MULTIPOINT = 5
MULTILINE = 6
MULTIPOLYGON = 7
SOLID = 8
MULTISOLID = 9

KIND_NAMES = {
    UNKNOWN: "UNKNOWN",
    POINT: "POINT",
    LINE: "LINE",
    POLYGON: "POLYGON",
    COLLECTION: "COLLECTION",
    MULTIPOINT: "MULTIPOINT",
    MULTILINE: "MULTILINE",
    MULTIPOLYGON: "MULTIPOLYGON",
    SOLID: "SOLID",
    MULTISOLID: "MULTISOLID",
}

# shapely geom_type -> kind
KIND_BY_GEOM_TYPE = {
    "Point": POINT,
    "LineString": LINE,
    "LinearRing": LINE,
    "Polygon": POLYGON,
    "GeometryCollection": COLLECTION,
    "MultiPoint": MULTIPOINT,
    "MultiLineString": MULTILINE,
    "MultiPolygon": MULTIPOLYGON,
}

# kind -> WKT keyword used for empty geometries
EMPTY_WKT_BY_KIND = {
    UNKNOWN: "GEOMETRYCOLLECTION",
    POINT: "POINT",
    LINE: "LINESTRING",
    POLYGON: "POLYGON",
    COLLECTION: "GEOMETRYCOLLECTION",
    MULTIPOINT: "MULTIPOINT",
    MULTILINE: "MULTILINESTRING",
    MULTIPOLYGON: "MULTIPOLYGON",
    SOLID: "MULTIPOLYGON",
    MULTISOLID: "MULTIPOLYGON",
}

# ------------------------- element types (SDO_ETYPE) ------------------------- #
ETYPE_CUSTOM = 0
ETYPE_POINT = 1
ETYPE_LINE = 2
ETYPE_POLYGON = 3
ETYPE_POLYGON_EXTERIOR = 1003
ETYPE_POLYGON_INTERIOR = 2003
ETYPE_FACE_EXTERIOR = 1007
ETYPE_FACE_INTERIOR = 2006
ETYPE_COMPOUND = 4
ETYPE_COMPOUND_POLYGON = 5
ETYPE_COMPOUND_POLYGON_EXTERIOR = 1005
ETYPE_COMPOUND_POLYGON_INTERIOR = 2005

KNOWN_ETYPES = frozenset({
    ETYPE_CUSTOM,
    ETYPE_POINT,
    ETYPE_LINE,
    ETYPE_POLYGON,
    ETYPE_POLYGON_EXTERIOR,
    ETYPE_POLYGON_INTERIOR,
    ETYPE_FACE_EXTERIOR,
    ETYPE_FACE_INTERIOR,
    ETYPE_COMPOUND,
    ETYPE_COMPOUND_POLYGON,
    ETYPE_COMPOUND_POLYGON_EXTERIOR,
    ETYPE_COMPOUND_POLYGON_INTERIOR,
})

# rings that open a new polygon
EXTERIOR_RING_ETYPES = frozenset({
    ETYPE_POLYGON_EXTERIOR,
    ETYPE_FACE_EXTERIOR,
    ETYPE_COMPOUND_POLYGON_EXTERIOR,
})
INTERIOR_RING_ETYPES = frozenset({
    ETYPE_POLYGON_INTERIOR,
    ETYPE_FACE_INTERIOR,
    ETYPE_COMPOUND_POLYGON_INTERIOR,
})
# orientation not stated: exterior when no polygon is open, else a hole
UNQUALIFIED_RING_ETYPES = frozenset({ETYPE_POLYGON, ETYPE_COMPOUND_POLYGON})

COMPOUND_ETYPES = frozenset({
    ETYPE_COMPOUND,
    ETYPE_COMPOUND_POLYGON,
    ETYPE_COMPOUND_POLYGON_EXTERIOR,
    ETYPE_COMPOUND_POLYGON_INTERIOR,
})

# ------------------------- interpretations (SDO_INTERPRETATION) ------------------------- #
INTERP_STRAIGHT = 1
INTERP_ARC = 2
INTERP_RECTANGLE = 3
INTERP_CIRCLE = 4
