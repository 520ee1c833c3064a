"""
Glue between SDORecord and the database driver's MDSYS.SDO_GEOMETRY objects.

Works with any driver object exposing `gettype(name)` on the connection and
`newobject()` / `extend()` on the returned types (python-oracledb, cx_Oracle).
The driver itself is not imported here.
"""
from __future__ import annotations
from typing import Any, Callable, Optional, Tuple

from shapely.geometry.base import BaseGeometry

from .codec import SDOCodec
from .constants import DATATYPE, POINT_DATATYPE, ELEM_INFO_DATATYPE, ORDINATE_DATATYPE
from .ordinates import ordinate_or_none
from .record import SDORecord


def record_from_db_object(obj: Any) -> Optional[SDORecord]:
    """Read a fetched SDO_GEOMETRY object; None for a NULL column value."""
    return SDORecord.from_value(obj)


def get_record_converter(connection) -> Tuple[Callable[[SDORecord], Any], Any]:
    """
    Get a converter from SDORecord to a driver SDO_GEOMETRY object, for use in
    input type handlers.

    :param connection: open driver connection
    :return: (converter, SDO_GEOMETRY object type)
    """
    geometry_obj_type = connection.gettype(DATATYPE)
    element_info_type = connection.gettype(ELEM_INFO_DATATYPE)
    ordinate_type = connection.gettype(ORDINATE_DATATYPE)
    point_type = connection.gettype(POINT_DATATYPE)

    def _converter(record: SDORecord):
        obj = geometry_obj_type.newobject()
        obj.SDO_GTYPE = record.gtype
        obj.SDO_SRID = record.srid

        # absent attributes stay NULL; an empty array is not the same thing
        if record.point is not None:
            obj.SDO_POINT = point_type.newobject()
            obj.SDO_POINT.X = record.point.x
            obj.SDO_POINT.Y = record.point.y
            obj.SDO_POINT.Z = record.point.z

        if record.elem_info is not None:
            obj.SDO_ELEM_INFO = element_info_type.newobject()
            obj.SDO_ELEM_INFO.extend(record.elem_info)

        if record.ordinates is not None:
            obj.SDO_ORDINATES = ordinate_type.newobject()
            obj.SDO_ORDINATES.extend([ordinate_or_none(v) for v in record.ordinates])

        return obj

    return _converter, geometry_obj_type


def get_geometry_converter(connection, codec: Optional[SDOCodec] = None):
    """Like get_record_converter, but the converter takes shapely geometries."""
    codec = codec or SDOCodec()
    to_db_object, geometry_obj_type = get_record_converter(connection)

    def _converter(geom: Optional[BaseGeometry]):
        return to_db_object(codec.encode(geom))

    return _converter, geometry_obj_type
