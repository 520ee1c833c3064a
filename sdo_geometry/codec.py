from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional
import logging

import shapely
from shapely.geometry.base import BaseGeometry

from .builder import GeometryBuilder
from .constants import DATATYPE, KIND_BY_GEOM_TYPE, SRID_NULL
from .elements import parse_element_table
from .errors import UnsupportedGeometryType
from .flattener import GeometryFlattener
from .ordinates import as_ordinate_array
from .record import SDOPoint, SDORecord
from .typecode import decode_type_code

logger = logging.getLogger(__name__)


@dataclass
class CodecConfig:
    orient_rings: bool = False       # write shells CCW and holes CW on encode
    srid: Optional[int] = None       # SRID used on encode when the call gives none


@dataclass
class DecodedGeometry:
    """A decoded geometry plus the record it came from (diagnostics only)."""
    geometry: Optional[BaseGeometry]
    source: Optional[SDORecord]


class SDOCodec:
    """
    Converts between MDSYS.SDO_GEOMETRY records and shapely geometries (2D or
    3D, no measures). Stateless; one instance can serve any number of callers.
    """

    def __init__(self, config: Optional[CodecConfig] = None):
        self.config = config or CodecConfig()
        self._flattener = GeometryFlattener(orient_rings=self.config.orient_rings)

    @property
    def data_type_name(self) -> str:
        return DATATYPE

    def is_capable(self, geom: Optional[BaseGeometry]) -> bool:
        """True when `geom` can be encoded: None, or a supported 2D/3D type without measures."""
        if geom is None:
            return True
        if not isinstance(geom, BaseGeometry) or geom.geom_type not in KIND_BY_GEOM_TYPE:
            return False
        return not getattr(geom, "has_m", False)

    # ------------------------- decode ------------------------- #
    def decode(self, value: Any) -> Optional[BaseGeometry]:
        """
        Convert an SDO_GEOMETRY record to a shapely geometry.

        `value` may be an SDORecord or anything SDORecord.from_value accepts.
        None decodes to None.
        """
        return self.decode_with_source(value).geometry

    def decode_with_source(self, value: Any) -> DecodedGeometry:
        record = SDORecord.from_value(value)
        if record is None:
            return DecodedGeometry(None, None)

        type_code = decode_type_code(record.gtype).require_plain()
        logger.debug("Decoding SDO_GTYPE %d (%s, %dD)", type_code.code, type_code.kind_name, type_code.dimension)

        if record.point is not None:
            point = record.point.as_array()
            entries = []
        else:
            point = None
            entries = parse_element_table(record.elem_info)
        ordinates = as_ordinate_array(None if point is not None else record.ordinates)

        geom = GeometryBuilder().build(type_code, point, entries, ordinates)
        if record.srid is not None and record.srid != SRID_NULL:
            geom = shapely.set_srid(geom, record.srid)
        return DecodedGeometry(geom, record)

    # ------------------------- encode ------------------------- #
    def encode(self, geom: Optional[BaseGeometry], srid: Optional[int] = None) -> SDORecord:
        """
        Convert a shapely geometry to an SDO_GEOMETRY record.

        None and empty geometries become an empty record (empty element table
        and ordinate array, no SDO_POINT). The SRID is `srid`, else the codec's
        configured SRID, else the geometry's own; 0 is written as null.
        """
        if not self.is_capable(geom):
            raise UnsupportedGeometryType(
                f"Cannot encode {getattr(geom, 'geom_type', type(geom).__name__)} as {DATATYPE}"
            )
        flat = self._flattener.flatten(geom)
        point = None if flat.point is None else SDOPoint(*flat.point)
        return SDORecord(
            gtype=flat.gtype,
            srid=self._resolve_srid(geom, srid),
            point=point,
            elem_info=flat.elem_info,
            ordinates=flat.ordinates,
        )

    def _resolve_srid(self, geom: Optional[BaseGeometry], srid: Optional[int]) -> Optional[int]:
        if srid is None:
            srid = self.config.srid
        if srid is None and geom is not None:
            srid = int(shapely.get_srid(geom))
        if srid is None or srid == SRID_NULL:
            return None
        return int(srid)


_default_codec = SDOCodec()


def decode(value: Any) -> Optional[BaseGeometry]:
    return _default_codec.decode(value)


def encode(geom: Optional[BaseGeometry], srid: Optional[int] = None) -> SDORecord:
    return _default_codec.encode(geom, srid=srid)
