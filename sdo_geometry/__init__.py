from .codec import SDOCodec, CodecConfig, DecodedGeometry, decode, encode
from .record import SDORecord, SDOPoint
from .typecode import TypeCode, decode_type_code, encode_type_code
from .errors import (
    SDOGeometryError,
    InvalidTypeCode,
    UnsupportedMeasure,
    UnsupportedCurve,
    MalformedElementTable,
    MalformedRecord,
    OrdinateRangeError,
    ElementCountMismatch,
    NonRectangularPolygonForRectangleEncoding,
    UnsupportedGeometryType,
)
from .constants import DATATYPE

__all__ = [
    "SDOCodec",
    "CodecConfig",
    "DecodedGeometry",
    "decode",
    "encode",
    "SDORecord",
    "SDOPoint",
    "TypeCode",
    "decode_type_code",
    "encode_type_code",
    "SDOGeometryError",
    "InvalidTypeCode",
    "UnsupportedMeasure",
    "UnsupportedCurve",
    "MalformedElementTable",
    "MalformedRecord",
    "OrdinateRangeError",
    "ElementCountMismatch",
    "NonRectangularPolygonForRectangleEncoding",
    "UnsupportedGeometryType",
    "DATATYPE",
]
