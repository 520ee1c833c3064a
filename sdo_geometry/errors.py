class SDOGeometryError(ValueError):
    """Base class for everything the codec refuses to decode or encode."""


class InvalidTypeCode(SDOGeometryError):
    pass


class UnsupportedMeasure(SDOGeometryError):
    pass


class UnsupportedCurve(SDOGeometryError):
    pass


class MalformedElementTable(SDOGeometryError):
    pass


class MalformedRecord(SDOGeometryError):
    """A record field that cannot be read, e.g. an SDO_POINT of the wrong length."""


class OrdinateRangeError(SDOGeometryError):
    pass


class ElementCountMismatch(SDOGeometryError):
    pass


class NonRectangularPolygonForRectangleEncoding(SDOGeometryError):
    pass


class UnsupportedGeometryType(SDOGeometryError, TypeError):
    pass
