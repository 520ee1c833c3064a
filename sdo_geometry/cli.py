from __future__ import annotations
import argparse
import json
import logging
import sys
from time import perf_counter

import shapely

from .codec import CodecConfig, SDOCodec
from .datasource import SDORecordSource, write_geoparquet
from .errors import SDOGeometryError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(relativeCreated).0fms] %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _parse_record(raw: str) -> dict:
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid record JSON: {e}") from e
    if not isinstance(obj, (dict, list)):
        raise argparse.ArgumentTypeError("Record must be a JSON object or a 5-item array")
    return obj


def _build_codec(args) -> SDOCodec:
    return SDOCodec(CodecConfig(
        orient_rings=getattr(args, "orient_rings", False),
        srid=getattr(args, "srid", None),
    ))


def cmd_decode(args) -> int:
    geom = _build_codec(args).decode(args.record)
    print("NULL" if geom is None else geom.wkt)
    return 0


def cmd_encode(args) -> int:
    geom = None if args.wkt.strip().upper() == "NULL" else shapely.from_wkt(args.wkt)
    record = _build_codec(args).encode(geom)
    print(json.dumps(record.to_dict()))
    return 0


def cmd_convert(args) -> int:
    t0 = perf_counter()
    source = SDORecordSource(args.input, batch_rows=args.batch_rows, codec=_build_codec(args))
    rows = write_geoparquet(source, args.output, compression=args.compression)
    logger.info("Converted %d records in %.2fs", rows, perf_counter() - t0)
    return 0


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(
        prog="sdo-geometry",
        description="MDSYS.SDO_GEOMETRY records <-> WKT / GeoParquet.",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Log codec decisions (DEBUG).")
    sub = ap.add_subparsers(dest="command", required=True)

    p_dec = sub.add_parser("decode", help="Decode one record (JSON) and print WKT.")
    p_dec.add_argument("--record", required=True, type=_parse_record,
                       help='Record JSON, e.g. \'{"gtype": 2003, "elem_info": [1,1003,3], "ordinates": [0,0,1,1]}\'.')
    p_dec.set_defaults(func=cmd_decode)

    p_enc = sub.add_parser("encode", help="Encode a WKT geometry and print the record as JSON.")
    p_enc.add_argument("--wkt", required=True, help="Geometry as WKT (or NULL).")
    p_enc.add_argument("--srid", type=int, default=None, help="SDO_SRID to write (default: none).")
    p_enc.add_argument("--orient-rings", action="store_true",
                       help="Write exterior rings CCW and interior rings CW.")
    p_enc.set_defaults(func=cmd_encode)

    p_conv = sub.add_parser("convert", help="Convert a JSON Lines file of records to GeoParquet.")
    p_conv.add_argument("--input", required=True, help="Path to input JSON Lines (one record per line).")
    p_conv.add_argument("--output", required=True, help="Path of the GeoParquet file to write.")
    p_conv.add_argument("--batch-rows", type=int, default=1_000, help="Records per Arrow batch (default: 1000).")
    p_conv.add_argument("--compression", default="zstd", help="Parquet compression codec (default: zstd).")
    p_conv.set_defaults(func=cmd_convert)

    args = ap.parse_args(argv)
    if args.verbose:
        logging.getLogger("sdo_geometry").setLevel(logging.DEBUG)

    try:
        return args.func(args)
    except SDOGeometryError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
