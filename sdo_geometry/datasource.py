from collections.abc import Mapping
from typing import Iterable, Optional, List, Dict, Any
import logging
import json
import pyarrow as pa
import pyarrow.parquet as pq
import numpy as np
import shapely

from .codec import SDOCodec
from .record import SDORecord

logger = logging.getLogger(__name__)

_RECORD_KEYS = frozenset({
    "gtype", "srid", "point", "elem_info", "ordinates",
    "SDO_GTYPE", "SDO_SRID", "SDO_POINT", "SDO_ELEM_INFO", "SDO_ORDINATES",
})


class DataSource:
    def schema(self) -> pa.Schema:
        raise NotImplementedError

    def iter_tables(self) -> Iterable[pa.Table]:
        raise NotImplementedError


# ------------------------- Helpers ------------------------- #
def _attach_geoparquet_metadata(schema: pa.Schema, crs_hint: Optional[str]) -> pa.Schema:
    """
    Return a copy of `schema` with a minimal GeoParquet 'geo' JSON block.

    Includes:
      - version: 1.1.0
      - primary_column: geometry
      - columns.geometry.encoding: WKB
      - columns.geometry.crs: <crs_hint> (string hint if provided)
    """
    md = dict(schema.metadata or {})
    if b"geo" in md:
        return pa.schema(schema, metadata=md)

    geo = {
        "version": "1.1.0",
        "primary_column": "geometry",
        "columns": {"geometry": {"encoding": "WKB"}}
    }
    if crs_hint:
        geo["columns"]["geometry"]["crs"] = crs_hint

    md[b"geo"] = json.dumps(geo, separators=(",", ":")).encode("utf-8")
    return pa.schema(schema, metadata=md)


def _crs_hint(srids: List[Optional[int]]) -> Optional[str]:
    distinct = {s for s in srids if s is not None}
    if len(distinct) == 1:
        return f"EPSG:{distinct.pop()}"
    if len(distinct) > 1:
        logger.warning("Batch mixes SRIDs %s; leaving CRS unset", sorted(distinct))
    return None


def records_to_table(rows: List[Dict[str, Any]], codec: Optional[SDOCodec] = None) -> pa.Table:
    """
    Decode a batch of SDO records into an Arrow table: a WKB 'geometry' column,
    an 'srid' column, and every non-record key of the rows as attributes.
    A row whose record is null gets a null geometry.
    """
    codec = codec or SDOCodec()
    geoms = np.empty(len(rows), dtype=object)
    srids: List[Optional[int]] = []
    props: List[Dict[str, Any]] = []

    for i, row in enumerate(rows):
        if isinstance(row, Mapping):
            record = SDORecord.from_value(row.get("record", row))
            props.append({k: v for k, v in row.items() if k not in _RECORD_KEYS and k != "record"})
        else:
            # 5-item array row: the record itself, no attributes
            record = SDORecord.from_value(row)
            props.append({})
        geoms[i] = codec.decode(record)
        srids.append(None if record is None else record.srid)

    wkb = shapely.to_wkb(geoms, hex=False).tolist()
    geometry_col = pa.array(wkb, type=pa.binary())
    srid_col = pa.array(srids, type=pa.int32())

    props_table = pa.Table.from_pylist(props)
    if props_table.num_columns == 0:
        table = pa.table([srid_col, geometry_col], names=["srid", "geometry"])
    else:
        table = props_table.append_column("srid", srid_col).append_column("geometry", geometry_col)

    schema_with_geo = _attach_geoparquet_metadata(table.schema, _crs_hint(srids))
    return table.replace_schema_metadata(schema_with_geo.metadata)


def iter_record_batches(path: str, batch_size: int) -> Iterable[List[Dict[str, Any]]]:
    """
    Stream a JSON Lines file of SDO records (one object per line) in batches.
    A row is either the record itself or {"record": {...}, <attributes>}.
    """
    batch: List[Dict[str, Any]] = []
    with open(path, "r", encoding="utf-8") as fin:
        for line in fin:
            line = line.strip()
            if not line:
                continue
            batch.append(json.loads(line))
            if len(batch) >= batch_size:
                yield batch
                batch = []
    if batch:
        yield batch


# ------------------------- SDO JSON Lines source ------------------------- #
class SDORecordSource(DataSource):
    """Streams a JSON Lines file of SDO records as Arrow tables with WKB geometry."""

    def __init__(self, path: str, batch_rows: int = 1_000, codec: Optional[SDOCodec] = None):
        self.path = path
        self.batch_rows = int(batch_rows)
        self.codec = codec or SDOCodec()
        self._schema: Optional[pa.Schema] = None
        logger.info("SDORecordSource opened %s (batch_rows=%d)", path, self.batch_rows)

    def schema(self) -> pa.Schema:
        """
        One schema covering every batch of the file. Attribute types are
        inferred per batch, so the whole file is scanned once and the batch
        schemas are unified (an all-null column in one batch takes the type
        another batch gives it).
        """
        if self._schema is None:
            schemas = [
                records_to_table(rows, self.codec).schema
                for rows in iter_record_batches(self.path, self.batch_rows)
            ]
            self._schema = _unify_batch_schemas(schemas)
            logger.info("Unified schema over %d batch(es): %s", len(schemas), self._schema.names)
        return self._schema

    def iter_tables(self) -> Iterable[pa.Table]:
        for batch_index, rows in enumerate(iter_record_batches(self.path, self.batch_rows)):
            table = records_to_table(rows, self.codec)
            logger.info(
                "SDO batch %d (%d rows) -> %d columns (including 'geometry')",
                batch_index, table.num_rows, len(table.column_names),
            )
            yield table


def _geo_crs(schema: pa.Schema) -> Optional[str]:
    geo = json.loads((schema.metadata or {}).get(b"geo", b"{}"))
    return geo.get("columns", {}).get("geometry", {}).get("crs")


def _unify_batch_schemas(schemas: List[pa.Schema]) -> pa.Schema:
    if not schemas:
        base = pa.schema([("srid", pa.int32()), ("geometry", pa.binary())])
        return _attach_geoparquet_metadata(base, None)

    unified = pa.unify_schemas([s.remove_metadata() for s in schemas], promote_options="permissive")
    attrs = [f for f in unified if f.name not in ("srid", "geometry")]
    ordered = pa.schema(attrs + [unified.field("srid"), unified.field("geometry")])

    hints = {_geo_crs(s) for s in schemas}
    if len(hints) > 1:
        logger.warning("Batches disagree on CRS %s; leaving CRS unset", sorted(h or "" for h in hints))
    crs = hints.pop() if len(hints) == 1 else None
    return _attach_geoparquet_metadata(ordered, crs)


def _conform(table: pa.Table, schema: pa.Schema) -> pa.Table:
    """Reorder/cast `table` to `schema`; columns the batch lacks are filled with nulls."""
    columns = []
    for f in schema:
        if f.name in table.column_names:
            columns.append(table.column(f.name).cast(f.type))
        else:
            columns.append(pa.nulls(table.num_rows, type=f.type))
    return pa.Table.from_arrays(columns, schema=schema)


def write_geoparquet(source: DataSource, out_path: str, compression: str = "zstd") -> int:
    """Write every table of `source` into one GeoParquet file; returns rows written."""
    schema = source.schema()
    total = 0
    with pq.ParquetWriter(out_path, schema, compression=compression) as writer:
        for table in source.iter_tables():
            writer.write_table(_conform(table, schema))
            total += table.num_rows
    logger.info("Wrote %d rows to %s", total, out_path)
    return total
