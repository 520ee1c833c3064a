import json

import pyarrow.parquet as pq
import pytest
import shapely

from sdo_geometry.cli import main
from sdo_geometry.datasource import (
    SDORecordSource,
    iter_record_batches,
    records_to_table,
    write_geoparquet,
)

SQUARE_RECORD = {"gtype": 2003, "srid": 4326, "elem_info": [1, 1003, 3], "ordinates": [0, 0, 10, 10]}
POINT_RECORD = {"gtype": 2001, "srid": 4326, "point": [1, 2, None]}


def _write_jsonl(path, rows):
    path.write_text("\n".join(json.dumps(r) for r in rows) + "\n", encoding="utf-8")
    return str(path)


class TestRecordsToTable:
    def test_bare_records(self):
        table = records_to_table([SQUARE_RECORD, POINT_RECORD])
        assert table.column_names == ["srid", "geometry"]
        geoms = shapely.from_wkb(table.column("geometry").to_pylist())
        assert geoms[0].bounds == (0.0, 0.0, 10.0, 10.0)
        assert geoms[1].equals(shapely.Point(1, 2))

    def test_attributes_kept(self):
        rows = [{"record": SQUARE_RECORD, "name": "a"}, {"record": POINT_RECORD, "name": "b"}]
        table = records_to_table(rows)
        assert table.column("name").to_pylist() == ["a", "b"]
        assert table.column("srid").to_pylist() == [4326, 4326]

    def test_null_record(self):
        table = records_to_table([{"record": None, "name": "gone"}])
        assert table.column("geometry").to_pylist() == [None]
        assert table.column("srid").to_pylist() == [None]

    def test_array_row_is_the_record(self):
        table = records_to_table([[2001, None, [1, 2, None], None, None], {"record": SQUARE_RECORD, "name": "a"}])
        geoms = shapely.from_wkb(table.column("geometry").to_pylist())
        assert geoms[0].equals(shapely.Point(1, 2))
        assert table.column("name").to_pylist() == [None, "a"]
        assert table.column("srid").to_pylist() == [None, 4326]

    def test_geo_metadata(self):
        geo = json.loads(records_to_table([SQUARE_RECORD]).schema.metadata[b"geo"])
        assert geo["primary_column"] == "geometry"
        assert geo["columns"]["geometry"]["encoding"] == "WKB"
        assert geo["columns"]["geometry"]["crs"] == "EPSG:4326"

    def test_mixed_srids_leave_crs_unset(self):
        other = dict(POINT_RECORD, srid=3857)
        geo = json.loads(records_to_table([SQUARE_RECORD, other]).schema.metadata[b"geo"])
        assert "crs" not in geo["columns"]["geometry"]


class TestGeoParquet:
    def test_batches(self, tmp_path):
        path = _write_jsonl(tmp_path / "in.jsonl", [SQUARE_RECORD] * 5)
        assert [len(b) for b in iter_record_batches(path, 2)] == [2, 2, 1]

    def test_write(self, tmp_path):
        path = _write_jsonl(tmp_path / "in.jsonl", [{"record": SQUARE_RECORD, "id": i} for i in range(3)])
        out = str(tmp_path / "out.parquet")
        assert write_geoparquet(SDORecordSource(path, batch_rows=2), out) == 3
        table = pq.read_table(out)
        assert table.num_rows == 3
        assert table.column("id").to_pylist() == [0, 1, 2]
        assert b"geo" in table.schema.metadata

    def test_attribute_null_in_first_batch(self, tmp_path):
        rows = [{"record": POINT_RECORD, "name": None}, {"record": SQUARE_RECORD, "name": "b"}]
        path = _write_jsonl(tmp_path / "in.jsonl", rows)
        out = str(tmp_path / "out.parquet")
        assert write_geoparquet(SDORecordSource(path, batch_rows=1), out) == 2
        table = pq.read_table(out)
        assert table.column("name").to_pylist() == [None, "b"]
        assert table.column_names[-2:] == ["srid", "geometry"]

    def test_attribute_missing_from_a_batch(self, tmp_path):
        rows = [{"record": POINT_RECORD}, {"record": SQUARE_RECORD, "id": 7}]
        path = _write_jsonl(tmp_path / "in.jsonl", rows)
        out = str(tmp_path / "out.parquet")
        write_geoparquet(SDORecordSource(path, batch_rows=1), out)
        assert pq.read_table(out).column("id").to_pylist() == [None, 7]

    def test_write_empty_input(self, tmp_path):
        path = tmp_path / "in.jsonl"
        path.write_text("", encoding="utf-8")
        out = str(tmp_path / "out.parquet")
        assert write_geoparquet(SDORecordSource(str(path)), out) == 0
        assert pq.read_table(out).column_names == ["srid", "geometry"]


class TestCli:
    def test_decode(self, capsys):
        assert main(["decode", "--record", json.dumps(SQUARE_RECORD)]) == 0
        assert capsys.readouterr().out.strip() == "POLYGON ((0 0, 10 0, 10 10, 0 10, 0 0))"

    def test_encode_point(self, capsys):
        assert main(["encode", "--wkt", "POINT (1 2)", "--srid", "4326"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out == {"gtype": 2001, "srid": 4326, "point": [1.0, 2.0, None],
                       "elem_info": None, "ordinates": None}

    def test_encode_null(self, capsys):
        assert main(["encode", "--wkt", "NULL"]) == 0
        assert json.loads(capsys.readouterr().out)["gtype"] == 2000

    def test_measured_record_fails(self, capsys):
        record = {"gtype": 3302, "elem_info": [1, 2, 1], "ordinates": [0, 0, 0, 1, 1, 1]}
        assert main(["decode", "--record", json.dumps(record)]) == 1
        assert capsys.readouterr().out == ""

    def test_bad_point_fails(self, capsys):
        record = {"gtype": 2001, "point": [1]}
        assert main(["decode", "--record", json.dumps(record)]) == 1
        assert capsys.readouterr().out == ""

    def test_bad_json(self):
        with pytest.raises(SystemExit):
            main(["decode", "--record", "{not json"])

    def test_convert(self, tmp_path):
        path = _write_jsonl(tmp_path / "in.jsonl", [POINT_RECORD, SQUARE_RECORD])
        out = tmp_path / "out.parquet"
        assert main(["convert", "--input", path, "--output", str(out), "--batch-rows", "1"]) == 0
        assert pq.read_table(str(out)).num_rows == 2
