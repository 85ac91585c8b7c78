from types import SimpleNamespace

import pytest

from tinyows import psql
from tinyows.db import Database
from tinyows.version import Version


class _Cursor:
    def __init__(self, conn):
        self.conn = conn
        self.description = None
        self._rows = []

    def execute(self, sql):
        self.conn.executed.append(sql)
        self.description = (("c",),)
        for key, result in self.conn.responses:
            if key in sql:
                if isinstance(result, Exception):
                    raise result
                self._rows = list(result)
                return
        self._rows = []

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class _Connection:
    def __init__(self, responses=None):
        self.responses = list((responses or {}).items())
        self.executed = []

    def cursor(self):
        return _Cursor(self)

    def rollback(self):
        pass


def _db(responses=None):
    conn = _Connection(responses)
    return Database(conn), conn


def _storage(**overrides):
    values = dict(
        pkey="gid",
        geom_columns=["the_geom"],
        schema="public",
        table="roads",
        not_null_columns=["gid"],
        attributes={"gid": "int4", "the_geom": "LINESTRING"},
        pkey_sequence=None,
        pkey_default=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def layers():
    return [
        SimpleNamespace(name=None, storage=_storage(table="ghost")),
        SimpleNamespace(name="tows:abstract", storage=None),
        SimpleNamespace(name="tows:roads", storage=_storage()),
    ]


def test_lookups(layers):
    assert psql.id_column(layers, "tows:roads") == "gid"
    assert psql.geometry_columns(layers, "tows:roads") == ["the_geom"]
    assert psql.schema_name(layers, "tows:roads") == "public"
    assert psql.table_name(layers, "tows:roads") == "roads"
    assert psql.not_null_properties(layers, "tows:roads") == ["gid"]
    assert psql.describe_table(layers, "tows:roads") == {"gid": "int4", "the_geom": "LINESTRING"}
    assert psql.property_type(layers, "tows:roads", "gid") == "int4"


def test_lookups_without_storage_or_unknown(layers):
    assert psql.table_name(layers, "tows:abstract") is None
    assert psql.id_column(layers, "nope") is None
    assert psql.property_type(layers, "tows:roads", "missing") is None


def test_is_geometry_column(layers):
    assert psql.is_geometry_column(layers, "tows:roads", "the_geom") is True
    assert psql.is_geometry_column(layers, "tows:roads", "gid") is False
    assert psql.is_geometry_column(layers, "tows:abstract", "the_geom") is False


def test_column_constraint_name():
    db, conn = _db({"constraint_column_usage": [("roads_type_check",)]})
    assert psql.column_constraint_name(db, "type", "roads") == "roads_type_check"
    assert "table_name = 'roads' AND column_name='type'" in conn.executed[0]


def test_column_constraint_name_missing_is_empty():
    db, _ = _db()
    assert psql.column_constraint_name(db, "type", "roads") == ""


def test_column_check_constraint_extracts_literals():
    clause = "((type)::text = ANY (ARRAY['road'::text, 'path'::text]))"
    db, _ = _db({"check_constraints": [(clause,)]})
    assert psql.column_check_constraint(db, "c") == ["road", "path"]


def test_column_check_constraint_drops_unterminated():
    db, _ = _db({"check_constraints": [("x = 'road' OR x = 'pa",)]})
    assert psql.column_check_constraint(db, "c") == ["road"]


def test_column_check_constraint_no_result():
    db, _ = _db()
    assert psql.column_check_constraint(db, "c") == []


def test_column_name_and_max_length():
    db, _ = _db({"pg_attribute": [("label",)], "character_maximum_length": [("80",)]})
    assert psql.column_name(db, "roads", 2) == "label"
    assert psql.column_character_maximum_length(db, "label", "roads") == "80"


def test_postgis_version():
    db, _ = _db({"postgis_full_version": [("2.1.8",)]})
    assert psql.postgis_version(db) == Version(2, 1, 8)


@pytest.mark.parametrize("value", ["3.0", "2.x.1", "1.5.3.1"])
def test_postgis_version_malformed(value):
    db, _ = _db({"postgis_full_version": [(value,)]})
    assert psql.postgis_version(db) is None


def test_postgis_version_query_fails():
    db, _ = _db({"postgis_full_version": RuntimeError("no postgis")})
    assert psql.postgis_version(db) is None


@pytest.mark.parametrize("name", ["int2", "int4", "int8", "float4", "float8", "numeric(10,2)"])
def test_is_numeric_true(name):
    assert psql.is_numeric(name) is True


@pytest.mark.parametrize("name", ["text", "bool", "geometry"])
def test_is_numeric_false(name):
    assert psql.is_numeric(name) is False


@pytest.mark.parametrize(
    "name, gml212, expected",
    [
        ("GEOMETRY", False, "gml:GeometryPropertyType"),
        ("geography", False, "gml:GeometryPropertyType"),
        ("int4", False, "int"),
        ("bool", False, "boolean"),
        ("numeric(5,1)", False, "decimal"),
        ("timestamptz", False, "dateTime"),
        ("POINT", True, "gml:PointPropertyType"),
        ("LINESTRING", True, "gml:LineStringPropertyType"),
        ("LINESTRING", False, "gml:CurvePropertyType"),
        ("MULTIPOLYGON", True, "gml:MultiPolygonPropertyType"),
        ("MULTIPOLYGON", False, "gml:MultiSurfacePropertyType"),
        ("TIN", False, "gml:TriangulatedSurfacePropertyType"),
        ("varchar", False, "string"),
    ],
)
def test_to_xsd(name, gml212, expected):
    assert psql.to_xsd(name, gml212) == expected


def test_timestamp_to_xml_time_utc():
    assert psql.timestamp_to_xml_time("2012-01-02 03:04:05") == "2012-01-02T03:04:05Z"


def test_timestamp_to_xml_time_offset():
    assert psql.timestamp_to_xml_time("2012-01-02 03:04:05+02") == "2012-01-02T03:04:05+02:00"


def test_timestamp_to_xml_time_empty():
    assert psql.timestamp_to_xml_time("") == ""


def test_generate_id_from_sequence():
    layers = [SimpleNamespace(name="t:a", storage=_storage(pkey_sequence="a_gid_seq"))]
    db, conn = _db({"nextval": [("42",)]})
    assert psql.generate_id(db, layers, "t:a") == "42"
    assert conn.executed == ["SELECT nextval('a_gid_seq');"]


def test_generate_id_falls_back_to_default():
    layers = [
        SimpleNamespace(
            name="t:a", storage=_storage(pkey_sequence="bad_seq", pkey_default="gen_id()")
        )
    ]
    db, _ = _db({"nextval": RuntimeError("no sequence"), "gen_id": [("abc",)]})
    assert psql.generate_id(db, layers, "t:a") == "abc"


def test_generate_id_random():
    layers = [SimpleNamespace(name="t:a", storage=_storage())]
    db, conn = _db()
    ident = psql.generate_id(db, layers, "t:a")
    assert conn.executed == []
    assert len(ident) == 18 and ident.isdigit()
    assert all(int(ident[i : i + 3]) <= 255 for i in range(0, 18, 3))


def test_generate_id_unknown_layer():
    db, _ = _db()
    with pytest.raises(KeyError):
        psql.generate_id(db, [], "t:none")


def test_number_features_single():
    db, conn = _db({"count(*)": [("5",)]})
    assert psql.number_features(db, ["roads"], ["WHERE gid > 1"]) == 5
    assert conn.executed == ['SELECT count(*) FROM "roads" WHERE gid > 1']


def test_number_features_sums():
    db, _ = _db({"count(*)": [("2",)]})
    assert psql.number_features(db, ["a", "b"], ["", ""]) == 4


def test_number_features_length_mismatch():
    db, conn = _db()
    assert psql.number_features(db, ["a"], []) == 0
    assert conn.executed == []


def test_number_features_query_error():
    db, _ = _db({"count(*)": RuntimeError("boom")})
    assert psql.number_features(db, ["a"], [""]) == -1