"""Layer storage lookups and PostgreSQL/PostGIS helper queries."""

from __future__ import annotations

import re
import secrets
from typing import Any, Iterable

from .db import Database, QueryError, run_query, single_value
from .version import Version

_DIGITS = re.compile(r"[0-9]+")


def _storage_for(layers: Iterable[Any], layer_name: str) -> Any:
    """Return the storage of the named layer, or None."""
    for layer in layers:
        if layer.name and layer.storage is not None and layer.name == layer_name:
            return layer.storage
    return None


def id_column(layers: Iterable[Any], layer_name: str) -> str | None:
    storage = _storage_for(layers, layer_name)
    return storage.pkey if storage is not None else None


def geometry_columns(layers: Iterable[Any], layer_name: str) -> list[str] | None:
    storage = _storage_for(layers, layer_name)
    return storage.geom_columns if storage is not None else None


def schema_name(layers: Iterable[Any], layer_name: str) -> str | None:
    storage = _storage_for(layers, layer_name)
    return storage.schema if storage is not None else None


def table_name(layers: Iterable[Any], layer_name: str) -> str | None:
    storage = _storage_for(layers, layer_name)
    return storage.table if storage is not None else None


def is_geometry_column(layers: Iterable[Any], layer_name: str, column: str) -> bool:
    storage = _storage_for(layers, layer_name)
    return storage is not None and column in storage.geom_columns


def not_null_properties(layers: Iterable[Any], layer_name: str) -> list[str] | None:
    storage = _storage_for(layers, layer_name)
    return storage.not_null_columns if storage is not None else None


def describe_table(layers: Iterable[Any], layer_name: str) -> dict[str, str] | None:
    """Return the column name to type mapping of a layer's table."""
    storage = _storage_for(layers, layer_name)
    return storage.attributes if storage is not None else None


def property_type(layers: Iterable[Any], layer_name: str, prop: str) -> str | None:
    storage = _storage_for(layers, layer_name)
    if storage is None:
        return None
    return storage.attributes.get(prop)


def column_constraint_name(db: Database, column_name: str, table_name: str) -> str:
    """Return the constraint name on a column, or '' if there is not exactly one."""
    sql = (
        "SELECT constraint_name FROM information_schema.constraint_column_usage "
        f"WHERE table_name = '{table_name}' AND column_name='{column_name}'"
    )
    return single_value(db, sql) or ""


def column_check_constraint(db: Database, constraint_name: str) -> list[str]:
    """Return the quoted literals of a check constraint (enumeration values)."""
    sql = (
        "SELECT check_clause FROM information_schema.check_constraints "
        f"WHERE constraint_name = '{constraint_name}'"
    )
    clause = single_value(db, sql)
    if not clause:
        return []
    parts = clause.split("'")
    # Odd-indexed parts lie between quotes; an unterminated last one is dropped.
    return [part for index, part in enumerate(parts[:-1]) if index % 2 == 1]


def column_name(db: Database, layer_name: str, number: int) -> str:
    """Return the name of column number ``number`` of a table, or ''."""
    sql = (
        "SELECT a.attname FROM pg_class c, pg_attribute a, pg_type t "
        f"WHERE c.relname ='{layer_name}' AND a.attnum > 0 AND a.attrelid = c.oid "
        f"AND a.atttypid = t.oid AND a.attnum = {int(number)}"
    )
    return single_value(db, sql) or ""


def column_character_maximum_length(db: Database, column_name: str, table_name: str) -> str:
    """Return a column's character_maximum_length as text, or ''."""
    sql = (
        "SELECT character_maximum_length FROM information_schema.columns "
        f"WHERE table_name = '{table_name}' and column_name = '{column_name}'"
    )
    return single_value(db, sql) or ""


def postgis_version(db: Database) -> Version | None:
    """Return the PostGIS version of the database, or None."""
    value = single_value(db, "SELECT substr(postgis_full_version(), 10, 5)")
    if value is None:
        return None
    parts = value.split(".")
    if len(parts) != 3 or not all(_DIGITS.fullmatch(part) for part in parts):
        return None
    major, minor, release = (int(part) for part in parts)
    return Version(major, minor, release)


def is_numeric(type_name: str) -> bool:
    return type_name in ("int2", "int4", "int8", "float4", "float8") or type_name.startswith(
        "numeric"
    )


_SIMPLE_XSD = {
    "geography": "gml:GeometryPropertyType",
    "int2": "short",
    "int4": "int",
    "int8": "long",
    "float4": "float",
    "float8": "double",
    "bool": "boolean",
    "bytea": "byte",
    "date": "date",
    "time": "time",
}

_GEOMETRY_XSD = {
    "POINT": "gml:PointPropertyType",
    "TRIANGLE": "gml:TrianglePropertyType",
    "MULTIPOINT": "gml:MultiPointPropertyType",
    "TIN": "gml:TriangulatedSurfacePropertyType",
    "POLYHEDRALSURFACE": "gml:PolyhedralSurfacePropertyType",
    "GEOMETRYCOLLECTION": "gml:MultiGeometryPropertyType",
}

# (GML 2.1.2 type, GML 3.1.1 type)
_VERSIONED_XSD = {
    "LINESTRING": ("gml:LineStringPropertyType", "gml:CurvePropertyType"),
    "POLYGON": ("gml:PolygonPropertyType", "gml:SurfacePropertyType"),
    "MULTILINESTRING": ("gml:MultiLineStringPropertyType", "gml:MultiCurvePropertyType"),
    "MULTIPOLYGON": ("gml:MultiPolygonPropertyType", "gml:MultiSurfacePropertyType"),
}


def to_xsd(type_name: str, gml212: bool = False) -> str:
    """Map a PostgreSQL / PostGIS type to an XML Schema type."""
    if type_name.lower() == "geometry":
        return "gml:GeometryPropertyType"
    if type_name in _SIMPLE_XSD:
        return _SIMPLE_XSD[type_name]
    if type_name.startswith("numeric"):
        return "decimal"
    if type_name.startswith("timestamp"):
        return "dateTime"
    if type_name in _GEOMETRY_XSD:
        return _GEOMETRY_XSD[type_name]
    if type_name in _VERSIONED_XSD:
        old, new = _VERSIONED_XSD[type_name]
        return old if gml212 else new
    return "string"


def timestamp_to_xml_time(timestamp: str) -> str:
    """Convert a PostgreSQL timestamp to xsd:dateTime form."""
    if not timestamp:
        return timestamp
    time = timestamp.replace(" ", "T")
    return time + ":00" if "+" in time else time + "Z"


def generate_id(db: Database, layers: Iterable[Any], layer_name: str) -> str:
    """Return a new identifier for a feature of the named layer.

    Uses the primary key sequence, then its DEFAULT expression, and
    finally an 18-digit random string.
    """
    storage = _storage_for(layers, layer_name)
    if storage is None:
        raise KeyError(layer_name)

    if storage.pkey_sequence:
        value = single_value(db, f"SELECT nextval('{storage.pkey_sequence}');")
        if value is not None:
            return value

    if storage.pkey_default:
        value = single_value(db, f"SELECT {storage.pkey_default};")
        if value is not None:
            return value

    return "".join(f"{byte:03d}" for byte in secrets.token_bytes(6))


def number_features(db: Database, tables: list[str], wheres: list[str]) -> int:
    """Count rows over paired tables and WHERE clauses.

    Returns 0 when the lists differ in length and -1 when a query fails.
    """
    if len(tables) != len(wheres):
        return 0
    total = 0
    for table, where in zip(tables, wheres):
        try:
            rows = run_query(db, f'SELECT count(*) FROM "{table}" {where}')
        except QueryError:
            return -1
        total += int(rows[0][0]) if rows and rows[0][0] else 0
    return total