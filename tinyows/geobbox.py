"""Geographic bounding boxes in WGS84 degrees."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import Any

from .db import Database, QueryError, run_query
from .psql import geometry_columns, schema_name, table_name

_TOLERANCE = 0.01
_UNSET = sys.float_info.min
_EPSILON = sys.float_info.epsilon
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")


def _atof(value: Any) -> float:
    """Read a leading float the way C's atof does; 0.0 when there is none."""
    if value is None:
        return 0.0
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else 0.0


@dataclass
class GeoBBox:
    """A west/east/south/north box; unset sides hold the smallest float."""

    west: float = _UNSET
    east: float = _UNSET
    south: float = _UNSET
    north: float = _UNSET

    @classmethod
    def from_bounds(cls, west: float, east: float, south: float, north: float) -> "GeoBBox":
        """Build a box, checking earth limits and a non-null area.

        Raises ValueError when a side lies outside the earth or the area is null.
        """
        t = _TOLERANCE
        if (
            south + t < -90.0 or south - t > 90.0
            or north + t < -90.0 or north - t > 90.0
            or east + t < -180.0 or east - t > 180.0
            or west + t < -180.0 or west - t > 180.0
        ):
            raise ValueError("bounding box lies outside the earth limits")
        if abs(south - north) < _EPSILON or abs(east - west) < _EPSILON:
            raise ValueError("bounding box has a null area")
        return cls(west, east, south, north)

    @classmethod
    def from_bbox(cls, xmin: float, ymin: float, xmax: float, ymax: float) -> "GeoBBox":
        """Build a box from bbox corners; a box wholly south of the equator is flipped."""
        if ymin < 0.0 and ymax < 0.0:
            return cls.from_bounds(xmax, xmin, ymax, ymin)
        return cls.from_bounds(xmin, xmax, ymin, ymax)

    @classmethod
    def from_string(cls, text: str) -> "GeoBBox":
        """Parse 'xmin,ymin,xmax,ymax'. Raises ValueError on a malformed string."""
        parts = text.split(",")
        if len(parts) != 4:
            raise ValueError(f"bbox needs four values: {text!r}")
        xmin, ymin, xmax, ymax = (float(part) for part in parts)
        return cls.from_bbox(xmin, ymin, xmax, ymax)


def _extent_sql(schema: str, table: str, column: str, estimated_extent: bool) -> str:
    head = "SELECT ST_xmin(g), ST_ymin(g), ST_xmax(g), ST_ymax(g) FROM "
    if estimated_extent:
        return (
            head
            + "(SELECT ST_Transform(ST_SetSRID(ST_Estimated_Extent('"
            + f"{schema}','{table}','{column}'), (SELECT ST_SRID(\"{column}\") "
            + f"FROM \"{schema}\".\"{table}\" LIMIT 1)) ,4326) AS g) AS foo"
        )
    return (
        head
        + f"(SELECT ST_Transform(ST_SetSRID(ST_Extent(\"{column}\"), "
        + f"(SELECT ST_SRID(\"{column}\") FROM \"{schema}\".\"{table}\" LIMIT 1)), 4326) AS g "
        + f" FROM \"{schema}\".\"{table}\" ) AS foo"
    )


def compute_geobbox(
    db: Database, layers: Any, layer_name: str, estimated_extent: bool = False
) -> GeoBBox | None:
    """Compute the WGS84 extent of a layer over all its geometry columns.

    Returns None when the layer has no geometry column, and an unset box
    when a query fails or the extent is not a valid geographic box.
    """
    columns = geometry_columns(layers, layer_name)
    if not columns:
        return None

    schema = schema_name(layers, layer_name)
    table = table_name(layers, layer_name)
    unset = GeoBBox()
    xmin = ymin = xmax = ymax = 0.0
    first = True

    for column in columns:
        try:
            rows = run_query(db, _extent_sql(schema, table, column, estimated_extent))
        except QueryError:
            return unset
        row = rows[0] if rows else ()
        values = [_atof(row[i]) if i < len(row) else 0.0 for i in range(4)]
        if first or values[0] < xmin:
            xmin = values[0]
        if first or values[1] < ymin:
            ymin = values[1]
        if first or values[2] > xmax:
            xmax = values[2]
        if first or values[3] > ymax:
            ymax = values[3]
        first = False

    try:
        return GeoBBox.from_bbox(xmin, ymin, xmax, ymax)
    except ValueError:
        return unset