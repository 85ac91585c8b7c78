"""GML geometries turned into PostGIS geometries, and geometry checks."""

from __future__ import annotations

import re
from typing import Any

from lxml import etree

from .db import Database, single_value
from .srs import Srs
from .version import Version

_GML_NAMESPACES = frozenset({"http://www.opengis.net/gml", "http://www.opengis.net/gml/3.2"})
_GEOMETRY_NAMES = frozenset({
    "Point", "LineString", "LinearRing", "Curve", "Polygon", "Triangle", "Surface",
    "MultiPoint", "MultiLineString", "MultiCurve", "MultiPolygon", "MultiSurface",
    "PolyhedralSurface", "Tin", "TriangulatedSurface", "MultiGeometry",
})
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


def find_gml_geometry(element: Any) -> Any:
    """Return the first GML geometry element at or after ``element``.

    The element and its following siblings are scanned in document order;
    only GML elements are descended into. Returns None when none is found.
    """
    for node in (element, *element.itersiblings()):
        if not isinstance(node.tag, str):
            continue
        qname = etree.QName(node)
        if qname.namespace not in _GML_NAMESPACES:
            continue
        if qname.localname in _GEOMETRY_NAMES:
            return node
        children = list(node)
        if children:
            found = find_gml_geometry(children[0])
            if found is not None:
                return found
    return None


def escape_string(content: str) -> str:
    """Escape a string for use inside an SQL literal."""
    return content.replace("'", "''")


def gml_to_sql(
    db: Database,
    element: Any,
    parent_srs: Srs | None,
    postgis_version: Version | None,
    check_valid_geom: bool = True,
) -> str | None:
    """Convert the GML geometry found at ``element`` to PostGIS EWKT.

    Returns None when there is no geometry, its srsName is not usable,
    PostGIS cannot parse it, or it is invalid while validity is checked.
    """
    geometry = find_gml_geometry(element)
    if geometry is None:
        return None

    srs_geom = None
    srs_name = geometry.get("srsName")
    if srs_name is not None:
        try:
            srs_geom = Srs.from_srsname(db, srs_name)
        except (ValueError, LookupError):
            return None

    gml = etree.tostring(geometry, encoding="unicode", with_tail=False)
    flip = (
        srs_geom is None
        and parent_srs is not None
        and parent_srs.honours_authority_axis_order
        and not parent_srs.is_axis_order_gis_friendly
    )
    version = postgis_version.as_int() if postgis_version is not None else 0

    sql = "SELECT "
    if flip:
        sql += "ST_FlipCoordinates("
    # ST_GeomFromGML swaps axes itself when the geometry carries an srsName.
    sql += "ST_GeomFromGML('" + escape_string(gml)
    if version >= 200 and (srs_geom is not None or parent_srs is not None):
        srid = srs_geom.srid if srs_geom is not None else parent_srs.srid
        sql += f"',{srid})"
    else:
        sql += "')"
    if flip:
        sql += ")"

    result = single_value(db, sql)
    if result is None:
        return None

    if check_valid_geom:
        valid = single_value(db, f"SELECT ST_IsValid('{escape_string(result)}')")
        if not valid or not valid.startswith("t"):
            return None
    return result


def is_geometry_valid(db: Database, wkt: str) -> bool:
    """Tell whether PostGIS considers a WKT geometry valid."""
    value = single_value(
        db, f"SELECT ST_isvalid(ST_geometryfromtext('{escape_string(wkt)}', -1));"
    )
    return bool(value) and value.startswith("t")


def geometry_srid(db: Database, geom: str) -> int:
    """Return the SRID of a geometry, or -1 when PostGIS cannot read it."""
    value = single_value(db, f"SELECT ST_SRID('{escape_string(geom)}'::geometry)")
    if value is None:
        return -1
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0