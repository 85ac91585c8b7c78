"""Spatial reference systems as known by the spatial_ref_sys table."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable

from .db import Database, QueryError, run_query, single_value

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")
_DIGITS_ONLY = re.compile(r"[0-9]*")

# (prefix, separator, honours authority axis order, long form)
_SRSNAME_FORMS = (
    ("EPSG:", ":", False, False),
    ("spatialreferencing.org", ":", False, False),
    ("urn:ogc:def:crs:EPSG:", ":", True, True),
    ("urn:x-ogc:def:crs:EPSG:", ":", True, True),
    ("urn:EPSG:geographicCRS:", ":", True, True),
    ("http://www.opengis.net/gml/srs/epsg.xml#", "#", False, True),
)


def _atoi(value: Any) -> int:
    """Read a leading integer the way C's atoi does; 0 when there is none."""
    if value is None:
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def _one_row(db: Database, sql: str) -> tuple[str | None, ...] | None:
    try:
        rows = run_query(db, sql)
    except QueryError:
        return None
    return rows[0] if len(rows) == 1 else None


def axis_properties(proj4text: str | None, srtext: str | None) -> tuple[bool, bool]:
    """Return (is_geographic, is_axis_order_gis_friendly) from a CRS definition.

    The WKT definition is preferred over the proj4 one; with neither the
    defaults of an unknown system (geographic, not GIS friendly) are kept.
    """
    if srtext:
        horizontal = srtext.split(",VERT_CS[", 1)[0]
        is_geographic = (
            "PROJCS[" not in srtext
            and "GEOCCS[" not in srtext
            and "BOUNDCRS[" not in srtext
        ) or "BOUNDCRS[SOURCECRS[GEOGCRS" in srtext

        if "AXIS[" not in horizontal and "GEOCCS[" not in horizontal:
            friendly = False
        elif 'AXIS["Latitude",NORTH],AXIS["Longitude",EAST]' in horizontal:
            friendly = False
        elif 'AXIS["Northing",NORTH],AXIS["Easting",EAST]' in horizontal:
            friendly = False
        elif 'AXIS["geodetic latitude (Lat)",north,ORDER[1]' in horizontal:
            friendly = False
        else:
            friendly = True
        return is_geographic, friendly

    if proj4text:
        is_geographic = "+units=m" not in proj4text
        return is_geographic, not is_geographic

    return True, False


def parse_srsname(srsname: str) -> tuple[int, bool, bool]:
    """Split an srsName into (srid, honours_authority_axis_order, is_long).

    Accepted forms include 'EPSG:4326', 'urn:ogc:def:crs:EPSG::4326',
    'http://www.opengis.net/gml/srs/epsg.xml#4326' and
    'spatialreferencing.org:900913'. Raises ValueError otherwise.
    """
    for prefix, sep, honours, is_long in _SRSNAME_FORMS:
        if srsname.startswith(prefix):
            break
    else:
        raise ValueError(f"unsupported srsName: {srsname!r}")

    if sep not in srsname:
        raise ValueError(f"no code in srsName: {srsname!r}")
    tail = srsname.rsplit(sep, 1)[1]
    if not _DIGITS_ONLY.fullmatch(tail):
        raise ValueError(f"invalid code in srsName: {srsname!r}")
    return (int(tail) if tail else 0), honours, is_long


@dataclass
class Srs:
    """A spatial reference system and its axis order properties."""

    srid: int = -1
    auth_name: str = ""
    auth_srid: int = 0
    is_geographic: bool = True
    honours_authority_axis_order: bool = False
    is_axis_order_gis_friendly: bool = False
    is_long: bool = False

    @classmethod
    def from_srid(cls, db: Database, srid: int) -> "Srs":
        """Look a system up by its database srid.

        srid -1 or 0 gives the unknown system without querying.
        Raises LookupError when spatial_ref_sys has no single match.
        """
        if srid in (-1, 0):
            return cls()
        row = _one_row(
            db,
            "SELECT auth_name, auth_srid, proj4text, srtext "
            f"FROM spatial_ref_sys WHERE srid = '{int(srid)}'",
        )
        if row is None:
            raise LookupError(f"srid {srid} is not handled")
        is_geographic, friendly = axis_properties(row[2], row[3])
        return cls(
            srid=srid,
            auth_name=row[0] or "",
            auth_srid=_atoi(row[1]),
            is_geographic=is_geographic,
            is_axis_order_gis_friendly=friendly,
        )

    @classmethod
    def from_auth(cls, db: Database, auth_name: str, auth_srid: int) -> "Srs":
        """Look a system up by authority name and code.

        Raises LookupError when spatial_ref_sys has no single match.
        """
        row = _one_row(
            db,
            "SELECT srid, proj4text, srtext FROM spatial_ref_sys "
            f"WHERE auth_name='{auth_name}' AND auth_srid={int(auth_srid)}",
        )
        if row is None:
            raise LookupError(f"{auth_name}:{auth_srid} is not handled")
        is_geographic, friendly = axis_properties(row[1], row[2])
        return cls(
            srid=_atoi(row[0]),
            auth_name=auth_name,
            auth_srid=auth_srid,
            is_geographic=is_geographic,
            is_axis_order_gis_friendly=friendly,
        )

    @classmethod
    def from_srsname(cls, db: Database, srsname: str) -> "Srs":
        """Build a system from an srsName attribute value.

        Raises ValueError for an unsupported form and LookupError for an
        unknown code.
        """
        srid, honours, is_long = parse_srsname(srsname)
        srs = cls.from_srid(db, srid)
        srs.is_long = is_long
        if srid not in (-1, 0):
            srs.honours_authority_axis_order = honours
        return srs

    @classmethod
    def wgs84_geobbox(cls) -> "Srs":
        """Return EPSG:4326 without consulting the database."""
        return cls(
            srid=4326,
            auth_name="EPSG",
            auth_srid=4326,
            is_geographic=True,
            is_axis_order_gis_friendly=False,
        )


def srs_name_for_srid(db: Database, srid: int) -> str:
    """Return 'AUTH:CODE' for a database srid, or '' when unknown."""
    sql = (
        "SELECT auth_name||':'||auth_srid AS srs FROM spatial_ref_sys "
        f"WHERE srid={int(srid)}"
    )
    return single_value(db, sql) or ""


def srs_names_for_srids(db: Database, srids: Iterable[Any]) -> list[str]:
    """Return 'AUTH:CODE' for each srid of a list (given as text or int)."""
    return [srs_name_for_srid(db, _atoi(srid)) for srid in srids]


def _storage_for(layers: Iterable[Any], layer_name: str) -> Any:
    for layer in layers:
        if layer.name and layer.storage is not None and layer.name == layer_name:
            return layer.storage
    return None


def meter_units(layers: Iterable[Any], layer_name: str) -> bool:
    """Tell whether a layer's storage uses meters rather than degrees.

    Raises KeyError when no stored layer has that name.
    """
    storage = _storage_for(layers, layer_name)
    if storage is None:
        raise KeyError(layer_name)
    return not storage.is_geographic


def srid_from_layer(layers: Iterable[Any], layer_name: str) -> int:
    """Return the srid of a layer's storage, or -1."""
    storage = _storage_for(layers, layer_name)
    return storage.srid if storage is not None else -1