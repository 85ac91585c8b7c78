# tinyows

Building blocks for a lightweight OGC Web Feature Service (WFS) that serves
PostGIS tables.

## What is in the package

- **`tinyows.db`**: `Database` wraps any DB-API connection. Its `execute`
  method returns every row with values turned into text the way PostgreSQL's
  text protocol shows them: booleans become `t`/`f`, `NULL` becomes `None`.
  `run_query` runs a statement and raises `QueryError` on failure.
  `single_value` returns the first column of a query that gives exactly one
  row. It returns `None` otherwise, or when the query fails.
- **`tinyows.version`**: `Version` is a three-part `x.y.z` number.
  `Version.from_string` parses single-digit parts and raises `ValueError`
  when the text has the wrong shape. `as_int` gives `major*100 + minor*10 +
  release`, and `is_set` tells whether all three parts are set.
- **`tinyows.layer`**: `Layer`, `LayerStorage` and `LayerList`. A
  `LayerList` looks layers up by URI-qualified name (`uri:name`), prefixed
  name (`prefix:name`) or bare name, and converts between these forms. It
  maps namespace prefixes to URIs (`namespaces`, `ns_prefix_to_ns_uri`,
  `ns_prefixes`). It also reports whether layers are backed by a table
  (`match_table`, `names_having_storage`) and whether they can be read or
  written (`is_retrievable`, `all_retrievable`, `is_writable`,
  `all_writable`).
- **`tinyows.psql`**:
  - Lookups on a layer's storage: `id_column`, `geometry_columns`,
    `schema_name`, `table_name`, `is_geometry_column`,
    `not_null_properties`, `describe_table` and `property_type`.
  - Catalogue queries: `column_constraint_name`, `column_check_constraint`,
    `column_name`, `column_character_maximum_length` and `postgis_version`.
  - Type helpers: `is_numeric`, and `to_xsd`, which maps PostgreSQL and
    PostGIS types to XML Schema or GML 2.1.2 / 3.1.1 property types.
    `timestamp_to_xml_time` converts a timestamp to `xsd:dateTime` form.
  - `generate_id` returns a new feature identifier. It tries the primary key
    sequence first, then the key's `DEFAULT`, and last an 18-digit random
    string.
  - `number_features` counts rows over paired tables and `WHERE` clauses.
- **`tinyows.srs`**: `Srs` describes a spatial reference system and its axis
  order. It is built with `Srs.from_srid`, `Srs.from_auth`,
  `Srs.from_srsname` or `Srs.wgs84_geobbox`. `parse_srsname` accepts
  `EPSG:4326`, `urn:ogc:def:crs:EPSG::4326`,
  `urn:x-ogc:def:crs:EPSG:6.6:4326`, `urn:EPSG:geographicCRS:4326`,
  `http://www.opengis.net/gml/srs/epsg.xml#4326` and
  `spatialreferencing.org:900913`. `axis_properties` reads whether a system
  is geographic and GIS-friendly from its WKT or proj4 text.
  `srs_name_for_srid` and `srs_names_for_srids` return `AUTH:CODE` strings.
  `meter_units` and `srid_from_layer` read a layer's storage.
- **`tinyows.geobbox`**: `GeoBBox` is a WGS84 box that is checked against
  earth limits and must not have a null area. It is built with
  `from_bounds`, `from_bbox` or `from_string` (`"xmin,ymin,xmax,ymax"`).
  `compute_geobbox` asks PostGIS for a layer's extent over all of its
  geometry columns.
- **`tinyows.gml`**: `find_gml_geometry` finds the first GML 3 or GML 3.2
  geometry element. `gml_to_sql` turns it into PostGIS EWKT. It honours
  `srsName`, flips axes when needed, and can check the result for validity.
  `is_geometry_valid`, `geometry_srid` and `escape_string` are helpers
  around these queries.
- **`tinyows.namespaces`**: `check_namespaces` returns `False` when a
  prefix declared on the root element is bound to a different URI further
  down the document.

## Installation

```
pip install .
```

## Example

```python
import sqlite3

from tinyows.db import Database, single_value
from tinyows.geobbox import GeoBBox
from tinyows.layer import Layer, LayerList
from tinyows.srs import parse_srsname
from tinyows.version import Version

print(Version.from_string("1.1.0").as_int())          # 110
print(parse_srsname("urn:ogc:def:crs:EPSG::4326"))    # (4326, True, True)
print(GeoBBox.from_string("-5,41,10,51"))

layers = LayerList([
    Layer(
        name="http://example.com/ns:roads",
        name_prefix="demo:roads",
        name_no_uri="roads",
        ns_prefix="demo",
        ns_uri="http://example.com/ns",
    )
])
print(layers.uri_to_prefix("http://example.com/ns:roads"))  # demo:roads
print(layers.namespaces())  # {'demo': 'http://example.com/ns'}

with Database(sqlite3.connect(":memory:")) as db:
    print(single_value(db, "SELECT 1"))  # '1'
```

The queries in `psql`, `srs`, `geobbox` and `gml` are written for
PostgreSQL with PostGIS. Pass a `Database` that wraps a connection from a
PostgreSQL driver of your choice. The package does not depend on any driver.

## What the package does not do

- It has no HTTP front end, no command and no server. It neither parses
  WFS requests nor writes GetCapabilities documents or exception reports.
- It does not read a configuration file. You build `Layer` objects and
  their `LayerStorage` yourself, including parent layers and inherited
  properties.
- It does not fill `LayerStorage` from the database catalogue. The geometry
  columns, SRID, primary key, sequence, attributes and not-null columns must
  be set by the caller.
- It does not validate XML against a WFS schema.

## Running the tests

```
pip install .[test]
pytest
```