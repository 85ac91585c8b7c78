[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyows"
version = "0.1.0"
description = "Building blocks of a lightweight WFS server backed by PostGIS: layers, SRS handling, geographic bounding boxes, GML geometries and catalogue queries."
requires-python = ">=3.10"
dependencies = [
    "lxml",
]
keywords = ["wfs", "ows", "ogc", "postgis", "gml", "gis", "srs"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Scientific/Engineering :: GIS",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["tinyows"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
