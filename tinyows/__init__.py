"""Layers, SRS handling, geographic bounding boxes, GML conversion and PostGIS helper queries for a WFS server."""

__version__ = "0.1.0"