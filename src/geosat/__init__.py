"""GeoSat: georeferenced satellite imagery for a drawing-CRS rectangle."""

__version__ = '0.1.0'
