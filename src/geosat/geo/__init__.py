"""Geographic utilities: CRS catalog, projection transforms, tile grid, world files."""
