"""Tile acquisition: disk cache, bounded executor, providers and fetcher."""
from geosat.tiles.cache import CacheStats, DiskTileCache
from geosat.tiles.fetcher import TileFetcher, TileSource, create_tile_source

__all__ = [
    'CacheStats',
    'DiskTileCache',
    'TileFetcher',
    'TileSource',
    'create_tile_source',
]
