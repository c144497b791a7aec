"""
Slippy-map tile grid math (Web Mercator, 256 px tiles, OSM convention).

Tile X grows eastward from lon -180, tile Y grows southward from the
northern Mercator limit. All functions are pure.
"""

from __future__ import annotations

import math

from geosat.domain.models import BoundingBox, TileRange
from geosat.shared.constants import (
    EARTH_CIRCUMFERENCE_M,
    MAX_MERCATOR_LAT_DEG,
    MAX_ZOOM,
    MIN_ZOOM,
    TILE_EDGE_EPSILON,
    TILE_SIZE,
    WORLD_LNG_HALF_SPAN_DEG,
    WORLD_LNG_SPAN_DEG,
)


def _to_index(v: float, zoom: int) -> int:
    # угол тайла после обратного пересчёта может оказаться чуть левее/выше границы
    i = math.floor(v + TILE_EDGE_EPSILON)
    return min(max(i, 0), (1 << zoom) - 1)


def _clamp_lat(lat: float) -> float:
    return min(max(lat, -MAX_MERCATOR_LAT_DEG), MAX_MERCATOR_LAT_DEG)


def meters_per_pixel(lat_deg: float, zoom: int) -> float:
    """Возвращает метров на пиксель в проекции Mercator на заданной широте и зуме."""
    return (EARTH_CIRCUMFERENCE_M * math.cos(math.radians(lat_deg))) / (
        TILE_SIZE * (1 << zoom)
    )


def choose_zoom(lat_deg: float, target_meters_per_pixel: float) -> int:
    """
    Smallest zoom whose ground resolution is at least as fine as the target.

    Falls back to MAX_ZOOM when even that is too coarse; never fails.
    """
    for zoom in range(MIN_ZOOM, MAX_ZOOM + 1):
        if meters_per_pixel(lat_deg, zoom) <= target_meters_per_pixel:
            return zoom
    return MAX_ZOOM


def lon_to_tile_x(lon: float, zoom: int) -> int:
    n = 1 << zoom
    return _to_index((lon + WORLD_LNG_HALF_SPAN_DEG) / WORLD_LNG_SPAN_DEG * n, zoom)


def lat_to_tile_y(lat: float, zoom: int) -> int:
    n = 1 << zoom
    lat_rad = math.radians(_clamp_lat(lat))
    merc = math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad))
    return _to_index((1.0 - merc / math.pi) / 2.0 * n, zoom)


def tile_x_to_lon(x: int, zoom: int) -> float:
    """Longitude of the western edge of tile column x."""
    return x / (1 << zoom) * WORLD_LNG_SPAN_DEG - WORLD_LNG_HALF_SPAN_DEG


def tile_y_to_lat(y: int, zoom: int) -> float:
    """Latitude of the northern edge of tile row y."""
    n = 1 << zoom
    return math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * y / n))))


def tile_bounds(x: int, y: int, zoom: int) -> BoundingBox:
    """WGS84 box covered by a single tile."""
    return BoundingBox(
        min_lon=tile_x_to_lon(x, zoom),
        min_lat=tile_y_to_lat(y + 1, zoom),
        max_lon=tile_x_to_lon(x + 1, zoom),
        max_lat=tile_y_to_lat(y, zoom),
    )


def get_tile_range(bbox: BoundingBox, zoom: int) -> TileRange:
    # Y инвертирован: северная граница (max_lat) даёт минимальный номер строки
    return TileRange(
        min_tile_x=lon_to_tile_x(bbox.min_lon, zoom),
        min_tile_y=lat_to_tile_y(bbox.max_lat, zoom),
        max_tile_x=lon_to_tile_x(bbox.max_lon, zoom),
        max_tile_y=lat_to_tile_y(bbox.min_lat, zoom),
        zoom=zoom,
    )


def tile_range_bounds(tile_range: TileRange) -> BoundingBox:
    """
    WGS84 box that exactly encloses every tile of the range.

    This is a superset of the box the range was computed from and is the
    extent the stitched mosaic actually covers.
    """
    z = tile_range.zoom
    return BoundingBox(
        min_lon=tile_x_to_lon(tile_range.min_tile_x, z),
        min_lat=tile_y_to_lat(tile_range.max_tile_y + 1, z),
        max_lon=tile_x_to_lon(tile_range.max_tile_x + 1, z),
        max_lat=tile_y_to_lat(tile_range.min_tile_y, z),
    )
