"""Domain layer - value types and user settings."""
from geosat.domain.models import BoundingBox, PlacementResult, TileRange
from geosat.domain.settings import (
    GeoSatSettings,
    MapboxConfig,
    SentinelHubConfig,
    mask_secret,
)
from geosat.domain.settings_store import load_settings, save_settings, settings_path

__all__ = [
    'BoundingBox',
    'GeoSatSettings',
    'MapboxConfig',
    'PlacementResult',
    'SentinelHubConfig',
    'TileRange',
    'load_settings',
    'mask_secret',
    'save_settings',
    'settings_path',
]
