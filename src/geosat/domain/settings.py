from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, field_validator

from geosat.shared.constants import (
    API_KEY_VISIBLE_PREFIX_LEN,
    APP_DIR_NAME,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_TARGET_METERS_PER_PIXEL,
    DOWNLOAD_CONCURRENCY,
    JPEG_QUALITY_MAX,
    JPEG_QUALITY_MIN,
    MAPBOX_DEFAULT_TILESET,
    SENTINEL_DEFAULT_LAYER,
    SENTINEL_TOKEN_URL,
    SENTINEL_WMTS_BASE,
    ImageryProvider,
    default_provider,
)


def default_output_directory() -> str:
    return str(Path.home() / 'Documents' / APP_DIR_NAME)


def mask_secret(value: str | None) -> str:
    """Show only the first characters of a credential."""
    if not value:
        return 'not set'
    return value[:API_KEY_VISIBLE_PREFIX_LEN] + '****'


class SentinelHubConfig(BaseModel):
    """Credentials for Sentinel Hub on the Copernicus Data Space."""

    client_id: str
    client_secret: str
    instance_id: str
    layer_name: str = SENTINEL_DEFAULT_LAYER
    token_url: str = SENTINEL_TOKEN_URL

    @property
    def wmts_base_url(self) -> str:
        return f'{SENTINEL_WMTS_BASE}/{self.instance_id}'


class MapboxConfig(BaseModel):
    """Mapbox access token and tileset for raster tiles."""

    access_token: str
    tileset_id: str = MAPBOX_DEFAULT_TILESET


class GeoSatSettings(BaseModel):
    """
    Per-user settings: provider credentials, output location and run tuning.

    Credentials live here rather than per drawing; the drawing CRS is kept
    in ``crs_code`` for hosts that have no document property store.
    """

    model_config = {
        'extra': 'ignore',
    }

    provider: ImageryProvider = default_provider()

    # Sentinel Hub (OAuth2 client credentials)
    client_id: str = ''
    client_secret: str = ''
    instance_id: str = ''
    layer_name: str = SENTINEL_DEFAULT_LAYER
    token_url: str = SENTINEL_TOKEN_URL

    # Mapbox
    mapbox_access_token: str = ''
    mapbox_tileset_id: str = MAPBOX_DEFAULT_TILESET

    # Куда сохранять снимки и где держать кэш тайлов
    output_directory: str = default_output_directory()
    cache_dir: str | None = None

    # Код СК чертежа, например 'EPSG:32633'
    crs_code: str | None = None

    target_meters_per_pixel: float = DEFAULT_TARGET_METERS_PER_PIXEL
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    concurrency: int = DOWNLOAD_CONCURRENCY

    @field_validator('target_meters_per_pixel')
    @classmethod
    def validate_resolution(cls, v: float | str) -> float:
        fv = float(v)
        if fv <= 0:
            msg = 'target_meters_per_pixel must be positive'
            raise ValueError(msg)
        return fv

    @field_validator('jpeg_quality')
    @classmethod
    def validate_quality(cls, v: int | str) -> int:
        iv = int(v)
        if not (JPEG_QUALITY_MIN <= iv <= JPEG_QUALITY_MAX):
            msg = f'jpeg_quality must be in [{JPEG_QUALITY_MIN}, {JPEG_QUALITY_MAX}]'
            raise ValueError(msg)
        return iv

    @field_validator('concurrency')
    @classmethod
    def validate_concurrency(cls, v: int | str) -> int:
        iv = int(v)
        if iv < 1:
            msg = 'concurrency must be at least 1'
            raise ValueError(msg)
        return iv

    @field_validator('cache_dir', 'crs_code', mode='before')
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_sentinel_config(self) -> SentinelHubConfig | None:
        if not (
            self.client_id.strip()
            and self.client_secret.strip()
            and self.instance_id.strip()
        ):
            return None
        return SentinelHubConfig(
            client_id=self.client_id,
            client_secret=self.client_secret,
            instance_id=self.instance_id,
            layer_name=self.layer_name,
            token_url=self.token_url,
        )

    def to_mapbox_config(self) -> MapboxConfig | None:
        if not self.mapbox_access_token.strip():
            return None
        return MapboxConfig(
            access_token=self.mapbox_access_token,
            tileset_id=self.mapbox_tileset_id,
        )
