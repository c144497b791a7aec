"""Mapbox raster tiles (v4 API, static access token in the query string)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import aiohttp

from geosat.shared.constants import (
    HTTP_OK,
    HTTP_TIMEOUT_DEFAULT,
    MAPBOX_RASTER_BASE,
    MAPBOX_TILE_FORMAT,
)
from geosat.shared.errors import FetchError
from geosat.tiles.http_utils import release_response

if TYPE_CHECKING:
    from geosat.domain.settings import MapboxConfig

logger = logging.getLogger(__name__)


class MapboxTileSource:
    """Stateless Mapbox provider: no auth handshake, token travels in the URL."""

    name = 'mapbox'

    def __init__(
        self, config: MapboxConfig, *, timeout_s: float = HTTP_TIMEOUT_DEFAULT
    ) -> None:
        self.config = config
        self.timeout_s = timeout_s

    def tile_path(self, zoom: int, x: int, y: int) -> str:
        """Request URL without the token; safe to log."""
        return (
            f'{MAPBOX_RASTER_BASE}/{self.config.tileset_id}/'
            f'{zoom}/{x}/{y}.{MAPBOX_TILE_FORMAT}'
        )

    def build_tile_url(self, zoom: int, x: int, y: int) -> str:
        return f'{self.tile_path(zoom, x, y)}?access_token={self.config.access_token}'

    async def request_tile(
        self, client: aiohttp.ClientSession, zoom: int, x: int, y: int
    ) -> bytes:
        url = self.build_tile_url(zoom, x, y)
        path = self.tile_path(zoom, x, y)
        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout_s)
            resp = await client.get(url, timeout=timeout)
            try:
                if resp.status != HTTP_OK:
                    msg = f'HTTP {resp.status} for tile z/x/y={zoom}/{x}/{y} path={path}'
                    raise FetchError(msg, status=resp.status, zoom=zoom, x=x, y=y)
                return await resp.read()
            finally:
                release_response(resp)
        except (aiohttp.ClientError, TimeoutError) as e:
            msg = f'Request failed for tile z/x/y={zoom}/{x}/{y} path={path}: {e}'
            raise FetchError(msg, zoom=zoom, x=x, y=y) from e
