from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from geosat.shared.constants import DOWNLOAD_CONCURRENCY, ImageryProvider
from geosat.shared.errors import FetchError, SettingsError
from geosat.tiles.executor import run_tiles
from geosat.tiles.mapbox import MapboxTileSource
from geosat.tiles.sentinel_hub import SentinelHubTileSource

if TYPE_CHECKING:
    import aiohttp

    from geosat.domain.models import TileRange
    from geosat.domain.settings import GeoSatSettings
    from geosat.shared.progress import CancelToken, ProgressCallback
    from geosat.tiles.cache import DiskTileCache

logger = logging.getLogger(__name__)


class TileSource(Protocol):
    """Provider capability: fetch the raw bytes of one tile over HTTP."""

    name: str

    async def request_tile(
        self, client: aiohttp.ClientSession, zoom: int, x: int, y: int
    ) -> bytes: ...


@dataclass
class FetchStats:
    cache_hits: int = 0
    cache_misses: int = 0
    downloads: int = 0
    errors: int = 0


class TileFetcher:
    """Cache-first tile fetcher over one provider with bounded concurrency."""

    def __init__(
        self,
        client: aiohttp.ClientSession,
        source: TileSource,
        cache: DiskTileCache,
        *,
        concurrency: int = DOWNLOAD_CONCURRENCY,
    ) -> None:
        self.client = client
        self.source = source
        self.cache = cache
        self.concurrency = concurrency
        self.stats = FetchStats()

    async def fetch_tile(self, zoom: int, x: int, y: int) -> bytes:
        """Return tile bytes, from the cache if present, else from the provider."""
        data = self.cache.try_get(zoom, x, y)
        if data is not None:
            self.stats.cache_hits += 1
            logger.debug('Cache hit %d/%d/%d', zoom, x, y)
            return data
        self.stats.cache_misses += 1
        try:
            data = await self.source.request_tile(self.client, zoom, x, y)
        except Exception:
            self.stats.errors += 1
            raise
        self.stats.downloads += 1
        self.cache.put(zoom, x, y, data)
        return data

    async def fetch_range(
        self,
        tile_range: TileRange,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
    ) -> dict[tuple[int, int], bytes]:
        """
        Fetch every tile of the range, keyed by (x, y).

        Fail-fast: the first tile error aborts the whole range. Tiles already
        written to the cache stay there.
        """
        total = tile_range.total_tiles
        zoom = tile_range.zoom
        out: dict[tuple[int, int], bytes] = {}
        lock = asyncio.Lock()
        done = 0

        async def process_tile(x: int, y: int) -> None:
            nonlocal done
            data = await self.fetch_tile(zoom, x, y)
            async with lock:
                out[(x, y)] = data
                done += 1
                if on_progress is not None:
                    on_progress(done, total)

        logger.info(
            'Fetching %d tiles at zoom %d from %s (concurrency %d)',
            total,
            zoom,
            self.source.name,
            self.concurrency,
        )
        await run_tiles(
            tile_range.enumerate_tiles(),
            process_tile=process_tile,
            concurrency=self.concurrency,
            cancel=cancel,
        )
        if len(out) != total:
            msg = f'Fetched {len(out)} of {total} tiles'
            raise FetchError(msg, zoom=zoom)
        logger.info(
            'Tiles ready: %d (cache hits %d, downloads %d)',
            total,
            self.stats.cache_hits,
            self.stats.downloads,
        )
        return out


def create_tile_source(settings: GeoSatSettings) -> TileSource:
    """Pick the provider configured in settings."""
    if settings.provider == ImageryProvider.SENTINEL_HUB:
        sentinel = settings.to_sentinel_config()
        if sentinel is None:
            msg = 'Sentinel Hub client id, client secret and instance id are required'
            raise SettingsError(msg)
        return SentinelHubTileSource(sentinel)
    mapbox = settings.to_mapbox_config()
    if mapbox is None:
        msg = 'Mapbox access token is not set'
        raise SettingsError(msg)
    return MapboxTileSource(mapbox)
