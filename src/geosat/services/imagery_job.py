"""
Host-agnostic entry point of the service layer.

A CAD plugin, the CLI or a test calls run_imagery_job from a plain
thread; it builds the HTTP session, cache and fetcher from settings and
drives the pipeline with ``asyncio.run``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from geosat.infrastructure.http.client import make_http_session
from geosat.services.pipeline import ImageryPipeline
from geosat.tiles.cache import DiskTileCache
from geosat.tiles.fetcher import TileFetcher, create_tile_source

if TYPE_CHECKING:
    from geosat.domain.models import PlacementResult
    from geosat.domain.settings import GeoSatSettings
    from geosat.geo.crs_catalog import CrsEntry
    from geosat.shared.progress import CancelToken, ProgressCallback

logger = logging.getLogger(__name__)


async def _run_async(  # noqa: PLR0913
    settings: GeoSatSettings,
    crs: CrsEntry,
    corners: tuple[float, float, float, float],
    output_dir: Path,
    cache: DiskTileCache,
    on_progress: ProgressCallback | None,
    cancel: CancelToken | None,
) -> PlacementResult:
    source = create_tile_source(settings)
    async with make_http_session() as client:
        fetcher = TileFetcher(
            client, source, cache, concurrency=settings.concurrency
        )
        pipeline = ImageryPipeline(
            crs,
            fetcher,
            target_meters_per_pixel=settings.target_meters_per_pixel,
            jpeg_quality=settings.jpeg_quality,
        )
        x1, y1, x2, y2 = corners
        result = await pipeline.run(
            x1, y1, x2, y2, output_dir, on_progress=on_progress, cancel=cancel
        )
        s = fetcher.stats
        logger.info(
            'Fetch stats: hits=%d misses=%d downloads=%d errors=%d',
            s.cache_hits,
            s.cache_misses,
            s.downloads,
            s.errors,
        )
        return result


def run_imagery_job(  # noqa: PLR0913
    settings: GeoSatSettings,
    crs: CrsEntry,
    corners: tuple[float, float, float, float],
    output_dir: str | Path | None = None,
    on_progress: ProgressCallback | None = None,
    cancel: CancelToken | None = None,
    cache: DiskTileCache | None = None,
) -> PlacementResult:
    """Run one imagery acquisition for the rectangle given by two drawing-CRS corners."""
    out_dir = Path(output_dir or settings.output_directory)
    if cache is None:
        cache = DiskTileCache(settings.cache_dir)
    logger.info(
        'Imagery job: provider=%s crs=%s output=%s',
        settings.provider.value,
        crs.code,
        out_dir,
    )
    return asyncio.run(
        _run_async(settings, crs, corners, out_dir, cache, on_progress, cancel)
    )
