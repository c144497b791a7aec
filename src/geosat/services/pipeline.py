"""
Imagery pipeline: drawing-CRS rectangle -> georeferenced mosaic on disk.

transform box -> choose zoom -> tile range -> fetch -> stitch ->
inverse-transform the tile-range extent -> world file -> PlacementResult.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from geosat.domain.models import PlacementResult
from geosat.geo.tile_grid import choose_zoom, get_tile_range, tile_range_bounds
from geosat.geo.transformer import ProjectionTransformer
from geosat.geo.world_file import write_world_file
from geosat.imaging.composer import stitch_and_save
from geosat.shared.constants import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_TARGET_METERS_PER_PIXEL,
    OUTPUT_IMAGE_EXT,
    OUTPUT_IMAGE_PREFIX,
    OUTPUT_TIMESTAMP_FORMAT,
)
from geosat.shared.diagnostics import log_memory_usage
from geosat.shared.errors import GeoSatError
from geosat.shared.progress import raise_if_cancelled

if TYPE_CHECKING:
    from collections.abc import Callable

    from geosat.geo.crs_catalog import CrsEntry
    from geosat.shared.progress import CancelToken, ProgressCallback
    from geosat.tiles.fetcher import TileFetcher

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = 'idle'
    TRANSFORMING_BBOX = 'transforming_bbox'
    SELECTING_ZOOM = 'selecting_zoom'
    FETCHING_TILES = 'fetching_tiles'
    STITCHING = 'stitching'
    ENCODING = 'encoding'
    DONE = 'done'
    FAILED = 'failed'


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _remove_quietly(path: Path) -> None:
    with contextlib.suppress(OSError):
        path.unlink()


def output_image_name(moment: datetime) -> str:
    stamp = moment.strftime(OUTPUT_TIMESTAMP_FORMAT)
    return f'{OUTPUT_IMAGE_PREFIX}{stamp}{OUTPUT_IMAGE_EXT}'


class ImageryPipeline:
    """One-shot orchestrator; no retries between stages."""

    def __init__(
        self,
        crs: CrsEntry,
        fetcher: TileFetcher,
        *,
        target_meters_per_pixel: float = DEFAULT_TARGET_METERS_PER_PIXEL,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.crs = crs
        self.fetcher = fetcher
        self.target_meters_per_pixel = target_meters_per_pixel
        self.jpeg_quality = jpeg_quality
        self._clock = clock
        self.state = PipelineState.IDLE
        self._on_state: Callable[[PipelineState], None] | None = None

    def _enter(self, state: PipelineState) -> None:
        self.state = state
        logger.info('Pipeline state: %s', state.value)
        if self._on_state is not None:
            self._on_state(state)

    async def run(  # noqa: PLR0913
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        output_dir: str | Path,
        on_progress: ProgressCallback | None = None,
        cancel: CancelToken | None = None,
        on_state: Callable[[PipelineState], None] | None = None,
    ) -> PlacementResult:
        """Run every stage; on failure stamp the stage onto the error and re-raise."""
        self._on_state = on_state
        try:
            return await self._run(x1, y1, x2, y2, Path(output_dir), on_progress, cancel)
        except GeoSatError as e:
            if e.stage is None:
                e.stage = self.state.value
            logger.error('Pipeline failed at %s: %s', self.state.value, e.message)
            self._enter(PipelineState.FAILED)
            raise
        except BaseException:
            logger.exception('Pipeline aborted at %s', self.state.value)
            self._enter(PipelineState.FAILED)
            raise

    async def _run(  # noqa: PLR0913
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        output_dir: Path,
        on_progress: ProgressCallback | None,
        cancel: CancelToken | None,
    ) -> PlacementResult:
        self._enter(PipelineState.TRANSFORMING_BBOX)
        transformer = ProjectionTransformer(self.crs)
        bbox = transformer.bbox_to_wgs84(x1, y1, x2, y2)
        logger.info(
            'WGS84 box: lon [%.6f, %.6f], lat [%.6f, %.6f]',
            bbox.min_lon,
            bbox.max_lon,
            bbox.min_lat,
            bbox.max_lat,
        )

        self._enter(PipelineState.SELECTING_ZOOM)
        zoom = choose_zoom(bbox.center_lat, self.target_meters_per_pixel)
        tile_range = get_tile_range(bbox, zoom)
        logger.info(
            'Zoom %d, tiles %dx%d (%d)',
            zoom,
            tile_range.count_x,
            tile_range.count_y,
            tile_range.total_tiles,
        )

        self._enter(PipelineState.FETCHING_TILES)
        raise_if_cancelled(cancel)
        log_memory_usage('before tile download')
        tiles = await self.fetcher.fetch_range(tile_range, on_progress, cancel)

        self._enter(PipelineState.STITCHING)
        raise_if_cancelled(cancel)
        image_path = output_dir / output_image_name(self._clock())
        width_px, height_px = await asyncio.to_thread(
            stitch_and_save, tiles, tile_range, image_path, self.jpeg_quality
        )
        del tiles
        log_memory_usage('after stitching')

        self._enter(PipelineState.ENCODING)
        # Мозаика покрывает весь диапазон тайлов, а не исходный прямоугольник
        extent = tile_range_bounds(tile_range)
        try:
            tl_x, tl_y = transformer.from_wgs84(extent.min_lon, extent.max_lat)
            br_x, br_y = transformer.from_wgs84(extent.max_lon, extent.min_lat)
            world_path = write_world_file(
                image_path, tl_x, tl_y, br_x, br_y, width_px, height_px
            )
        except (OSError, ValueError) as e:
            _remove_quietly(image_path)
            msg = f'Cannot write world file for {image_path}: {e}'
            raise GeoSatError(msg) from e
        except GeoSatError:
            _remove_quietly(image_path)
            raise

        result = PlacementResult(
            image_path=str(image_path),
            world_file_path=str(world_path),
            insertion_x=tl_x,
            insertion_y=tl_y,
            width_drawing_units=br_x - tl_x,
            height_drawing_units=tl_y - br_y,
            width_px=width_px,
            height_px=height_px,
            tile_count=tile_range.total_tiles,
            zoom_level=zoom,
        )
        self._enter(PipelineState.DONE)
        return result
