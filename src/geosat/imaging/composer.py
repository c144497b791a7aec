"""Mosaic assembly: paste decoded tiles into one canvas."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from geosat.imaging.io import save_jpeg
from geosat.shared.constants import DEFAULT_JPEG_QUALITY, MOSAIC_FILL_COLOR, TILE_SIZE
from geosat.shared.errors import CompositeError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from geosat.domain.models import TileRange

logger = logging.getLogger(__name__)


def decode_tile(data: bytes, x: int, y: int) -> Image.Image:
    """Decode tile bytes to a TILE_SIZE x TILE_SIZE RGB image."""
    try:
        with Image.open(BytesIO(data)) as src:
            img = src.convert('RGB')
    except (UnidentifiedImageError, OSError) as e:
        msg = f'Cannot decode tile x={x} y={y}: {e}'
        raise CompositeError(msg, x=x, y=y) from e
    if img.size != (TILE_SIZE, TILE_SIZE):
        resized = img.resize((TILE_SIZE, TILE_SIZE), Image.Resampling.LANCZOS)
        img.close()
        img = resized
    return img


def stitch(
    tiles: Mapping[tuple[int, int], bytes],
    tile_range: TileRange,
    fill: tuple[int, int, int] = MOSAIC_FILL_COLOR,
) -> tuple[Image.Image, int, int]:
    """
    Склеивает тайлы диапазона в один холст.

    Каждый тайл вставляется без смешивания по смещению
    ((x - min_x) * 256, (y - min_y) * 256). Отсутствующие тайлы остаются
    залитыми цветом fill.
    """
    width_px = tile_range.count_x * TILE_SIZE
    height_px = tile_range.count_y * TILE_SIZE
    canvas = Image.new('RGB', (width_px, height_px), fill)

    missing = 0
    for x, y in tile_range.enumerate_tiles():
        data = tiles.get((x, y))
        if data is None:
            missing += 1
            continue
        img = decode_tile(data, x, y)
        try:
            offset = (
                (x - tile_range.min_tile_x) * TILE_SIZE,
                (y - tile_range.min_tile_y) * TILE_SIZE,
            )
            canvas.paste(img, offset)
        finally:
            img.close()

    if missing:
        logger.warning('%d of %d tiles missing, left as fill', missing, len(tile_range))
    return canvas, width_px, height_px


def stitch_and_save(
    tiles: Mapping[tuple[int, int], bytes],
    tile_range: TileRange,
    output_path: str | Path,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> tuple[int, int]:
    """Stitch the range and write it as JPEG; returns (width_px, height_px)."""
    canvas, width_px, height_px = stitch(tiles, tile_range)
    try:
        save_jpeg(canvas, output_path, quality)
    except OSError as e:
        msg = f'Cannot write mosaic {output_path}: {e}'
        raise CompositeError(msg) from e
    finally:
        canvas.close()
    logger.info('Mosaic saved: %s (%dx%d)', output_path, width_px, height_px)
    return width_px, height_px
