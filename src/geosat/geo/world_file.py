"""
World-file (ESRI .jgw/.tfw/...) encoder.

Six lines: pixel width, two rotation terms, pixel height (negative),
then X and Y of the CENTER of the upper-left pixel.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    'jpg': '.jgw',
    'jpeg': '.jgw',
    'tif': '.tfw',
    'tiff': '.tfw',
    'png': '.pgw',
    'bmp': '.bpw',
}


def _fmt_scale(v: float) -> str:
    return f'{v:.10f}'


def _fmt_coord(v: float) -> str:
    return f'{v:.4f}'


def generate(
    top_left_x: float,
    top_left_y: float,
    bottom_right_x: float,
    bottom_right_y: float,
    width_px: int,
    height_px: int,
) -> str:
    """Build world-file text for a raster with the given real-world corners."""
    if width_px <= 0 or height_px <= 0:
        msg = f'Image size must be positive, got {width_px}x{height_px}'
        raise ValueError(msg)
    pixel_width = (bottom_right_x - top_left_x) / width_px
    pixel_height = (bottom_right_y - top_left_y) / height_px
    center_x = top_left_x + pixel_width / 2.0
    center_y = top_left_y + pixel_height / 2.0
    lines = [
        _fmt_scale(pixel_width),
        _fmt_scale(0.0),
        _fmt_scale(0.0),
        _fmt_scale(pixel_height),
        _fmt_coord(center_x),
        _fmt_coord(center_y),
    ]
    return '\n'.join(lines)


def world_file_extension(image_ext: str) -> str:
    """
    jpg -> .jgw etc.

    Unknown extensions use first letter + 'w' + last letter, keeping their case.
    """
    ext = image_ext.lstrip('.')
    if not ext:
        msg = 'Image extension is empty'
        raise ValueError(msg)
    known = _EXTENSIONS.get(ext.lower())
    if known is not None:
        return known
    return f'.{ext[0]}w{ext[-1]}'


def world_file_path(image_path: str | Path) -> Path:
    p = Path(image_path)
    return p.with_suffix(world_file_extension(p.suffix))


def write_world_file(
    image_path: str | Path,
    top_left_x: float,
    top_left_y: float,
    bottom_right_x: float,
    bottom_right_y: float,
    width_px: int,
    height_px: int,
) -> Path:
    """Write the sibling world file for image_path and return its path."""
    text = generate(
        top_left_x, top_left_y, bottom_right_x, bottom_right_y, width_px, height_px
    )
    path = world_file_path(image_path)
    path.write_text(text, encoding='ascii')
    logger.info('World file written: %s', path)
    return path
