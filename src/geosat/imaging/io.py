from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from geosat.shared.constants import (
    DEFAULT_JPEG_QUALITY,
    JPEG_QUALITY_MAX,
    JPEG_QUALITY_MIN,
)

if TYPE_CHECKING:
    from PIL import Image


def build_save_kwargs(quality: int = DEFAULT_JPEG_QUALITY) -> dict[str, Any]:
    """Build PIL.Image.save kwargs for JPEG based on quality value."""
    q = max(JPEG_QUALITY_MIN, min(JPEG_QUALITY_MAX, int(quality)))
    return {
        'format': 'JPEG',
        'quality': q,
        'optimize': True,
    }


def save_jpeg(
    img: Image.Image, out_path: str | Path, quality: int = DEFAULT_JPEG_QUALITY
) -> Path:
    """
    Save an image as JPEG without ever leaving a partial file at out_path.

    Writes to a temporary sibling, fsyncs it, then renames over the target.
    """
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f'.{out_path.stem}.', suffix='.tmp', dir=out_path.parent
    )
    os.close(fd)
    # Use temporary RGB image for saving and close it afterwards
    tmp_rgb = img.convert('RGB') if img.mode != 'RGB' else img.copy()
    try:
        tmp_rgb.save(tmp_name, **build_save_kwargs(quality))
        # Ensure data is written to disk
        fd = os.open(tmp_name, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
        os.replace(tmp_name, out_path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.remove(tmp_name)
        raise
    finally:
        tmp_rgb.close()
    return out_path
