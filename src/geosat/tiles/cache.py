"""File-system tile cache.

Tiles are stored as ``{cache_dir}/{zoom}/{x}/{y}.jpg``. Imagery tiles are
treated as immutable, so there is no expiry and no size bound: a hit
always wins over the network.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from geosat.infrastructure.http.client import resolve_cache_dir
from geosat.shared.errors import CacheIOError

logger = logging.getLogger(__name__)

TILE_FILE_EXT = '.jpg'


@dataclass
class CacheStats:
    """Statistics about the tile cache."""

    total_tiles: int = 0
    total_size_bytes: int = 0
    tiles_by_zoom: dict[int, int] = field(default_factory=dict)


class DiskTileCache:
    """Tile cache keyed hierarchically by zoom, column and row.

    Usage:
        cache = DiskTileCache()
        cache.put(15, 100, 200, tile_bytes)
        data = cache.try_get(15, 100, 200)
    """

    def __init__(self, cache_dir: str | Path | None = None) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir else resolve_cache_dir()
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f'Cannot create tile cache directory: {e}'
            raise CacheIOError(msg, path=str(self.cache_dir)) from e
        logger.info('Tile cache at %s', self.cache_dir)

    def tile_path(self, zoom: int, x: int, y: int) -> Path:
        return self.cache_dir / str(zoom) / str(x) / f'{y}{TILE_FILE_EXT}'

    def exists(self, zoom: int, x: int, y: int) -> bool:
        return self.tile_path(zoom, x, y).is_file()

    def try_get(self, zoom: int, x: int, y: int) -> bytes | None:
        """Return cached tile bytes, or None on a miss."""
        path = self.tile_path(zoom, x, y)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            msg = f'Cannot read cached tile {zoom}/{x}/{y}: {e}'
            raise CacheIOError(msg, path=str(path)) from e

    def put(self, zoom: int, x: int, y: int, data: bytes) -> None:
        """Store tile bytes; the file appears atomically (temp file + rename)."""
        path = self.tile_path(zoom, x, y)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f'.{y}.', suffix='.tmp', dir=path.parent
            )
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            msg = f'Cannot write cached tile {zoom}/{x}/{y}: {e}'
            raise CacheIOError(msg, path=str(path)) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.remove(tmp_name)

    def clear(self) -> None:
        """Remove every cached tile and recreate the empty root."""
        try:
            if self.cache_dir.exists():
                shutil.rmtree(self.cache_dir)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f'Cannot clear tile cache: {e}'
            raise CacheIOError(msg, path=str(self.cache_dir)) from e
        logger.info('Tile cache cleared: %s', self.cache_dir)

    def get_stats(self) -> CacheStats:
        stats = CacheStats()
        if not self.cache_dir.exists():
            return stats
        for zoom_dir in self.cache_dir.iterdir():
            if not zoom_dir.is_dir() or not zoom_dir.name.isdigit():
                continue
            zoom = int(zoom_dir.name)
            for tile in zoom_dir.glob(f'*/*{TILE_FILE_EXT}'):
                stats.total_tiles += 1
                stats.total_size_bytes += tile.stat().st_size
                stats.tiles_by_zoom[zoom] = stats.tiles_by_zoom.get(zoom, 0) + 1
        return stats
