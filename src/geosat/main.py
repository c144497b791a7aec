"""Command-line entry point for GeoSat."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from geosat import __version__
from geosat.domain.settings import GeoSatSettings, mask_secret
from geosat.domain.settings_store import load_settings, save_settings, user_data_dir
from geosat.geo.crs_catalog import CATALOG, get_crs
from geosat.shared.constants import LOG_FILE_NAME, ImageryProvider
from geosat.shared.diagnostics import log_memory_usage, log_thread_status
from geosat.shared.errors import CancelledError, GeoSatError, SettingsError
from geosat.shared.progress import ConsoleProgress
from geosat.services.imagery_job import run_imagery_job
from geosat.tiles.cache import DiskTileCache

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130

# Поля configure -> поле GeoSatSettings
_CONFIGURE_FIELDS = {
    'provider': 'provider',
    'client_id': 'client_id',
    'client_secret': 'client_secret',
    'instance_id': 'instance_id',
    'layer': 'layer_name',
    'mapbox_token': 'mapbox_access_token',
    'tileset': 'mapbox_tileset_id',
    'output_dir': 'output_directory',
    'cache_dir': 'cache_dir',
    'crs': 'crs_code',
    'resolution': 'target_meters_per_pixel',
    'quality': 'jpeg_quality',
    'concurrency': 'concurrency',
}


def setup_logging(*, verbose: bool = False) -> Path:
    """Configure logging to stdout and to a file in the user data dir.

    Returns:
        Path of the log file.
    """
    log_dir = user_data_dir() / 'log'
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(str(log_file), encoding='utf-8'),
        ],
    )
    return log_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='geosat',
        description='GeoSat - georeferenced satellite imagery for a drawing rectangle',
    )
    parser.add_argument('--version', action='version', version=__version__)
    parser.add_argument('--settings', help='Path to settings.toml')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest='command', required=True)

    fetch = sub.add_parser('fetch', help='Download imagery for a rectangle')
    for name in ('x1', 'y1', 'x2', 'y2'):
        fetch.add_argument(name, type=float, help=f'Corner coordinate {name}')
    fetch.add_argument('--crs', help='Drawing CRS code, e.g. EPSG:32633')
    fetch.add_argument('--output-dir', help='Where to write the image')
    fetch.add_argument(
        '--provider',
        choices=[p.value for p in ImageryProvider],
        help='Imagery provider (overrides settings)',
    )

    sub.add_parser('crs', help='List supported coordinate systems')

    configure = sub.add_parser('configure', help='Update the settings file')
    configure.add_argument('--provider', choices=[p.value for p in ImageryProvider])
    configure.add_argument('--client-id')
    configure.add_argument('--client-secret')
    configure.add_argument('--instance-id')
    configure.add_argument('--layer')
    configure.add_argument('--mapbox-token')
    configure.add_argument('--tileset')
    configure.add_argument('--output-dir')
    configure.add_argument('--cache-dir')
    configure.add_argument('--crs')
    configure.add_argument('--resolution', type=float, help='Target meters per pixel')
    configure.add_argument('--quality', type=int, help='JPEG quality 1-100')
    configure.add_argument('--concurrency', type=int)

    cache = sub.add_parser('cache', help='Inspect or clear the tile cache')
    cache.add_argument('action', choices=['info', 'clear'])
    return parser


def format_settings(settings: GeoSatSettings) -> str:
    lines = [
        f'Provider:        {settings.provider.value}',
        f'Client ID:       {settings.client_id or "not set"}',
        f'Client secret:   {mask_secret(settings.client_secret)}',
        f'Instance ID:     {settings.instance_id or "not set"}',
        f'Layer:           {settings.layer_name}',
        f'Mapbox token:    {mask_secret(settings.mapbox_access_token)}',
        f'Mapbox tileset:  {settings.mapbox_tileset_id}',
        f'Output dir:      {settings.output_directory}',
        f'Cache dir:       {settings.cache_dir or "default"}',
        f'Drawing CRS:     {settings.crs_code or "not set"}',
        f'Resolution:      {settings.target_meters_per_pixel} m/px',
        f'JPEG quality:    {settings.jpeg_quality}',
        f'Concurrency:     {settings.concurrency}',
    ]
    return '\n'.join(lines)


def cmd_fetch(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings)
    if args.provider:
        settings = settings.model_copy(
            update={'provider': ImageryProvider(args.provider)}
        )
    crs_code = args.crs or settings.crs_code
    if not crs_code:
        msg = 'Drawing CRS is not set; pass --crs or run "geosat configure --crs"'
        raise SettingsError(msg)
    crs = get_crs(crs_code)

    progress = ConsoleProgress(label='Tiles')
    log_thread_status('before fetch')
    try:
        result = run_imagery_job(
            settings,
            crs,
            (args.x1, args.y1, args.x2, args.y2),
            output_dir=args.output_dir,
            on_progress=progress,
        )
    finally:
        progress.close()
    log_memory_usage('after fetch')

    print(f'Image:        {result.image_path}')
    print(f'World file:   {result.world_file_path}')
    print(f'Insertion:    {result.insertion_x:.4f}, {result.insertion_y:.4f}')
    print(
        f'Size:         {result.width_drawing_units:.4f} x '
        f'{result.height_drawing_units:.4f} ({result.width_px}x{result.height_px} px)'
    )
    px_w, px_h = result.drawing_units_per_pixel
    print(f'Pixel size:   {px_w:.4f} x {px_h:.4f}')
    print(f'Zoom / tiles: {result.zoom_level} / {result.tile_count}')
    return EXIT_OK


def cmd_crs(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings)
    current = (settings.crs_code or '').upper()
    for entry in CATALOG:
        marker = '*' if entry.code == current else ' '
        print(f'{marker} {entry}')
    return EXIT_OK


def cmd_configure(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings)
    updates = {
        field: getattr(args, opt)
        for opt, field in _CONFIGURE_FIELDS.items()
        if getattr(args, opt) is not None
    }
    if updates.get('crs_code'):
        updates['crs_code'] = get_crs(updates['crs_code']).code
    if updates:
        try:
            settings = GeoSatSettings.model_validate(
                {**settings.model_dump(), **updates}
            )
        except ValidationError as e:
            msg = f'Invalid settings: {e}'
            raise SettingsError(msg) from e
        path = save_settings(settings, args.settings)
        print(f'Saved {path}')
    print(format_settings(settings))
    return EXIT_OK


def cmd_cache(args: argparse.Namespace) -> int:
    settings = load_settings(args.settings)
    cache = DiskTileCache(settings.cache_dir)
    if args.action == 'clear':
        cache.clear()
        print(f'Cleared {cache.cache_dir}')
        return EXIT_OK
    stats = cache.get_stats()
    print(f'Cache dir:  {cache.cache_dir}')
    print(f'Tiles:      {stats.total_tiles}')
    print(f'Size:       {stats.total_size_bytes / 1024 / 1024:.2f} MB')
    for zoom in sorted(stats.tiles_by_zoom):
        print(f'  z{zoom}: {stats.tiles_by_zoom[zoom]}')
    return EXIT_OK


_COMMANDS = {
    'fetch': cmd_fetch,
    'crs': cmd_crs,
    'configure': cmd_configure,
    'cache': cmd_cache,
}


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose)
    logger.info('GeoSat %s: %s', __version__, args.command)
    try:
        return _COMMANDS[args.command](args)
    except (CancelledError, KeyboardInterrupt):
        logger.warning('Cancelled by user')
        return EXIT_CANCELLED
    except GeoSatError as e:
        logger.error('%s', e)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
