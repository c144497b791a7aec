from __future__ import annotations

import os
import ssl
from pathlib import Path

import aiohttp
import certifi

from geosat.shared.constants import (
    APP_DIR_NAME,
    HOME_DIR_NAME,
    HTTP_TIMEOUT_DEFAULT,
    TILE_CACHE_DIR_NAME,
)


def resolve_cache_dir() -> Path:
    local = os.getenv('LOCALAPPDATA')
    if local:
        return (Path(local) / APP_DIR_NAME / TILE_CACHE_DIR_NAME).resolve()
    # Fallback: user's home directory
    return (Path.home() / HOME_DIR_NAME / TILE_CACHE_DIR_NAME).resolve()


def make_http_session(
    timeout_s: float = HTTP_TIMEOUT_DEFAULT,
) -> aiohttp.ClientSession:
    # Создать SSL-контекст с сертификатами из certifi
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)
    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout_s),
    )
