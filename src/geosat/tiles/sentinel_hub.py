"""Sentinel Hub WMTS tiles with an OAuth2 client-credentials bearer token."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING
from urllib.parse import urlencode

import aiohttp

from geosat.shared.constants import (
    HTTP_OK,
    HTTP_TIMEOUT_DEFAULT,
    HTTP_UNAUTHORIZED,
    TOKEN_REFRESH_MARGIN_S,
    WMTS_FORMAT,
    WMTS_TILE_MATRIX_SET,
    WMTS_VERSION,
)
from geosat.shared.errors import AuthError, FetchError
from geosat.tiles.http_utils import release_response

if TYPE_CHECKING:
    from collections.abc import Callable

    from geosat.domain.settings import SentinelHubConfig

logger = logging.getLogger(__name__)


class TokenCache:
    """
    One bearer token with its expiry, refreshed lazily.

    A new token is requested only when none is held or the held one is
    within TOKEN_REFRESH_MARGIN_S of expiring. Concurrent callers share a
    single refresh.
    """

    def __init__(
        self,
        config: SentinelHubConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
        timeout_s: float = HTTP_TIMEOUT_DEFAULT,
    ) -> None:
        self.config = config
        self._clock = clock
        self.timeout_s = timeout_s
        self.token: str | None = None
        self.expires_at = 0.0
        self._lock = asyncio.Lock()

    def is_valid(self) -> bool:
        return (
            self.token is not None
            and self._clock() < self.expires_at - TOKEN_REFRESH_MARGIN_S
        )

    def invalidate(self) -> None:
        self.token = None
        self.expires_at = 0.0

    async def get_token(self, client: aiohttp.ClientSession) -> str:
        async with self._lock:
            if not self.is_valid():
                await self._refresh(client)
            assert self.token is not None
            return self.token

    async def _refresh(self, client: aiohttp.ClientSession) -> None:
        form = {
            'grant_type': 'client_credentials',
            'client_id': self.config.client_id,
            'client_secret': self.config.client_secret,
        }
        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout_s)
            resp = await client.post(self.config.token_url, data=form, timeout=timeout)
            try:
                if resp.status != HTTP_OK:
                    msg = f'Token request failed (HTTP {resp.status})'
                    raise AuthError(msg, status=resp.status)
                payload = await resp.json(content_type=None)
            finally:
                release_response(resp)
        except (aiohttp.ClientError, TimeoutError) as e:
            msg = f'Token request failed: {e}'
            raise AuthError(msg) from e

        try:
            token = str(payload['access_token'])
            expires_in = float(payload['expires_in'])
        except (KeyError, TypeError, ValueError) as e:
            msg = 'Token response is missing access_token or expires_in'
            raise AuthError(msg) from e
        self.token = token
        self.expires_at = self._clock() + expires_in
        logger.info('Sentinel Hub token acquired, expires in %.0f s', expires_in)


class SentinelHubTileSource:
    """Sentinel Hub WMTS GetTile provider (PopularWebMercator256 matrix set)."""

    name = 'sentinel_hub'

    def __init__(
        self,
        config: SentinelHubConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
        timeout_s: float = HTTP_TIMEOUT_DEFAULT,
    ) -> None:
        self.config = config
        self.timeout_s = timeout_s
        self.tokens = TokenCache(config, clock=clock, timeout_s=timeout_s)

    def build_tile_url(
        self, zoom: int, x: int, y: int, today: date | None = None
    ) -> str:
        day = (today or datetime.now(timezone.utc).date()).isoformat()
        params = {
            'SERVICE': 'WMTS',
            'REQUEST': 'GetTile',
            'VERSION': WMTS_VERSION,
            'LAYER': self.config.layer_name,
            'STYLE': 'default',
            'FORMAT': WMTS_FORMAT,
            'TILEMATRIXSET': WMTS_TILE_MATRIX_SET,
            'TILEMATRIX': zoom,
            'TILEROW': y,
            'TILECOL': x,
            'TIME': f'{day}/{day}',
        }
        return f'{self.config.wmts_base_url}?{urlencode(params, safe="/")}'

    async def request_tile(
        self, client: aiohttp.ClientSession, zoom: int, x: int, y: int
    ) -> bytes:
        token = await self.tokens.get_token(client)
        url = self.build_tile_url(zoom, x, y)
        headers = {'Authorization': f'Bearer {token}'}
        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout_s)
            resp = await client.get(url, headers=headers, timeout=timeout)
            try:
                if resp.status != HTTP_OK:
                    if resp.status == HTTP_UNAUTHORIZED:
                        # Следующий запрос получит новый токен
                        self.tokens.invalidate()
                    msg = f'HTTP {resp.status} for WMTS tile z/x/y={zoom}/{x}/{y}'
                    raise FetchError(msg, status=resp.status, zoom=zoom, x=x, y=y)
                return await resp.read()
            finally:
                release_response(resp)
        except (aiohttp.ClientError, TimeoutError) as e:
            msg = f'WMTS request failed for tile z/x/y={zoom}/{x}/{y}: {e}'
            raise FetchError(msg, zoom=zoom, x=x, y=y) from e
