"""Tests for MapboxTileSource."""

from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from geosat.domain.settings import MapboxConfig
from geosat.shared.errors import FetchError
from geosat.tiles.mapbox import MapboxTileSource


@pytest.fixture
def source():
    return MapboxTileSource(MapboxConfig(access_token='pk.secret-token'))


def _session(status=200, body=b'jpeg'):
    mock_response = MagicMock()
    mock_response.status = status
    mock_response.read = AsyncMock(return_value=body)
    mock_session = MagicMock()
    mock_session.get = AsyncMock(return_value=mock_response)
    return mock_session, mock_response


class TestMapboxTileSource:
    """Tests for MapboxTileSource."""

    def test_build_tile_url(self, source):
        """Should put the access token only in the query string."""
        assert source.build_tile_url(12, 2200, 1300) == (
            'https://api.mapbox.com/v4/mapbox.satellite/12/2200/1300.jpg90'
            '?access_token=pk.secret-token'
        )

    def test_custom_tileset(self):
        """Should use the configured tileset id in the path."""
        src = MapboxTileSource(
            MapboxConfig(access_token='t', tileset_id='user.custom')
        )
        assert src.tile_path(1, 0, 1).startswith(
            'https://api.mapbox.com/v4/user.custom/1/0/1'
        )

    @pytest.mark.asyncio
    async def test_request_ok(self, source):
        """Should return the body and release the response."""
        session, response = _session(body=b'tile')
        data = await source.request_tile(session, 3, 4, 5)
        assert data == b'tile'
        url = session.get.call_args.args[0]
        assert url == source.build_tile_url(3, 4, 5)
        response.release.assert_called_once()

    @pytest.mark.asyncio
    async def test_non_success_status(self, source):
        """Should raise FetchError with tile address and no token."""
        session, response = _session(status=404)
        with pytest.raises(FetchError) as exc_info:
            await source.request_tile(session, 3, 4, 5)
        err = exc_info.value
        assert err.status == 404
        assert (err.zoom, err.x, err.y) == (3, 4, 5)
        assert 'pk.secret-token' not in str(err)
        response.read.assert_not_called()

    @pytest.mark.asyncio
    async def test_unauthorized(self, source):
        """Should report 401 as a tile fetch failure."""
        session, _ = _session(status=401)
        with pytest.raises(FetchError) as exc_info:
            await source.request_tile(session, 0, 0, 0)
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_connection_error(self, source):
        """Should wrap aiohttp errors into FetchError."""
        session = MagicMock()
        session.get = AsyncMock(side_effect=aiohttp.ClientConnectionError('reset'))
        with pytest.raises(FetchError) as exc_info:
            await source.request_tile(session, 1, 1, 1)
        assert exc_info.value.status is None
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientError)

    @pytest.mark.asyncio
    async def test_timeout(self, source):
        """Should wrap a request timeout into FetchError."""
        session = MagicMock()
        session.get = AsyncMock(side_effect=TimeoutError())
        with pytest.raises(FetchError):
            await source.request_tile(session, 1, 1, 1)
