"""Tests for the error taxonomy."""

import pytest

from geosat.shared.errors import (
    AuthError,
    CacheIOError,
    CancelledError,
    CompositeError,
    FetchError,
    GeoSatError,
    ProjectionError,
    SettingsError,
)


@pytest.mark.parametrize(
    'cls',
    [
        ProjectionError,
        AuthError,
        FetchError,
        CacheIOError,
        CompositeError,
        CancelledError,
        SettingsError,
    ],
)
def test_all_derive_from_base(cls):
    """Every domain error should derive from GeoSatError."""
    assert issubclass(cls, GeoSatError)


def test_str_without_stage():
    """Message should print as is without a stage."""
    assert str(GeoSatError('boom')) == 'boom'


def test_str_with_stage():
    """Stage should prefix the message in brackets."""
    err = FetchError('HTTP 500', status=500)
    err.stage = 'fetching_tiles'
    assert str(err) == '[fetching_tiles] HTTP 500'


def test_fetch_error_fields():
    """FetchError should keep status and tile address."""
    err = FetchError('x', status=404, zoom=3, x=1, y=2)
    assert (err.status, err.zoom, err.x, err.y) == (404, 3, 1, 2)


def test_cancelled_default_message():
    """CancelledError should have a default message."""
    assert str(CancelledError()) == 'Operation cancelled'
