"""Tests for GeoSatSettings and its TOML persistence."""

from pathlib import Path

import pytest
import tomlkit
from pydantic import ValidationError

from geosat.domain.settings import GeoSatSettings, mask_secret
from geosat.domain.settings_store import load_settings, save_settings, settings_path
from geosat.shared.constants import ImageryProvider
from geosat.shared.errors import SettingsError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv('MAPBOX_ACCESS_TOKEN', raising=False)
    monkeypatch.delenv('GEOSAT_SETTINGS', raising=False)


class TestGeoSatSettings:
    """Tests for GeoSatSettings model."""

    def test_defaults(self):
        """Defaults should match a fresh install."""
        s = GeoSatSettings()
        assert s.provider is ImageryProvider.MAPBOX
        assert s.layer_name == 'TRUE_COLOR'
        assert s.mapbox_tileset_id == 'mapbox.satellite'
        assert s.target_meters_per_pixel == 10.0
        assert s.jpeg_quality == 90
        assert s.concurrency == 4
        assert Path(s.output_directory).parts[-2:] == ('Documents', 'GeoSat')

    @pytest.mark.parametrize(
        'kwargs',
        [
            {'target_meters_per_pixel': 0},
            {'jpeg_quality': 0},
            {'jpeg_quality': 101},
            {'concurrency': 0},
        ],
    )
    def test_validation(self, kwargs):
        """Out-of-range values should fail validation."""
        with pytest.raises(ValidationError):
            GeoSatSettings(**kwargs)

    def test_blank_optional_fields_become_none(self):
        """Blank optional strings should become None."""
        s = GeoSatSettings(cache_dir='  ', crs_code='')
        assert s.cache_dir is None
        assert s.crs_code is None

    def test_extra_keys_ignored(self):
        """Unknown keys should be ignored."""
        assert GeoSatSettings.model_validate({'unknown': 1}).concurrency == 4

    def test_sentinel_config(self):
        """Should build SentinelHubConfig when all credentials are set."""
        s = GeoSatSettings(client_id='a', client_secret='b', instance_id='c')
        cfg = s.to_sentinel_config()
        assert cfg is not None
        assert cfg.wmts_base_url.endswith('/ogc/wmts/c')

    def test_sentinel_config_incomplete(self):
        """Should return None without instance id."""
        assert GeoSatSettings(client_id='a', client_secret='b').to_sentinel_config() is None

    def test_mapbox_config(self):
        """Should build MapboxConfig only with a token."""
        assert GeoSatSettings().to_mapbox_config() is None
        cfg = GeoSatSettings(mapbox_access_token='pk.x').to_mapbox_config()
        assert cfg.access_token == 'pk.x'


class TestMaskSecret:
    """Tests for mask_secret()."""

    def test_masks(self):
        """Should keep four characters and mask the rest."""
        assert mask_secret('pk.eyJ1Ijoi') == 'pk.e****'

    def test_not_set(self):
        """Should show 'not set' for empty values."""
        assert mask_secret('') == 'not set'
        assert mask_secret(None) == 'not set'


class TestSettingsStore:
    """Tests for load_settings() / save_settings()."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Missing file should give default settings."""
        s = load_settings(tmp_path / 'nope.toml')
        assert s == GeoSatSettings()

    def test_round_trip(self, tmp_path):
        """Saved settings should load back equal."""
        path = tmp_path / 'cfg' / 'settings.toml'
        original = GeoSatSettings(
            provider=ImageryProvider.SENTINEL_HUB,
            client_id='cid',
            client_secret='csecret',
            instance_id='inst',
            crs_code='EPSG:32633',
            jpeg_quality=75,
        )
        assert save_settings(original, path) == path
        assert load_settings(path) == original

    def test_file_is_sectioned(self, tmp_path):
        """Should write sectioned TOML without None values."""
        path = tmp_path / 'settings.toml'
        save_settings(GeoSatSettings(mapbox_access_token='pk.1', client_id='c'), path)
        doc = tomlkit.parse(path.read_text(encoding='utf-8'))
        assert doc['mapbox']['access_token'] == 'pk.1'
        assert doc['sentinel_hub']['client_id'] == 'c'
        assert doc['common']['provider'] == 'MAPBOX'
        assert 'cache_dir' not in doc['common']

    def test_env_token_fills_blank(self, tmp_path, monkeypatch):
        """Env token should fill a blank Mapbox token."""
        monkeypatch.setenv('MAPBOX_ACCESS_TOKEN', 'pk.env')
        assert load_settings(tmp_path / 'none.toml').mapbox_access_token == 'pk.env'

    def test_file_token_wins_over_env(self, tmp_path, monkeypatch):
        """Token from file should win over env."""
        path = tmp_path / 'settings.toml'
        save_settings(GeoSatSettings(mapbox_access_token='pk.file'), path)
        monkeypatch.setenv('MAPBOX_ACCESS_TOKEN', 'pk.env')
        assert load_settings(path).mapbox_access_token == 'pk.file'

    def test_invalid_toml(self, tmp_path):
        """Broken TOML should raise SettingsError."""
        path = tmp_path / 'settings.toml'
        path.write_text('[common\nprovider = ', encoding='utf-8')
        with pytest.raises(SettingsError):
            load_settings(path)

    def test_invalid_value(self, tmp_path):
        """Invalid value should raise SettingsError naming the field."""
        path = tmp_path / 'settings.toml'
        path.write_text('[common]\njpeg_quality = 500\n', encoding='utf-8')
        with pytest.raises(SettingsError, match='jpeg_quality'):
            load_settings(path)

    def test_settings_path_env_override(self, tmp_path, monkeypatch):
        """GEOSAT_SETTINGS should override the path."""
        monkeypatch.setenv('GEOSAT_SETTINGS', str(tmp_path / 'x.toml'))
        assert settings_path() == tmp_path / 'x.toml'

    def test_settings_path_localappdata(self, tmp_path, monkeypatch):
        """Should default under LOCALAPPDATA/GeoSat."""
        monkeypatch.setenv('LOCALAPPDATA', str(tmp_path))
        assert settings_path() == tmp_path / 'GeoSat' / 'settings.toml'
