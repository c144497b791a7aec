"""Tests for the synchronous imagery job entry point."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from geosat.domain.models import PlacementResult
from geosat.domain.settings import GeoSatSettings
from geosat.geo.crs_catalog import utm_zone
from geosat.services.imagery_job import run_imagery_job
from geosat.shared.errors import SettingsError
from geosat.tiles.cache import DiskTileCache


@pytest.fixture
def placement(tmp_path):
    """Placement returned by the patched pipeline."""
    return PlacementResult(
        image_path=str(tmp_path / 'a.jpg'),
        world_file_path=str(tmp_path / 'a.jgw'),
        insertion_x=0.0,
        insertion_y=10.0,
        width_drawing_units=10.0,
        height_drawing_units=10.0,
        width_px=256,
        height_px=256,
        tile_count=1,
        zoom_level=14,
    )


class TestRunImageryJob:
    """Tests for run_imagery_job()."""

    def test_missing_credentials(self, tmp_path):
        """Should fail before any network work without credentials."""
        settings = GeoSatSettings(output_directory=str(tmp_path))
        with pytest.raises(SettingsError):
            run_imagery_job(
                settings,
                utm_zone(33),
                (0.0, 0.0, 1.0, 1.0),
                cache=DiskTileCache(tmp_path / 'cache'),
            )

    def test_runs_pipeline_with_settings(self, tmp_path, placement):
        """Should wire settings into the fetcher and pipeline."""
        settings = GeoSatSettings(
            mapbox_access_token='pk.test',
            output_directory=str(tmp_path / 'default-out'),
            target_meters_per_pixel=2.5,
            jpeg_quality=70,
            concurrency=2,
        )
        pipeline = MagicMock()
        pipeline.run = AsyncMock(return_value=placement)
        with patch(
            'geosat.services.imagery_job.ImageryPipeline', return_value=pipeline
        ) as pipeline_cls:
            result = run_imagery_job(
                settings,
                utm_zone(33),
                (1.0, 2.0, 3.0, 4.0),
                output_dir=tmp_path / 'out',
                cache=DiskTileCache(tmp_path / 'cache'),
            )

        assert result is placement
        crs_arg, fetcher_arg = pipeline_cls.call_args.args
        assert crs_arg.code == 'EPSG:32633'
        assert fetcher_arg.concurrency == 2
        assert fetcher_arg.source.name == 'mapbox'
        assert pipeline_cls.call_args.kwargs == {
            'target_meters_per_pixel': 2.5,
            'jpeg_quality': 70,
        }
        args = pipeline.run.call_args.args
        assert args[:4] == (1.0, 2.0, 3.0, 4.0)
        assert args[4] == tmp_path / 'out'

    def test_defaults_to_settings_output_dir(self, tmp_path, placement):
        """Should fall back to the configured output directory."""
        settings = GeoSatSettings(
            mapbox_access_token='pk.test', output_directory=str(tmp_path / 'maps')
        )
        pipeline = MagicMock()
        pipeline.run = AsyncMock(return_value=placement)
        with patch(
            'geosat.services.imagery_job.ImageryPipeline', return_value=pipeline
        ):
            run_imagery_job(
                settings,
                utm_zone(33),
                (1.0, 2.0, 3.0, 4.0),
                cache=DiskTileCache(tmp_path / 'cache'),
            )
        assert pipeline.run.call_args.args[4] == tmp_path / 'maps'
