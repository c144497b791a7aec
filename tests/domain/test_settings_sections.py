"""Tests for the flat <-> sectioned settings mapping."""

from geosat.domain.settings import GeoSatSettings
from geosat.domain.toml_sections import SECTION_MAP, flat_to_sectioned, sectioned_to_flat


class TestFlatToSectioned:
    """Tests for flat_to_sectioned()."""

    def test_creates_expected_sections(self):
        """Should create common, sentinel_hub and mapbox sections."""
        result = flat_to_sectioned(GeoSatSettings().model_dump(mode='json'))
        assert set(result) == {'common', 'sentinel_hub', 'mapbox'}

    def test_short_names(self):
        """Should use short key names inside sections."""
        result = flat_to_sectioned(GeoSatSettings().model_dump(mode='json'))
        assert result['sentinel_hub']['layer'] == 'TRUE_COLOR'
        assert result['mapbox']['tileset_id'] == 'mapbox.satellite'
        # Flat name must NOT be in the section
        assert 'mapbox_tileset_id' not in result['mapbox']

    def test_none_dropped(self):
        """Should drop None values."""
        result = flat_to_sectioned({'cache_dir': None, 'jpeg_quality': 80})
        assert result == {'common': {'jpeg_quality': 80}}


class TestSectionedToFlat:
    """Tests for sectioned_to_flat()."""

    def test_round_trip(self):
        """Flat -> sectioned -> flat should be lossless."""
        flat = GeoSatSettings(client_secret='x').model_dump(mode='json')
        flat = {k: v for k, v in flat.items() if v is not None}
        assert sectioned_to_flat(flat_to_sectioned(flat)) == flat

    def test_accepts_flat_toml(self):
        """Should pass flat keys through."""
        assert sectioned_to_flat({'jpeg_quality': 50}) == {'jpeg_quality': 50}

    def test_unknown_short_name_kept(self):
        """Should keep unknown keys as is."""
        assert sectioned_to_flat({'mapbox': {'other': 1}}) == {'other': 1}

    def test_every_section_field_exists_on_model(self):
        """Every mapped field should exist on the model."""
        fields = set(GeoSatSettings.model_fields)
        for mapping in SECTION_MAP.values():
            assert set(mapping) <= fields
