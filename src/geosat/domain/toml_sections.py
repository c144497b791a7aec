"""Mapping layer between flat GeoSatSettings fields and sectioned TOML format.

GeoSatSettings remains a flat Pydantic model. This module provides two functions:
- flat_to_sectioned(): flat dict → sectioned dict (for TOML save)
- sectioned_to_flat(): sectioned dict → flat dict (for TOML load)
"""

from __future__ import annotations

# {section_name: {flat_field_name: short_name_in_toml}}
SECTION_MAP: dict[str, dict[str, str]] = {
    'sentinel_hub': {
        'client_id': 'client_id',
        'client_secret': 'client_secret',
        'instance_id': 'instance_id',
        'layer_name': 'layer',
        'token_url': 'token_url',
    },
    'mapbox': {
        'mapbox_access_token': 'access_token',
        'mapbox_tileset_id': 'tileset_id',
    },
}

# Reverse index: flat_field → (section, short_name)
_FLAT_TO_SECTION: dict[str, tuple[str, str]] = {}
for _section, _fields in SECTION_MAP.items():
    for _flat, _short in _fields.items():
        _FLAT_TO_SECTION[_flat] = (_section, _short)

# Reverse index: (section, short_name) → flat_field
_SECTION_TO_FLAT: dict[str, dict[str, str]] = {}
for _section, _fields in SECTION_MAP.items():
    _SECTION_TO_FLAT[_section] = {v: k for k, v in _fields.items()}


def flat_to_sectioned(flat: dict) -> dict:
    """Convert flat GeoSatSettings dict to sectioned dict for TOML output.

    TOML has no null, so None values are dropped.
    """
    result: dict = {'common': {}}
    for key, value in flat.items():
        if value is None:
            continue
        if key in _FLAT_TO_SECTION:
            section, short_name = _FLAT_TO_SECTION[key]
            result.setdefault(section, {})[short_name] = value
        else:
            result['common'][key] = value
    return result


def sectioned_to_flat(data: dict) -> dict:
    """Convert sectioned TOML dict to flat dict for GeoSatSettings validation."""
    flat: dict = {}
    for key, value in data.items():
        if isinstance(value, dict) and key in _SECTION_TO_FLAT:
            mapping = _SECTION_TO_FLAT[key]
            for short_name, field_value in value.items():
                flat[mapping.get(short_name, short_name)] = field_value
        elif isinstance(value, dict):
            # common и неизвестные секции: ключи как есть
            flat.update(value)
        else:
            # Top-level key (flat TOML)
            flat[key] = value
    return flat
