from __future__ import annotations

import logging
import os
from pathlib import Path

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import TOMLKitError

from geosat.domain.settings import GeoSatSettings
from geosat.domain.toml_sections import flat_to_sectioned, sectioned_to_flat
from geosat.shared.constants import (
    APP_DIR_NAME,
    HOME_DIR_NAME,
    MAPBOX_TOKEN_ENV_VAR,
    SETTINGS_ENV_VAR,
    SETTINGS_FILE_NAME,
)
from geosat.shared.errors import SettingsError

logger = logging.getLogger(__name__)


def user_data_dir() -> Path:
    """
    Per-user data directory.

    %LOCALAPPDATA%/GeoSat when LOCALAPPDATA is set (Windows hosts),
    otherwise ~/.geosat.
    """
    local = os.getenv('LOCALAPPDATA')
    if local:
        return Path(local) / APP_DIR_NAME
    return Path.home() / HOME_DIR_NAME


def settings_path() -> Path:
    override = os.getenv(SETTINGS_ENV_VAR)
    if override:
        return Path(override)
    return user_data_dir() / SETTINGS_FILE_NAME


def load_settings(path: str | Path | None = None) -> GeoSatSettings:
    """
    Load GeoSatSettings from TOML.

    A missing file yields defaults. A blank Mapbox token is filled from
    the MAPBOX_ACCESS_TOKEN environment variable.
    """
    p = Path(path) if path is not None else settings_path()
    data: dict = {}
    if p.exists():
        try:
            text = p.read_text(encoding='utf-8')
            data = sectioned_to_flat(tomlkit.parse(text).unwrap())
        except (OSError, TOMLKitError) as e:
            msg = f'Cannot read settings file {p}: {e}'
            raise SettingsError(msg) from e
        logger.info('Settings loaded from %s', p)
    else:
        logger.info('Settings file %s not found, using defaults', p)

    if not data.get('mapbox_access_token'):
        env_token = os.getenv(MAPBOX_TOKEN_ENV_VAR)
        if env_token:
            data['mapbox_access_token'] = env_token

    try:
        return GeoSatSettings.model_validate(data)
    except ValidationError as e:
        msg = f'Invalid settings in {p}: {e}'
        raise SettingsError(msg) from e


def save_settings(settings: GeoSatSettings, path: str | Path | None = None) -> Path:
    """Save settings to TOML (sectioned), creating the parent directory."""
    p = Path(path) if path is not None else settings_path()
    data = flat_to_sectioned(settings.model_dump(mode='json'))
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(tomlkit.dumps(data), encoding='utf-8')
    except OSError as e:
        msg = f'Cannot write settings file {p}: {e}'
        raise SettingsError(msg) from e
    logger.info('Settings saved to %s', p)
    return p
