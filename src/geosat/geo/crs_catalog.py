"""Catalog of coordinate reference systems a drawing can be set to."""

from __future__ import annotations

import re
from dataclasses import dataclass

from geosat.shared.errors import ProjectionError

UTM_ZONE_MIN = 1
UTM_ZONE_MAX = 60

_UTM_CODE_RE = re.compile(r'^EPSG:(32[67])(\d{2})$', re.IGNORECASE)


@dataclass(frozen=True)
class CrsEntry:
    """A CRS identifier with its display name and PROJ definition."""

    code: str
    display_name: str
    projection_params: str

    def __str__(self) -> str:
        return f'{self.code} — {self.display_name}'


WGS84 = CrsEntry(
    code='EPSG:4326',
    display_name='WGS 84',
    projection_params='+proj=longlat +datum=WGS84 +no_defs +type=crs',
)

WEB_MERCATOR = CrsEntry(
    code='EPSG:3857',
    display_name='WGS 84 / Pseudo-Mercator',
    projection_params=(
        '+proj=merc +a=6378137 +b=6378137 +lat_ts=0 +lon_0=0 +x_0=0 +y_0=0 '
        '+k=1 +units=m +nadgrids=@null +wktext +no_defs +type=crs'
    ),
)


def utm_zone(zone: int, *, north: bool = True) -> CrsEntry:
    """Build the WGS 84 / UTM entry for a zone (EPSG:326zz north, 327zz south)."""
    if not (UTM_ZONE_MIN <= zone <= UTM_ZONE_MAX):
        msg = f'UTM zone {zone} outside [{UTM_ZONE_MIN}, {UTM_ZONE_MAX}]'
        raise ProjectionError(msg)
    hemisphere = 'N' if north else 'S'
    south = '' if north else ' +south'
    return CrsEntry(
        code=f'EPSG:{326 if north else 327}{zone:02d}',
        display_name=f'WGS 84 / UTM zone {zone}{hemisphere}',
        projection_params=(
            f'+proj=utm +zone={zone}{south} +datum=WGS84 +units=m +no_defs +type=crs'
        ),
    )


CATALOG: tuple[CrsEntry, ...] = (
    WGS84,
    WEB_MERCATOR,
    *(utm_zone(z) for z in range(32, 36)),
)

_BY_CODE = {entry.code: entry for entry in CATALOG}


def find_crs(code: str) -> CrsEntry | None:
    """Return the entry for a code, synthesizing UTM zones on demand."""
    key = code.strip().upper()
    entry = _BY_CODE.get(key)
    if entry is not None:
        return entry
    m = _UTM_CODE_RE.match(key)
    if m is None:
        return None
    zone = int(m.group(2))
    if not (UTM_ZONE_MIN <= zone <= UTM_ZONE_MAX):
        return None
    return utm_zone(zone, north=m.group(1) == '326')


def get_crs(code: str) -> CrsEntry:
    entry = find_crs(code)
    if entry is None:
        msg = f'Unsupported CRS: {code}'
        raise ProjectionError(msg)
    return entry
