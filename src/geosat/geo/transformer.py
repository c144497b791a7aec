"""Point and box transforms between a drawing CRS and WGS84 lon/lat."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from geosat.domain.models import BoundingBox
from geosat.shared.constants import MAX_MERCATOR_LAT_DEG
from geosat.shared.errors import ProjectionError

if TYPE_CHECKING:
    from geosat.geo.crs_catalog import CrsEntry

logger = logging.getLogger(__name__)

crs_wgs84 = CRS.from_epsg(4326)


def _is_mercator(crs: CRS) -> bool:
    """Normal-aspect Mercator (EPSG:3857, +proj=merc); not Transverse/Oblique."""
    if crs.is_bound and crs.source_crs is not None:
        crs = crs.source_crs
    op = crs.coordinate_operation
    if op is None:
        return False
    name = op.method_name.lower()
    return 'mercator' in name and 'transverse' not in name and 'oblique' not in name


class ProjectionTransformer:
    """Converts coordinates between one drawing CRS and WGS84 (always lon, lat order)."""

    def __init__(self, crs_entry: CrsEntry) -> None:
        self.crs_entry = crs_entry
        try:
            self.crs = CRS.from_user_input(crs_entry.projection_params)
            self.t_to_wgs = Transformer.from_crs(self.crs, crs_wgs84, always_xy=True)
            self.t_from_wgs = Transformer.from_crs(
                crs_wgs84, self.crs, always_xy=True
            )
        except (CRSError, ProjError) as e:
            msg = f'Unsupported CRS parameters for {crs_entry.code}: {e}'
            raise ProjectionError(msg) from e
        self.is_mercator = _is_mercator(self.crs)
        logger.debug('Transformer ready for %s', crs_entry.code)

    @staticmethod
    def _apply(t: Transformer, a: float, b: float) -> tuple[float, float]:
        try:
            out_a, out_b = t.transform(a, b, errcheck=True)
        except ProjError as e:
            msg = f'Transform failed at ({a}, {b}): {e}'
            raise ProjectionError(msg) from e
        if not (math.isfinite(out_a) and math.isfinite(out_b)):
            msg = f'Transform is singular at ({a}, {b})'
            raise ProjectionError(msg)
        return out_a, out_b

    def to_wgs84(self, x: float, y: float) -> tuple[float, float]:
        """Drawing (x, y) -> (lon, lat)."""
        return self._apply(self.t_to_wgs, x, y)

    def from_wgs84(self, lon: float, lat: float) -> tuple[float, float]:
        """(lon, lat) -> drawing (x, y)."""
        # PROJ не падает на полюсе Меркатора, а отдаёт конечное число
        if self.is_mercator and abs(lat) > MAX_MERCATOR_LAT_DEG:
            msg = f'Transform is singular at ({lon}, {lat})'
            raise ProjectionError(msg)
        return self._apply(self.t_from_wgs, lon, lat)

    def bbox_to_wgs84(
        self, x1: float, y1: float, x2: float, y2: float
    ) -> BoundingBox:
        """
        Transform two drawing-CRS corners and normalize into a WGS84 box.

        Projection may flip axis order or handedness, hence min/max after
        transforming rather than before.
        """
        lon1, lat1 = self.to_wgs84(x1, y1)
        lon2, lat2 = self.to_wgs84(x2, y2)
        return BoundingBox.from_corners(lon1, lat1, lon2, lat2)

    def bbox_from_wgs84(self, bbox: BoundingBox) -> tuple[float, float, float, float]:
        """WGS84 box -> (min_x, min_y, max_x, max_y) in the drawing CRS."""
        x1, y1 = self.from_wgs84(bbox.min_lon, bbox.min_lat)
        x2, y2 = self.from_wgs84(bbox.max_lon, bbox.max_lat)
        return (min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))
