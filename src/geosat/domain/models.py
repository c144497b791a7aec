"""Value types that flow through the imagery pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from geosat.shared.constants import MAX_ZOOM, MIN_ZOOM

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned WGS84 box in degrees.

    Callers normalize on construction (min/max of the two corners), so
    min_lon <= max_lon and min_lat <= max_lat always hold.
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self) -> None:
        if self.min_lon > self.max_lon or self.min_lat > self.max_lat:
            msg = (
                f'Invalid bounding box: lon [{self.min_lon}, {self.max_lon}], '
                f'lat [{self.min_lat}, {self.max_lat}]'
            )
            raise ValueError(msg)

    @classmethod
    def from_corners(
        cls, lon1: float, lat1: float, lon2: float, lat2: float
    ) -> BoundingBox:
        return cls(
            min(lon1, lon2),
            min(lat1, lat2),
            max(lon1, lon2),
            max(lat1, lat2),
        )

    @property
    def width(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def height(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def center_lon(self) -> float:
        return (self.min_lon + self.max_lon) / 2.0

    @property
    def center_lat(self) -> float:
        return (self.min_lat + self.max_lat) / 2.0

    @property
    def center(self) -> tuple[float, float]:
        """(lon, lat) of the box center."""
        return (self.center_lon, self.center_lat)


@dataclass(frozen=True)
class TileRange:
    """A rectangular block of slippy-map tiles at one zoom level (inclusive bounds)."""

    min_tile_x: int
    min_tile_y: int
    max_tile_x: int
    max_tile_y: int
    zoom: int

    def __post_init__(self) -> None:
        if not (MIN_ZOOM <= self.zoom <= MAX_ZOOM):
            msg = f'Zoom {self.zoom} outside [{MIN_ZOOM}, {MAX_ZOOM}]'
            raise ValueError(msg)
        if self.min_tile_x > self.max_tile_x or self.min_tile_y > self.max_tile_y:
            msg = (
                f'Invalid tile range x=[{self.min_tile_x}, {self.max_tile_x}] '
                f'y=[{self.min_tile_y}, {self.max_tile_y}]'
            )
            raise ValueError(msg)
        n = 1 << self.zoom
        if self.min_tile_x < 0 or self.min_tile_y < 0 or max(
            self.max_tile_x, self.max_tile_y
        ) >= n:
            msg = f'Tile indices outside [0, {n}) at zoom {self.zoom}'
            raise ValueError(msg)

    @property
    def count_x(self) -> int:
        return self.max_tile_x - self.min_tile_x + 1

    @property
    def count_y(self) -> int:
        return self.max_tile_y - self.min_tile_y + 1

    @property
    def total_tiles(self) -> int:
        return self.count_x * self.count_y

    def enumerate_tiles(self) -> Iterator[tuple[int, int]]:
        """Yield (x, y) in row-major order: y outer, x inner."""
        for y in range(self.min_tile_y, self.max_tile_y + 1):
            for x in range(self.min_tile_x, self.max_tile_x + 1):
                yield (x, y)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return self.enumerate_tiles()

    def __len__(self) -> int:
        return self.total_tiles


@dataclass(frozen=True)
class PlacementResult:
    """Everything a host needs to insert the georeferenced mosaic."""

    image_path: str
    world_file_path: str

    # Top-left corner of the mosaic in drawing CRS
    insertion_x: float
    insertion_y: float

    # Mosaic extent in drawing units
    width_drawing_units: float
    height_drawing_units: float

    width_px: int
    height_px: int
    tile_count: int
    zoom_level: int

    @property
    def lower_left(self) -> tuple[float, float]:
        """Image origin for hosts that place rasters by origin + U/V vectors."""
        return (self.insertion_x, self.insertion_y - self.height_drawing_units)

    @property
    def drawing_units_per_pixel(self) -> tuple[float, float]:
        return (
            self.width_drawing_units / self.width_px,
            self.height_drawing_units / self.height_px,
        )
