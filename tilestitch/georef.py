from __future__ import annotations

from typing import Tuple

from common.errors import ConfigurationError
from common.geo import lat_lon_to_projected_meters, projected_meters_to_lat_lon
from common.types import BoundingBox, Georeference


def projected_bounds(bbox: BoundingBox) -> Tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y) of `bbox` in EPSG:3857 meters."""
    min_x, min_y = lat_lon_to_projected_meters(bbox.min_lat, bbox.min_lon)
    max_x, max_y = lat_lon_to_projected_meters(bbox.max_lat, bbox.max_lon)
    return min_x, min_y, max_x, max_y


def compute_georeference(bbox: BoundingBox, width: int, height: int) -> Georeference:
    """
    Pixel size and top-left tie point of a width x height raster covering `bbox`.

    The tie point is the projected (max_lat, min_lon) corner.
    """
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"Raster size {width}x{height} is empty")
    min_x, min_y, max_x, max_y = projected_bounds(bbox)
    tie_x, tie_y = lat_lon_to_projected_meters(bbox.top_left.lat, bbox.top_left.lon)
    return Georeference(
        pixel_size_x=(max_x - min_x) / width,
        pixel_size_y=abs(max_y - min_y) / height,
        top_left_x=tie_x,
        top_left_y=tie_y,
    )


def pixel_to_lat_lon(georef: Georeference, col: float, row: float) -> Tuple[float, float]:
    """(lat, lon) of raster position (col, row), pixel corners at integer positions."""
    x = georef.top_left_x + col * georef.pixel_size_x
    y = georef.top_left_y - row * georef.pixel_size_y
    return projected_meters_to_lat_lon(x, y)
