from __future__ import annotations

from typing import Tuple
import math


# Half the EPSG:3857 world width: pi * 6378137
ORIGIN_SHIFT = 20037508.342789244

# Tile-grid zoom used as a 32-bit fixed-point grid for sub-pixel alignment
PRECISION_ZOOM = 32

# log2 of the 256 px reference tile width
SUBPIXEL_BITS = 8

# Latitude at which the Web Mercator square world ends
MAX_MERCATOR_LAT = 85.0511287798066


# -------------------------
# Slippy tile grid
# -------------------------
def lat_lon_to_tile_grid(lat: float, lon: float, zoom: int) -> Tuple[float, float]:
    """
    WGS84 lat/lon (deg) to fractional slippy tile-grid coordinates at `zoom`.

    See http://wiki.openstreetmap.org/wiki/Slippy_map_tilenames
    NOTE: no clamping; tan/log diverge as |lat| approaches 90.
    """
    lat_rad = math.radians(lat)
    n = float(1 << zoom)
    x = n * ((lon + 180.0) / 360.0)
    y = n * (1.0 - (math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi)) / 2.0
    return x, y


def lat_lon_to_tile(lat: float, lon: float, zoom: int) -> Tuple[int, int]:
    """
    Integer tile-grid index at `zoom` (fraction truncated).

    At PRECISION_ZOOM the result is a fixed-point position: shifting it right by
    (PRECISION_ZOOM - z) gives the tile index at zoom z, and by
    (PRECISION_ZOOM - z - SUBPIXEL_BITS) the 256 px pixel index.
    """
    x, y = lat_lon_to_tile_grid(lat, lon, zoom)
    return int(x), int(y)


def tile_grid_to_lat_lon(x: float, y: float, zoom: int) -> Tuple[float, float]:
    """Inverse of lat_lon_to_tile_grid(): grid (x, y) at `zoom` to (lat, lon) degrees."""
    n = float(1 << zoom)
    lon = 360.0 * x / n - 180.0
    lat_rad = math.atan(math.sinh(math.pi * (1.0 - 2.0 * y / n)))
    return math.degrees(lat_rad), lon


# -------------------------
# Spherical Mercator (EPSG:3857)
# -------------------------
def lat_lon_to_projected_meters(lat: float, lon: float) -> Tuple[float, float]:
    """WGS84 lat/lon (deg) to Pseudo-Mercator x/y meters."""
    x = lon * ORIGIN_SHIFT / 180.0
    y = math.log(math.tan((90.0 + lat) * math.pi / 360.0)) / (math.pi / 180.0)
    y = y * ORIGIN_SHIFT / 180.0
    return x, y


def projected_meters_to_lat_lon(x: float, y: float) -> Tuple[float, float]:
    """Pseudo-Mercator x/y meters back to WGS84 (lat, lon) degrees."""
    lon = x / ORIGIN_SHIFT * 180.0
    lat = y / ORIGIN_SHIFT * 180.0
    lat = 180.0 / math.pi * (2.0 * math.atan(math.exp(lat * math.pi / 180.0)) - math.pi / 2.0)
    return lat, lon
