from __future__ import annotations

from typing import Tuple

from common.errors import ConfigurationError
from common.geo import (
    MAX_MERCATOR_LAT,
    PRECISION_ZOOM,
    SUBPIXEL_BITS,
    lat_lon_to_tile,
    tile_grid_to_lat_lon,
)
from common.types import BoundingBox, RasterLayout, TileRange


# Pixel index at zoom z is the precision grid shifted by (32 - (z + 8)),
# so zooms above 24 would need a negative shift.
MAX_ZOOM = PRECISION_ZOOM - SUBPIXEL_BITS

# width * height guard for the in-memory RGBA canvas
MAX_PIXELS = 10000 * 10000


def _check_zoom(zoom: int) -> None:
    if zoom < 0:
        raise ConfigurationError(f"Zoom {zoom} less than 0")
    if zoom > MAX_ZOOM:
        raise ConfigurationError(f"Zoom {zoom} greater than {MAX_ZOOM}")


def _check_latitude(lat: float) -> None:
    if abs(lat) > MAX_MERCATOR_LAT:
        raise ConfigurationError(
            f"Latitude {lat} outside the Web Mercator range (+/-{MAX_MERCATOR_LAT:.6f})"
        )


def _pixel_shift(zoom: int) -> int:
    return PRECISION_ZOOM - (zoom + SUBPIXEL_BITS)


def resolve_corners(lat1: float, lon1: float, lat2: float, lon2: float) -> BoundingBox:
    """Corner mode: two (lat, lon) corners in any order."""
    bbox = BoundingBox.from_corners(lat1, lon1, lat2, lon2)
    _check_latitude(bbox.min_lat)
    _check_latitude(bbox.max_lat)
    return bbox


def resolve_centered(lat: float, lon: float, width_px: int, height_px: int, zoom: int) -> BoundingBox:
    """
    Centered mode: a box of width_px x height_px (256 px tiles) at `zoom` around (lat, lon).

    The center is located on the 32-bit precision grid, expanded by half the
    requested size in grid units and both corners converted back to lat/lon.
    """
    if width_px <= 0 or height_px <= 0:
        raise ConfigurationError(f"Width/height less than 1: {width_px} {height_px}")
    _check_zoom(zoom)
    _check_latitude(lat)

    cx, cy = lat_lon_to_tile(lat, lon, PRECISION_ZOOM)
    shift = _pixel_shift(zoom)
    half_w = (int(width_px) << shift) // 2
    half_h = (int(height_px) << shift) // 2

    max_lat, min_lon = tile_grid_to_lat_lon(cx - half_w, cy - half_h, PRECISION_ZOOM)
    min_lat, max_lon = tile_grid_to_lat_lon(cx + half_w, cy + half_h, PRECISION_ZOOM)
    return resolve_corners(min_lat, min_lon, max_lat, max_lon)


def precision_corners(bbox: BoundingBox) -> Tuple[int, int, int, int]:
    """
    Top-left and bottom-right corners on the 32-bit precision grid.

    Tile y grows southward, so the top-left corner is (max_lat, min_lon).
    """
    tl, br = bbox.top_left, bbox.bottom_right
    x1, y1 = lat_lon_to_tile(tl.lat, tl.lon, PRECISION_ZOOM)
    x2, y2 = lat_lon_to_tile(br.lat, br.lon, PRECISION_ZOOM)
    return x1, y1, x2, y2


def tile_range(bbox: BoundingBox, zoom: int) -> TileRange:
    """Inclusive range of tiles at `zoom` covering `bbox`."""
    _check_zoom(zoom)
    x1, y1, x2, y2 = precision_corners(bbox)
    shift = PRECISION_ZOOM - zoom
    return TileRange(x1 >> shift, y1 >> shift, x2 >> shift, y2 >> shift, zoom)


def raster_layout(bbox: BoundingBox, zoom: int, tile_size: int = 256, max_pixels: int = MAX_PIXELS) -> RasterLayout:
    """
    Size of the output raster and its sub-tile offset inside the first tile.

    Pixel positions are taken on the 256 px reference grid and scaled to
    `tile_size`, so 512 px tile sources yield a raster twice as large.
    """
    if tile_size <= 0:
        raise ConfigurationError(f"Tile size {tile_size} less than 1")
    tr = tile_range(bbox, zoom)
    x1, y1, x2, y2 = precision_corners(bbox)
    shift = _pixel_shift(zoom)
    px1, py1 = x1 >> shift, y1 >> shift
    px2, py2 = x2 >> shift, y2 >> shift

    offset_x = (px1 & 0xFF) * tile_size // 256
    offset_y = (py1 & 0xFF) * tile_size // 256
    width = (px2 - px1) * tile_size // 256
    height = (py2 - py1) * tile_size // 256

    if width <= 0 or height <= 0:
        raise ConfigurationError(f"Raster size {width}x{height} is empty; enlarge the box or the zoom")
    if width * height > max_pixels:
        raise ConfigurationError(f"Raster size {width}x{height} exceeds {max_pixels} pixels")
    return RasterLayout(
        tile_range=tr,
        offset_x=offset_x,
        offset_y=offset_y,
        width=width,
        height=height,
        tile_size=tile_size,
    )
