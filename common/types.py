from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple
import numpy as np

from common.errors import UnsupportedChannelDepthError


SUPPORTED_DEPTHS = (1, 3, 4)


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 point in degrees. Latitude is not clamped; longitude is unrestricted."""
    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Geographic bounding box, always normalized so min <= max on each axis.

    Build it with `from_corners()` when the corner order is not known.
    """
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    def __post_init__(self) -> None:
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError("bounding box is not normalized; use BoundingBox.from_corners()")

    @classmethod
    def from_corners(cls, lat1: float, lon1: float, lat2: float, lon2: float) -> "BoundingBox":
        return cls(
            min_lat=float(min(lat1, lat2)),
            min_lon=float(min(lon1, lon2)),
            max_lat=float(max(lat1, lat2)),
            max_lon=float(max(lon1, lon2)),
        )

    @property
    def top_left(self) -> GeoPoint:
        return GeoPoint(self.max_lat, self.min_lon)

    @property
    def bottom_right(self) -> GeoPoint:
        return GeoPoint(self.min_lat, self.max_lon)

    def to_dict(self) -> Dict[str, float]:
        return {
            "min_lat": self.min_lat,
            "min_lon": self.min_lon,
            "max_lat": self.max_lat,
            "max_lon": self.max_lon,
        }


@dataclass(frozen=True, slots=True)
class TileCoordinate:
    x: int
    y: int
    zoom: int

    def __post_init__(self) -> None:
        if self.zoom < 0:
            raise ValueError("zoom must be >= 0")


@dataclass(frozen=True, slots=True)
class TileRange:
    """
    Inclusive tile index rectangle (x1, y1)-(x2, y2) at `zoom`.

    Iteration yields tiles column by column (outer x, inner y), which is the
    fetch order of the stitching loop.
    """
    x1: int
    y1: int
    x2: int
    y2: int
    zoom: int

    @property
    def columns(self) -> int:
        return self.x2 - self.x1 + 1

    @property
    def rows(self) -> int:
        return self.y2 - self.y1 + 1

    @property
    def count(self) -> int:
        return self.columns * self.rows

    def __iter__(self) -> Iterator[TileCoordinate]:
        for x in range(self.x1, self.x2 + 1):
            for y in range(self.y1, self.y2 + 1):
                yield TileCoordinate(x, y, self.zoom)


@dataclass(slots=True)
class TileImage:
    """
    A decoded tile.

    Attributes:
        width, height: image dimensions in pixels.
        depth: channels per pixel (1=gray, 3=RGB, 4=RGBA).
        pixels: np.ndarray of shape (H, W, depth), dtype uint8.
    """
    width: int
    height: int
    depth: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.depth not in SUPPORTED_DEPTHS:
            raise UnsupportedChannelDepthError(self.depth)
        if not isinstance(self.pixels, np.ndarray):
            raise TypeError("pixels must be a numpy ndarray")
        if self.pixels.ndim == 2:
            self.pixels = self.pixels[..., None]
        if self.pixels.shape != (self.height, self.width, self.depth):
            raise ValueError("width/height/depth do not match pixel shape")
        if self.pixels.dtype != np.uint8:
            self.pixels = self.pixels.astype(np.uint8, copy=False)

    @classmethod
    def from_array(cls, pixels: np.ndarray) -> "TileImage":
        """Build from an (H, W) gray or (H, W, C) array."""
        arr = np.asarray(pixels)
        depth = 1 if arr.ndim == 2 else int(arr.shape[2])
        return cls(width=int(arr.shape[1]), height=int(arr.shape[0]), depth=depth, pixels=arr)


@dataclass(frozen=True, slots=True)
class Georeference:
    """Pixel scale plus the projected (EPSG:3857) top-left tie point."""
    pixel_size_x: float
    pixel_size_y: float
    top_left_x: float
    top_left_y: float

    def world_file_coefficients(self) -> Tuple[float, float, float, float, float, float]:
        # y resolution is negative: raster rows run south, projected y runs north
        return (self.pixel_size_x, 0.0, 0.0, -self.pixel_size_y, self.top_left_x, self.top_left_y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pixel_size_x": self.pixel_size_x,
            "pixel_size_y": self.pixel_size_y,
            "top_left_x": self.top_left_x,
            "top_left_y": self.top_left_y,
        }


@dataclass(frozen=True, slots=True)
class RasterLayout:
    """
    Where the output raster sits in the tile grid.

    offset_x/offset_y are the sub-tile pixel offsets of the raster's top-left
    corner inside the first tile of `tile_range`.
    """
    tile_range: TileRange
    offset_x: int
    offset_y: int
    width: int
    height: int
    tile_size: int

    @property
    def pixels(self) -> int:
        return self.width * self.height
