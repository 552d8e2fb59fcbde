from __future__ import annotations

from typing import Iterator, Tuple
import numpy as np

from common.errors import ConfigurationError, TileSizeMismatchError, UnsupportedChannelDepthError
from common.types import TileImage
from common.utils import round_half_up


CHANNELS = 4  # RGBA


class Canvas:
    """
    The output raster: a zero-initialized, row-major RGBA uint8 buffer.

    `pixels` is an (H, W, 4) view over the same memory as `buffer`, so the
    compositor and writers can work on whichever is more convenient.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Canvas size {width}x{height} is empty")
        self.width = int(width)
        self.height = int(height)
        self.buffer = np.zeros(self.width * self.height * CHANNELS, dtype=np.uint8)

    @property
    def pixels(self) -> np.ndarray:
        return self.buffer.reshape(self.height, self.width, CHANNELS)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.height, self.width, CHANNELS)

    def index(self, row: int, col: int, channel: int) -> int:
        """Flat offset of (row, col, channel) in `buffer`."""
        if not (0 <= row < self.height and 0 <= col < self.width and 0 <= channel < CHANNELS):
            raise IndexError(f"({row}, {col}, {channel}) outside {self.width}x{self.height}x{CHANNELS}")
        return (row * self.width + col) * CHANNELS + channel

    def rows(self) -> Iterator[np.ndarray]:
        """Yield each row as a (W*4,) uint8 view."""
        flat = self.buffer.reshape(self.height, self.width * CHANNELS)
        for r in range(self.height):
            yield flat[r]


def _clip(offset: int, size: int, limit: int) -> Tuple[int, int]:
    """Source span [lo, hi) that lands inside [0, limit) when shifted by `offset`."""
    lo = max(0, -offset)
    hi = min(size, limit - offset)
    return lo, max(lo, hi)


def blend_over(dst: np.ndarray, src: np.ndarray) -> np.ndarray:
    """
    Composite straight-alpha RGBA `src` over straight-alpha RGBA `dst`.

        a   = a_s + a_d * (1 - a_s)
        rgb = (rgb_s * a_s + rgb_d * a_d * (1 - a_s)) / a

    Pixels where the result is fully transparent keep `dst` unchanged.
    Returns a new uint8 array with the shape of `dst`.
    """
    d = dst.astype(np.float64) / 255.0
    s = src.astype(np.float64) / 255.0
    a_d = d[..., 3:4]
    a_s = s[..., 3:4]

    a_r = a_s + a_d * (1.0 - a_s)
    premult = s[..., :3] * a_s + d[..., :3] * a_d * (1.0 - a_s)
    with np.errstate(divide="ignore", invalid="ignore"):
        rgb = np.where(a_r > 0, premult / a_r, d[..., :3])

    out = np.concatenate([rgb, a_r], axis=-1) * 255.0
    out = np.clip(round_half_up(out), 0, 255).astype(np.uint8)
    keep = (a_r[..., 0] <= 0)
    out[keep] = dst[keep]
    return out


def place_tile(
    canvas: Canvas,
    tile: TileImage,
    column_index: int,
    row_index: int,
    tile_size: int,
    offset_x: int,
    offset_y: int,
) -> None:
    """
    Write `tile` into `canvas`.

    column_index/row_index are the tile's position relative to the first tile
    of the range; offset_x/offset_y the sub-tile offset of the canvas origin.
    Destination pixel = index * tile_size + local - offset. Pixels falling
    outside the canvas are dropped.
    """
    if tile.width != tile_size or tile.height != tile_size:
        raise TileSizeMismatchError(tile.width, tile.height, tile_size)
    if tile.depth not in (1, 3, 4):
        raise UnsupportedChannelDepthError(tile.depth)

    xoff = column_index * tile_size - offset_x
    yoff = row_index * tile_size - offset_y
    sx0, sx1 = _clip(xoff, tile.width, canvas.width)
    sy0, sy1 = _clip(yoff, tile.height, canvas.height)
    if sx0 >= sx1 or sy0 >= sy1:
        return

    src = tile.pixels[sy0:sy1, sx0:sx1]
    dst = canvas.pixels[sy0 + yoff:sy1 + yoff, sx0 + xoff:sx1 + xoff]

    if tile.depth == 4:
        dst[...] = blend_over(dst, src)
    elif tile.depth == 3:
        dst[..., :3] = src
        dst[..., 3] = 255
    else:
        dst[..., :3] = src[..., 0:1]
        dst[..., 3] = 255
