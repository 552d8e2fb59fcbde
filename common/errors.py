from __future__ import annotations


class TileStitchError(Exception):
    """Base exception for tile stitching errors."""
    pass


class ConfigurationError(TileStitchError):
    """Invalid zoom, raster dimensions, output options or URL template."""
    pass


class TileSizeMismatchError(TileStitchError):
    """A decoded tile does not have the configured tile size."""

    def __init__(self, width: int, height: int, tile_size: int):
        self.width = width
        self.height = height
        self.tile_size = tile_size
        super().__init__(f"Got {width}x{height} tile, not {tile_size}")


class UnsupportedChannelDepthError(TileStitchError):
    """Tile pixels are not gray (1), RGB (3) or RGBA (4)."""

    def __init__(self, depth: int):
        self.depth = depth
        super().__init__(f"Unsupported channel depth {depth}")


class TileFetchError(TileStitchError):
    """Error retrieving a tile from the tile server."""

    def __init__(self, url: str, message: str = ""):
        self.url = url
        super().__init__(f"Can't retrieve {url}: {message}")


class TileDecodeError(TileStitchError):
    """Tile bytes are not a PNG/JPEG image we can decode."""
    pass
