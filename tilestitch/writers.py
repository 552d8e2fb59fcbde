from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Union

import rasterio
from PIL import Image
from rasterio.transform import from_origin

from common.errors import ConfigurationError
from common.logging_setup import get_logger
from common.types import Georeference
from tilestitch.compositor import Canvas


log = get_logger("tilestitch.writers")

FORMAT_PNG = "png"
FORMAT_GEOTIFF = "geotiff"
OUTPUT_FORMATS = (FORMAT_PNG, FORMAT_GEOTIFF)

WORLD_FILE_EXT = {FORMAT_PNG: ".pnw", FORMAT_GEOTIFF: ".tfw"}


def write_png(canvas: Canvas, out: Union[str, os.PathLike, BinaryIO]) -> None:
    """RGBA PNG to a path or a binary stream (e.g. sys.stdout.buffer)."""
    img = Image.fromarray(canvas.pixels)
    img.save(out, format="PNG")


def write_geotiff(canvas: Canvas, georef: Georeference, path: Union[str, os.PathLike]) -> None:
    """
    RGBA GeoTIFF in EPSG:3857, georeferenced by the top-left tie point and
    pixel scale. LZW with horizontal differencing.
    """
    transform = from_origin(georef.top_left_x, georef.top_left_y, georef.pixel_size_x, georef.pixel_size_y)
    profile = {
        "driver": "GTiff",
        "height": canvas.height,
        "width": canvas.width,
        "count": 4,
        "dtype": rasterio.uint8,
        "crs": "EPSG:3857",
        "transform": transform,
        "compress": "lzw",
        "predictor": 2,
        "photometric": "RGB",
        "alpha": "YES",
        "blockysize": 20,
    }
    # rasterio wants band-major (bands, rows, cols)
    bands = canvas.pixels.transpose(2, 0, 1)
    with rasterio.open(path, "w", **profile) as dst:
        dst.write(bands)


def world_file_path(outfile: Union[str, os.PathLike], fmt: str) -> Path:
    """`outfile` with its extension replaced by .pnw/.tfw (appended if it has none)."""
    if fmt not in WORLD_FILE_EXT:
        raise ConfigurationError(f"No world file extension for format {fmt!r}")
    p = Path(outfile)
    return p.with_suffix(WORLD_FILE_EXT[fmt]) if p.suffix else p.with_name(p.name + WORLD_FILE_EXT[fmt])


def format_world_file(georef: Georeference) -> str:
    return "".join(f"{v:24.10f}\n" for v in georef.world_file_coefficients())


def write_world_file(georef: Georeference, path: Union[str, os.PathLike]) -> None:
    Path(path).write_text(format_world_file(georef))
    log.info("World file written to '%s'.", path)
