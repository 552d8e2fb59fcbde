from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from common.errors import ConfigurationError
from common.logging_setup import get_logger
from common.types import BoundingBox, Georeference, RasterLayout, TileImage
from common.utils import ElevationStats
from tilestitch.bbox import MAX_PIXELS, raster_layout
from tilestitch.compositor import Canvas, place_tile
from tilestitch.elevation import normalize_elevation
from tilestitch.georef import compute_georeference, pixel_to_lat_lon, projected_bounds
from tilestitch.presets import expand_url, find_preset_url
from tilestitch.tiles import decode_tile


log = get_logger("tilestitch.pipeline")

Fetch = Callable[[str], bytes]
Decode = Callable[[bytes], TileImage]


@dataclass
class StitchRequest:
    """
    One stitching run.

    Attributes:
        bbox: resolved geographic bounding box.
        zoom: tile zoom level.
        sources: preset keys or URL templates; each is fetched for every tile
            and composited in the given order.
        tile_size: pixel size the server's tiles must have.
        elevation: normalize Terrarium-encoded elevation to grayscale.
        max_pixels: canvas size guard.
        subdomain_seed: seed for {s} substitution (None = nondeterministic).
    """
    bbox: BoundingBox
    zoom: int
    sources: Sequence[str]
    tile_size: int = 256
    elevation: bool = False
    max_pixels: int = MAX_PIXELS
    subdomain_seed: Optional[int] = None


@dataclass
class StitchResult:
    canvas: Canvas
    georeference: Georeference
    bbox: BoundingBox
    layout: RasterLayout
    elevation_stats: Optional[ElevationStats] = None
    urls: List[str] = field(default_factory=list)


def plan(request: StitchRequest) -> RasterLayout:
    """Resolve the raster layout and log the geodetic/projected diagnostics."""
    bbox = request.bbox
    layout = raster_layout(bbox, request.zoom, request.tile_size, request.max_pixels)
    min_x, min_y, max_x, max_y = projected_bounds(bbox)
    tr = layout.tile_range

    log.info("Geodetic Bounds  (EPSG:4326): %.17g,%.17g to %.17g,%.17g",
             bbox.min_lat, bbox.min_lon, bbox.max_lat, bbox.max_lon)
    log.info("Projected Bounds (EPSG:3857): %.17g,%.17g to %.17g,%.17g", min_y, min_x, max_y, max_x)
    log.info("Zoom Level: %d", request.zoom)
    log.info("Upper Left Tile: x:%d y:%d", tr.x1, tr.y1)
    log.info("Lower Right Tile: x:%d y:%d", tr.x2, tr.y2)
    log.info("Raster Size: %dx%d", layout.width, layout.height,
             extra={"extra": {"tiles": tr.count, "offset_x": layout.offset_x, "offset_y": layout.offset_y}})
    return layout


def stitch(request: StitchRequest, fetch: Fetch, decode: Decode = decode_tile) -> StitchResult:
    """
    Fetch, decode and composite every tile of the request into one canvas.

    Tiles are processed column by column, row by row, then source by source.
    Any fetch/decode/size error propagates and aborts the run.
    """
    if not request.sources:
        raise ConfigurationError("At least one tile source is required")
    layout = plan(request)
    tr = layout.tile_range
    rng = random.Random(request.subdomain_seed)
    templates = [find_preset_url(s) for s in request.sources]

    canvas = Canvas(layout.width, layout.height)
    urls: List[str] = []
    for tile in tr:
        for template in templates:
            url = expand_url(template, tile.zoom, tile.x, tile.y, rng)
            log.info("%s", url)
            urls.append(url)
            image = decode(fetch(url))
            place_tile(
                canvas,
                image,
                tile.x - tr.x1,
                tile.y - tr.y1,
                layout.tile_size,
                layout.offset_x,
                layout.offset_y,
            )

    stats = normalize_elevation(canvas) if request.elevation else None

    georef = compute_georeference(request.bbox, layout.width, layout.height)
    log.info("Pixel Size: x:%.17g y:%.17g", georef.pixel_size_x, georef.pixel_size_y,
             extra={"extra": georef.to_dict()})
    br_lat, br_lon = pixel_to_lat_lon(georef, layout.width, layout.height)
    log.info("Raster Lower Right: %.17g,%.17g", br_lat, br_lon)
    return StitchResult(
        canvas=canvas,
        georeference=georef,
        bbox=request.bbox,
        layout=layout,
        elevation_stats=stats,
        urls=urls,
    )
