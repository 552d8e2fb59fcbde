"""
tilestitch: slippy-map tile mosaics

- Resolve a bounding box (two corners, or center + pixel size) to a tile range
- Fetch every tile from one or more URL templates/presets and composite them
  into a single RGBA canvas (alpha-aware, clipped to the box)
- Optionally normalize Terrarium elevation tiles to 8-bit grayscale
- Write PNG or GeoTIFF (EPSG:3857) plus an optional world file

Entry point:
    python -m tilestitch [-o out.png] minlat minlon maxlat maxlon zoom osm
"""
from .compositor import Canvas, place_tile
from .pipeline import StitchRequest, StitchResult, stitch

__all__ = ["Canvas", "place_tile", "StitchRequest", "StitchResult", "stitch"]
