"""
Command-line entry point.

  tile-stitch [-o outfile] [-f png|geotiff] [-e] [-w] minlat minlon maxlat maxlon zoom URL...
  tile-stitch [-o outfile] [-f png|geotiff] [-e] [-w] -c lat lon width height zoom URL...

URL is a template such as http://tile.openstreetmap.org/{z}/{x}/{y}.png or a
preset key (see --help).
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from common.errors import ConfigurationError, TileStitchError
from common.logging_setup import get_logger, setup_logging
from common.types import BoundingBox
from tilestitch.bbox import resolve_centered, resolve_corners
from tilestitch.config import load_config
from tilestitch.pipeline import StitchRequest, StitchResult, stitch
from tilestitch.presets import format_presets
from tilestitch.tiles import TileFetcher
from tilestitch.writers import (
    FORMAT_GEOTIFF,
    FORMAT_PNG,
    OUTPUT_FORMATS,
    world_file_path,
    write_geotiff,
    write_png,
    write_world_file,
)


log = get_logger("tilestitch")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="tile-stitch",
        description="Stitch slippy-map tiles covering a bounding box into one georeferenced image.",
        epilog="You may also use one of the following presets instead of a URL:\n\n" + format_presets(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("-o", dest="outfile", default=None, help="Output file (PNG defaults to stdout)")
    ap.add_argument("-f", dest="fmt", choices=OUTPUT_FORMATS, default=FORMAT_PNG, help="Output format")
    ap.add_argument("-e", dest="elevation", action="store_true",
                    help="Treat tiles as Terrarium elevation and normalize to grayscale")
    ap.add_argument("-w", dest="world_file", action="store_true", help="Also write a world file (.pnw/.tfw)")
    ap.add_argument("-t", dest="tile_size", type=int, default=None, help="Tile size in pixels (default 256)")
    ap.add_argument("-c", dest="centered", action="store_true",
                    help="Positional args are lat lon width height (pixels) instead of two corners")
    ap.add_argument("--config", default=None, help="YAML config file (default config/params.yaml if present)")
    ap.add_argument("--log-level", default=None, help="DEBUG/INFO/WARNING/ERROR")
    ap.add_argument("--log-format", default=None, choices=("json", "text"), help="Diagnostic log format (default json)")
    ap.add_argument("coords", nargs=4, type=float, metavar="N",
                    help="minlat minlon maxlat maxlon, or lat lon width height with -c")
    ap.add_argument("zoom", type=int)
    ap.add_argument("sources", nargs="+", metavar="URL", help="Tile URL template or preset key")
    return ap


def resolve_bbox(args: argparse.Namespace) -> BoundingBox:
    a, b, c, d = args.coords
    if args.centered:
        return resolve_centered(a, b, int(c), int(d), args.zoom)
    return resolve_corners(a, b, c, d)


def write_outputs(result: StitchResult, fmt: str, outfile: Optional[str], world_file: bool) -> None:
    if fmt == FORMAT_PNG:
        if outfile is None:
            log.info("Output PNG: stdout")
            write_png(result.canvas, sys.stdout.buffer)
            sys.stdout.buffer.flush()
        else:
            log.info("Output PNG: %s", outfile)
            write_png(result.canvas, outfile)
    else:
        if outfile is None:
            raise ConfigurationError("Can't write TIFF to stdout, sorry")
        log.info("Output TIFF: %s", outfile)
        write_geotiff(result.canvas, result.georeference, outfile)

    if world_file:
        if outfile is None:
            log.warning("Can't write a worldfile when writing to stdout")
        else:
            write_world_file(result.georeference, world_file_path(outfile, fmt))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args.config)
        setup_logging(args.log_level or cfg.get("log_level"), args.log_format or cfg.get("log_format"), force=True)

        if args.outfile is None and sys.stdout.isatty():
            raise ConfigurationError("Didn't specify -o and standard output is a terminal")
        if args.fmt == FORMAT_GEOTIFF and args.outfile is None:
            raise ConfigurationError("Can't write TIFF to stdout, sorry")

        request = StitchRequest(
            bbox=resolve_bbox(args),
            zoom=args.zoom,
            sources=args.sources,
            tile_size=args.tile_size if args.tile_size is not None else cfg["tile_size"],
            elevation=args.elevation,
            max_pixels=cfg["max_pixels"],
            subdomain_seed=cfg.get("subdomain_seed"),
        )
        fetcher = TileFetcher(user_agent=str(cfg["user_agent"]), timeout=float(cfg["timeout_s"]))
        try:
            result = stitch(request, fetcher.fetch)
        finally:
            fetcher.close()
        write_outputs(result, args.fmt, args.outfile, args.world_file)
    except TileStitchError as e:
        log.error("%s", e, extra={"extra": {"error": type(e).__name__}})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
