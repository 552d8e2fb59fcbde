from __future__ import annotations

import numpy as np

from common.logging_setup import get_logger
from common.utils import ElevationStats, round_half_up
from tilestitch.compositor import Canvas


log = get_logger("tilestitch.elevation")


def pack_elevation(rgba: np.ndarray) -> np.ndarray:
    """R, G, B channels of an (..., 4) array as 24-bit big-endian integers."""
    rgb = rgba[..., :3].astype(np.uint32)
    return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]


def terrarium_to_meters(value: float) -> float:
    """Terrarium encoding: (R * 256 + G + B / 256) - 32768."""
    return value / 256.0 - 32768.0


def elevation_stats(canvas: Canvas) -> ElevationStats:
    stats = ElevationStats()
    for row in canvas.rows():
        stats.update(pack_elevation(row.reshape(-1, 4)))
    return stats


def normalize_elevation(canvas: Canvas) -> ElevationStats:
    """
    Rewrite the canvas as 8-bit grayscale elevation, min -> 0 and max -> 255.

    Alpha is left untouched. If the canvas is flat every pixel becomes 0.
    Returns the statistics of the packed values before the rewrite.
    """
    stats = elevation_stats(canvas)
    lo, hi = int(stats.minimum), int(stats.maximum)
    ratio = 255.0 / (hi - lo) if hi > lo else 1.0

    log.info(
        "Elevation range: [%.4f; %.4f] --> %.4f",
        terrarium_to_meters(lo), terrarium_to_meters(hi), (hi - lo) / 256.0,
        extra={"extra": {"min": lo, "max": hi}},
    )
    log.info("Average elevation: %.4f", terrarium_to_meters(stats.mean))
    log.info("Midpoint in [0; 1] range: %.4f", (stats.mean - lo) * ratio / 255.0)

    for row in canvas.pixels:
        values = pack_elevation(row).astype(np.int64) - lo
        gray = np.clip(round_half_up(values * ratio), 0, 255).astype(np.uint8)
        row[:, 0] = gray
        row[:, 1] = gray
        row[:, 2] = gray
    return stats
