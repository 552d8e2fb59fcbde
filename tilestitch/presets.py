"""
Named tile sources and slippy-map URL templating.

A source argument is either a preset key (e.g. "osm", "aws:terrarium") or a
literal URL template with {z}/{x}/{y} and optionally {s} tokens.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from common.errors import ConfigurationError


@dataclass(frozen=True)
class Preset:
    description: str
    url: str


PRESETS: Mapping[str, Preset] = MappingProxyType({
    "aws:terrarium": Preset(
        "Amazon AWS open elevation map (Terrarium format)",
        "https://s3.amazonaws.com/elevation-tiles-prod/terrarium/{z}/{x}/{y}.png",
    ),
    "aws:normal": Preset(
        "Amazon AWS open elevation map (normal vector format)",
        "https://s3.amazonaws.com/elevation-tiles-prod/normal/{z}/{x}/{y}.png",
    ),
    "gmaps": Preset(
        "Google Maps standard road map",
        "http://mt.google.com/vt/lyrs=m&x={x}&y={y}&z={z}",
    ),
    "gmaps:satellite": Preset(
        "Google Maps satellite imagery",
        "http://mt.google.com/vt/lyrs=s&x={x}&y={y}&z={z}",
    ),
    "gmaps:hybrid": Preset(
        "Google Maps hybrid map",
        "http://mt.google.com/vt/lyrs=y&x={x}&y={y}&z={z}",
    ),
    "ocm": Preset(
        "OpenCycleMaps tiles (watermarked)",
        "http://tile.thunderforest.com/cycle/{z}/{x}/{y}.png",
    ),
    "osm": Preset(
        "OpenStreetMaps standard tiles",
        "http://tile.openstreetmap.org/{z}/{x}/{y}.png",
    ),
    "stamen:terrain": Preset(
        "Stamen terrain tiles",
        "http://tile.stamen.com/terrain/{z}/{x}/{y}.jpg",
    ),
    "stamen:toner": Preset(
        "Stamen toner tiles",
        "http://tile.stamen.com/toner/{z}/{x}/{y}.png",
    ),
    "stamen:watercolor": Preset(
        "Stamen watercolor tiles",
        "http://tile.stamen.com/watercolor/{z}/{x}/{y}.jpg",
    ),
    "tf:landscape": Preset(
        "Thunderforest landscape map tiles (watermarked)",
        "http://tile.thunderforest.com/landscape/{z}/{x}/{y}.png",
    ),
    "tf:outdoors": Preset(
        "Thunderforest outdoors map tiles (watermarked)",
        "http://tile.thunderforest.com/outdoors/{z}/{x}/{y}.png",
    ),
    "tf:transport": Preset(
        "Thunderforest transport map tiles (watermarked)",
        "http://tile.thunderforest.com/transport/{z}/{x}/{y}.png",
    ),
})

_TOKEN = re.compile(r"\{(.)\}")


def find_preset_url(name: str) -> str:
    """Preset URL for `name`, or `name` itself when it is not a preset key."""
    preset = PRESETS.get(name)
    return preset.url if preset else name


def format_presets() -> str:
    return "\n".join(f"    {key:<20} {p.description}" for key, p in PRESETS.items())


def expand_url(template: str, z: int, x: int, y: int, rng: Optional[random.Random] = None) -> str:
    """
    Substitute {z}, {x}, {y} and {s} (random subdomain a-c) in `template`.

    Any other single-character token is a configuration error.
    """
    rng = rng or random

    def _sub(m: re.Match) -> str:
        token = m.group(1)
        if token == "z":
            return str(int(z))
        if token == "x":
            return str(int(x))
        if token == "y":
            return str(int(y))
        if token == "s":
            return "abc"[rng.randrange(3)]
        raise ConfigurationError(f"Unknown format token {token}")

    return _TOKEN.sub(_sub, template)
