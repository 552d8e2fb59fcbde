"""
Tile fetching (requests) and decoding (Pillow).

    fetcher = TileFetcher(user_agent="tile-stitch/1.0.0")
    tile = decode_tile(fetcher.fetch(url))
    # tile.pixels -> (H, W, depth) uint8, depth in {1, 3, 4}
"""

from __future__ import annotations

import io
from typing import Optional

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from common.errors import TileDecodeError, TileFetchError
from common.logging_setup import get_logger
from common.types import TileImage


log = get_logger("tilestitch.tiles")

DEFAULT_USER_AGENT = "tile-stitch/1.0.0"
PNG_MAGIC = b"\x89PNG"
JPEG_MAGIC = b"\xff\xd8"

# Minimum extra capacity reserved whenever the receive buffer grows
_CHUNK_SLACK = 50000


class TileFetcher:
    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Params:
            user_agent: User-Agent header sent with every request
            timeout: connect/read timeout in seconds
            session: optional requests.Session for connection reuse
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def fetch(self, url: str) -> bytes:
        """GET `url` following redirects; raise TileFetchError unless it answers 200 with a body."""
        try:
            with self.session.get(url, timeout=self.timeout, stream=True, allow_redirects=True) as r:
                if r.status_code != 200:
                    raise TileFetchError(url, f"HTTP {r.status_code}")
                data = bytearray()
                for chunk in r.iter_content(chunk_size=_CHUNK_SLACK):
                    data.extend(chunk)
        except requests.RequestException as e:
            raise TileFetchError(url, str(e)) from e
        if not data:
            raise TileFetchError(url, "empty response")
        return bytes(data)

    def close(self) -> None:
        self.session.close()


def sniff_format(data: bytes) -> Optional[str]:
    if data[:4] == PNG_MAGIC:
        return "png"
    if data[:2] == JPEG_MAGIC:
        return "jpeg"
    return None


def _to_supported_mode(img: Image.Image) -> Image.Image:
    # Mirror libpng's EXPAND/STRIP_16: palette -> RGB(A), gray+alpha -> RGBA,
    # 16-bit gray -> 8-bit gray, anything else -> RGB.
    if img.mode in ("L", "RGB", "RGBA"):
        return img
    if img.mode == "P":
        return img.convert("RGBA" if "transparency" in img.info else "RGB")
    if img.mode in ("LA", "PA", "RGBa", "La"):
        return img.convert("RGBA")
    if img.mode in ("I;16", "I;16B", "I;16L", "I"):
        arr = np.asarray(img, dtype=np.uint32) >> 8
        return Image.fromarray(arr.astype(np.uint8))
    if img.mode == "1":
        return img.convert("L")
    return img.convert("RGB")


def decode_tile(data: bytes) -> TileImage:
    """Decode PNG or JPEG bytes (chosen by magic number) into a TileImage."""
    fmt = sniff_format(data)
    if fmt is None:
        raise TileDecodeError("Don't recognize file format")
    try:
        with Image.open(io.BytesIO(data), formats=[fmt.upper()]) as img:
            img.load()
            img = _to_supported_mode(img)
            pixels = np.asarray(img, dtype=np.uint8)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise TileDecodeError(f"{fmt.upper()} error {e}") from e
    return TileImage.from_array(pixels)
