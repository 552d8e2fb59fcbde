"""
Unit tests for tile fetching and decoding
"""

import io
import os
import sys
from unittest.mock import MagicMock

import numpy as np
import pytest
import requests
from PIL import Image

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import TileDecodeError, TileFetchError
from tilestitch.tiles import DEFAULT_USER_AGENT, TileFetcher, decode_tile, sniff_format


def _encode(img: Image.Image, fmt: str) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def _session_returning(status_code=200, chunks=(b"abc",)):
    response = MagicMock()
    response.status_code = status_code
    response.iter_content.return_value = list(chunks)
    session = MagicMock()
    session.headers = {}
    session.get.return_value.__enter__.return_value = response
    session.get.return_value.__exit__.return_value = False
    return session


class TestDecodeTile:
    """Test cases for decode_tile()"""

    def test_png_rgba(self):
        arr = np.zeros((4, 4, 4), dtype=np.uint8)
        arr[1, 2] = (10, 20, 30, 40)
        tile = decode_tile(_encode(Image.fromarray(arr), "PNG"))
        assert (tile.width, tile.height, tile.depth) == (4, 4, 4)
        assert tuple(tile.pixels[1, 2]) == (10, 20, 30, 40)

    def test_png_rgb(self):
        tile = decode_tile(_encode(Image.new("RGB", (8, 8), (1, 2, 3)), "PNG"))
        assert tile.depth == 3
        assert tuple(tile.pixels[0, 0]) == (1, 2, 3)

    def test_png_gray(self):
        tile = decode_tile(_encode(Image.new("L", (8, 8), 99), "PNG"))
        assert tile.depth == 1
        assert tile.pixels.shape == (8, 8, 1)
        assert tile.pixels[3, 3, 0] == 99

    def test_png_palette_expanded(self):
        img = Image.new("RGB", (8, 8), (255, 0, 0)).convert("P")
        tile = decode_tile(_encode(img, "PNG"))
        assert tile.depth == 3
        assert tuple(tile.pixels[0, 0]) == (255, 0, 0)

    def test_png_gray_alpha_expanded(self):
        tile = decode_tile(_encode(Image.new("LA", (4, 4), (50, 128)), "PNG"))
        assert tile.depth == 4
        assert tuple(tile.pixels[0, 0]) == (50, 50, 50, 128)

    def test_jpeg(self):
        tile = decode_tile(_encode(Image.new("RGB", (16, 16), (200, 200, 200)), "JPEG"))
        assert tile.depth == 3
        assert (tile.width, tile.height) == (16, 16)
        assert abs(int(tile.pixels[8, 8, 0]) - 200) <= 2

    def test_unknown_format(self):
        with pytest.raises(TileDecodeError, match="Don't recognize file format"):
            decode_tile(b"<html>404</html>")

    def test_truncated_png(self):
        data = _encode(Image.new("RGB", (64, 64), (1, 2, 3)), "PNG")
        with pytest.raises(TileDecodeError):
            decode_tile(data[:40])

    @pytest.mark.parametrize("data,expected", [
        (b"\x89PNG\r\n\x1a\n", "png"),
        (b"\xff\xd8\xff\xe0", "jpeg"),
        (b"GIF89a", None),
        (b"", None),
    ])
    def test_sniff_format(self, data, expected):
        assert sniff_format(data) == expected


class TestTileFetcher:
    """Test cases for TileFetcher"""

    def test_user_agent(self):
        session = _session_returning()
        TileFetcher(session=session)
        assert session.headers["User-Agent"] == DEFAULT_USER_AGENT

    def test_fetch_joins_chunks(self):
        session = _session_returning(chunks=(b"\x89PN", b"G", b"rest"))
        data = TileFetcher(session=session, timeout=5.0).fetch("http://tiles/1/2/3.png")
        assert data == b"\x89PNGrest"
        session.get.assert_called_once_with(
            "http://tiles/1/2/3.png", timeout=5.0, stream=True, allow_redirects=True
        )

    def test_http_error(self):
        session = _session_returning(status_code=404)
        with pytest.raises(TileFetchError, match="HTTP 404"):
            TileFetcher(session=session).fetch("http://tiles/1/2/3.png")

    def test_network_error(self):
        session = MagicMock()
        session.headers = {}
        session.get.side_effect = requests.ConnectionError("Network error")
        with pytest.raises(TileFetchError, match="Network error"):
            TileFetcher(session=session).fetch("http://tiles/1/2/3.png")

    def test_empty_body(self):
        session = _session_returning(chunks=())
        with pytest.raises(TileFetchError, match="empty"):
            TileFetcher(session=session).fetch("http://tiles/1/2/3.png")
