"""
Unit tests for PNG / GeoTIFF / world file writers
"""

import io
import os
import sys

import numpy as np
import pytest
import rasterio
from PIL import Image

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.types import Georeference
from tilestitch.compositor import Canvas
from tilestitch.writers import write_geotiff, write_png, write_world_file


@pytest.fixture
def canvas():
    c = Canvas(6, 4)
    c.pixels[..., 0] = np.arange(6, dtype=np.uint8)[None, :] * 40
    c.pixels[..., 1] = np.arange(4, dtype=np.uint8)[:, None] * 60
    c.pixels[..., 2] = 7
    c.pixels[..., 3] = 255
    c.pixels[0, 0, 3] = 0
    return c


@pytest.fixture
def georef():
    return Georeference(pixel_size_x=10.0, pixel_size_y=20.0, top_left_x=1000.0, top_left_y=5000.0)


class TestWritePng:
    """Test cases for write_png()"""

    def test_file(self, tmp_path, canvas):
        path = tmp_path / "out.png"
        write_png(canvas, path)
        with Image.open(path) as img:
            assert img.mode == "RGBA"
            assert img.size == (6, 4)
            np.testing.assert_array_equal(np.asarray(img), canvas.pixels)

    def test_stream(self, canvas):
        buf = io.BytesIO()
        write_png(canvas, buf)
        assert buf.getvalue()[:4] == b"\x89PNG"


class TestWriteGeotiff:
    """Test cases for write_geotiff()"""

    def test_round_trip(self, tmp_path, canvas, georef):
        path = tmp_path / "out.tif"
        write_geotiff(canvas, georef, path)
        with rasterio.open(path) as ds:
            assert ds.count == 4
            assert (ds.width, ds.height) == (6, 4)
            assert ds.crs.to_epsg() == 3857
            t = ds.transform
            assert (t.a, t.b, t.c) == (10.0, 0.0, 1000.0)
            assert (t.d, t.e, t.f) == (0.0, -20.0, 5000.0)
            data = ds.read()
        np.testing.assert_array_equal(data.transpose(1, 2, 0), canvas.pixels)


class TestWriteWorldFile:
    """Test cases for write_world_file()"""

    def test_contents(self, tmp_path, georef):
        path = tmp_path / "out.pnw"
        write_world_file(georef, path)
        values = [float(line) for line in path.read_text().splitlines()]
        assert values == [10.0, 0.0, 0.0, -20.0, 1000.0, 5000.0]
