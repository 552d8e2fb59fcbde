"""
Unit tests for georeferencing and world files
"""

import os
import sys

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import ConfigurationError
from common.geo import lat_lon_to_projected_meters
from common.types import BoundingBox, Georeference
from tilestitch.georef import compute_georeference, pixel_to_lat_lon, projected_bounds
from tilestitch.writers import FORMAT_GEOTIFF, FORMAT_PNG, format_world_file, world_file_path


class TestComputeGeoreference:
    """Test cases for compute_georeference()"""

    def test_pixel_size_and_tie_point(self):
        bbox = BoundingBox.from_corners(51.50, -0.15, 51.53, -0.10)
        g = compute_georeference(bbox, 500, 300)
        min_x, min_y = lat_lon_to_projected_meters(51.50, -0.15)
        max_x, max_y = lat_lon_to_projected_meters(51.53, -0.10)
        assert g.pixel_size_x == pytest.approx((max_x - min_x) / 500)
        assert g.pixel_size_y == pytest.approx((max_y - min_y) / 300)
        assert g.pixel_size_y > 0
        assert g.top_left_x == pytest.approx(min_x)
        assert g.top_left_y == pytest.approx(max_y)

    def test_projected_bounds_ordered(self):
        bbox = BoundingBox.from_corners(-10.0, 20.0, 10.0, 30.0)
        min_x, min_y, max_x, max_y = projected_bounds(bbox)
        assert min_x < max_x
        assert min_y < max_y
        assert min_y == pytest.approx(-max_y)

    def test_raster_corners_map_back_to_bbox(self):
        bbox = BoundingBox.from_corners(51.50, -0.15, 51.53, -0.10)
        g = compute_georeference(bbox, 500, 300)
        assert pixel_to_lat_lon(g, 0, 0) == pytest.approx((51.53, -0.15))
        assert pixel_to_lat_lon(g, 500, 300) == pytest.approx((51.50, -0.10))

    def test_empty_raster(self):
        bbox = BoundingBox.from_corners(0.0, 0.0, 1.0, 1.0)
        with pytest.raises(ConfigurationError):
            compute_georeference(bbox, 0, 10)


class TestWorldFile:
    """Test cases for world file output"""

    def test_coefficients(self):
        g = Georeference(pixel_size_x=2.5, pixel_size_y=3.0, top_left_x=-100.0, top_left_y=200.0)
        assert g.world_file_coefficients() == (2.5, 0.0, 0.0, -3.0, -100.0, 200.0)

    def test_format(self):
        g = Georeference(pixel_size_x=2.5, pixel_size_y=3.0, top_left_x=-100.0, top_left_y=200.0)
        lines = format_world_file(g).splitlines()
        assert len(lines) == 6
        assert all(len(line) == 24 for line in lines)
        assert float(lines[3]) == -3.0
        assert lines[0] == "            2.5000000000"

    @pytest.mark.parametrize("outfile,fmt,expected", [
        ("map.png", FORMAT_PNG, "map.pnw"),
        ("out/map.tif", FORMAT_GEOTIFF, "out/map.tfw"),
        ("map.v2.png", FORMAT_PNG, "map.v2.pnw"),
        ("map", FORMAT_GEOTIFF, "map.tfw"),
    ])
    def test_world_file_path(self, outfile, fmt, expected):
        assert str(world_file_path(outfile, fmt)) == expected

    def test_unknown_format(self):
        with pytest.raises(ConfigurationError):
            world_file_path("x.jpg", "jpeg")
