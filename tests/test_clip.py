from __future__ import annotations

import numpy as np
import pytest
import rasterio

from gdem.dem.clip import clip_dem
from tests.utils import write_raster


@pytest.fixture
def grid(tmp_path):
    path = tmp_path / "grid.tif"
    data = np.arange(16, dtype=np.int16).reshape(4, 4)
    write_raster(path, data, bounds=(0.0, 0.0, 4.0, 4.0), nodata=-9999)
    return path, data


def test_clip_on_pixel_edges(grid, tmp_path) -> None:
    path, data = grid

    result = clip_dem(path, tmp_path / "clip.tif", 1.0, 3.0, 3.0, 1.0)

    assert (result.width, result.height) == (2, 2)
    assert result.bounds == (1.0, 1.0, 3.0, 3.0)
    assert result.crs == "EPSG:4326"
    with rasterio.open(result.path) as dataset:
        np.testing.assert_array_equal(dataset.read(1), data[1:3, 1:3])
        assert dataset.nodata == -9999


def test_clip_snaps_outward(grid, tmp_path) -> None:
    path, data = grid

    result = clip_dem(path, tmp_path / "clip.tif", 0.5, 3.5, 2.5, 0.5)

    assert result.bounds == (0.0, 0.0, 3.0, 4.0)
    with rasterio.open(result.path) as dataset:
        np.testing.assert_array_equal(dataset.read(1), data[:, 0:3])


def test_clip_is_limited_to_raster(grid, tmp_path) -> None:
    path, data = grid

    result = clip_dem(path, tmp_path / "clip.tif", -5.0, 10.0, 2.0, 2.0)

    assert result.bounds == (0.0, 2.0, 2.0, 4.0)
    with rasterio.open(result.path) as dataset:
        np.testing.assert_array_equal(dataset.read(1), data[0:2, 0:2])


def test_clip_outside_raster(grid, tmp_path) -> None:
    path, _ = grid
    with pytest.raises(ValueError, match="does not intersect"):
        clip_dem(path, tmp_path / "clip.tif", 10.0, 12.0, 12.0, 10.0)


def test_clip_rejects_inverted_rectangle(grid, tmp_path) -> None:
    path, _ = grid
    with pytest.raises(ValueError, match="top-left"):
        clip_dem(path, tmp_path / "clip.tif", 3.0, 1.0, 1.0, 3.0)
