from __future__ import annotations

import numpy as np
import pytest
import rasterio
from rasterio.enums import Resampling

from gdem.dem.resample import resample_dem
from tests.utils import write_raster


def test_resample_upsamples_nearest(tmp_path) -> None:
    src = tmp_path / "src.tif"
    data = np.array([[1, 2], [3, 4]], dtype=np.int16)
    write_raster(src, data, bounds=(0.0, 0.0, 2.0, 2.0), nodata=-9999)

    result = resample_dem(src, tmp_path / "out.tif", 4, 4, resampling=Resampling.nearest)

    assert (result.width, result.height) == (4, 4)
    assert result.resolution == (0.5, 0.5)
    assert result.bounds == (0.0, 0.0, 2.0, 2.0)
    with rasterio.open(result.path) as dataset:
        expected = np.repeat(np.repeat(data, 2, axis=0), 2, axis=1)
        np.testing.assert_array_equal(dataset.read(1), expected)
        assert dataset.nodata == -9999


def test_resample_downsamples_average(tmp_path) -> None:
    src = tmp_path / "src.tif"
    data = np.array([[1.0, 3.0], [5.0, 7.0]], dtype=np.float32)
    write_raster(src, data, bounds=(0.0, 0.0, 2.0, 2.0))

    result = resample_dem(src, tmp_path / "out.tif", 1, 1, resampling=Resampling.average)

    assert result.resolution == (2.0, 2.0)
    with rasterio.open(result.path) as dataset:
        assert dataset.read(1)[0, 0] == pytest.approx(4.0)


@pytest.mark.parametrize(("width", "height"), [(0, 2), (2, 0), (-1, -1)])
def test_resample_rejects_empty_size(tmp_path, width: int, height: int) -> None:
    src = tmp_path / "src.tif"
    write_raster(src, np.ones((2, 2), dtype=np.int16), bounds=(0.0, 0.0, 2.0, 2.0))

    with pytest.raises(ValueError, match="positive"):
        resample_dem(src, tmp_path / "out.tif", width, height)
