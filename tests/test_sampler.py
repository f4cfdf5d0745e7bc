from __future__ import annotations

import math

import numpy as np
import pytest

from gdem.dem.models import PixelIndex
from gdem.dem.sampler import ElevationSampler
from tests.utils import ArraySource, write_raster

NODATA = -9999


@pytest.fixture
def square_dem(tmp_path):
    """2x2 raster with origin (0, 0) and resolution (1, -1)."""
    path = tmp_path / "square.tif"
    data = np.array([[10, 20], [30, 40]], dtype=np.int16)
    write_raster(path, data, bounds=(0.0, -2.0, 2.0, 0.0), nodata=NODATA)
    return path


@pytest.fixture
def grid_dem(tmp_path):
    """3x3 raster with distinct values and unit resolution."""
    path = tmp_path / "grid.tif"
    data = (np.arange(9, dtype=np.int16) * 10 + 100).reshape(3, 3)
    write_raster(path, data, bounds=(0.0, -3.0, 3.0, 0.0), nodata=NODATA)
    return path, data


def test_metadata_of_square_dem(square_dem) -> None:
    with ElevationSampler(square_dem) as sampler:
        meta = sampler.metadata
        assert (meta.y_max, meta.x_min, meta.y_min, meta.x_max) == (0.0, 0.0, -2.0, 2.0)
        assert (meta.y_resolution, meta.x_resolution) == (-1.0, 1.0)


def test_interpolated_altitude_at_raster_center(square_dem) -> None:
    with ElevationSampler(square_dem) as sampler:
        assert sampler.interpolated_altitude(-0.5, 0.5) == 25.0


def test_index_maps_coordinates_to_fractional_pixels(square_dem) -> None:
    with ElevationSampler(square_dem) as sampler:
        assert sampler.index(-0.5, 0.5) == PixelIndex(0.5, 0.5)
        assert sampler.index(-1.25, 1.75) == PixelIndex(1.25, 1.75)
        assert sampler.index(0.0, 0.5) == PixelIndex(NODATA, NODATA)


@pytest.mark.parametrize(
    ("lat", "lon"),
    [
        (0.0, 0.5),
        (-1.0, 2.0),
        (0.0, 2.0),
        (-2.5, 1.0),
        (-1.0, -0.5),
        (5.0, 5.0),
    ],
)
def test_outside_points_return_nodata(square_dem, lat: float, lon: float) -> None:
    with ElevationSampler(square_dem) as sampler:
        assert not sampler.check_bounds(lat, lon)
        assert sampler.altitude(lat, lon) == NODATA
        assert sampler.interpolated_altitude(lat, lon) == float(NODATA)


def test_south_and_west_edges_are_inside(square_dem) -> None:
    with ElevationSampler(square_dem) as sampler:
        assert sampler.check_bounds(-2.0, 0.5)
        assert sampler.check_bounds(-1.0, 0.0)
        # row 2.0 rounds past the last row and is clamped back to it
        assert sampler.altitude(-2.0, 0.0) == 30
        assert sampler.altitude(-1.0, 0.0) == 30
        assert sampler.interpolated_altitude(-2.0, 0.5) == 35.0


def test_nearest_rounds_halves_away_from_zero(square_dem) -> None:
    with ElevationSampler(square_dem) as sampler:
        assert sampler.altitude(-0.5, 0.5) == 40
        assert sampler.altitude(-0.49, 0.49) == 10
        assert sampler.altitude(-0.2, 1.6) == 20


def test_altitude_returns_sample_type(square_dem) -> None:
    with ElevationSampler(square_dem) as sampler:
        assert isinstance(sampler.altitude(-1.0, 1.0), int)
        assert isinstance(sampler.interpolated_altitude(-1.0, 1.0), float)
    with ElevationSampler(square_dem, dtype="float32") as sampler:
        assert isinstance(sampler.altitude(-1.0, 1.0), float)
        assert sampler.altitude(-1.0, 1.0) == 40.0


def test_pixel_nodes_round_trip(grid_dem) -> None:
    path, data = grid_dem
    with ElevationSampler(path) as sampler:
        for row in range(1, 3):
            for column in range(3):
                lat = -float(row)
                lon = float(column)
                assert sampler.altitude(lat, lon) == data[row, column]
                assert sampler.interpolated_altitude(lat, lon) == float(data[row, column])


def test_interpolation_blends_neighbours(grid_dem) -> None:
    path, data = grid_dem
    with ElevationSampler(path) as sampler:
        value = sampler.interpolated_altitude(-1.25, 0.5)
    top = data[1, 0] * 0.5 + data[1, 1] * 0.5
    bottom = data[2, 0] * 0.5 + data[2, 1] * 0.5
    assert value == pytest.approx(top * 0.75 + bottom * 0.25)


def test_interpolation_stays_inside_raster() -> None:
    data = np.arange(12, dtype=np.int16).reshape(3, 4)
    source = ArraySource(data, (0.0, 0.5, 0.0, 0.0, 0.0, -0.5), nodata=NODATA)
    sampler = ElevationSampler(source)

    lats = [-1.5, -1.4999, -1.25, -1.0, -0.75, -0.01]
    lons = [0.0, 0.25, 1.5, 1.75, 1.9999]
    for lat in lats:
        for lon in lons:
            assert sampler.interpolated_altitude(lat, lon) != NODATA

    assert source.reads
    assert all(0 <= row < 3 and 0 <= column < 4 for row, column in source.reads)
    # last row and column degrade to the edge values
    assert sampler.interpolated_altitude(-1.5, 1.75) == float(data[2, 3])
    assert sampler.interpolated_altitude(-0.75, 1.75) == pytest.approx((data[2, 3] + data[1, 3]) / 2)


def test_read_failures_collapse_to_nodata() -> None:
    data = np.ones((2, 2), dtype=np.int16)
    source = ArraySource(data, (0.0, 1.0, 0.0, 0.0, 0.0, -1.0), nodata=NODATA, fail_reads=True)
    sampler = ElevationSampler(source)

    assert sampler.altitude(-1.0, 1.0) == NODATA
    assert sampler.interpolated_altitude(-0.5, 0.5) == float(NODATA)


def test_nodata_corners_are_blended() -> None:
    data = np.array([[NODATA, 0], [0, 0]], dtype=np.int16)
    source = ArraySource(data, (0.0, 1.0, 0.0, 0.0, 0.0, -1.0), nodata=NODATA)
    sampler = ElevationSampler(source)

    assert sampler.interpolated_altitude(-0.5, 0.5) == NODATA / 4


def test_nan_nodata_rasters(tmp_path) -> None:
    path = tmp_path / "float.tif"
    data = np.array([[1.5, 2.5], [3.5, 4.5]], dtype=np.float32)
    write_raster(path, data, bounds=(0.0, -2.0, 2.0, 0.0), nodata=float("nan"))

    with ElevationSampler(path) as sampler:
        assert math.isnan(sampler.altitude(1.0, 1.0))
        assert math.isnan(sampler.interpolated_altitude(1.0, 1.0))
        assert sampler.altitude(-1.0, 1.0) == 4.5
        assert sampler.interpolated_altitude(-0.5, 0.5) == pytest.approx(3.0)


def test_sample_type_tag_converts_values(tmp_path) -> None:
    path = tmp_path / "float.tif"
    data = np.array([[1.75, 2.25], [3.5, 4.5]], dtype=np.float32)
    write_raster(path, data, bounds=(0.0, -2.0, 2.0, 0.0), nodata=-9999.0)

    with ElevationSampler(path, dtype="int16") as sampler:
        assert sampler.altitude(-1.0, 0.0) == 3
        assert sampler.nodata == NODATA
        assert sampler.altitude(0.5, 0.0) == NODATA


def test_second_band(tmp_path) -> None:
    path = tmp_path / "multi.tif"
    data = np.stack(
        [
            np.full((2, 2), 1, dtype=np.int16),
            np.full((2, 2), 2, dtype=np.int16),
        ]
    )
    write_raster(path, data, bounds=(0.0, -2.0, 2.0, 0.0), nodata=NODATA)

    with ElevationSampler(path, 2) as sampler:
        assert sampler.metadata.band == 2
        assert sampler.altitude(-1.0, 1.0) == 2


def test_description(square_dem) -> None:
    with ElevationSampler(square_dem) as sampler:
        text = str(sampler)
    assert text.startswith("Projection : ")
    assert "Data Type : Int16" in text
    assert "No Data Value : -9999" in text


def test_queries_are_idempotent(square_dem) -> None:
    with ElevationSampler(square_dem) as sampler:
        first = [sampler.interpolated_altitude(-0.7, 1.3) for _ in range(3)]
    assert first[0] == first[1] == first[2]
