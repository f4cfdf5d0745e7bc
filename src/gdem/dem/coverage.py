"""Selection of DEM files covering a rectangle."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import rasterio

from gdem.dem.crs import reproject_bounds, same_crs

LOGGER = logging.getLogger(__name__)


def coverage(
    paths: Iterable[str | Path],
    top_left_x: float,
    top_left_y: float,
    bottom_right_x: float,
    bottom_right_y: float,
    *,
    crs: str | None = None,
) -> list[Path]:
    """Return the DEMs whose footprint intersects the rectangle.

    Footprints are compared in each raster's own coordinates unless ``crs``
    names the rectangle's CRS, in which case footprints are transformed into
    it first. Input order is preserved.
    """
    if top_left_x >= bottom_right_x or bottom_right_y >= top_left_y:
        raise ValueError("Coverage rectangle top-left must lie above and left of bottom-right.")

    covering: list[Path] = []
    for path in paths:
        with rasterio.open(path) as dataset:
            bounds = tuple(dataset.bounds)
            if crs is not None and dataset.crs is not None and not same_crs(dataset.crs, crs):
                bounds = reproject_bounds(bounds, dataset.crs, crs)
        west, south, east, north = bounds
        if (
            west < bottom_right_x
            and east > top_left_x
            and south < top_left_y
            and north > bottom_right_y
        ):
            covering.append(Path(path))
        else:
            LOGGER.debug("Skipping %s outside the rectangle", path, extra={"raster": str(path)})
    return covering
