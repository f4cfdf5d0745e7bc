"""Rectangular clipping of DEMs."""

from __future__ import annotations

import math
from pathlib import Path

import rasterio
from rasterio.windows import Window
from rasterio.windows import from_bounds as window_from_bounds

from gdem.dem.models import ClipResult


def _snap_outward(window: Window, width: int, height: int) -> Window:
    """Grow a fractional window to whole pixels and intersect it with the raster."""
    col_start = max(0, math.floor(round(window.col_off, 6)))
    row_start = max(0, math.floor(round(window.row_off, 6)))
    col_stop = min(width, math.ceil(round(window.col_off + window.width, 6)))
    row_stop = min(height, math.ceil(round(window.row_off + window.height, 6)))
    if col_stop <= col_start or row_stop <= row_start:
        raise ValueError("Clip rectangle does not intersect the raster.")
    return Window(col_start, row_start, col_stop - col_start, row_stop - row_start)


def clip_dem(
    src_path: str | Path,
    output_path: str | Path,
    top_left_x: float,
    top_left_y: float,
    bottom_right_x: float,
    bottom_right_y: float,
) -> ClipResult:
    """Write the part of a DEM covered by a rectangle in raster coordinates."""
    if top_left_x >= bottom_right_x or bottom_right_y >= top_left_y:
        raise ValueError("Clip rectangle top-left must lie above and left of bottom-right.")

    output_path = Path(output_path)
    with rasterio.open(src_path) as src:
        fractional = window_from_bounds(
            top_left_x,
            bottom_right_y,
            bottom_right_x,
            top_left_y,
            transform=src.transform,
        )
        window = _snap_outward(fractional, src.width, src.height)
        data = src.read(window=window)
        meta = src.meta.copy()
        meta.update(
            {
                "driver": "GTiff",
                "height": int(window.height),
                "width": int(window.width),
                "transform": src.window_transform(window),
            }
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with rasterio.open(output_path, "w", **meta) as dest:
            dest.write(data)

    with rasterio.open(output_path) as dataset:
        bounds = dataset.bounds
        return ClipResult(
            path=output_path,
            crs=dataset.crs.to_string() if dataset.crs else None,
            bounds=(bounds.left, bounds.bottom, bounds.right, bounds.top),
            resolution=(abs(dataset.res[0]), abs(dataset.res[1])),
            width=dataset.width,
            height=dataset.height,
        )
