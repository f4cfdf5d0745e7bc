"""Median compositing of DEM tiles."""

from __future__ import annotations

import logging
import math
import warnings
from pathlib import Path
from typing import Sequence

import numpy as np
import rasterio
from rasterio.enums import Resampling
from rasterio.transform import from_origin
from rasterio.windows import from_bounds as window_from_bounds

from gdem.dem.models import BoundingBox, MergeResult
from gdem.dem.warp import output_nodata

LOGGER = logging.getLogger(__name__)


def _pixel_count(extent: float, resolution: float) -> int:
    """Return the pixels needed to cover ``extent``, ignoring float noise."""
    return max(1, int(math.ceil(round(extent / resolution, 6))))


def _composite_band(
    sources: Sequence[rasterio.io.DatasetReader],
    band: int,
    *,
    grid_bounds: BoundingBox,
    shape: tuple[int, int],
) -> np.ndarray:
    """Return the per-pixel median of valid samples, NaN where none exist.

    Sources share one CRS, so each is placed on the union grid with a
    boundless window read; pixels outside a source or flagged as its
    no-data are masked.
    """
    layers = np.full((len(sources), *shape), np.nan, dtype=np.float64)
    for layer, src in zip(layers, sources):
        window = window_from_bounds(*grid_bounds, transform=src.transform)
        data = src.read(
            band,
            window=window,
            out_shape=shape,
            boundless=True,
            masked=True,
            resampling=Resampling.nearest,
        )
        layer[:] = data.astype(np.float64).filled(np.nan)
    with warnings.catch_warnings():
        # all-NaN pixels are expected where no tile has data
        warnings.simplefilter("ignore", RuntimeWarning)
        return np.nanmedian(layers, axis=0)


def merge_dems(
    dem_paths: Sequence[str | Path],
    output_path: str | Path,
    *,
    nodata: float | None = None,
) -> MergeResult:
    """Merge DEM tiles into one GeoTIFF using median compositing.

    The output grid spans the union of the inputs at the first input's
    resolution. Pixels covered by several tiles take the median of their
    valid samples; pixels without any valid sample are set to ``nodata``,
    which defaults to a value the first input's type can hold.
    """
    if not dem_paths:
        raise ValueError("At least one DEM path is required.")

    output_path = Path(output_path)
    sources = [rasterio.open(path) for path in dem_paths]
    try:
        base = sources[0]
        if base.crs is None:
            raise ValueError("Source DEM CRS is required for merging.")
        crs = base.crs
        band_count = base.count
        dtype = np.dtype(base.dtypes[0])
        nodata = output_nodata(dtype, nodata)
        for src in sources[1:]:
            if src.crs != crs:
                raise ValueError("All merge sources must share the same CRS.")
            if src.count != band_count:
                raise ValueError("All merge sources must share the same band count.")

        res_x, res_y = abs(base.res[0]), abs(base.res[1])
        min_x = min(src.bounds.left for src in sources)
        min_y = min(src.bounds.bottom for src in sources)
        max_x = max(src.bounds.right for src in sources)
        max_y = max(src.bounds.top for src in sources)
        width = _pixel_count(max_x - min_x, res_x)
        height = _pixel_count(max_y - min_y, res_y)
        transform = from_origin(min_x, max_y, res_x, res_y)
        grid_bounds = (min_x, max_y - height * res_y, min_x + width * res_x, max_y)

        merged = np.empty((band_count, height, width), dtype=dtype)
        for band in range(1, band_count + 1):
            median = _composite_band(
                sources,
                band,
                grid_bounds=grid_bounds,
                shape=(height, width),
            )
            empty = np.isnan(median)
            if dtype.kind in "iu":
                median = np.rint(median)
            median[empty] = nodata
            merged[band - 1] = median.astype(dtype)
            LOGGER.debug(
                "Band %s composited, %s empty pixel(s)",
                band,
                int(empty.sum()),
                extra={"raster": str(output_path)},
            )

        meta = base.meta.copy()
        meta.update(
            {
                "driver": "GTiff",
                "height": height,
                "width": width,
                "count": band_count,
                "dtype": dtype.name,
                "crs": crs,
                "transform": transform,
                "nodata": nodata,
            }
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with rasterio.open(output_path, "w", **meta) as dest:
            dest.write(merged)
    finally:
        for src in sources:
            src.close()

    return MergeResult(
        path=output_path,
        crs=crs.to_string(),
        bounds=(min_x, min_y, max_x, max_y),
        resolution=(res_x, res_y),
        nodata=nodata,
        sources=len(sources),
    )
