"""Reprojection of DEMs to WGS84."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any

import numpy as np
import rasterio
from rasterio.crs import CRS as RasterioCRS
from rasterio.enums import Resampling
from rasterio.warp import calculate_default_transform, reproject

from gdem.dem.crs import WGS84, to_crs
from gdem.dem.models import ReprojectResult

LOGGER = logging.getLogger(__name__)

DEFAULT_NODATA = -32768.0


def output_nodata(dtype: Any, nodata: float | None = None) -> float:
    """Return the no-data value written to an output of ``dtype``.

    Without an explicit value, ``DEFAULT_NODATA`` is used when the type can
    hold it and the type's lowest value otherwise (0 for unsigned rasters).
    """
    dtype = np.dtype(dtype)
    if dtype.kind not in "iu":
        return DEFAULT_NODATA if nodata is None else float(nodata)
    info = np.iinfo(dtype)
    if nodata is None:
        return DEFAULT_NODATA if info.min <= DEFAULT_NODATA else float(info.min)
    if not math.isfinite(nodata) or not info.min <= nodata <= info.max or nodata != int(nodata):
        raise ValueError(f"No-data value {nodata} cannot be stored in a {dtype.name} raster.")
    return float(nodata)


def reproject_dem(
    src_path: str | Path,
    output_path: str | Path,
    *,
    nodata: float | None = None,
    dst_crs: str = WGS84,
    resampling: Resampling = Resampling.nearest,
    force_axis_order: bool = True,
) -> ReprojectResult:
    """Warp every band of a DEM to ``dst_crs`` and write a GeoTIFF.

    Source no-data pixels are written as ``nodata``, which the output
    declares as its no-data value. Without ``nodata``, a value the output
    type can hold is chosen by :func:`output_nodata`.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    target = RasterioCRS.from_wkt(to_crs(dst_crs).to_wkt())
    env_options = {}
    if force_axis_order:
        env_options["OGR_CT_FORCE_TRADITIONAL_GIS_ORDER"] = "YES"

    with rasterio.Env(**env_options):
        with rasterio.open(src_path) as src:
            if src.crs is None:
                raise ValueError("Source DEM must declare a CRS.")
            nodata = output_nodata(src.dtypes[0], nodata)
            transform, width, height = calculate_default_transform(
                src.crs,
                target,
                src.width,
                src.height,
                *src.bounds,
            )
            meta = src.meta.copy()
            meta.update(
                {
                    "driver": "GTiff",
                    "crs": target,
                    "transform": transform,
                    "width": width,
                    "height": height,
                    "nodata": nodata,
                }
            )
            LOGGER.debug(
                "Reprojecting %s to %s (%sx%s)",
                src_path,
                dst_crs,
                width,
                height,
                extra={"raster": str(src_path)},
            )
            with rasterio.open(output_path, "w", **meta) as dest:
                for band in range(1, src.count + 1):
                    reproject(
                        source=rasterio.band(src, band),
                        destination=rasterio.band(dest, band),
                        src_transform=src.transform,
                        src_crs=src.crs,
                        dst_transform=transform,
                        dst_crs=target,
                        resampling=resampling,
                        src_nodata=src.nodata,
                        dst_nodata=nodata,
                    )

    with rasterio.open(output_path) as dataset:
        bounds = dataset.bounds
        return ReprojectResult(
            path=output_path,
            crs=dataset.crs.to_string(),
            bounds=(bounds.left, bounds.bottom, bounds.right, bounds.top),
            resolution=(abs(dataset.res[0]), abs(dataset.res[1])),
            nodata=dataset.nodata,
        )
