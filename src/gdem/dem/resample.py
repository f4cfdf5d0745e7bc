"""Resampling of DEMs to an explicit output size."""

from __future__ import annotations

from pathlib import Path

import rasterio
from rasterio.enums import Resampling

from gdem.dem.models import ResampleResult

RESAMPLING_CHOICES = ("nearest", "bilinear", "cubic", "average")


def resample_dem(
    src_path: str | Path,
    output_path: str | Path,
    width: int,
    height: int,
    *,
    resampling: Resampling = Resampling.bilinear,
) -> ResampleResult:
    """Rewrite a DEM on a ``width`` x ``height`` grid over the same bounds."""
    if width < 1 or height < 1:
        raise ValueError("Output width and height must be positive.")

    output_path = Path(output_path)
    with rasterio.open(src_path) as src:
        data = src.read(out_shape=(src.count, height, width), resampling=resampling)
        transform = src.transform * src.transform.scale(src.width / width, src.height / height)
        meta = src.meta.copy()
        meta.update(
            {
                "driver": "GTiff",
                "height": height,
                "width": width,
                "transform": transform,
            }
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with rasterio.open(output_path, "w", **meta) as dest:
            dest.write(data)

    with rasterio.open(output_path) as dataset:
        bounds = dataset.bounds
        return ResampleResult(
            path=output_path,
            crs=dataset.crs.to_string() if dataset.crs else None,
            bounds=(bounds.left, bounds.bottom, bounds.right, bounds.top),
            resolution=(abs(dataset.res[0]), abs(dataset.res[1])),
            width=dataset.width,
            height=dataset.height,
        )
