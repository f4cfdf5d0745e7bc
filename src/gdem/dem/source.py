"""Raster I/O capability used by the elevation sampler."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, Tuple

import numpy as np
import rasterio
from rasterio.errors import RasterioError
from rasterio.windows import Window

from gdem.errors import (
    DemFileNotFoundError,
    PixelReadError,
    RasterOpenError,
    TransformUnavailableError,
)

GeoTransform = Tuple[float, float, float, float, float, float]


class RasterSource(Protocol):
    """Minimal pixel-level contract a DEM sampler needs from a raster."""

    @property
    def name(self) -> str:
        """Path the raster can be re-opened from."""
        ...

    def band_count(self) -> int: ...

    def nodata(self, band: int) -> float | None: ...

    def size(self) -> tuple[int, int]:
        """Return (rows, columns)."""
        ...

    def geotransform(self) -> GeoTransform:
        """Return the GDAL-ordered affine coefficients."""
        ...

    def dtype(self, band: int) -> np.dtype: ...

    def projection(self) -> str: ...

    def read_pixel(self, band: int, row: int, column: int) -> int | float:
        """Read one sample, raising PixelReadError on failure."""
        ...

    def reopen(self) -> "RasterSource":
        """Open an independent handle to the same raster."""
        ...

    def close(self) -> None: ...


class RasterioSource:
    """RasterSource backed by a rasterio dataset."""

    def __init__(self, dataset: Any) -> None:
        self.dataset = dataset

    @classmethod
    def open(cls, path: str | Path) -> "RasterioSource":
        """Open a raster file read-only."""
        path = Path(path)
        if not path.exists():
            raise DemFileNotFoundError(f"file '{path}' not found")
        try:
            dataset = rasterio.open(path)
        except RasterioError as exc:
            raise RasterOpenError(f"failed to read DEM file '{path}'") from exc
        return cls(dataset)

    @property
    def name(self) -> str:
        return self.dataset.name

    @property
    def closed(self) -> bool:
        return bool(self.dataset.closed)

    def band_count(self) -> int:
        return self.dataset.count

    def nodata(self, band: int) -> float | None:
        return self.dataset.nodatavals[band - 1]

    def size(self) -> tuple[int, int]:
        return self.dataset.height, self.dataset.width

    def geotransform(self) -> GeoTransform:
        transform = self.dataset.transform
        gcps, _ = self.dataset.gcps
        # rasterio reports a missing geo-transform as the identity matrix.
        if transform.is_identity and self.dataset.crs is None and not gcps:
            raise TransformUnavailableError("failed to read dataset transformations")
        return tuple(float(value) for value in transform.to_gdal())  # type: ignore[return-value]

    def dtype(self, band: int) -> np.dtype:
        return np.dtype(self.dataset.dtypes[band - 1])

    def projection(self) -> str:
        crs = self.dataset.crs
        return crs.to_wkt() if crs else ""

    def read_pixel(self, band: int, row: int, column: int) -> int | float:
        try:
            data = self.dataset.read(band, window=Window(column, row, 1, 1))
        except (RasterioError, ValueError, IndexError) as exc:
            raise PixelReadError(f"failed to read pixel ({row}, {column})") from exc
        if data.shape != (1, 1):
            raise PixelReadError(f"pixel ({row}, {column}) is outside the raster")
        return data[0, 0].item()

    def reopen(self) -> "RasterioSource":
        return RasterioSource.open(self.name)

    def close(self) -> None:
        self.dataset.close()
