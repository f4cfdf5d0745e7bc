"""Raster band metadata derived from a geo-transform."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
from rasterio.dtypes import _gdal_typename

from gdem.dem.models import BoundingBox, Resolution
from gdem.dem.source import GeoTransform, RasterioSource, RasterSource
from gdem.errors import InvalidBandError, InvalidSampleTypeError, TransformUnavailableError


def validate_sample_dtype(value: Any) -> np.dtype:
    """Return a numpy dtype suitable for holding elevation samples.

    Booleans, complex numbers and single-byte (character sized) types are
    rejected.
    """
    try:
        dtype = np.dtype(value)
    except TypeError as exc:
        raise InvalidSampleTypeError(f"unknown sample type: {value!r}") from exc
    if dtype.kind in "iu" and dtype.itemsize >= 2:
        return dtype
    if dtype.kind == "f" and dtype.itemsize >= 4:
        return dtype
    raise InvalidSampleTypeError(f"unsupported sample type: {dtype.name}")


def native_sample_dtype(raster_dtype: np.dtype) -> np.dtype:
    """Pick the sample type used when the caller does not name one."""
    if raster_dtype.kind in "iu" and raster_dtype.itemsize == 1:
        return np.dtype(np.int16)
    return validate_sample_dtype(raster_dtype)


def default_nodata_fallback(dtype: np.dtype) -> int | float:
    """Return the lowest value representable by the sample type."""
    if dtype.kind in "iu":
        return int(np.iinfo(dtype).min)
    return float(np.finfo(dtype).min)


def coerce_sample(value: float, dtype: np.dtype) -> int | float:
    """Convert a raw value into the Python type matching the sample type.

    Values an integer type cannot hold (NaN, out of range) stay floats.
    """
    if dtype.kind in "iu":
        info = np.iinfo(dtype)
        if math.isfinite(value) and info.min <= value <= info.max:
            return int(value)
        return float(value)
    return float(np.asarray(value, dtype=dtype))


def extent_from_transform(
    transform: GeoTransform,
    rows: int,
    columns: int,
) -> tuple[float, float, float, float]:
    """Return (y_min, x_min, y_max, x_max) including the rotation terms."""
    x_min = transform[0]
    y_max = transform[3]
    x_max = transform[0] + columns * transform[1] + rows * transform[2]
    y_min = transform[3] + columns * transform[4] + rows * transform[5]
    return y_min, x_min, y_max, x_max


@dataclass(frozen=True)
class RasterMetadata:
    """Semantic description of one raster band."""

    band: int
    rows: int
    columns: int
    y_min: float
    x_min: float
    y_max: float
    x_max: float
    y_resolution: float
    x_resolution: float
    nodata: int | float
    dtype: np.dtype
    raster_dtype: np.dtype
    projection: str

    @classmethod
    def from_source(
        cls,
        source: RasterSource,
        band: int = 1,
        *,
        dtype: Any = None,
        nodata_fallback: float | None = None,
    ) -> "RasterMetadata":
        """Derive metadata for ``band`` of an open raster source."""
        if band < 1 or band > source.band_count():
            raise InvalidBandError(f"invalid raster band {band}")

        raster_dtype = source.dtype(band)
        sample_dtype = (
            validate_sample_dtype(dtype) if dtype is not None else native_sample_dtype(raster_dtype)
        )
        fallback = (
            nodata_fallback if nodata_fallback is not None else default_nodata_fallback(sample_dtype)
        )
        nodata = source.nodata(band)
        # GDAL reports an undeclared no-data value as zero.
        if nodata is None or nodata == 0:
            nodata = fallback

        rows, columns = source.size()
        transform = source.geotransform()
        x_resolution = transform[1]
        y_resolution = transform[5]
        if x_resolution == 0 or y_resolution == 0:
            raise TransformUnavailableError("dataset transformation has a zero resolution")
        y_min, x_min, y_max, x_max = extent_from_transform(transform, rows, columns)

        return cls(
            band=band,
            rows=rows,
            columns=columns,
            y_min=y_min,
            x_min=x_min,
            y_max=y_max,
            x_max=x_max,
            y_resolution=y_resolution,
            x_resolution=x_resolution,
            nodata=coerce_sample(nodata, sample_dtype),
            dtype=sample_dtype,
            raster_dtype=raster_dtype,
            projection=source.projection(),
        )

    @property
    def bounds(self) -> BoundingBox:
        """Return (west, south, east, north)."""
        return (self.x_min, self.y_min, self.x_max, self.y_max)

    @property
    def resolution(self) -> Resolution:
        """Return the (latitudinal, longitudinal) step."""
        return (self.y_resolution, self.x_resolution)

    def __str__(self) -> str:
        return (
            f"Projection : {self.projection}\n"
            f"Data Type : {_gdal_typename(self.raster_dtype.name)}\n"
            f"Rows : {self.rows}\n"
            f"Columns : {self.columns}\n"
            f"Resolution (latitudinal, longitudinal) : "
            f"({self.y_resolution:g}, {self.x_resolution:g})\n"
            "Bounded Region {\n"
            f"    North West : ({self.y_max:g}, {self.x_min:g})\n"
            f"    South East : ({self.y_min:g}, {self.x_max:g})\n"
            "}\n"
            f"No Data Value : {self.nodata}"
        )


def _json_nodata(value: float | None) -> float | None:
    # JSON has no NaN; a NaN no-data value is reported as null.
    if value is not None and math.isnan(value):
        return None
    return value


@dataclass(frozen=True)
class BandReport:
    """Per-band entry of a raster report."""

    index: int
    data_type: str
    nodata: float | None


@dataclass(frozen=True)
class RasterReport:
    """Whole-raster metadata summary."""

    path: str
    projection: str
    rows: int
    columns: int
    resolution: Resolution
    north_west: tuple[float, float]
    south_east: tuple[float, float]
    bands: tuple[BandReport, ...]

    def as_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "projection": self.projection,
            "rows": self.rows,
            "columns": self.columns,
            "resolution": list(self.resolution),
            "north_west": list(self.north_west),
            "south_east": list(self.south_east),
            "bands": [
                {
                    "index": band.index,
                    "data_type": band.data_type,
                    "nodata": _json_nodata(band.nodata),
                }
                for band in self.bands
            ],
        }

    def __str__(self) -> str:
        lines = [
            f"Projection : {self.projection}",
            f"Rows : {self.rows}",
            f"Columns : {self.columns}",
            f"Resolution (latitudinal, longitudinal) : "
            f"({self.resolution[0]:g}, {self.resolution[1]:g})",
            "Bounded Region {",
            f"    North West : ({self.north_west[0]:g}, {self.north_west[1]:g})",
            f"    South East : ({self.south_east[0]:g}, {self.south_east[1]:g})",
            "}",
        ]
        for band in self.bands:
            lines.extend(
                [
                    f"Raster ({band.index}) {{",
                    f"    Data Type : {band.data_type}",
                    f"    No Data Value : {band.nodata}",
                    "}",
                ]
            )
        return "\n".join(lines)


def _report_from_source(source: RasterSource) -> RasterReport:
    rows, columns = source.size()
    transform = source.geotransform()
    y_min, x_min, y_max, x_max = extent_from_transform(transform, rows, columns)
    bands = tuple(
        BandReport(
            index=index,
            data_type=_gdal_typename(source.dtype(index).name),
            nodata=source.nodata(index),
        )
        for index in range(1, source.band_count() + 1)
    )
    return RasterReport(
        path=source.name,
        projection=source.projection(),
        rows=rows,
        columns=columns,
        resolution=(transform[5], transform[1]),
        north_west=(y_max, x_min),
        south_east=(y_min, x_max),
        bands=bands,
    )


def describe_raster(target: str | Path | Any) -> RasterReport:
    """Collect a metadata report for every band of a raster.

    ``target`` is a path or an already-open rasterio dataset; a dataset
    passed in is left open.
    """
    if isinstance(target, (str, Path)):
        source = RasterioSource.open(target)
        try:
            return _report_from_source(source)
        finally:
            source.close()
    return _report_from_source(RasterioSource(target))
