"""Elevation sampling from a single DEM raster band."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any

from gdem.dem.metadata import RasterMetadata, coerce_sample
from gdem.dem.models import Bounds, PixelIndex
from gdem.dem.source import RasterioSource, RasterSource
from gdem.errors import PixelReadError

LOGGER = logging.getLogger(__name__)


def _round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class ElevationSampler:
    """Nearest-neighbour and bilinear elevation lookups on one raster band.

    ``source`` is a file path, an open rasterio dataset, or any object
    implementing :class:`~gdem.dem.source.RasterSource`. A sampler built from
    a path owns its handle and closes it on :meth:`close`, on context exit,
    or when collected; datasets and sources passed in stay open and remain
    the caller's responsibility.

    Query methods never raise: coordinates outside the raster and failed
    pixel reads both return the no-data value.

    Not safe for concurrent use from several threads; copy the sampler to get
    an independent handle per worker.
    """

    def __init__(
        self,
        source: str | Path | RasterSource | Any,
        band: int = 1,
        *,
        dtype: Any = None,
        nodata_fallback: float | None = None,
    ) -> None:
        self._source: RasterSource | None = None
        self._owned = False

        if isinstance(source, (str, Path)):
            opened: RasterSource = RasterioSource.open(source)
            owned = True
        elif hasattr(source, "read_pixel"):
            opened = source
            owned = False
        else:
            opened = RasterioSource(source)
            owned = False

        try:
            metadata = RasterMetadata.from_source(
                opened,
                band,
                dtype=dtype,
                nodata_fallback=nodata_fallback,
            )
            bounds = Bounds.from_extent(
                metadata.y_min,
                metadata.x_min,
                metadata.y_max,
                metadata.x_max,
            )
        except Exception:
            if owned:
                opened.close()
            raise

        self.metadata = metadata
        self.bounds = bounds
        self._source = opened
        self._owned = owned
        LOGGER.debug(
            "Opened DEM band %s (%sx%s)",
            band,
            metadata.rows,
            metadata.columns,
            extra={"raster": self.name},
        )

    @property
    def name(self) -> str:
        """Path of the underlying raster, empty once released."""
        return self._source.name if self._source is not None else ""

    @property
    def nodata(self) -> int | float:
        return self.metadata.nodata

    @property
    def owns_source(self) -> bool:
        return self._owned

    @property
    def is_open(self) -> bool:
        return self._source is not None

    def close(self) -> None:
        """Release the raster handle if this sampler opened it."""
        source = getattr(self, "_source", None)
        if source is not None and getattr(self, "_owned", False):
            source.close()
        self._source = None
        self._owned = False

    def __enter__(self) -> "ElevationSampler":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()

    def _empty_like(self) -> "ElevationSampler":
        clone = object.__new__(type(self))
        clone.metadata = self.metadata
        clone.bounds = self.bounds
        clone._source = None
        clone._owned = False
        return clone

    def __copy__(self) -> "ElevationSampler":
        """Return a sampler with its own handle to the same raster."""
        clone = self._empty_like()
        if self._source is not None:
            clone._source = self._source.reopen()
            clone._owned = True
        return clone

    def __deepcopy__(self, memo: dict[int, Any]) -> "ElevationSampler":
        return self.__copy__()

    def move(self) -> "ElevationSampler":
        """Transfer the handle and its ownership to a new sampler.

        This sampler is left without a handle; its queries return no-data.
        """
        moved = self._empty_like()
        moved._source = self._source
        moved._owned = self._owned
        self._source = None
        self._owned = False
        return moved

    def check_bounds(self, latitude: float, longitude: float) -> bool:
        """Return True when the coordinate lies inside the raster."""
        return self.bounds.within(latitude, longitude)

    def index(self, latitude: float, longitude: float) -> PixelIndex:
        """Map a coordinate to a fractional (row, column).

        Coordinates outside the raster map to ``(nodata, nodata)``.
        """
        meta = self.metadata
        if self.bounds.within(latitude, longitude):
            return PixelIndex(
                (latitude - meta.y_max) / meta.y_resolution,
                (longitude - meta.x_min) / meta.x_resolution,
            )
        return PixelIndex(meta.nodata, meta.nodata)

    def _is_nodata(self, value: float) -> bool:
        nodata = self.metadata.nodata
        if isinstance(nodata, float) and math.isnan(nodata):
            return math.isnan(value)
        return value == nodata

    def _read(self, row: int, column: int) -> int | float:
        if self._source is None:
            raise PixelReadError("sampler has no open raster")
        value = self._source.read_pixel(self.metadata.band, row, column)
        return coerce_sample(value, self.metadata.dtype)

    def altitude(self, latitude: float, longitude: float) -> int | float:
        """Return the elevation of the pixel nearest to the coordinate."""
        meta = self.metadata
        rc = self.index(latitude, longitude)
        if self._is_nodata(rc.row) or self._is_nodata(rc.column):
            return meta.nodata

        row = _round_half_away(rc.row)
        column = _round_half_away(rc.column)
        # A point on the southern or eastern-most sample rounds one past the end.
        if row == meta.rows:
            row -= 1
        if column == meta.columns:
            column -= 1

        try:
            return self._read(row, column)
        except PixelReadError as exc:
            LOGGER.debug("Altitude read failed: %s", exc, extra={"raster": self.name})
            return meta.nodata

    def interpolated_altitude(self, latitude: float, longitude: float) -> float:
        """Return the bilinear blend of the four pixels around the coordinate.

        No-data corner values take part in the blend like any other value.
        """
        meta = self.metadata
        rc = self.index(latitude, longitude)
        if self._is_nodata(rc.row) or self._is_nodata(rc.column):
            return float(meta.nodata)

        last_row = meta.rows - 1
        last_column = meta.columns - 1
        # A point on the southern edge floors to row == rows; read the last row instead.
        r = min(math.floor(rc.row), last_row)
        c = min(math.floor(rc.column), last_column)

        d_lat = min(rc.row, last_row) - r
        d_lon = min(rc.column, last_column) - c

        next_r = 0 if r == last_row else 1
        next_c = 0 if c == last_column else 1

        try:
            m = self._read(r, c)
            n = self._read(r, c + next_c)
            o = self._read(r + next_r, c)
            p = self._read(r + next_r, c + next_c)
        except PixelReadError as exc:
            LOGGER.debug(
                "Interpolated altitude read failed: %s",
                exc,
                extra={"raster": self.name},
            )
            return float(meta.nodata)

        return float(
            (1 - d_lat) * (1 - d_lon) * m
            + d_lon * (1 - d_lat) * n
            + (1 - d_lon) * d_lat * o
            + d_lat * d_lon * p
        )

    def __str__(self) -> str:
        return str(self.metadata)
