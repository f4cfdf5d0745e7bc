from __future__ import annotations

import os
from pathlib import Path
from typing import Tuple

import numpy as np
import rasterio
from rasterio.transform import from_bounds

from gdem.dem.source import GeoTransform
from gdem.errors import PixelReadError


def write_raster(
    path: Path,
    data: np.ndarray,
    *,
    bounds: Tuple[float, float, float, float],
    crs: str | None = "EPSG:4326",
    nodata: float | None = None,
) -> None:
    """Write a GeoTIFF; ``data`` is (rows, cols) or (bands, rows, cols)."""
    bands = data if data.ndim == 3 else data[np.newaxis, ...]
    count, height, width = bands.shape
    transform = from_bounds(*bounds, width=width, height=height)
    path.parent.mkdir(parents=True, exist_ok=True)
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=bands.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dataset:
        dataset.write(bands)


class ArraySource:
    """In-memory RasterSource recording every pixel read."""

    def __init__(
        self,
        data: np.ndarray,
        transform: GeoTransform,
        *,
        nodata: float | None = None,
        bands: int = 1,
        fail_reads: bool = False,
    ) -> None:
        self.data = data
        self.transform = transform
        self._nodata = nodata
        self._bands = bands
        self.fail_reads = fail_reads
        self.reads: list[tuple[int, int]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return "memory"

    def band_count(self) -> int:
        return self._bands

    def nodata(self, band: int) -> float | None:
        return self._nodata

    def size(self) -> tuple[int, int]:
        rows, columns = self.data.shape
        return rows, columns

    def geotransform(self) -> GeoTransform:
        return self.transform

    def dtype(self, band: int) -> np.dtype:
        return self.data.dtype

    def projection(self) -> str:
        return ""

    def read_pixel(self, band: int, row: int, column: int) -> int | float:
        self.reads.append((row, column))
        rows, columns = self.data.shape
        if self.fail_reads or not (0 <= row < rows and 0 <= column < columns):
            raise PixelReadError(f"cannot read ({row}, {column})")
        return self.data[row, column].item()

    def reopen(self) -> "ArraySource":
        return ArraySource(
            self.data,
            self.transform,
            nodata=self._nodata,
            bands=self._bands,
            fail_reads=self.fail_reads,
        )

    def close(self) -> None:
        self.closed = True


def with_src_env(base_env: dict[str, str] | None = None) -> dict[str, str]:
    """Return an environment with repo src/ on PYTHONPATH."""
    env = dict(base_env or os.environ)
    repo_root = Path(__file__).resolve().parents[1]
    src_path = repo_root / "src"
    if src_path.exists():
        existing = env.get("PYTHONPATH", "")
        entries = [entry for entry in existing.split(os.pathsep) if entry]
        src_str = str(src_path)
        if src_str not in entries:
            entries.insert(0, src_str)
        env["PYTHONPATH"] = os.pathsep.join(entries)
    return env
