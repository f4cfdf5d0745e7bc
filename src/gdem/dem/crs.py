"""CRS helpers shared by the raster utilities."""

from __future__ import annotations

from typing import Any

from pyproj import CRS, Transformer

from gdem.dem.models import BoundingBox

WGS84 = "EPSG:4326"


def to_crs(value: Any) -> CRS:
    """Normalize a CRS string, pyproj CRS, or rasterio CRS into a pyproj CRS."""
    if hasattr(value, "to_wkt") and not isinstance(value, CRS):
        value = value.to_wkt()
    return CRS.from_user_input(value)


def same_crs(left: Any, right: Any) -> bool:
    """Return True when two CRS descriptions are equivalent."""
    return to_crs(left) == to_crs(right)


def reproject_bounds(bounds: BoundingBox, src: Any, dst: Any) -> BoundingBox:
    """Transform (west, south, east, north) between CRSs, lon/lat axis order."""
    west, south, east, north = bounds
    tx = Transformer.from_crs(to_crs(src), to_crs(dst), always_xy=True)
    xs, ys = tx.transform(
        [west, west, east, east],
        [south, north, south, north],
    )
    return (min(xs), min(ys), max(xs), max(ys))
