"""Data models used by DEM sampling and raster utilities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Tuple

from gdem.errors import InvalidCoordinateError

BoundingBox = Tuple[float, float, float, float]
Resolution = Tuple[float, float]


@dataclass(frozen=True, order=True)
class Coordinate:
    """Geographic coordinate in degrees, ordered by latitude then longitude."""

    latitude: float = 0.0
    longitude: float = 0.0

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90 or not -180 <= self.longitude <= 180:
            raise InvalidCoordinateError(
                f"invalid coordinates ({self.latitude}:{self.longitude})"
            )


@dataclass(frozen=True)
class Bounds:
    """Corner coordinates of a raster's bounding box."""

    NW: Coordinate
    NE: Coordinate
    SW: Coordinate
    SE: Coordinate

    @classmethod
    def from_extent(
        cls,
        y_min: float,
        x_min: float,
        y_max: float,
        x_max: float,
    ) -> "Bounds":
        return cls(
            NW=Coordinate(y_max, x_min),
            NE=Coordinate(y_max, x_max),
            SW=Coordinate(y_min, x_min),
            SE=Coordinate(y_min, x_max),
        )

    def within(self, latitude: float, longitude: float) -> bool:
        """Return True when the point lies in the half-open box.

        South and west edges are inside, north and east edges are outside.
        """
        return (
            self.SW.latitude <= latitude < self.NE.latitude
            and self.SW.longitude <= longitude < self.NE.longitude
        )


class PixelIndex(NamedTuple):
    """Fractional raster position."""

    row: float
    column: float


@dataclass(frozen=True)
class ReprojectResult:
    """Result of reprojecting a DEM to a target CRS."""

    path: Path
    crs: str
    bounds: BoundingBox
    resolution: Resolution
    nodata: float


@dataclass(frozen=True)
class MergeResult:
    """Result of median-compositing several DEM tiles."""

    path: Path
    crs: str
    bounds: BoundingBox
    resolution: Resolution
    nodata: float
    sources: int


@dataclass(frozen=True)
class ClipResult:
    """Result of clipping a DEM to a rectangle."""

    path: Path
    crs: str | None
    bounds: BoundingBox
    resolution: Resolution
    width: int
    height: int


@dataclass(frozen=True)
class ResampleResult:
    """Result of resampling a DEM to a new pixel grid."""

    path: Path
    crs: str | None
    bounds: BoundingBox
    resolution: Resolution
    width: int
    height: int


@dataclass(frozen=True)
class ProfilePoint:
    """Elevation sample along a polyline."""

    latitude: float
    longitude: float
    distance_m: float
    elevation: float
