"""Elevation sampling and utilities for DEM rasters."""

from gdem.dem.metadata import RasterMetadata, describe_raster
from gdem.dem.models import Bounds, Coordinate
from gdem.dem.sampler import ElevationSampler

__version__ = "0.3.0"

__all__ = [
    "Bounds",
    "Coordinate",
    "ElevationSampler",
    "RasterMetadata",
    "__version__",
    "describe_raster",
]
