"""DEM sampling helpers and raster utilities."""

from gdem.dem.clip import clip_dem
from gdem.dem.coverage import coverage
from gdem.dem.crs import reproject_bounds, same_crs, to_crs
from gdem.dem.metadata import RasterMetadata, RasterReport, describe_raster
from gdem.dem.models import (
    Bounds,
    ClipResult,
    Coordinate,
    MergeResult,
    PixelIndex,
    ProfilePoint,
    ReprojectResult,
    ResampleResult,
)
from gdem.dem.mosaic import merge_dems
from gdem.dem.profile import points_along, sample_profile
from gdem.dem.resample import resample_dem
from gdem.dem.sampler import ElevationSampler
from gdem.dem.source import RasterioSource, RasterSource
from gdem.dem.warp import reproject_dem

__all__ = [
    "Bounds",
    "ClipResult",
    "Coordinate",
    "ElevationSampler",
    "MergeResult",
    "PixelIndex",
    "ProfilePoint",
    "RasterMetadata",
    "RasterReport",
    "RasterSource",
    "RasterioSource",
    "ReprojectResult",
    "ResampleResult",
    "clip_dem",
    "coverage",
    "describe_raster",
    "merge_dems",
    "points_along",
    "reproject_bounds",
    "reproject_dem",
    "resample_dem",
    "same_crs",
    "sample_profile",
    "to_crs",
]
