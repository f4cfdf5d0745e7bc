"""Exceptions raised while opening and describing DEM rasters."""

from __future__ import annotations


class GdemError(Exception):
    """Base class for gdem errors."""


class DemFileNotFoundError(GdemError, FileNotFoundError):
    """The DEM file does not exist."""


class RasterOpenError(GdemError, OSError):
    """The DEM file exists but could not be opened as a raster."""


class InvalidBandError(GdemError, ValueError):
    """The requested band index is not present in the raster."""


class TransformUnavailableError(GdemError, ValueError):
    """The raster has no usable geo-transform."""


class InvalidSampleTypeError(GdemError, ValueError):
    """The requested sample type cannot hold elevation values."""


class InvalidCoordinateError(GdemError, ValueError):
    """A latitude/longitude pair lies outside the valid geographic range."""


class PixelReadError(GdemError):
    """A single pixel could not be read from the raster source."""


class SettingsError(GdemError, ValueError):
    """A settings file could not be parsed or failed validation."""
