"""Command-line interface for gdem."""

from __future__ import annotations

import argparse
import json
import logging
import math
from pathlib import Path

from rasterio.enums import Resampling
from rasterio.errors import RasterioError

from gdem import __version__
from gdem.dem.clip import clip_dem
from gdem.dem.coverage import coverage
from gdem.dem.metadata import describe_raster
from gdem.dem.mosaic import merge_dems
from gdem.dem.profile import sample_profile
from gdem.dem.resample import RESAMPLING_CHOICES, resample_dem
from gdem.dem.sampler import ElevationSampler
from gdem.dem.warp import reproject_dem
from gdem.errors import GdemError
from gdem.logging_utils import LogOptions, configure_logging
from gdem.settings import Settings, load_settings

LOGGER = logging.getLogger("gdem.cli")

FAILURES = (GdemError, RasterioError, OSError, ValueError)


def parse_point(value: str) -> tuple[float, float]:
    """Parse a ``LAT,LON`` argument."""
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected LAT,LON but got {value!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected LAT,LON but got {value!r}") from exc


def _json_number(value: int | float) -> int | float | None:
    """Map NaN to None so payloads stay strict JSON."""
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _add_bbox_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--bbox",
        nargs=4,
        type=float,
        required=True,
        metavar=("TOP_LEFT_X", "TOP_LEFT_Y", "BOTTOM_RIGHT_X", "BOTTOM_RIGHT_Y"),
        help="Rectangle in raster coordinates.",
    )


def _add_sampler_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("path", help="Path to a DEM raster.")
    parser.add_argument("--band", type=int, help="1-based band index to sample.")
    parser.add_argument(
        "--dtype",
        help="Sample type for nearest-neighbour values (e.g. int16, float32).",
    )
    parser.add_argument(
        "--nodata-fallback",
        type=float,
        help="No-data value used when the raster declares none or zero.",
    )
    parser.add_argument(
        "--interpolate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use bilinear interpolation instead of nearest neighbour.",
    )


def _add_info_parser(subparsers: argparse._SubParsersAction) -> None:
    info = subparsers.add_parser("info", help="Print raster metadata.")
    info.add_argument("path", help="Path to a raster.")
    info.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format.",
    )


def _add_sample_parser(subparsers: argparse._SubParsersAction) -> None:
    sample = subparsers.add_parser("sample", help="Sample elevation at points.")
    _add_sampler_arguments(sample)
    sample.add_argument(
        "--point",
        action="append",
        type=parse_point,
        required=True,
        metavar="LAT,LON",
        help="Coordinate to sample (repeatable).",
    )


def _add_profile_parser(subparsers: argparse._SubParsersAction) -> None:
    profile = subparsers.add_parser("profile", help="Sample elevation along a polyline.")
    _add_sampler_arguments(profile)
    profile.add_argument(
        "--vertex",
        action="append",
        type=parse_point,
        required=True,
        metavar="LAT,LON",
        help="Polyline vertex (repeat at least twice).",
    )
    profile.add_argument("--spacing", type=float, help="Point spacing in meters.")
    profile.add_argument("--output", help="Write the profile JSON to this path.")


def _add_reproject_parser(subparsers: argparse._SubParsersAction) -> None:
    reproject = subparsers.add_parser("reproject", help="Reproject a DEM to WGS84.")
    reproject.add_argument("source", help="Source raster.")
    reproject.add_argument("destination", help="Output GeoTIFF.")
    reproject.add_argument(
        "--nodata",
        type=float,
        help="No-data value of the output (default: -32768, or the lowest value of the type).",
    )
    reproject.add_argument("--crs", default="EPSG:4326", help="Target CRS.")


def _add_merge_parser(subparsers: argparse._SubParsersAction) -> None:
    merge = subparsers.add_parser("merge", help="Median-composite DEM tiles.")
    merge.add_argument("destination", help="Output GeoTIFF.")
    merge.add_argument("sources", nargs="+", help="Input tiles.")
    merge.add_argument(
        "--nodata",
        type=float,
        help="No-data value of the output (default: -32768, or the lowest value of the type).",
    )


def _add_clip_parser(subparsers: argparse._SubParsersAction) -> None:
    clip = subparsers.add_parser("clip", help="Clip a DEM to a rectangle.")
    clip.add_argument("source", help="Source raster.")
    clip.add_argument("destination", help="Output GeoTIFF.")
    _add_bbox_argument(clip)


def _add_resample_parser(subparsers: argparse._SubParsersAction) -> None:
    resample = subparsers.add_parser("resample", help="Resample a DEM to a new size.")
    resample.add_argument("source", help="Source raster.")
    resample.add_argument("destination", help="Output GeoTIFF.")
    resample.add_argument("--width", type=int, required=True, help="Output width in pixels.")
    resample.add_argument("--height", type=int, required=True, help="Output height in pixels.")
    resample.add_argument(
        "--method",
        choices=RESAMPLING_CHOICES,
        default="bilinear",
        help="Resampling method.",
    )


def _add_coverage_parser(subparsers: argparse._SubParsersAction) -> None:
    cover = subparsers.add_parser("coverage", help="List DEMs intersecting a rectangle.")
    cover.add_argument("paths", nargs="+", help="Candidate rasters.")
    _add_bbox_argument(cover)
    cover.add_argument("--crs", help="CRS of the rectangle, if not the rasters' own.")


def _open_sampler(args: argparse.Namespace, settings: Settings) -> ElevationSampler:
    band = args.band if args.band is not None else settings.band
    fallback = (
        args.nodata_fallback if args.nodata_fallback is not None else settings.nodata_fallback
    )
    return ElevationSampler(
        args.path,
        band,
        dtype=args.dtype,
        nodata_fallback=fallback,
    )


def _interpolate(args: argparse.Namespace, settings: Settings) -> bool:
    return settings.interpolate if args.interpolate is None else args.interpolate


def _run_sample(args: argparse.Namespace, settings: Settings) -> int:
    interpolate = _interpolate(args, settings)
    with _open_sampler(args, settings) as sampler:
        for lat, lon in args.point:
            if interpolate:
                elevation = sampler.interpolated_altitude(lat, lon)
            else:
                elevation = sampler.altitude(lat, lon)
            payload = {
                "latitude": lat,
                "longitude": lon,
                "elevation": _json_number(elevation),
                "in_bounds": sampler.check_bounds(lat, lon),
            }
            print(json.dumps(payload, allow_nan=False))
    return 0


def _run_profile(args: argparse.Namespace, settings: Settings) -> int:
    spacing = args.spacing if args.spacing is not None else settings.profile_spacing_m
    with _open_sampler(args, settings) as sampler:
        points = sample_profile(
            sampler,
            args.vertex,
            spacing,
            interpolate=_interpolate(args, settings),
        )
        payload = {
            "raster": sampler.name,
            "nodata": _json_number(sampler.nodata),
            "points": [
                {
                    "latitude": point.latitude,
                    "longitude": point.longitude,
                    "distance_m": point.distance_m,
                    "elevation": _json_number(point.elevation),
                }
                for point in points
            ],
        }
    text = json.dumps(payload, indent=2, allow_nan=False)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        LOGGER.info("Wrote %s profile point(s) to %s", len(points), output_path)
    else:
        print(text)
    return 0


def _dispatch(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "info":
        report = describe_raster(Path(args.path))
        if args.format == "json":
            print(json.dumps(report.as_dict(), indent=2))
        else:
            print(report)
        return 0
    if args.command == "sample":
        return _run_sample(args, settings)
    if args.command == "profile":
        return _run_profile(args, settings)
    if args.command == "reproject":
        result = reproject_dem(
            Path(args.source),
            Path(args.destination),
            nodata=args.nodata,
            dst_crs=args.crs,
        )
        LOGGER.info("Reprojected to %s (%s)", result.path, result.crs)
        return 0
    if args.command == "merge":
        result = merge_dems(
            [Path(path) for path in args.sources],
            Path(args.destination),
            nodata=args.nodata,
        )
        LOGGER.info("Merged %s tile(s) into %s", result.sources, result.path)
        return 0
    if args.command == "clip":
        result = clip_dem(Path(args.source), Path(args.destination), *args.bbox)
        LOGGER.info("Clipped to %s (%sx%s)", result.path, result.width, result.height)
        return 0
    if args.command == "resample":
        result = resample_dem(
            Path(args.source),
            Path(args.destination),
            args.width,
            args.height,
            resampling=Resampling[args.method],
        )
        LOGGER.info("Resampled to %s (%sx%s)", result.path, result.width, result.height)
        return 0
    if args.command == "coverage":
        for path in coverage(args.paths, *args.bbox, crs=args.crs):
            print(path)
        return 0
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint and return an exit code."""
    parser = argparse.ArgumentParser(
        prog="gdem",
        description="GDEM elevation sampling and DEM raster utilities",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeatable).",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce log output to warnings and errors.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON on stderr.",
    )
    parser.add_argument(
        "--log-file",
        help="Optional path for JSON log output.",
    )
    parser.add_argument(
        "--settings",
        help="Path to a JSON settings file (defaults to $GDEM_SETTINGS or ./gdem.json).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_info_parser(subparsers)
    _add_sample_parser(subparsers)
    _add_profile_parser(subparsers)
    _add_reproject_parser(subparsers)
    _add_merge_parser(subparsers)
    _add_clip_parser(subparsers)
    _add_resample_parser(subparsers)
    _add_coverage_parser(subparsers)
    subparsers.add_parser("version", help="Print the current version.")

    args = parser.parse_args(argv)
    log_file_value = getattr(args, "log_file", None)
    configure_logging(
        LogOptions(
            verbose=args.verbose or 0,
            quiet=bool(args.quiet),
            log_file=Path(log_file_value) if log_file_value else None,
            json_console=bool(args.log_json),
        )
    )

    if args.command == "version":
        print(__version__)
        return 0

    try:
        settings = load_settings(Path(args.settings) if args.settings else None)
        return _dispatch(args, settings)
    except FAILURES as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
