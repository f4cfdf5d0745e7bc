"""Point generation and elevation sampling along polylines."""

from __future__ import annotations

from typing import Sequence, Tuple

from pyproj import Geod

from gdem.dem.models import ProfilePoint
from gdem.dem.sampler import ElevationSampler

Vertex = Tuple[float, float]
PolylinePoint = Tuple[float, float, float]

GEOD = Geod(ellps="WGS84")


def points_along(vertices: Sequence[Vertex], spacing_m: float) -> list[PolylinePoint]:
    """Return (lat, lon, distance_m) points every ``spacing_m`` along a polyline.

    Distances are geodesic on the WGS84 ellipsoid and cumulative from the
    first vertex. Every vertex is included; spacing restarts at each vertex.
    """
    if len(vertices) < 2:
        raise ValueError("A polyline needs at least two vertices.")
    if spacing_m <= 0:
        raise ValueError("Point spacing must be positive.")

    first_lat, first_lon = vertices[0]
    points: list[PolylinePoint] = [(first_lat, first_lon, 0.0)]
    travelled = 0.0
    for (lat1, lon1), (lat2, lon2) in zip(vertices, vertices[1:]):
        azimuth, _, length = GEOD.inv(lon1, lat1, lon2, lat2)
        step = 1
        while step * spacing_m < length:
            offset = step * spacing_m
            lon, lat, _ = GEOD.fwd(lon1, lat1, azimuth, offset)
            points.append((lat, lon, travelled + offset))
            step += 1
        travelled += length
        points.append((lat2, lon2, travelled))
    return points


def sample_profile(
    sampler: ElevationSampler,
    vertices: Sequence[Vertex],
    spacing_m: float,
    *,
    interpolate: bool = True,
) -> list[ProfilePoint]:
    """Sample elevations at evenly spaced points along a polyline."""
    lookup = sampler.interpolated_altitude if interpolate else sampler.altitude
    return [
        ProfilePoint(
            latitude=lat,
            longitude=lon,
            distance_m=distance,
            elevation=float(lookup(lat, lon)),
        )
        for lat, lon, distance in points_along(vertices, spacing_m)
    ]
