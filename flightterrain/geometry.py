"""Local projection, path buffering, and sample-grid generation.

All conversions between degrees and metres go through
``METERS_PER_DEGREE``: an equirectangular small-area approximation that
is only meaningful for tracks a few kilometres across.
"""

import math
import logging
from typing import List, Sequence

import numpy as np
import shapely as _shapely
from shapely.geometry import LineString, MultiPolygon, Polygon

from .constants import BUFFER_QUAD_SEGS, METERS_PER_DEGREE
from .exceptions import DegenerateBufferError, InputError
from .models import Centroid, LocalPoint, TrackPoint

logger = logging.getLogger(__name__)


# ── Coordinate transforms ───────────────────────────────────────────────

def compute_centroid(points: Sequence[TrackPoint]) -> Centroid:
    """Mean latitude and longitude of a track, taken independently."""
    if not points:
        raise InputError("Cannot compute the centroid of an empty track")
    n = len(points)
    return Centroid(
        latitude=sum(p.latitude for p in points) / n,
        longitude=sum(p.longitude for p in points) / n,
    )


def meters_to_degrees(meters: float) -> float:
    return meters / METERS_PER_DEGREE


def project(longitude: float, latitude: float, value: float,
            centroid: Centroid) -> LocalPoint:
    """Project a geodetic position to local metres around *centroid*.

    *value* (altitude or elevation) passes through as z.
    """
    x = (longitude - centroid.longitude) * METERS_PER_DEGREE
    y = (latitude - centroid.latitude) * METERS_PER_DEGREE
    return LocalPoint(x, y, value)


def project_track(points: Sequence[TrackPoint], centroid: Centroid) -> List[LocalPoint]:
    """Flight path in local metres, altitude as z."""
    return [project(p.longitude, p.latitude, p.altitude, centroid) for p in points]


def project_ring(coords, centroid: Centroid, height: float = 0.0) -> List[LocalPoint]:
    """Project (longitude, latitude) pairs at a constant *height*."""
    return [project(lon, lat, height, centroid) for lon, lat in coords]


def track_labels(points: Sequence[TrackPoint]) -> List[str]:
    """Hover labels for the path markers."""
    return [
        f"Point {i + 1}: lat {p.latitude:.6f}, lon {p.longitude:.6f}, "
        f"alt {p.altitude:g}m"
        for i, p in enumerate(points)
    ]


# ── Path buffer ─────────────────────────────────────────────────────────

def build_buffer(path: Sequence[TrackPoint], distance_meters: float) -> Polygon:
    """Offset the path polyline outward by *distance_meters*.

    The distance is converted to degrees with the projection constant so
    the outline lands at the right distance once projected back.
    """
    if distance_meters <= 0:
        raise DegenerateBufferError(
            f"Buffer distance must be positive, got {distance_meters}")

    coords = [(p.longitude, p.latitude) for p in path]
    if len(dict.fromkeys(coords)) < 2:
        raise DegenerateBufferError(
            f"Need at least 2 distinct track points to buffer, got {len(set(coords))}")

    buffered = LineString(coords).buffer(
        meters_to_degrees(distance_meters), quad_segs=BUFFER_QUAD_SEGS)

    if isinstance(buffered, MultiPolygon):
        logger.debug(f"Buffer produced {len(buffered.geoms)} parts, using the first")
        buffered = buffered.geoms[0]

    if buffered.is_empty or buffered.area <= 0:
        raise DegenerateBufferError("Buffer produced an empty polygon")

    logger.info(f"Buffered {len(coords)} track points by {distance_meters:g}m "
                f"({len(buffered.exterior.coords)} outline vertices)")
    return buffered


def buffer_outline(polygon: Polygon) -> list:
    """Exterior ring of the buffer as (longitude, latitude) pairs."""
    if polygon is None or polygon.is_empty:
        return []
    return list(polygon.exterior.coords)


# ── Sample grid ─────────────────────────────────────────────────────────

def build_sample_grid(polygon: Polygon, resolution_meters: float) -> np.ndarray:
    """Regular lattice of (longitude, latitude) points inside *polygon*.

    The lattice covers the polygon's bounding box at a spacing of
    *resolution_meters*, centred so the leftover margin is split evenly on
    both sides.  Points on the polygon boundary are kept.

    Returns
    -------
    np.ndarray — (n, 2) array of longitude, latitude; (0, 2) when empty
    """
    if resolution_meters <= 0:
        raise InputError(f"Resolution must be positive, got {resolution_meters}")
    if polygon is None or polygon.is_empty:
        return np.empty((0, 2), dtype=np.float64)

    west, south, east, north = polygon.bounds
    step = meters_to_degrees(resolution_meters)

    width = east - west
    height = north - south
    columns = int(math.floor(width / step))
    rows = int(math.floor(height / step))

    lons = west + (width - columns * step) / 2.0 + np.arange(columns + 1) * step
    lats = south + (height - rows * step) / 2.0 + np.arange(rows + 1) * step

    lon_grid, lat_grid = np.meshgrid(lons, lats, indexing='ij')
    lon_flat = lon_grid.ravel()
    lat_flat = lat_grid.ravel()

    inside = _shapely.intersects_xy(polygon, lon_flat, lat_flat)
    grid = np.column_stack([lon_flat[inside], lat_flat[inside]])

    logger.info(f"Sample grid: {len(lons)}x{len(lats)} lattice, "
                f"{len(grid)} points inside buffer")
    return grid
