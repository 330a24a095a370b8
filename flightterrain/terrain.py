"""Height-field construction for terrain surface rendering.

Provides functions for:
1. Re-gridding scattered elevation samples onto a rectangular height field
2. A synthetic preview field on a centred square lattice
"""

import logging
import math
from typing import Sequence

import numpy as np
from scipy.spatial import cKDTree

from .constants import (
    DEFAULT_PREVIEW_EXTENT,
    DEFAULT_PREVIEW_RESOLUTION,
    METERS_PER_DEGREE,
    NEIGHBOR_WINDOW_FACTOR,
    PREVIEW_TERRAIN_WAVES,
)
from .exceptions import InputError
from .models import Centroid, ElevationSample, HeightField

logger = logging.getLogger(__name__)


def _project_samples(samples: Sequence[ElevationSample], centroid: Centroid):
    """Vectorised local projection of samples → (x, y, z) arrays."""
    lon = np.fromiter((s.longitude for s in samples), dtype=np.float64, count=len(samples))
    lat = np.fromiter((s.latitude for s in samples), dtype=np.float64, count=len(samples))
    z = np.fromiter((s.elevation for s in samples), dtype=np.float64, count=len(samples))
    x = (lon - centroid.longitude) * METERS_PER_DEGREE
    y = (lat - centroid.latitude) * METERS_PER_DEGREE
    return x, y, z


def rebuild_height_field(samples: Sequence[ElevationSample], centroid: Centroid,
                         resolution: float, snap: bool = False) -> HeightField:
    """Assemble scattered samples into a rectangular height field.

    The axes are the distinct projected x and y values actually present.
    A cell takes the elevation of the sample sitting exactly on it;
    otherwise the mean of every sample within ``2 * resolution`` on both
    axes; otherwise 0.

    Parameters
    ----------
    samples : sequence of ElevationSample
    centroid : Centroid — projection origin shared with the rest of the scene
    resolution : float — sample spacing in metres
    snap : bool
        Round projected positions to the resolution lattice anchored at the
        centroid before building the axes.  Without it, floating-point
        noise in the projection leaves most cells to the neighbour average.

    Returns
    -------
    HeightField — empty when *samples* is empty
    """
    if resolution <= 0:
        raise InputError(f"Resolution must be positive, got {resolution}")
    if len(samples) == 0:
        return HeightField.empty()

    x, y, z = _project_samples(samples, centroid)
    if snap:
        x = np.round(x / resolution) * resolution
        y = np.round(y / resolution) * resolution

    xs = np.unique(x)
    ys = np.unique(y)

    # First sample wins when several share a position
    exact = {}
    for k, key in enumerate(zip(x.tolist(), y.tolist())):
        exact.setdefault(key, k)

    grid = np.zeros((len(ys), len(xs)), dtype=np.float64)
    missing = []
    for i, yv in enumerate(ys.tolist()):
        for j, xv in enumerate(xs.tolist()):
            k = exact.get((xv, yv))
            if k is None:
                missing.append((i, j))
            else:
                grid[i, j] = z[k]

    # ── Neighbour-window average for cells with no exact sample ──
    n_empty = 0
    if missing:
        window = NEIGHBOR_WINDOW_FACTOR * resolution
        tree = cKDTree(np.column_stack([x, y]))
        cells = np.array([(xs[j], ys[i]) for i, j in missing], dtype=np.float64)
        # Chebyshev ball is inclusive; the window is strict
        candidates = tree.query_ball_point(cells, r=window, p=np.inf)

        for (i, j), (cx, cy), idx in zip(missing, cells, candidates):
            if idx:
                idx = np.asarray(idx, dtype=np.intp)
                near = idx[(np.abs(x[idx] - cx) < window) &
                           (np.abs(y[idx] - cy) < window)]
            else:
                near = ()
            if len(near) > 0:
                grid[i, j] = z[near].mean()
            else:
                n_empty += 1

    logger.info(f"Height field: {len(xs)}x{len(ys)} from {len(samples)} samples "
                f"({len(xs) * len(ys) - len(missing)} exact, "
                f"{len(missing) - n_empty} averaged, {n_empty} empty)")
    return HeightField(xs=xs, ys=ys, z=grid)


def preview_height_field(resolution: float = DEFAULT_PREVIEW_RESOLUTION,
                         extent: float = DEFAULT_PREVIEW_EXTENT) -> HeightField:
    """Synthetic square terrain centred on the origin.

    ``ceil(2 * extent / resolution)`` cells per side, used to preview a
    scene before any track or elevation data is available.
    """
    if resolution <= 0 or extent <= 0:
        raise InputError(
            f"Resolution and extent must be positive, got {resolution}, {extent}")

    size = int(math.ceil(extent * 2 / resolution))
    positions = (np.arange(size) - size / 2.0) * resolution
    xx, yy = np.meshgrid(positions, positions)  # both (size, size), rows = y

    height = np.zeros_like(xx)
    for freq, amp, phase in PREVIEW_TERRAIN_WAVES:
        height += np.sin(xx * freq + phase) * np.cos(yy * freq + phase) * amp

    return HeightField(xs=positions.copy(), ys=positions.copy(), z=height)
