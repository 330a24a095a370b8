"""Elevation lookup via an Open-Elevation style service, with a synthetic fallback.

Provides:
1. ``OpenElevationProvider``: sequential batched POST lookups
2. ``synthetic_elevation``: deterministic rolling terrain from local x/y
3. ``resolve_elevations``: fetch, or fall back to synthetic terrain
"""

import asyncio
import logging
import math
from typing import List, Optional, Protocol, Sequence

import numpy as np
import requests

from .constants import (
    DEGRADED_NOTICE,
    ELEVATION_API_URL,
    ELEVATION_BATCH_DELAY,
    ELEVATION_BATCH_SIZE,
    ELEVATION_TIMEOUT,
    FALLBACK_TERRAIN_WAVES,
)
from .exceptions import ElevationFetchError, MalformedResponseError
from .geometry import project
from .models import Centroid, ElevationResult, ElevationSample, ResolveStatus

logger = logging.getLogger(__name__)


class ElevationProvider(Protocol):
    """Anything that can turn (longitude, latitude) points into elevations."""

    async def fetch(self, points: Sequence) -> List[ElevationSample]:
        """Return one sample per point, in order, or raise ElevationFetchError."""


class OpenElevationProvider:
    """Batched client for the Open-Elevation ``/api/v1/lookup`` endpoint.

    Batches go out one at a time with a short pause in between so the
    public service's rate limits are respected.  Each blocking request is
    run in a worker thread so the event loop stays free.
    """

    def __init__(self, url: Optional[str] = ELEVATION_API_URL,
                 batch_size: int = ELEVATION_BATCH_SIZE,
                 batch_delay: float = ELEVATION_BATCH_DELAY,
                 timeout: Optional[float] = ELEVATION_TIMEOUT,
                 session: Optional[requests.Session] = None):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.url = url
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def _post_batch(self, batch) -> List[ElevationSample]:
        """POST one batch and parse the results (blocking)."""
        locations = [{"latitude": float(lat), "longitude": float(lon)}
                     for lon, lat in batch]
        try:
            response = self.session.post(
                self.url,
                json={"locations": locations},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ElevationFetchError(f"Elevation request failed: {e}") from e

        if not response.ok:
            raise ElevationFetchError(
                f"Elevation API responded with status: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Elevation response is not JSON: {e}") from e

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise MalformedResponseError("Elevation response has no 'results' list")
        if len(results) != len(locations):
            raise MalformedResponseError(
                f"Elevation response has {len(results)} results "
                f"for {len(locations)} locations")

        samples = []
        for item in results:
            try:
                samples.append(ElevationSample(
                    longitude=float(item["longitude"]),
                    latitude=float(item["latitude"]),
                    elevation=float(item["elevation"]),
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedResponseError(f"Bad elevation result {item!r}: {e}") from e
        return samples

    async def fetch(self, points: Sequence) -> List[ElevationSample]:
        """Look up every point, batch by batch, preserving request order."""
        if not self.url:
            raise ElevationFetchError("No elevation service configured")

        points = list(points)
        n_batches = math.ceil(len(points) / self.batch_size)
        all_results: List[ElevationSample] = []

        for b, start in enumerate(range(0, len(points), self.batch_size)):
            batch = points[start:start + self.batch_size]
            logger.debug(f"Elevation batch {b + 1}/{n_batches} ({len(batch)} points)")
            all_results.extend(await asyncio.to_thread(self._post_batch, batch))

            if b < n_batches - 1 and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        logger.info(f"Fetched {len(all_results)} elevations in {n_batches} batches")
        return all_results


# ── Synthetic terrain ───────────────────────────────────────────────────

def synthetic_elevation(x, y):
    """Rolling terrain height at local (x, y) metres.

    Works on scalars and numpy arrays alike.
    """
    return sum(np.sin(x * freq) * np.cos(y * freq) * amp
               for freq, amp in FALLBACK_TERRAIN_WAVES)


def simulate_elevations(points: Sequence, centroid: Centroid) -> List[ElevationSample]:
    """One synthetic sample per (longitude, latitude) point."""
    samples = []
    for lon, lat in points:
        local = project(float(lon), float(lat), 0.0, centroid)
        samples.append(ElevationSample(
            longitude=float(lon),
            latitude=float(lat),
            elevation=float(synthetic_elevation(local.x, local.y)),
        ))
    return samples


async def resolve_elevations(points: Sequence, centroid: Centroid,
                             provider: ElevationProvider) -> ElevationResult:
    """Elevation for every point, falling back to synthetic terrain.

    Never raises on provider problems: any exception from the provider discards
    partial results and returns a ``failed`` result carrying synthetic
    samples and a degraded-mode notice.
    """
    points = list(points)
    if not points:
        return ElevationResult(status=ResolveStatus.ready)

    try:
        samples = await provider.fetch(points)
        if len(samples) != len(points):
            raise MalformedResponseError(
                f"Provider returned {len(samples)} samples for {len(points)} points")
        return ElevationResult(status=ResolveStatus.ready, samples=samples)
    except Exception as e:
        if isinstance(e, ElevationFetchError):
            logger.warning(f"Error fetching elevation data: {e}; using simulated terrain")
        else:
            logger.exception("Elevation provider failed unexpectedly; using simulated terrain")
        return ElevationResult(
            status=ResolveStatus.failed,
            samples=simulate_elevations(points, centroid),
            reason=str(e) or type(e).__name__,
            notice=DEGRADED_NOTICE,
        )
