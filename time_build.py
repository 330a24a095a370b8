"""Time each stage of a terrain build on the sample track."""

import asyncio
import logging
import time
import sys

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

from flightterrain.constants import DEFAULT_BUFFER_DISTANCE, DEFAULT_RESOLUTION, SAMPLE_TRACK
from flightterrain.elevation import OpenElevationProvider, resolve_elevations
from flightterrain.geometry import build_buffer, build_sample_grid, compute_centroid
from flightterrain.models import TrackPoint
from flightterrain.terrain import rebuild_height_field


async def timed_build(track, offline: bool = False):
    provider = OpenElevationProvider(url=None) if offline else OpenElevationProvider()
    timings = {}

    t0 = time.perf_counter()
    centroid = compute_centroid(track)
    polygon = build_buffer(track, DEFAULT_BUFFER_DISTANCE)
    grid = build_sample_grid(polygon, DEFAULT_RESOLUTION)
    timings["1. Buffer + sample grid"] = time.perf_counter() - t0

    t0 = time.perf_counter()
    result = await resolve_elevations(grid, centroid, provider)
    timings[f"2. Elevation ({result.status.value})"] = time.perf_counter() - t0

    t0 = time.perf_counter()
    field = rebuild_height_field(result.samples, centroid, DEFAULT_RESOLUTION)
    timings["3. Re-grid"] = time.perf_counter() - t0
    provider.close()

    print("\n" + "=" * 60)
    print(f"BUILD COMPLETE: {len(grid)} samples, terrain {field.shape[1]}x{field.shape[0]}")
    print("=" * 60)
    total = 0
    for label, dur in timings.items():
        print(f"  {label}: {dur:.2f}s")
        total += dur
    print(f"  TOTAL: {total:.2f}s")
    print("=" * 60)


if __name__ == "__main__":
    offline = "--offline" in sys.argv
    track = [TrackPoint(lat, lon, alt) for lat, lon, alt in SAMPLE_TRACK]
    asyncio.run(timed_build(track, offline=offline))
